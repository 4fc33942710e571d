"""Tests for config loading (JSON/YAML files plus environment overrides)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from phasecraft.core.config import loader as config_loader
from phasecraft.core.config.models import AppConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("LEDFX_HOST", "LEDFX_PORT", "LEDFX_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_config_data() -> dict:
    return {
        "ledfx": {"host": "ledfx.local", "port": 9000},
        "logging": {"level": "DEBUG"},
        "show": {"profile": "Sunset", "strict_blender": True},
    }


def test_detect_format() -> None:
    """Test format detection from file extensions."""
    assert config_loader.detect_format("config.json") == "json"
    assert config_loader.detect_format(Path("config.YML")) == "yaml"
    assert config_loader.detect_format("config.yaml") == "yaml"


def test_detect_format_invalid() -> None:
    """Test unsupported extensions raise ValueError."""
    with pytest.raises(ValueError, match="Unsupported config format"):
        config_loader.detect_format("config.toml")


def test_load_config_json(tmp_path: Path, sample_config_data: dict) -> None:
    """Test loading a JSON config file."""
    config_file = tmp_path / "phasecraft.json"
    config_file.write_text(json.dumps(sample_config_data))

    assert config_loader.load_config(config_file) == sample_config_data


def test_load_config_yaml(tmp_path: Path, sample_config_data: dict) -> None:
    """Test loading a YAML config file."""
    config_file = tmp_path / "phasecraft.yaml"
    config_file.write_text(yaml.dump(sample_config_data))

    assert config_loader.load_config(config_file) == sample_config_data


def test_load_config_missing_file(tmp_path: Path) -> None:
    """Test loading a missing file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        config_loader.load_config(tmp_path / "nope.yaml")


def test_load_config_empty_yaml_is_empty_dict(tmp_path: Path) -> None:
    """Test empty YAML file loads as an empty dict."""
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")

    assert config_loader.load_config(config_file) == {}


@pytest.mark.parametrize(
    ("filename", "content", "message"),
    [
        ("bad.json", "{not json", "Invalid JSON"),
        ("bad.yaml", "ledfx: [unclosed", "Invalid YAML"),
        ("list.yaml", "- a\n- b\n", "must be a mapping"),
    ],
)
def test_load_config_invalid_content(
    tmp_path: Path, filename: str, content: str, message: str
) -> None:
    """Test unparsable or non-mapping content raises ValueError."""
    config_file = tmp_path / filename
    config_file.write_text(content)

    with pytest.raises(ValueError, match=message):
        config_loader.load_config(config_file)


def test_load_app_config_from_file(tmp_path: Path, sample_config_data: dict) -> None:
    """Test AppConfig built from a config file."""
    config_file = tmp_path / "phasecraft.yaml"
    config_file.write_text(yaml.dump(sample_config_data))

    config = config_loader.load_app_config(config_file)

    assert config.ledfx.base_url == "http://ledfx.local:9000/api"
    assert config.logging.level == "DEBUG"
    assert config.show.profile == "Sunset"
    assert config.show.strict_blender is True
    assert config.show.include_blender is True


def test_load_app_config_missing_explicit_path_raises(tmp_path: Path) -> None:
    """Test an explicit config path must exist."""
    with pytest.raises(FileNotFoundError, match="absent.yaml"):
        config_loader.load_app_config(tmp_path / "absent.yaml")


def test_load_app_config_without_default_file_gives_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test defaults apply when phasecraft.yaml is absent."""
    monkeypatch.chdir(tmp_path)

    config = config_loader.load_app_config()

    assert config == AppConfig()
    assert config.ledfx.base_url == "http://localhost:8888/api"
    assert config.show.default_query == "3lineMatrix"


def test_load_app_config_reads_default_file_from_cwd(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test phasecraft.yaml in the working directory is picked up."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "phasecraft.yaml").write_text("show:\n  profile: Sunset\n")

    config = config_loader.load_app_config()

    assert config.show.profile == "Sunset"


def test_load_app_config_tolerates_null_sections_and_unknown_keys(tmp_path: Path) -> None:
    """Test null sections and unknown keys are tolerated."""
    config_file = tmp_path / "phasecraft.yaml"
    config_file.write_text("ledfx:\nlogging:\nfuture_section: {a: 1}\n")

    config = config_loader.load_app_config(config_file)

    assert config.ledfx.host == "localhost"


def test_env_overrides_file_values(
    tmp_path: Path, sample_config_data: dict, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test environment variables override file values."""
    config_file = tmp_path / "phasecraft.json"
    config_file.write_text(json.dumps(sample_config_data))
    monkeypatch.setenv("LEDFX_HOST", "10.0.0.7")
    monkeypatch.setenv("LEDFX_PORT", "8080")
    monkeypatch.setenv("LEDFX_LOG_LEVEL", "warning")

    config = config_loader.load_app_config(config_file)

    assert config.ledfx.host == "10.0.0.7"
    assert config.ledfx.port == 8080
    assert config.logging.level == "WARNING"


def test_invalid_values_raise_validation_error(tmp_path: Path) -> None:
    """Test invalid values raise ValidationError."""
    config_file = tmp_path / "phasecraft.json"
    config_file.write_text(json.dumps({"ledfx": {"port": 70000}}))

    with pytest.raises(ValidationError):
        config_loader.load_app_config(config_file)
