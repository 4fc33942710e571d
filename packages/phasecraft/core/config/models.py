"""Configuration models for phasecraft."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LedFxConfig(BaseModel):
    """Connection settings for the LedFx controller."""

    host: str = Field(default="localhost", min_length=1)
    port: int = Field(default=8888, ge=1, le=65535)
    timeout_s: float = Field(default=10.0, gt=0, description="Per-request timeout")
    max_attempts: int = Field(
        default=1, ge=1, description="Attempts per idempotent read (1 = no retry)"
    )
    verify_attempts: int = Field(
        default=3, ge=1, description="Reads used to confirm an applied effect"
    )
    verify_delay_s: float = Field(default=0.15, ge=0.0)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}/api"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON log lines")


class ShowConfig(BaseModel):
    """Defaults for a show setup run (CLI flags override these)."""

    profile: str = Field(default="DJPhases", min_length=1)
    default_query: str = Field(default="3lineMatrix", min_length=1)
    include_blender: bool = True
    strict_blender: bool = False
    create_playlists: bool = True


class AppConfig(BaseModel):
    """Application-level configuration."""

    model_config = ConfigDict(extra="ignore")  # Forward compatibility

    ledfx: LedFxConfig = Field(default_factory=LedFxConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    show: ShowConfig = Field(default_factory=ShowConfig)
