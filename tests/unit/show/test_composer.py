"""Tests for direct and blender scene composition."""

from __future__ import annotations

import pytest

from phasecraft.core.show.catalog import PHASE_ORDER, PHASES
from phasecraft.core.show.composer import (
    compose_blender_scene,
    compose_direct_scene,
    preset_name,
    scene_duration,
    scene_order,
    scene_tags,
)
from phasecraft.core.show.context import ShowContext
from phasecraft.core.show.errors import ConfigurationError, EffectApplicationError
from phasecraft.core.show.models import (
    BlenderSceneSpec,
    DirectSceneSpec,
    LayerRole,
    LayerSpec,
    SceneKind,
    ShowMode,
    ShowOptions,
)
from phasecraft.core.show.palette import build_palettes
from phasecraft.core.show.schema import parse_effect_schemas
from phasecraft.core.show.targets import resolve_target_set
from tests.conftest import FakeController, blend_ready_devices


def _ctx(controller: FakeController, *, dry_run: bool = False) -> ShowContext:
    options = ShowOptions(profile="DJPhases", dry_run=dry_run)
    palettes = build_palettes([PHASES[key] for key in PHASE_ORDER], options.profile_slug)
    return ShowContext(
        controller=controller,
        options=options,
        schemas=parse_effect_schemas(controller.get_effect_schemas()),
        palettes={(p.phase, p.mode): p for p in palettes},
    )


def _targets(controller: FakeController):
    mains = [d for d in controller.devices if d.id in ("3linematrix", "wled-strip")]
    return [resolve_target_set(main, controller.devices) for main in mains]


def _blender_spec(**kwargs) -> BlenderSceneSpec:
    fields = {
        "phase": "p1",
        "order": 20,
        "role": "wobble",
        "label": "P1-Test-Blend",
        "mode": ShowMode.NORMAL,
        "tags": ("blender", "wobble"),
        "background": LayerSpec(effect="gradient", profile="chill"),
        "foreground": LayerSpec(effect="wavelength", profile="wobble"),
        "mask": LayerSpec(effect="energy", profile="hard"),
    }
    fields.update(kwargs)
    return BlenderSceneSpec(**fields)


class TestHelpers:
    def test_scene_tags_order_and_dedupe(self) -> None:
        """Test scene tags keep order and drop duplicates."""
        tags = scene_tags("djphases", PHASES["p3"], ShowMode.CRAZY, ["direct", "peak", "power"])
        assert tags == [
            "djphases",
            "p3",
            "crazy",
            "phase3",
            "peak",
            "drop",
            "climax",
            "direct",
            "power",
        ]

    def test_preset_name_is_slugged(self) -> None:
        """Test preset names are slugged."""
        assert preset_name("djphases", "3lineMatrix", "P1-Entry Canopy") == (
            "djphases-3linematrix-p1-entry-canopy"
        )

    def test_scene_order_fallbacks(self) -> None:
        """Test scene order falls back to the role default, then 999."""
        assert scene_order(5, "exit") == 5
        assert scene_order(None, "exit") == 100
        assert scene_order(None, "mystery") == 999

    def test_scene_duration_precedence(self) -> None:
        """Test explicit duration beats strobe, rapid and default durations."""
        assert scene_duration(12000, strobe=True, rapid=True) == 12000
        assert scene_duration(None, strobe=True, rapid=True) == 8000
        assert scene_duration(None, strobe=False, rapid=True) == 10000
        assert scene_duration(None, strobe=False, rapid=False) == 15000


class TestDirect:
    def test_applies_to_every_target_and_registers(self, controller: FakeController) -> None:
        """Test direct scene applies to every target and is registered."""
        ctx = _ctx(controller)
        spec = DirectSceneSpec(
            phase="p1", order=10, role="entry", label="P1-Entry", effect="wavelength", profile="flow"
        )

        scene = compose_direct_scene(ctx, spec, _targets(controller))

        applied = [call for call in controller.calls if call[0] == "apply_effect"]
        assert applied == [
            ("apply_effect", "3linematrix", "wavelength"),
            ("apply_effect", "wled-strip", "wavelength"),
        ]
        assert controller.presets == [
            ("3linematrix", "djphases-3linematrix-p1-entry"),
            ("wled-strip", "djphases-wled-strip-p1-entry"),
        ]
        stored = controller.scenes[scene.id]
        assert stored["name"] == "DJPhases P1-Entry"
        assert set(stored["devices"]) == {"3linematrix", "wled-strip"}
        assert "direct" in stored["tags"] and "wavelength" in stored["tags"]
        assert scene.kind is SceneKind.DIRECT
        assert scene.duration_ms == 15000
        assert ctx.created_scenes == [scene]
        assert ctx.fallbacks == []

    def test_fallback_is_recorded_and_config_is_schema_clean(
        self, controller: FakeController
    ) -> None:
        """Test fallbacks are recorded with schema-filtered configs."""
        ctx = _ctx(controller)
        spec = DirectSceneSpec(phase="p4", label="P4-Aqua", effect="energy2", profile="wobble")

        compose_direct_scene(ctx, spec, _targets(controller)[:1])

        record = ctx.fallbacks[0]
        assert (record.requested, record.resolved, record.layer) == ("energy2", "energy", None)
        config = controller.effects["3linematrix"].config
        assert set(config) <= ctx.schemas["energy"]
        assert "background_color" not in config

    def test_strobe_resolution_gets_short_duration(self, controller: FakeController) -> None:
        """Test strobe-class resolution gets the short duration."""
        ctx = _ctx(controller)
        spec = DirectSceneSpec(
            phase="p3", label="P3-Hits", mode=ShowMode.CRAZY, effect="real_strobe", profile="strobe"
        )

        scene = compose_direct_scene(ctx, spec, _targets(controller))

        assert scene.strobe is True
        assert scene.duration_ms == 8000

    def test_rapid_resolution_and_bullet_profile(self, controller: FakeController) -> None:
        """Test rapid classification and the bullet profile."""
        ctx = _ctx(controller)
        by_effect = compose_direct_scene(
            ctx, DirectSceneSpec(phase="p2", label="Scan", effect="scan"), _targets(controller)
        )
        by_profile = compose_direct_scene(
            ctx,
            DirectSceneSpec(phase="p2", label="Bullet", effect="wavelength", profile="bullet"),
            _targets(controller),
        )

        assert by_effect.duration_ms == 10000
        assert by_profile.duration_ms == 10000

    def test_exhausted_chain_aborts(self) -> None:
        """Test exhausted fallback chain aborts composition."""
        controller = FakeController(blend_ready_devices(), reject=["power", "energy", "wavelength"])
        ctx = _ctx(controller)
        spec = DirectSceneSpec(phase="p2", label="Punch", effect="power")

        with pytest.raises(EffectApplicationError):
            compose_direct_scene(ctx, spec, _targets(controller))
        assert controller.scenes == {}

    def test_unknown_phase_is_configuration_error(self, controller: FakeController) -> None:
        """Test unknown phase raises ConfigurationError."""
        ctx = _ctx(controller)
        with pytest.raises(ConfigurationError, match="p9"):
            compose_direct_scene(
                ctx, DirectSceneSpec(phase="p9", label="X", effect="energy"), _targets(controller)
            )

    def test_dry_run_matches_live_fallbacks_without_writes(self, controller: FakeController) -> None:
        """Test dry-run reports live fallbacks without writing."""
        spec = DirectSceneSpec(phase="p2", label="P2-Riser", effect="bands")
        live_ctx = _ctx(controller)
        compose_direct_scene(live_ctx, spec, _targets(controller))

        dry_controller = FakeController(controller.devices)
        dry_ctx = _ctx(dry_controller, dry_run=True)
        dry_controller.calls.clear()
        scene = compose_direct_scene(dry_ctx, spec, _targets(dry_controller))

        assert dry_controller.calls == []
        assert scene.id == "dryrun-djphases-p2-riser"
        assert [(f.requested, f.resolved) for f in dry_ctx.fallbacks] == [
            (f.requested, f.resolved) for f in live_ctx.fallbacks
        ]


class TestBlender:
    def test_layers_go_to_companions_and_scene_snapshots_main_only(
        self, controller: FakeController
    ) -> None:
        """Test layers land on companions and scenes snapshot mains only."""
        ctx = _ctx(controller)
        target = _targets(controller)[0]

        scene = compose_blender_scene(ctx, _blender_spec(), [target])

        main_id, layers, _ = controller.blends[0]
        assert main_id == "3linematrix"
        assert layers.background.device_id == "3linematrix-background"
        assert layers.foreground.device_id == "3linematrix-foreground"
        assert layers.mask.device_id == "3linematrix-mask"
        assert controller.scenes[scene.id]["devices"]["3linematrix"]["type"] == "blender"
        assert set(controller.scenes[scene.id]["devices"]) == {"3linematrix"}
        assert controller.presets == [("3linematrix", "djphases-3linematrix-p1-test-blend")]
        assert scene.kind is SceneKind.BLENDER

    def test_mask_defaults_to_crazy_mode(self, controller: FakeController) -> None:
        """Test mask layer defaults to crazy mode."""
        ctx = _ctx(controller)

        compose_blender_scene(ctx, _blender_spec(), _targets(controller)[:1])

        _, layers, _ = controller.blends[0]
        assert layers.mask.config["gradient"] == "palette:djphases-p1-crazy"
        assert layers.background.config["gradient"] == "palette:djphases-p1-normal"

    def test_solid_color_role_defaults(self, controller: FakeController) -> None:
        """Test singleColor role defaults per layer role."""
        ctx = _ctx(controller)
        spec = _blender_spec(
            background=LayerSpec(effect="singleColor", profile="chill"),
            mask=LayerSpec(effect="singleColor", profile="chill"),
        )

        compose_blender_scene(ctx, spec, _targets(controller)[:1])

        _, layers, _ = controller.blends[0]
        assert layers.background.config == {"color": "#001a00", "brightness": 0.3}
        assert layers.mask.config == {"color": "#000000", "brightness": 0}

    def test_explicit_override_beats_role_default(self, controller: FakeController) -> None:
        """Test explicit overrides beat role defaults."""
        ctx = _ctx(controller)
        spec = _blender_spec(
            background=LayerSpec(effect="singleColor", overrides={"brightness": 0.25}),
        )

        compose_blender_scene(ctx, spec, _targets(controller)[:1])

        _, layers, _ = controller.blends[0]
        assert layers.background.config == {"color": "#001a00", "brightness": 0.25}

    def test_mask_chain_ends_with_solid_color(self) -> None:
        """Test mask fallback chain ends with singleColor."""
        controller = FakeController(blend_ready_devices(), reject=["real_strobe", "strobe"])
        ctx = _ctx(controller)
        spec = _blender_spec(mask=LayerSpec(effect="real_strobe", fallback_effects=("strobe",)))

        scene = compose_blender_scene(ctx, spec, _targets(controller)[:1])

        _, layers, _ = controller.blends[0]
        assert layers.mask.effect_type == "singleColor"
        assert layers.mask.config == {"color": "#000000", "brightness": 0}
        record = ctx.fallbacks[-1]
        assert (record.layer, record.requested, record.resolved) == (
            LayerRole.MASK,
            "real_strobe",
            "singleColor",
        )
        assert scene.strobe is False

    def test_classification_aggregates_layers(self, controller: FakeController) -> None:
        """Test blender scene classification aggregates its layers."""
        ctx = _ctx(controller)
        spec = _blender_spec(mask=LayerSpec(effect="strobe", profile="strobe"))

        scene = compose_blender_scene(ctx, spec, _targets(controller)[:1])

        assert scene.strobe is True
        assert scene.duration_ms == 8000

    def test_blender_config_passthrough(self, controller: FakeController) -> None:
        """Test blender config values pass through to the blender."""
        ctx = _ctx(controller)

        compose_blender_scene(
            ctx, _blender_spec(blender_config={"invert_mask": True}), _targets(controller)[:1]
        )

        assert controller.blends[0][2] == {"invert_mask": True}
        assert controller.effects["3linematrix"].config["invert_mask"] is True

    def test_target_without_companions_rejected(self, controller: FakeController) -> None:
        """Test target without companions is rejected."""
        ctx = _ctx(controller)
        strip = _targets(controller)[1]

        with pytest.raises(ConfigurationError, match="wled-strip"):
            compose_blender_scene(ctx, _blender_spec(), [strip])

    def test_dry_run_makes_no_mutating_calls(self, controller: FakeController) -> None:
        """Test blender dry-run makes no mutating calls."""
        ctx = _ctx(controller, dry_run=True)
        controller.calls.clear()

        scene = compose_blender_scene(ctx, _blender_spec(), _targets(controller)[:1])

        assert controller.calls == []
        assert scene.id == "dryrun-djphases-p1-test-blend"
