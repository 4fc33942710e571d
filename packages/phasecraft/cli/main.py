"""Command-line interface for phasecraft.

Builds DJ-phase scenes and playlists on a running LedFx instance.
"""

from __future__ import annotations

import argparse
from collections.abc import Callable, Sequence
import logging
import sys
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from phasecraft.core.config.loader import load_app_config
from phasecraft.core.config.models import AppConfig, LedFxConfig, ShowConfig
from phasecraft.core.controller import ControllerError, create_ledfx_client
from phasecraft.core.show import RunSummary, ShowError, ShowOptions, run_show
from phasecraft.core.show.catalog import BLENDER_SCENE_SPECS, DIRECT_SCENE_SPECS
from phasecraft.core.utils.logging import configure_from

console = Console()
logger = logging.getLogger(__name__)

ControllerFactory = Callable[[LedFxConfig], Any]


def parse_queries(virtual: Sequence[str] | None, virtuals: str | None) -> tuple[str, ...]:
    """Merge repeated ``--virtual`` values and the comma list from ``--virtuals``."""
    queries = [query.strip() for query in (virtual or [])]
    if virtuals:
        queries.extend(part.strip() for part in virtuals.split(","))
    return tuple(query for query in queries if query)


def build_show_options(args: argparse.Namespace, show: ShowConfig) -> ShowOptions:
    """Combine CLI flags with the ``show`` config section (flags win)."""
    return ShowOptions(
        profile=args.profile or show.profile,
        device_queries=parse_queries(args.virtual, args.virtuals),
        default_query=args.default_query or show.default_query,
        include_blender=show.include_blender and not args.no_blender,
        strict_blender=show.strict_blender or args.strict_blender,
        create_playlists=show.create_playlists and not args.skip_playlists,
        dry_run=args.dry_run,
    )


def _load_config(args: argparse.Namespace) -> AppConfig:
    app_config = load_app_config(args.config)
    configure_from(app_config.logging, verbose=args.verbose)
    return app_config


def print_summary(summary: RunSummary) -> None:
    suffix = " (dry-run)" if summary.dry_run else ""
    console.print(f"\n[bold]Profile:[/bold] {summary.profile}{suffix}")
    console.print(f"Main targets: {', '.join(summary.main_targets)}")
    if summary.blender_targets:
        console.print(f"Blender targets: {', '.join(summary.blender_targets)}")
    for device_id, missing in summary.skipped_blender.items():
        console.print(
            f"[yellow]Blender skipped for '{device_id}' (missing: {', '.join(missing)})[/yellow]"
        )

    if summary.fallbacks:
        table = Table(title="Fallback effects")
        table.add_column("Scene")
        table.add_column("Device")
        table.add_column("Layer")
        table.add_column("Requested")
        table.add_column("Used")
        for record in summary.fallbacks:
            table.add_row(
                record.scene_name,
                record.device_id,
                record.layer.value if record.layer else "-",
                record.requested,
                record.resolved,
            )
        console.print(table)

    for plan in summary.playlists:
        console.print(f"Playlist {plan.playlist_id}: {len(plan.scene_ids)} scenes")
    console.print(
        f"[green]Setup complete{suffix}.[/green] "
        f"Palettes: {len(summary.palettes)}, scenes: {summary.scene_count}, "
        f"playlists: {summary.playlist_count}"
    )


def run_setup(
    args: argparse.Namespace, controller_factory: ControllerFactory = create_ledfx_client
) -> int:
    """Run the show setup.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        app_config = _load_config(args)
        options = build_show_options(args, app_config.show)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[red]ERROR: Could not load config: {e}[/red]")
        return 1

    console.print(f"[bold]Direct scenes:[/bold] {len(DIRECT_SCENE_SPECS)}")
    if options.include_blender:
        console.print(f"[bold]Blender scenes:[/bold] {len(BLENDER_SCENE_SPECS)} per ready target")
    else:
        console.print("[bold]Blender scenes:[/bold] disabled")
    playlists = "enabled" if options.create_playlists else "disabled"
    console.print(f"[bold]Playlists:[/bold] {playlists}")

    try:
        with controller_factory(app_config.ledfx) as controller:
            summary = run_show(controller, options)
    except (ShowError, ControllerError) as e:
        logger.debug("Show setup failed", exc_info=True)
        console.print(f"[red]ERROR: {e}[/red]")
        return 1

    print_summary(summary)
    return 0


def run_list_virtuals(
    args: argparse.Namespace, controller_factory: ControllerFactory = create_ledfx_client
) -> int:
    """Print every virtual known to the controller."""
    try:
        app_config = _load_config(args)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[red]ERROR: Could not load config: {e}[/red]")
        return 1

    try:
        with controller_factory(app_config.ledfx) as controller:
            devices = controller.list_devices()
    except ControllerError as e:
        console.print(f"[red]ERROR: {e}[/red]")
        return 1

    table = Table(title="Available virtuals")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Active")
    for device in devices:
        table.add_row(device.id, device.name, "yes" if device.active else "no")
    console.print(table)
    return 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to app config (.yaml/.yml/.json, default: phasecraft.yaml)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="phasecraft",
        description="phasecraft - DJ-phase scene and playlist builder for LedFx",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    setup = sub.add_parser("setup", help="Create palettes, scenes and playlists")
    setup.add_argument(
        "--virtual",
        action="append",
        default=[],
        help="Target virtual id or name query (repeatable)",
    )
    setup.add_argument("--virtuals", default=None, help="Comma-separated target queries")
    setup.add_argument(
        "--default-query",
        default=None,
        help="Query used when no --virtual is given (default: 3lineMatrix)",
    )
    setup.add_argument("--profile", default=None, help="Naming profile (default: DJPhases)")
    setup.add_argument("--no-blender", action="store_true", help="Skip blender scenes")
    setup.add_argument(
        "--strict-blender",
        action="store_true",
        help="Fail when a target lacks -background/-foreground/-mask companions",
    )
    setup.add_argument("--skip-playlists", action="store_true", help="Do not build playlists")
    setup.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve and synthesize everything without writing to LedFx",
    )
    _add_common_arguments(setup)

    list_cmd = sub.add_parser("list-virtuals", help="List virtuals known to LedFx")
    _add_common_arguments(list_cmd)

    return p


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    if args.cmd == "setup":
        sys.exit(run_setup(args))
    elif args.cmd == "list-virtuals":
        sys.exit(run_list_virtuals(args))
