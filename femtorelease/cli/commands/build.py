"""``femtorelease build [VERSION]``: cross-compile every target.

Builds each registry target in order, strips and renames the binaries, and
writes a ``.sha256`` sidecar next to each one.  Nothing is uploaded.
"""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console

from femtorelease.cli import wiring
from femtorelease.cli.render import ReleaseRenderer
from femtorelease.config import load_settings
from femtorelease.core.errors import ReleaseError
from femtorelease.core.pipeline import ReleasePipeline
from femtorelease.core.target_registry import resolve_targets

console = Console()


def build_cmd(
    version: Optional[str] = typer.Argument(
        None,
        help="Version being built (default: FEMTORELEASE_DEFAULT_VERSION, 0.1.0).",
    ),
    target: Optional[List[str]] = typer.Option(
        None,
        "--target",
        "-t",
        help="Build only this target (triple or os-arch). Repeatable.",
    ),
) -> None:
    """Build release binaries for all platforms."""
    renderer = ReleaseRenderer(console=console)

    try:
        settings = load_settings()
        settings.require_token()
        version = version or settings.default_version
        targets = resolve_targets(target)
        pipeline = ReleasePipeline(wiring.make_builder(settings, targets))
        console.print(
            f"[bold cyan]Building {settings.project_name} v{version} "
            f"for {len(targets)} platform(s)...[/bold cyan]"
        )
        artifacts = pipeline.build(version)
    except ReleaseError as exc:
        renderer.print_error(exc)
        raise typer.Exit(code=1)

    console.print()
    renderer.print_artifacts(artifacts, pipeline.checksums)
