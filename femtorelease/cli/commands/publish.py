"""``femtorelease publish VERSION``: build and publish a release.

Checks the access token first, so a misconfigured run fails before any
build or network call.  Then builds every target, checksums the artifacts
and synchronizes release ``v<VERSION>``: the release is reused if it exists,
and same-named assets are deleted before their replacements are uploaded.
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

USAGE = "Usage: femtorelease publish <version>\nExample: femtorelease publish 0.1.0"


def publish_cmd(
    version: Optional[str] = typer.Argument(
        None,
        help="Version to release, without the leading 'v' (e.g. 0.1.0 or 1.0.0-rc1).",
    ),
    target: Optional[List[str]] = typer.Option(
        None,
        "--target",
        "-t",
        help="Publish only this target (triple or os-arch). Repeatable.",
    ),
    build: bool = typer.Option(
        True,
        "--build/--skip-build",
        help="Build before publishing, or publish the files already on disk.",
    ),
) -> None:
    """Create or update a release and upload the binaries."""
    renderer = ReleaseRenderer(console=console)

    try:
        settings = load_settings()
        settings.require_token()
    except ReleaseError as exc:
        renderer.print_error(exc)
        raise typer.Exit(code=1)

    if not version:
        console.print(USAGE, highlight=False)
        raise typer.Exit(code=1)

    console.print(
        f"[bold cyan]Creating release v{version} for {settings.repo}...[/bold cyan]"
    )
    try:
        targets = resolve_targets(target)
        pipeline = ReleasePipeline(
            wiring.make_builder(settings, targets),
            wiring.make_publisher(settings),
        )
        report = pipeline.run(version, build=build)
    except ReleaseError as exc:
        renderer.print_error(exc)
        raise typer.Exit(code=1)

    if pipeline.artifacts:
        console.print()
        renderer.print_artifacts(pipeline.artifacts, pipeline.checksums)
    console.print()
    renderer.print_report(report)
