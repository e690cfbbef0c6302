"""``femtorelease targets``: list the build matrix."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from femtorelease.cli.render import ReleaseRenderer
from femtorelease.config import load_settings
from femtorelease.core.errors import ReleaseError
from femtorelease.core.target_registry import all_targets, host_target

console = Console()


def targets_cmd(
    tag: Optional[str] = typer.Option(
        None,
        "--tag",
        help="Show the download URL of each asset in this release tag (e.g. v0.1.0).",
    ),
    host: bool = typer.Option(
        False,
        "--host",
        help="Print only the asset name matching this machine.",
    ),
) -> None:
    """List supported targets and their artifact names."""
    try:
        settings = load_settings()
        target = host_target() if host else None
    except ReleaseError as exc:
        ReleaseRenderer(console=console).print_error(exc)
        raise typer.Exit(code=1)

    if target is not None:
        console.print(target.artifact_name(settings.project_name), highlight=False)
        return

    ReleaseRenderer(console=console).print_targets(
        all_targets(),
        settings.project_name,
        web_base=settings.release_web_base,
        tag=tag,
    )
