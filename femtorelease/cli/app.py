"""Main Typer application: imports and registers all CLI commands.

Entry point: ``femtorelease`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from femtorelease.cli.commands.build import build_cmd
from femtorelease.cli.commands.publish import publish_cmd
from femtorelease.cli.commands.targets import targets_cmd
from femtorelease.cli.render import ReleaseRenderer
from femtorelease.config import load_settings
from femtorelease.core.errors import ReleaseError
from femtorelease.logging_setup import configure_logging

app = typer.Typer(
    name="femtorelease",
    help="Cross-compile, checksum and publish femtobot release binaries.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

console = Console()


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (default: FEMTORELEASE_LOG_LEVEL or INFO).",
    ),
) -> None:
    """Configure logging before any command runs."""
    if not log_level:
        try:
            log_level = load_settings().log_level
        except ReleaseError as exc:
            ReleaseRenderer(console=console).print_error(exc)
            raise typer.Exit(code=1)
    configure_logging(log_level)


# Register subcommands
app.command(name="build", help="Build release binaries for all platforms.")(build_cmd)
app.command(name="publish", help="Build and publish a release for VERSION.")(publish_cmd)
app.command(name="targets", help="List supported build targets.")(targets_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
