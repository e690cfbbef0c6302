"""Rich terminal rendering for build and publish results.

Color scheme
------------
- green  : uploaded / created
- cyan   : replaced
- yellow : skipped / warnings
- red    : errors
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from femtorelease.core.errors import APIError, ReleaseError
from femtorelease.core.target_registry import download_url
from femtorelease.models.artifacts import Artifact, ChecksumRecord
from femtorelease.models.release import AssetAction, PublishReport
from femtorelease.models.targets import Target

_ACTION_STYLES: dict[AssetAction, str] = {
    AssetAction.UPLOADED: "[green]uploaded[/green]",
    AssetAction.REPLACED: "[cyan]replaced[/cyan]",
    AssetAction.SKIPPED: "[yellow]skipped (not found)[/yellow]",
}


def human_size(size: int) -> str:
    """Format a byte count the way ``ls -lh`` does (``1.5M``)."""
    value = float(size)
    for unit in ("B", "K", "M", "G"):
        if value < 1024 or unit == "G":
            return f"{value:.0f}{unit}" if unit == "B" else f"{value:.1f}{unit}"
        value /= 1024
    return f"{value:.1f}G"


class ReleaseRenderer:
    """Renders pipeline results as Rich terminal output.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def print_artifacts(
        self, artifacts: list[Artifact], checksums: list[ChecksumRecord] | None = None
    ) -> None:
        digests = {c.artifact_name: c.hexdigest for c in checksums or []}
        table = Table(title="Binaries")
        table.add_column("Artifact", style="cyan")
        table.add_column("Target")
        table.add_column("Size", justify="right")
        table.add_column("Stripped", justify="center")
        table.add_column("SHA-256", style="dim")
        for artifact in artifacts:
            table.add_row(
                artifact.name,
                artifact.target.triple,
                human_size(artifact.size_bytes),
                "[green]Yes[/green]" if artifact.stripped else "[dim]No[/dim]",
                digests.get(artifact.name, "")[:16],
            )
        self.console.print(table)

    def print_report(self, report: PublishReport) -> None:
        table = Table(title=f"Assets on {report.tag}")
        table.add_column("Asset", style="cyan")
        table.add_column("Result")
        table.add_column("Size", justify="right")
        for outcome in report.assets:
            table.add_row(
                outcome.name,
                _ACTION_STYLES[outcome.action],
                human_size(outcome.size_bytes) if outcome.size_bytes else "",
            )
        self.console.print(table)
        self.console.print()

        verb = "created" if report.created else "updated"
        lines = [
            f"[bold green]Release {report.tag} {verb}![/bold green]",
            "",
            f"[bold]Uploaded:[/bold] {report.uploaded_count}",
        ]
        if report.skipped:
            lines.append(f"[yellow][bold]Skipped:[/bold] {', '.join(report.skipped)}[/yellow]")
        if report.prerelease:
            lines.append("[bold]Pre-release:[/bold] yes")
        lines += ["", report.location]
        self.console.print(
            Panel("\n".join(lines), title="[bold]Release[/bold]", border_style="green", padding=(1, 2))
        )

    def print_targets(
        self,
        targets: list[Target],
        project: str,
        *,
        web_base: str = "",
        tag: str | None = None,
    ) -> None:
        table = Table(title="Build Targets")
        table.add_column("Triple", style="cyan")
        table.add_column("Artifact", style="green")
        table.add_column("Toolchain")
        if tag:
            table.add_column("Download URL", style="dim")
        for target in targets:
            row = [
                target.triple,
                target.artifact_name(project),
                target.toolchain.kind.value,
            ]
            if tag:
                row.append(download_url(web_base, tag, target, project))
            table.add_row(*row)
        self.console.print(table)

    def print_error(self, exc: ReleaseError) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", highlight=False)
        if isinstance(exc, APIError) and exc.body:
            self.console.print(exc.body, markup=False, highlight=False)
        if exc.hint:
            self.console.print(f"[dim]{escape(exc.hint)}[/dim]", highlight=False)
