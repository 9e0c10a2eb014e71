"""Console UI for terminal output using Rich."""

import logging
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from paperkeeper.models.paper import MigrationCheck, MigrationReport, Summary, ValidationResult

_SUMMARY_STYLES = {"success": "green", "warning": "yellow", "error": "red"}


def configure_logging(level: str = "INFO", console: Optional[Console] = None) -> None:
    """Route library logging through a Rich handler."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _author_names(paper: dict[str, Any]) -> str:
    authors = paper.get("authors")
    if not isinstance(authors, list):
        return str(authors) if authors else "-"
    names = [a.get("fullName", "") for a in authors if isinstance(a, dict)]
    if len(names) > 3:
        return ", ".join(names[:3]) + " et al."
    return ", ".join(names) or "-"


class ConsoleUI:
    """Rich-based console UI for paper records, migrations and validation."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize console."""
        self.console = console or Console()

    def info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(message)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        self.console.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning message in yellow."""
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print an error message in red."""
        self.console.print(f"[red]Error:[/red] {message}")

    def migration_check(self, check: MigrationCheck) -> None:
        """Print whether the stored collection needs migrating."""
        if check.needed:
            self.console.print(
                f"[yellow]Migration needed[/yellow]: {check.count} papers, "
                f"v{check.from_version} → v{check.to_version}"
            )
        else:
            self.console.print(
                f"[green]Up to date[/green]: {check.count} papers at v{check.to_version}"
            )

    def migration_report(self, report: MigrationReport) -> None:
        """Print migration totals, then each failure and warning."""
        self.console.print(
            f"\n[green]Done.[/green] Migrated: [bold]{report.migrated}[/bold], "
            f"already current: {report.unchanged}, failed: {len(report.failures)}"
        )
        for failure in report.failures:
            self.error(f"paper #{failure.index}: {failure.cause}")
        for diag in report.warnings:
            self.warning(f"paper #{diag.index}: {diag.message} ({diag.cause})")

    def display_papers(self, papers: list[Any]) -> None:
        """Display papers in a formatted table.

        Args:
            papers: Paper records (migrated or not)
        """
        table = Table(title=f"Papers ({len(papers)})")
        table.add_column("#", justify="right")
        table.add_column("Saved", width=10)
        table.add_column("Title", overflow="fold")
        table.add_column("Authors", overflow="fold")
        table.add_column("Year", width=4)
        table.add_column("Status")
        table.add_column("Schema")

        for index, paper in enumerate(papers):
            if not isinstance(paper, dict):
                table.add_row(str(index), "-", f"[red]{paper!r}[/red]", "-", "-", "-", "-")
                continue
            saved = paper.get("dateAdded") or paper.get("savedAt") or "-"
            table.add_row(
                str(index),
                str(saved)[:10],
                escape(str(paper.get("title") or "(no title)")),
                _author_names(paper),
                str(paper.get("year") or "-"),
                str(paper.get("status") or "-"),
                str(paper.get("_schemaVersion") or "legacy"),
            )

        self.console.print(table)
        if not papers:
            self.console.print("No papers found.")

    def display_validation(self, rows: list[tuple[int, str, ValidationResult]]) -> None:
        """Display validation outcomes, one row per paper."""
        table = Table(title="Validation")
        table.add_column("#", justify="right")
        table.add_column("Title", overflow="fold")
        table.add_column("Errors", justify="right")
        table.add_column("Warnings", justify="right")
        table.add_column("Issues", overflow="fold")

        for index, title, result in rows:
            issues = [f"[red]{e.field}[/red]: {escape(e.message)}" for e in result.errors]
            issues += [f"[yellow]{w.field}[/yellow]: {escape(w.message)}" for w in result.warnings]
            table.add_row(
                str(index),
                escape(title or "(no title)"),
                str(len(result.errors)),
                str(len(result.warnings)),
                "\n".join(issues) or "[green]ok[/green]",
            )

        self.console.print(table)

    def summary(self, summary: Summary) -> None:
        """Print a validation summary in its status colour."""
        style = _SUMMARY_STYLES.get(summary.status, "white")
        self.console.print(f"[{style}]{summary.message}[/{style}]")
        if summary.details:
            self.console.print(summary.details, markup=False)

    def prompt(self, text: str) -> None:
        """Print a repair prompt verbatim."""
        self.console.rule("Repair prompt")
        self.console.print(text, markup=False, highlight=False)
        self.console.rule()
