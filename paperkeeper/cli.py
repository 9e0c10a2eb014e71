"""Command-line interface handlers."""

import argparse
import json
from pathlib import Path
from typing import Any, Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from paperkeeper.config import Settings
from paperkeeper.console import ConsoleUI, configure_logging
from paperkeeper.database.repository import PaperStore
from paperkeeper.models.paper import MigrationCheck, MigrationReport
from paperkeeper.services.feedback_service import FeedbackService
from paperkeeper.services.migration_service import CollectionMigrator
from paperkeeper.services.validation_service import PaperValidator


class PaperKeeperCLI:
    """CLI application for paperkeeper."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        ui: Optional[ConsoleUI] = None,
    ):
        """Initialize CLI with settings.

        Args:
            settings: Application settings (loads from .metadata if not provided)
            ui: Console UI (a default Rich console if not provided)
        """
        self.settings = settings or Settings.load()
        self.ui = ui or ConsoleUI()
        self.store = PaperStore(self.settings.db_path)

        version = self.settings.schema_version
        self.migrator = CollectionMigrator(version)
        self.validator = PaperValidator(version)
        self.feedback = FeedbackService(version, self.validator)

    def cmd_status(self) -> MigrationCheck:
        """Show whether the stored collection needs migrating."""
        check = self.store.check_migration(self.migrator)
        self.ui.migration_check(check)
        return check

    def cmd_migrate(self, force: bool = False) -> Optional[MigrationReport]:
        """Migrate stored papers to the current schema version.

        Args:
            force: Rewrite the collection even if it is already current
        """
        check = self.store.check_migration(self.migrator)
        if not check.needed and not force:
            self.ui.migration_check(check)
            return None

        with Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            console=self.ui.console,
        ) as progress:
            progress.add_task(
                f"Migrating {check.count} papers to v{check.to_version}...", total=None
            )
            report = self.store.migrate_stored_papers(self.migrator)

        self.ui.migration_report(report)
        return report

    def cmd_list(self, limit: int = 50) -> None:
        """List stored papers (migrated on read).

        Args:
            limit: Maximum papers to display
        """
        papers = self.store.load_papers(self.migrator)
        self.ui.display_papers(papers[:limit])

    def cmd_validate(
        self,
        index: Optional[int] = None,
        prompt: bool = False,
        raw: bool = False,
    ) -> int:
        """Validate stored papers.

        Args:
            index: Validate only the paper at this position
            prompt: Print a repair prompt for each paper with issues
            raw: Validate records as stored instead of migrated on read

        Returns:
            Number of invalid papers
        """
        papers = self.store.load_papers(None if raw else self.migrator)
        if index is not None:
            if not 0 <= index < len(papers):
                self.ui.error(f"No paper at index {index} ({len(papers)} stored)")
                return 1
            selected = [(index, papers[index])]
        else:
            selected = list(enumerate(papers))

        rows = []
        results = {}
        invalid = 0
        for i, paper in selected:
            result = results[i] = self.validator.validate(paper)
            title = paper.get("title") if isinstance(paper, dict) else None
            rows.append((i, str(title or ""), result))
            if not result.valid:
                invalid += 1

        self.ui.display_validation(rows)

        if index is not None:
            self.ui.summary(self.feedback.summarize(results[index]))

        if prompt:
            for i, paper in selected:
                text = self.feedback.generate_repair_prompt(paper, results[i])
                if text:
                    self.ui.prompt(text)

        return invalid

    def cmd_import(self, path: Path) -> int:
        """Save raw paper records from a JSON file.

        The file may hold one record object or a list of them.

        Returns:
            Number of papers saved (duplicates are skipped)
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data: Any = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            self.ui.error(f"Cannot read {path}: {exc}")
            return -1

        records = [data] if isinstance(data, dict) else data
        if not isinstance(records, list):
            self.ui.error(f"{path} must contain a paper object or a list of them")
            return -1

        saved = 0
        for record in records:
            if not isinstance(record, dict):
                self.ui.warning(f"Skipping non-object entry: {record!r}")
                continue
            if self.store.save_paper(record):
                saved += 1
            else:
                self.ui.warning(f"Already saved: {record.get('title') or record.get('url')}")

        self.ui.success(f"Imported {saved} of {len(records)} papers")
        return saved

    def cmd_delete(self, saved_at: str) -> bool:
        """Delete the paper saved at the given timestamp."""
        if self.store.delete_paper(saved_at):
            self.ui.success(f"Deleted paper saved at {saved_at}")
            return True
        self.ui.warning(f"No paper saved at {saved_at}")
        return False


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="paperkeeper",
        description="Migrate and validate stored paper records",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # status command
    subparsers.add_parser("status", help="Check whether stored papers need migrating")

    # migrate command
    migrate_parser = subparsers.add_parser("migrate", help="Migrate stored papers")
    migrate_parser.add_argument(
        "--force",
        action="store_true",
        help="Rewrite the collection even if it is already current",
    )

    # list command
    list_parser = subparsers.add_parser("list", help="List stored papers")
    list_parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum papers to display (default: 50)",
    )

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Validate stored papers")
    validate_parser.add_argument(
        "--index",
        type=int,
        default=None,
        help="Validate only the paper at this position",
    )
    validate_parser.add_argument(
        "--prompt",
        action="store_true",
        help="Print a repair prompt for papers with issues",
    )
    validate_parser.add_argument(
        "--raw",
        action="store_true",
        help="Validate records as stored, without migrating them first",
    )

    # import command
    import_parser = subparsers.add_parser("import", help="Save papers from a JSON file")
    import_parser.add_argument("path", type=Path, help="JSON file with paper records")

    # delete command
    delete_parser = subparsers.add_parser("delete", help="Delete a paper by its savedAt")
    delete_parser.add_argument("saved_at", help="savedAt timestamp of the paper")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI.

    Returns:
        Process exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = Settings.load()
    configure_logging(settings.log_level)
    cli = PaperKeeperCLI(settings)

    if args.command == "status":
        cli.cmd_status()
    elif args.command == "migrate":
        report = cli.cmd_migrate(force=args.force)
        if report is not None and not report.success:
            return 1
    elif args.command == "list":
        cli.cmd_list(args.limit)
    elif args.command == "validate":
        if cli.cmd_validate(args.index, args.prompt, args.raw):
            return 1
    elif args.command == "import":
        if cli.cmd_import(args.path) < 0:
            return 1
    elif args.command == "delete":
        if not cli.cmd_delete(args.saved_at):
            return 1
    return 0
