"""Schema migration for stored paper records.

``RecordMigrator`` upgrades one record of any legacy shape to the canonical
schema.  ``CollectionMigrator`` applies it to a whole stored collection and
isolates per-record failures so one corrupt entry never blocks the rest.

Both are pure: the input record is never modified and the only output
besides the returned value is the diagnostics channel (``logging`` plus an
optional list of :class:`Diagnostic`).
"""

import copy
import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, Callable, Optional

from paperkeeper.models.paper import Diagnostic, MigrationCheck, MigrationReport
from paperkeeper.models.schema import (
    CURRENT_SCHEMA_VERSION,
    DEFAULT_ITEM_TYPE,
    DEFAULTS,
    LEGACY_SCHEMA_VERSION,
    PASSTHROUGH_FIELDS,
    PUBLICATION_TYPE_MAP,
)
from paperkeeper.utils.text import (
    normalize_authors,
    normalize_date,
    normalize_doi,
    normalize_keywords,
    now_iso,
)

logger = logging.getLogger(__name__)


def detect_schema_version(record: Any) -> str:
    """Return the record's ``_schemaVersion``, or the legacy version if unset."""
    version = record.get("_schemaVersion") if isinstance(record, Mapping) else None
    return str(version) if version else LEGACY_SCHEMA_VERSION


def infer_item_type(publication_type: Any) -> str:
    """Map a legacy ``publicationType`` label to an ``itemType``."""
    if not isinstance(publication_type, str):
        return DEFAULT_ITEM_TYPE
    return PUBLICATION_TYPE_MAP.get(publication_type.strip().lower(), DEFAULT_ITEM_TYPE)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


class RecordMigrator:
    """Upgrades a single paper record to the current schema version."""

    def __init__(
        self,
        current_version: str = CURRENT_SCHEMA_VERSION,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize migrator.

        Args:
            current_version: Schema version records are migrated to
            clock: Callable returning "now" (UTC wall clock by default)
        """
        self.current_version = current_version
        self.clock = clock

    def detect_schema_version(self, record: Any) -> str:
        """Return the schema version a record claims (legacy if unstamped)."""
        return detect_schema_version(record)

    def is_current(self, record: Any) -> bool:
        return self.detect_schema_version(record) == self.current_version

    def migrate_record(
        self,
        record: Mapping[str, Any],
        diagnostics: Optional[list[Diagnostic]] = None,
    ) -> Mapping[str, Any]:
        """Migrate *record* to the current schema.

        A record already at the current version is returned as-is, which
        makes migration idempotent.  Unknown version tags are migrated as
        1.x records and reported as warnings, never as failures.

        Args:
            record: Paper record in any known legacy shape
            diagnostics: Optional list collecting warnings for the caller

        Returns:
            The original record if current, else a new canonical record

        Raises:
            TypeError: If *record* is not a mapping
        """
        if not isinstance(record, Mapping):
            raise TypeError(f"Paper record must be a mapping, got {type(record).__name__}")

        version = self.detect_schema_version(record)
        if version == self.current_version:
            return record

        found: list[Diagnostic] = []
        if not version.startswith("1."):
            found.append(
                Diagnostic(
                    level="warning",
                    message=f"Unknown schema version {version}, migrating as {LEGACY_SCHEMA_VERSION}",
                    field="_schemaVersion",
                    cause=version,
                )
            )

        migrated = self._upgrade_v1(record, found)

        for diag in found:
            logger.warning("%s [%s=%s]", diag.message, diag.field, diag.cause)
        if diagnostics is not None:
            diagnostics.extend(found)
        return migrated

    def _upgrade_v1(
        self, old: Mapping[str, Any], diagnostics: list[Diagnostic]
    ) -> dict[str, Any]:
        """Build a fresh canonical record from a 1.x record."""
        paper: dict[str, Any] = {
            "_schemaVersion": self.current_version,
            "_lastModified": now_iso(self.clock),
        }

        if "id" in old:
            paper["id"] = copy.deepcopy(old["id"])
        paper["title"] = old.get("title") or ""

        paper["authors"] = normalize_authors(old.get("authors"))

        if old.get("doi"):
            paper["doi"] = normalize_doi(old["doi"])

        # savedAt is mirrored for readers that predate dateAdded
        paper["dateAdded"] = normalize_date(
            old.get("savedAt") or old.get("dateAdded"), diagnostics, self.clock
        )
        paper["savedAt"] = paper["dateAdded"]

        year = old.get("year")
        if year:
            if isinstance(year, float) and year.is_integer():
                year = int(year)
            paper["year"] = str(year)

        paper["keywords"] = normalize_keywords(old.get("keywords"))

        for key in PASSTHROUGH_FIELDS:
            if old.get(key) is not None:
                paper[key] = copy.deepcopy(old[key])

        if old.get("itemType"):
            paper["itemType"] = old["itemType"]
        else:
            paper["itemType"] = infer_item_type(old.get("publicationType"))

        for key, default in DEFAULTS.items():
            if not paper.get(key):
                paper[key] = default
        if "hasPDF" not in paper:
            paper["hasPDF"] = bool(paper.get("pdf") or paper.get("pdfPath"))

        return paper


class CollectionMigrator:
    """Migrates whole collections of records, one failure at a time."""

    def __init__(
        self,
        current_version: str = CURRENT_SCHEMA_VERSION,
        clock: Optional[Callable[[], datetime]] = None,
        record_migrator: Optional[RecordMigrator] = None,
    ):
        """Initialize collection migrator.

        Args:
            current_version: Schema version records are migrated to
            clock: Callable returning "now" (UTC wall clock by default)
            record_migrator: Pre-built record migrator (built from the
                other arguments when omitted)
        """
        self.record_migrator = record_migrator or RecordMigrator(current_version, clock)

    @property
    def current_version(self) -> str:
        return self.record_migrator.current_version

    def migrate_collection(self, records: Any) -> list[Any]:
        """Migrate every record, keeping failed ones unchanged in place.

        Non-sequence input yields an empty list.
        """
        return self.migrate_collection_report(records).records

    def migrate_collection_report(self, records: Any) -> MigrationReport:
        """Migrate every record and report what happened.

        Returns:
            MigrationReport whose ``records`` matches the input order and
            length; failed records appear unmodified at their index
        """
        report = MigrationReport()
        if not _is_sequence(records):
            if records is not None:
                logger.warning(
                    "Expected a sequence of papers, got %s; nothing migrated",
                    type(records).__name__,
                )
            return report

        for index, record in enumerate(records):
            warnings: list[Diagnostic] = []
            try:
                migrated = self.record_migrator.migrate_record(record, warnings)
            except Exception as exc:
                logger.exception("Error migrating paper at index %d", index)
                report.failures.append(
                    Diagnostic(
                        level="error",
                        message="Migration failed; record kept unchanged",
                        index=index,
                        cause=f"{type(exc).__name__}: {exc}",
                    )
                )
                report.records.append(record)
                continue

            for diag in warnings:
                diag.index = index
            report.warnings.extend(warnings)

            if migrated is record:
                report.unchanged += 1
            else:
                report.migrated += 1
            report.records.append(migrated)

        logger.info(
            "Migration to v%s: %d migrated, %d current, %d failed",
            self.current_version,
            report.migrated,
            report.unchanged,
            len(report.failures),
        )
        return report

    def check_migration_needed(
        self, stored_version: Optional[str], records: Any
    ) -> MigrationCheck:
        """Decide whether a stored collection needs migrating.

        Args:
            stored_version: Collection-level version marker (None → legacy)
            records: Stored paper records

        Returns:
            MigrationCheck; ``from_version`` is ``"mixed"`` when the marker
            is current but some records are not
        """
        stored = stored_version or LEGACY_SCHEMA_VERSION
        papers = list(records) if _is_sequence(records) else []
        current = self.current_version

        if stored != current:
            return MigrationCheck(
                needed=True, from_version=stored, to_version=current, count=len(papers)
            )

        needed = any(not self.record_migrator.is_current(p) for p in papers)
        return MigrationCheck(
            needed=needed,
            from_version="mixed" if needed else current,
            to_version=current,
            count=len(papers),
        )
