"""Key-value paper store backed by SQLite.

The store keeps one JSON blob per key:

* ``savedPapers``   – sequence of all paper records
* ``schemaVersion`` – collection-level schema version marker
* ``lastMigration`` – timestamp of the last completed migration

Read-modify-write sequences (saving a paper, migrating the collection)
run under a per-store lock inside a single SQLite transaction, so other
readers never see a half-migrated collection.
"""

import json
import logging
import sqlite3
import threading
import uuid
from collections.abc import Iterable
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Union

from paperkeeper.models.paper import MigrationCheck, MigrationReport
from paperkeeper.services.migration_service import CollectionMigrator
from paperkeeper.utils.text import now_iso

logger = logging.getLogger(__name__)

PAPERS_KEY = "savedPapers"
VERSION_KEY = "schemaVersion"
MIGRATED_AT_KEY = "lastMigration"

Listener = Callable[[dict[str, Any]], None]


class PaperStore:
    """Persistent key-value store for paper records using SQLite."""

    def __init__(self, db_path: Path):
        """Initialize store with database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []
        self._init_db()

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
            """)
            conn.commit()

    # ── Key-value interface ───────────────────────────────────────────

    def get(self, keys: Union[str, Iterable[str]]) -> dict[str, Any]:
        """Read values for *keys*; missing keys are left out of the result."""
        if isinstance(keys, str):
            keys = [keys]
        keys = list(keys)
        if not keys:
            return {}

        with self._connection() as conn:
            return self._read(conn, keys)

    def set(self, values: dict[str, Any]) -> None:
        """Write all *values* in one transaction and notify listeners."""
        if not values:
            return
        with self._lock, self._connection() as conn:
            self._write(conn, values)
            conn.commit()
        self._notify(values)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener.

        The listener receives a dict of the keys written and their new
        values after every successful write.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @staticmethod
    def _read(conn: sqlite3.Connection, keys: list[str]) -> dict[str, Any]:
        placeholders = ", ".join("?" for _ in keys)
        rows = conn.execute(
            f"SELECT key, value FROM kv WHERE key IN ({placeholders})", keys
        ).fetchall()
        return {key: json.loads(value) for key, value in rows}

    @staticmethod
    def _write(conn: sqlite3.Connection, values: dict[str, Any]) -> None:
        conn.executemany(
            "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
            [
                (key, json.dumps(value, ensure_ascii=False, default=str))
                for key, value in values.items()
            ],
        )

    def _notify(self, changes: dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(changes)
            except Exception:
                logger.exception("Store change listener failed")

    # ── Paper collection ──────────────────────────────────────────────

    def load_papers(self, migrator: Optional[CollectionMigrator] = None) -> list[Any]:
        """Return stored papers, migrated on read when *migrator* is given.

        Migration here is in-memory only; use :meth:`migrate_stored_papers`
        to persist it.
        """
        papers = self.get(PAPERS_KEY).get(PAPERS_KEY) or []
        if migrator is None:
            return papers
        return migrator.migrate_collection(papers)

    def save_paper(self, record: dict[str, Any]) -> bool:
        """Append a raw paper record unless it duplicates a stored one.

        Duplicates are exact matches on ``title`` or ``url``.  The stored
        copy is stamped with ``savedAt`` and given an ``id`` if it has none.

        Returns:
            True if the paper was saved, False if it already existed
        """
        with self._lock, self._connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            papers = self._read(conn, [PAPERS_KEY]).get(PAPERS_KEY) or []

            if self._is_duplicate(record, papers):
                conn.rollback()
                logger.info("Paper already saved: %s", record.get("title"))
                return False

            paper = {**record, "savedAt": now_iso()}
            if paper.get("id") is None:
                paper["id"] = uuid.uuid4().hex[:12]
            papers.append(paper)

            self._write(conn, {PAPERS_KEY: papers})
            conn.commit()

        self._notify({PAPERS_KEY: papers})
        return True

    @staticmethod
    def _is_duplicate(record: dict[str, Any], papers: list[Any]) -> bool:
        title = record.get("title")
        url = record.get("url")
        for paper in papers:
            if not isinstance(paper, dict):
                continue
            if title and paper.get("title") == title:
                return True
            if url and paper.get("url") == url:
                return True
        return False

    def delete_paper(self, saved_at: str) -> bool:
        """Delete the paper saved at *saved_at*.

        Returns:
            True if a paper was removed
        """
        with self._lock, self._connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            papers = self._read(conn, [PAPERS_KEY]).get(PAPERS_KEY) or []
            kept = [
                p for p in papers
                if not (isinstance(p, dict) and p.get("savedAt") == saved_at)
            ]
            if len(kept) == len(papers):
                conn.rollback()
                return False
            self._write(conn, {PAPERS_KEY: kept})
            conn.commit()

        self._notify({PAPERS_KEY: kept})
        return True

    def clear(self) -> None:
        """Remove all stored papers."""
        self.set({PAPERS_KEY: []})

    # ── Migration ─────────────────────────────────────────────────────

    def check_migration(self, migrator: CollectionMigrator) -> MigrationCheck:
        """Check whether the stored collection needs migrating."""
        stored = self.get([PAPERS_KEY, VERSION_KEY])
        return migrator.check_migration_needed(
            stored.get(VERSION_KEY), stored.get(PAPERS_KEY) or []
        )

    def migrate_stored_papers(self, migrator: CollectionMigrator) -> MigrationReport:
        """Migrate the stored collection and write it back as one unit.

        Only one migration runs per store at a time.  Papers, version
        marker and migration timestamp are written in the same transaction.
        """
        with self._lock, self._connection() as conn:
            conn.execute("BEGIN IMMEDIATE")
            papers = self._read(conn, [PAPERS_KEY]).get(PAPERS_KEY) or []
            if not isinstance(papers, list):
                conn.rollback()
                raise ValueError(
                    f"Stored {PAPERS_KEY} is a {type(papers).__name__}, expected a list"
                )
            logger.info(
                "Migrating %d papers to schema v%s", len(papers), migrator.current_version
            )

            report = migrator.migrate_collection_report(papers)
            changes = {
                PAPERS_KEY: report.records,
                VERSION_KEY: migrator.current_version,
                MIGRATED_AT_KEY: now_iso(),
            }
            self._write(conn, changes)
            conn.commit()

        logger.info("Migration complete: %d papers", report.count)
        self._notify(changes)
        return report
