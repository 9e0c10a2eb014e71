"""Shared fixtures."""

from datetime import datetime, timezone

import pytest

from paperkeeper.config import Settings
from paperkeeper.database.repository import PaperStore
from paperkeeper.services.migration_service import CollectionMigrator, RecordMigrator

FIXED_NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
FIXED_NOW_ISO = "2025-03-01T12:00:00.000Z"


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def migrator(clock):
    return RecordMigrator(clock=clock)


@pytest.fixture
def collection_migrator(clock):
    return CollectionMigrator(clock=clock)


@pytest.fixture
def store(tmp_path):
    return PaperStore(tmp_path / "papers.db")


@pytest.fixture(autouse=True)
def reset_settings():
    Settings.reset()
    yield
    Settings.reset()


@pytest.fixture
def legacy_paper():
    """A 1.x record as saved by the old browser capture path."""
    return {
        "id": 42,
        "title": "Attention Is All You Need",
        "authors": "Vaswani, Ashish; Shazeer, Noam and Parmar, Niki",
        "doi": "doi:10.5555/3295222.3295349",
        "year": 2017,
        "keywords": "transformers; attention, sequence models",
        "abstract": "The dominant sequence transduction models...",
        "publicationType": "Conference Paper",
        "url": "https://papers.nips.cc/paper/7181",
        "savedAt": "2023-06-01T09:30:00.000Z",
        "tags": ["nlp"],
    }
