"""Data models."""

from paperkeeper.models.paper import (
    Diagnostic,
    MigrationCheck,
    MigrationReport,
    Person,
    Summary,
    ValidationIssue,
    ValidationResult,
)
from paperkeeper.models.schema import CURRENT_SCHEMA_VERSION, LEGACY_SCHEMA_VERSION

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "Diagnostic",
    "LEGACY_SCHEMA_VERSION",
    "MigrationCheck",
    "MigrationReport",
    "Person",
    "Summary",
    "ValidationIssue",
    "ValidationResult",
]
