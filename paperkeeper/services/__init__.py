"""Service layer."""

from paperkeeper.services.feedback_service import FeedbackService
from paperkeeper.services.migration_service import (
    CollectionMigrator,
    RecordMigrator,
    detect_schema_version,
)
from paperkeeper.services.validation_service import PaperValidator

__all__ = [
    "CollectionMigrator",
    "FeedbackService",
    "PaperValidator",
    "RecordMigrator",
    "detect_schema_version",
]
