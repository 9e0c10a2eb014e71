"""paperkeeper - schema migration and validation for saved paper records.

Upgrades paper records of any legacy shape to the canonical, versioned
schema, validates them with field-level errors and warnings, and explains
problems in human-readable form.
"""

__version__ = "2.0.0"

from paperkeeper.config import Settings
from paperkeeper.models.schema import CURRENT_SCHEMA_VERSION
from paperkeeper.services.feedback_service import FeedbackService
from paperkeeper.services.migration_service import CollectionMigrator, RecordMigrator
from paperkeeper.services.validation_service import PaperValidator

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "CollectionMigrator",
    "FeedbackService",
    "PaperValidator",
    "RecordMigrator",
    "Settings",
    "__version__",
]
