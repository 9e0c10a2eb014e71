"""Paper data model.

Paper records themselves are plain ``dict`` objects: they arrive in many
ad hoc shapes and are persisted as JSON.  The dataclasses here describe the
typed values the engine produces *about* records.
"""

from dataclasses import dataclass, field
from typing import Any, Literal, Optional


@dataclass
class Person:
    """An author in citation order."""

    full_name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def to_dict(self) -> dict[str, str]:
        data = {"fullName": self.full_name}
        if self.first_name:
            data["firstName"] = self.first_name
        if self.last_name:
            data["lastName"] = self.last_name
        return data


@dataclass
class Diagnostic:
    """A non-fatal message raised while migrating records."""

    level: Literal["warning", "error"]
    message: str
    index: Optional[int] = None
    field: Optional[str] = None
    cause: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"level": self.level, "message": self.message}
        if self.index is not None:
            data["index"] = self.index
        if self.field is not None:
            data["field"] = self.field
        if self.cause is not None:
            data["cause"] = self.cause
        return data


@dataclass
class ValidationIssue:
    """A single validation error or warning for one field."""

    field: str
    message: str
    severity: Literal["error", "warning"] = "error"
    value: Any = None
    suggestion: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "field": self.field,
            "message": self.message,
            "severity": self.severity,
        }
        if self.value is not None:
            data["value"] = self.value
        if self.suggestion is not None:
            data["suggestion"] = self.suggestion
        return data


@dataclass
class ValidationResult:
    """Outcome of validating one record.

    ``valid`` depends on ``errors`` only; warnings never invalidate a record.
    """

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    schema_version: str = ""

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "schemaVersion": self.schema_version,
        }


@dataclass
class MigrationCheck:
    """Whether a stored collection has to be migrated."""

    needed: bool
    from_version: str
    to_version: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "needed": self.needed,
            "from": self.from_version,
            "to": self.to_version,
            "count": self.count,
        }


@dataclass
class MigrationReport:
    """Aggregate outcome of migrating a collection."""

    records: list[Any] = field(default_factory=list)
    migrated: int = 0
    unchanged: int = 0
    failures: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def success(self) -> bool:
        return not self.failures


@dataclass
class Summary:
    """Human-readable digest of a validation result."""

    status: Literal["success", "warning", "error"]
    message: str
    details: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status, "message": self.message}
        if self.details is not None:
            data["details"] = self.details
        return data
