"""Validation of paper records against the canonical schema.

The validator never raises and never modifies its input: every problem is
collected so the caller can show all of them at once.  Hard errors make a
record invalid; warnings flag recommended fields that are missing or look
suspicious.
"""

import re
from collections.abc import Mapping
from typing import Any

from paperkeeper.models.paper import ValidationIssue, ValidationResult
from paperkeeper.models.schema import (
    CURRENT_SCHEMA_VERSION,
    DOI_PREFIX,
    ITEM_TYPES,
    PRIORITIES,
    STATUSES,
)
from paperkeeper.utils.text import DOI_URL_RE, is_iso_datetime, normalize_doi

YEAR_RE = re.compile(r"^[0-9]{4}$")
LANGUAGE_RE = re.compile(r"^[a-z]{2}$")

# field → allowed values
ENUM_FIELDS = {
    "itemType": ITEM_TYPES,
    "status": STATUSES,
    "priority": PRIORITIES,
}


def _present(value: Any) -> bool:
    """True unless the value is None or an empty string."""
    return value is not None and value != ""


def _matches(pattern: re.Pattern, value: Any) -> bool:
    return isinstance(value, str) and pattern.fullmatch(value) is not None


class PaperValidator:
    """Checks records against the schema of one version."""

    def __init__(self, current_version: str = CURRENT_SCHEMA_VERSION):
        """Initialize validator.

        Args:
            current_version: Schema version reported in results
        """
        self.current_version = current_version

    def validate(self, record: Any) -> ValidationResult:
        """Validate a (migrated) paper record.

        Args:
            record: Paper record; any shape is accepted

        Returns:
            ValidationResult with every error and warning found
        """
        result = ValidationResult(schema_version=self.current_version)

        if not isinstance(record, Mapping):
            result.errors.append(
                ValidationIssue(
                    field="record",
                    message="Paper record must be an object",
                    value=repr(record),
                )
            )
            record = {}

        self._check_required(record, result)
        self._check_authors(record, result)
        self._check_doi(record, result)
        self._check_year(record, result)
        self._check_enums(record, result)
        self._check_language(record, result)
        self._check_recommended(record, result)
        return result

    # ── Hard errors ───────────────────────────────────────────────────

    def _check_required(self, record: Mapping, result: ValidationResult) -> None:
        if not record.get("_schemaVersion"):
            result.errors.append(
                ValidationIssue(field="_schemaVersion", message="Schema version is required")
            )

        # 0 and "" are legitimate ids
        if record.get("id") is None:
            result.errors.append(ValidationIssue(field="id", message="Paper ID is required"))

        title = record.get("title")
        if title is None or (isinstance(title, str) and not title.strip()):
            result.errors.append(
                ValidationIssue(field="title", message="Title is required and cannot be empty")
            )
        elif not isinstance(title, str):
            result.errors.append(
                ValidationIssue(field="title", message="Title must be a string", value=title)
            )

        date_added = record.get("dateAdded")
        if not _present(date_added):
            result.errors.append(
                ValidationIssue(field="dateAdded", message="Date added is required")
            )
        elif not is_iso_datetime(date_added):
            result.errors.append(
                ValidationIssue(
                    field="dateAdded",
                    message="Date added must be in ISO 8601 format",
                    value=date_added,
                )
            )

    def _check_authors(self, record: Mapping, result: ValidationResult) -> None:
        authors = record.get("authors")
        if authors is None:
            result.warnings.append(
                ValidationIssue(
                    field="authors",
                    message="Authors field is missing (recommended)",
                    severity="warning",
                )
            )
            return

        if not isinstance(authors, list):
            result.errors.append(
                ValidationIssue(
                    field="authors",
                    message="Authors must be an array of objects",
                    value=authors,
                )
            )
            return

        for index, author in enumerate(authors):
            if not isinstance(author, Mapping):
                result.errors.append(
                    ValidationIssue(
                        field=f"authors[{index}]",
                        message="Each author must be an object with at least a fullName field",
                        value=author,
                    )
                )
                continue
            full_name = author.get("fullName")
            if not isinstance(full_name, str) or not full_name.strip():
                result.errors.append(
                    ValidationIssue(
                        field=f"authors[{index}].fullName",
                        message="Author fullName is required",
                    )
                )

    def _check_doi(self, record: Mapping, result: ValidationResult) -> None:
        doi = record.get("doi")
        if not _present(doi):
            return

        if not (isinstance(doi, str) and doi.startswith(DOI_PREFIX)):
            result.errors.append(
                ValidationIssue(
                    field="doi",
                    message=f"DOI must be in full URL format ({DOI_PREFIX}...)",
                    value=doi,
                    suggestion=normalize_doi(doi),
                )
            )
        elif not DOI_URL_RE.fullmatch(doi):
            result.warnings.append(
                ValidationIssue(
                    field="doi",
                    message="DOI format may be invalid",
                    severity="warning",
                    value=doi,
                )
            )

    def _check_year(self, record: Mapping, result: ValidationResult) -> None:
        year = record.get("year")
        if _present(year) and not _matches(YEAR_RE, year):
            result.errors.append(
                ValidationIssue(field="year", message="Year must be in YYYY format", value=year)
            )

    def _check_enums(self, record: Mapping, result: ValidationResult) -> None:
        for field_name, allowed in ENUM_FIELDS.items():
            value = record.get(field_name)
            if _present(value) and not (isinstance(value, str) and value in allowed):
                result.errors.append(
                    ValidationIssue(
                        field=field_name,
                        message=f"Invalid {field_name}. Must be one of: {', '.join(allowed)}",
                        value=value,
                    )
                )

    # ── Soft warnings ─────────────────────────────────────────────────

    def _check_language(self, record: Mapping, result: ValidationResult) -> None:
        language = record.get("language")
        if _present(language) and not _matches(LANGUAGE_RE, language):
            result.warnings.append(
                ValidationIssue(
                    field="language",
                    message='Language should be a 2-letter ISO 639-1 code (e.g., "en", "fr")',
                    severity="warning",
                    value=language,
                )
            )

    def _check_recommended(self, record: Mapping, result: ValidationResult) -> None:
        if not _present(record.get("year")):
            result.warnings.append(
                ValidationIssue(
                    field="year",
                    message="Publication year is recommended",
                    severity="warning",
                )
            )

        if not record.get("abstract"):
            result.warnings.append(
                ValidationIssue(
                    field="abstract",
                    message="Abstract is recommended",
                    severity="warning",
                )
            )

        keywords = record.get("keywords")
        if not _present(keywords) or (isinstance(keywords, (list, tuple)) and not keywords):
            result.warnings.append(
                ValidationIssue(
                    field="keywords",
                    message="Keywords are recommended for better organization",
                    severity="warning",
                )
            )
