"""Human-facing feedback for validation results.

Turns a :class:`ValidationResult` into a short summary and, when there is
something to fix, a repair prompt that can be pasted into a text-completion
assistant or handed to whoever corrects the record by hand.
"""

import json
from typing import Any, Optional

from paperkeeper.models.paper import Summary, ValidationIssue, ValidationResult
from paperkeeper.models.schema import CURRENT_SCHEMA_VERSION, ITEM_TYPES
from paperkeeper.services.validation_service import PaperValidator


def _to_json(value: Any, indent: Optional[int] = None) -> str:
    return json.dumps(value, indent=indent, ensure_ascii=False, default=str)


def _detail_lines(issues: list[ValidationIssue]) -> str:
    return "\n".join(f"{issue.field}: {issue.message}" for issue in issues)


class FeedbackService:
    """Builds summaries and repair prompts for one schema version."""

    def __init__(
        self,
        current_version: str = CURRENT_SCHEMA_VERSION,
        validator: Optional[PaperValidator] = None,
    ):
        """Initialize feedback service.

        Args:
            current_version: Schema version named in repair requirements
            validator: Validator used by :meth:`review` (built if omitted)
        """
        self.current_version = current_version
        self.validator = validator or PaperValidator(current_version)

    def summarize(self, result: ValidationResult) -> Summary:
        """Summarize a validation result as success, warning or error."""
        if result.valid and not result.warnings:
            return Summary(status="success", message="Paper data is valid and complete")

        if result.valid:
            return Summary(
                status="warning",
                message=(
                    f"Paper saved with {len(result.warnings)} warning(s). "
                    "Data is valid but some recommended fields are missing."
                ),
                details=_detail_lines(result.warnings),
            )

        return Summary(
            status="error",
            message=f"Paper has {len(result.errors)} error(s) that should be fixed.",
            details=_detail_lines(result.errors),
        )

    def generate_repair_prompt(
        self, record: Any, result: ValidationResult
    ) -> Optional[str]:
        """Describe everything wrong with *record* as a repair request.

        Returns:
            Prompt text, or None when there are no errors or warnings
        """
        if not result.errors and not result.warnings:
            return None

        lines = [
            "I have a research paper metadata object that needs to be fixed to match "
            "the required schema. Please help me correct the following issues:",
            "",
            "**Current Paper Data:**",
            "```json",
            _to_json(record, indent=2),
            "```",
            "",
        ]

        if result.errors:
            lines.append("**Errors (must fix):**")
            for i, error in enumerate(result.errors, 1):
                lines.append(f'{i}. Field "{error.field}": {error.message}')
                if error.value is not None:
                    lines.append(f"   Current value: {_to_json(error.value)}")
                if error.suggestion:
                    lines.append(f"   Suggested fix: {_to_json(error.suggestion)}")
            lines.append("")

        if result.warnings:
            lines.append("**Warnings (recommended to fix):**")
            for i, warning in enumerate(result.warnings, 1):
                lines.append(f'{i}. Field "{warning.field}": {warning.message}')
                if warning.value is not None:
                    lines.append(f"   Current value: {_to_json(warning.value)}")
            lines.append("")

        lines.extend(
            [
                "**Requirements:**",
                f'- _schemaVersion must be "{self.current_version}"',
                '- authors must be an array of objects like '
                '[{"fullName": "John Doe", "firstName": "John", "lastName": "Doe"}]',
                '- doi must be full URL format: "https://doi.org/10.xxxx/xxxxx"',
                '- dateAdded must be ISO 8601 format: "2024-11-14T10:30:00.000Z"',
                '- year must be 4-digit string: "2024"',
                f"- itemType must be one of: {', '.join(ITEM_TYPES)}",
                '- keywords should be an array of strings: ["machine learning", "neural networks"]',
                "",
                "Please return the corrected JSON object that passes all validation requirements.",
            ]
        )
        return "\n".join(lines)

    def review(self, record: Any) -> dict[str, Any]:
        """Validate *record* and bundle the result with its feedback."""
        result = self.validator.validate(record)
        return {
            **result.to_dict(),
            "summary": self.summarize(result).to_dict(),
            "repairPrompt": self.generate_repair_prompt(record, result),
        }
