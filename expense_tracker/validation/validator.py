"""
Two-Stage Import Validation

DESIGN DECISION: An import replaces everything, so a document is checked
in full before any of it is applied.

STAGE 1 - SCHEMA VALIDATION:
- The text parses as a JSON object
- `categories` and `expenses` are present and are arrays
- `shoppingLists`, if present, is an array
- Every entity matches its model (types, required fields, amount > 0, ...)

STAGE 2 - SEMANTIC VALIDATION:
- Ids are unique within each kind of entity
- Every subcategory points back at the category that contains it
- Every expense's category is its subcategory's owner
- Expenses pointing at an unknown subcategory are only a warning; such
  orphans are harmless and older versions could produce them

IMPORTANT: Validation NEVER silently fixes issues.
It reports them, and the import is refused.
"""

import json
from collections import Counter
from typing import Any, Optional

from pydantic import ValidationError

from expense_tracker.models.exchange import (
    OPTIONAL_SECTIONS,
    REQUIRED_SECTIONS,
    ExchangePayload,
    ValidationIssue,
    ValidationResult,
)


class ExchangeValidator:
    """
    Validates exchange-format documents through a two-stage pipeline.

    Stage 2 only runs when stage 1 produced a payload.
    """

    def validate(
        self,
        text: Any,
    ) -> tuple[Optional[ExchangePayload], ValidationResult]:
        """
        Run both stages.

        Args:
            text: The document as text (bytes are decoded as UTF-8)

        Returns:
            (payload, result). payload is None when stage 1 failed.
        """
        payload, schema_issues = self._validate_schema(text)
        schema_valid = payload is not None

        semantic_issues: list[ValidationIssue] = []
        if payload is not None:
            semantic_issues = self._validate_semantic(payload)
        semantic_valid = schema_valid and not any(
            issue.severity == "error" for issue in semantic_issues
        )

        issues = schema_issues + semantic_issues
        return payload, ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=issues,
            warnings=[issue.message for issue in issues if issue.severity == "warning"],
        )

    def _validate_schema(
        self,
        text: Any,
    ) -> tuple[Optional[ExchangePayload], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (payload_or_None, list_of_issues)
        """
        issues = []

        if isinstance(text, (bytes, bytearray)):
            try:
                text = text.decode("utf-8")
            except UnicodeDecodeError:
                issues.append(ValidationIssue(
                    field="document",
                    issue_type="invalid_encoding",
                    message="The file is not UTF-8 text",
                    severity="error",
                    suggested_fix="Choose a file produced by the export function",
                ))
                return None, issues

        if not isinstance(text, str):
            issues.append(ValidationIssue(
                field="document",
                issue_type="invalid_format",
                message=f"Expected text, got {type(text).__name__}",
                severity="error",
            ))
            return None, issues

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            issues.append(ValidationIssue(
                field="document",
                issue_type="invalid_format",
                message=f"Not valid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
                severity="error",
                suggested_fix="Choose a file produced by the export function",
            ))
            return None, issues

        if not isinstance(data, dict):
            issues.append(ValidationIssue(
                field="document",
                issue_type="invalid_format",
                message="The document must be a JSON object",
                severity="error",
            ))
            return None, issues

        for section in REQUIRED_SECTIONS:
            if section not in data:
                issues.append(ValidationIssue(
                    field=section,
                    issue_type="missing",
                    message=f"Required section '{section}' is missing",
                    severity="error",
                ))
            elif not isinstance(data[section], list):
                issues.append(ValidationIssue(
                    field=section,
                    issue_type="invalid_format",
                    message=f"Section '{section}' must be an array",
                    severity="error",
                ))

        for section in OPTIONAL_SECTIONS:
            if section in data and not isinstance(data[section], list):
                issues.append(ValidationIssue(
                    field=section,
                    issue_type="invalid_format",
                    message=f"Section '{section}' must be an array when present",
                    severity="error",
                ))

        if issues:
            return None, issues

        try:
            payload = ExchangePayload.model_validate(data)
        except ValidationError as e:
            for error in e.errors():
                issues.append(ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]),
                    issue_type=error["type"],
                    message=error["msg"],
                    severity="error",
                ))
            return None, issues

        return payload, issues

    def _validate_semantic(
        self,
        payload: ExchangePayload,
    ) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Checks identifiers and the references between entities.
        """
        issues = []

        subcategories = [s for c in payload.categories for s in c.subcategories]

        issues.extend(self._duplicate_ids("categories", [c.id for c in payload.categories]))
        issues.extend(self._duplicate_ids("subcategories", [s.id for s in subcategories]))
        issues.extend(self._duplicate_ids("expenses", [e.id for e in payload.expenses]))
        if payload.shopping_lists is not None:
            issues.extend(self._duplicate_ids(
                "shoppingLists", [sl.id for sl in payload.shopping_lists]
            ))

        owners = {}
        for c_index, category in enumerate(payload.categories):
            for s_index, subcategory in enumerate(category.subcategories):
                owners.setdefault(subcategory.id, category.id)
                if subcategory.category_id != category.id:
                    issues.append(ValidationIssue(
                        field=f"categories.{c_index}.subcategories.{s_index}.categoryId",
                        issue_type="broken_reference",
                        message=(
                            f"Subcategory '{subcategory.name}' is inside category "
                            f"'{category.id}' but points at '{subcategory.category_id}'"
                        ),
                        severity="error",
                    ))

        for index, expense in enumerate(payload.expenses):
            owner = owners.get(expense.subcategory_id)
            if owner is None:
                issues.append(ValidationIssue(
                    field=f"expenses.{index}.subcategoryId",
                    issue_type="orphan",
                    message=(
                        f"Expense '{expense.id}' refers to unknown subcategory "
                        f"'{expense.subcategory_id}'"
                    ),
                    severity="warning",
                    suggested_fix="It will be kept but will not appear in category reports",
                ))
            elif owner != expense.category_id:
                issues.append(ValidationIssue(
                    field=f"expenses.{index}.categoryId",
                    issue_type="category_mismatch",
                    message=(
                        f"Expense '{expense.id}' is filed under category "
                        f"'{expense.category_id}' but its subcategory belongs to '{owner}'"
                    ),
                    severity="error",
                ))

        return issues

    def _duplicate_ids(self, section: str, ids: list[str]) -> list[ValidationIssue]:
        return [
            ValidationIssue(
                field=section,
                issue_type="duplicate_id",
                message=f"Id '{entity_id}' appears {count} times in {section}",
                severity="error",
            )
            for entity_id, count in Counter(ids).items()
            if count > 1
        ]
