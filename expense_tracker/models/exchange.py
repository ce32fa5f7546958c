"""
Exchange Format Models

The exchange format is the JSON document produced by export and consumed
by import:

    {
      "categories": [...],
      "expenses": [...],
      "shoppingLists": [...]      # optional
    }

DESIGN DECISION: `shoppingLists` is optional and additive. Files written
before shopping lists existed must still import.
"""

import json
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from expense_tracker.models.expense import (
    Category,
    Expense,
    ShoppingList,
    utc_now,
)


REQUIRED_SECTIONS = ("categories", "expenses")
OPTIONAL_SECTIONS = ("shoppingLists",)


class ExchangePayload(BaseModel):
    """A whole-state snapshot in exchange format."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    categories: list[Category] = Field(
        ...,
        description="All categories with their subcategories"
    )
    expenses: list[Expense] = Field(
        ...,
        description="All expenses"
    )
    shopping_lists: Optional[list[ShoppingList]] = Field(
        default=None,
        description="Shopping lists, absent in older files"
    )

    def to_json(self) -> str:
        """
        Render as deterministic, human-readable JSON.

        Keys are sorted so two exports of the same state are identical
        and diff cleanly.
        """
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        return json.dumps(data, indent=2, ensure_ascii=False, sort_keys=True)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Location of the issue (e.g., 'expenses.3.amount')"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'duplicate_id')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage import validation.

    Stage 1: Schema validation (parseable, required sections, entity shapes)
    Stage 2: Semantic validation (identifiers and references)
    """

    validated_at: datetime = Field(
        default_factory=utc_now
    )

    # Stage results
    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )

    # Overall result
    is_valid: bool = Field(
        ...,
        description="Can the payload replace the current state?"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
