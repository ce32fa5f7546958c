"""
Report Models

Aggregates computed from stored expenses for history and chart views.
The reporter produces them; views only render.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ChartSlice(BaseModel):
    """One slice of a spending pie chart."""

    key: str = Field(
        ...,
        description="ID of the category or subcategory this slice sums"
    )
    name: str = Field(
        ...,
        description="Display name"
    )
    value: float = Field(
        ...,
        ge=0,
        description="Total spent"
    )
    color: str = Field(
        ...,
        description="Display color (a subcategory uses its category's color)"
    )
    category_name: Optional[str] = Field(
        default=None,
        description="Owning category name, set for subcategory slices"
    )

    def share_of(self, total: float) -> float:
        """Fraction of `total` this slice represents."""
        if total <= 0:
            return 0.0
        return self.value / total


class BreakdownResult(BaseModel):
    """
    Result of summarizing expenses for a period.

    Slices with no spending are left out, as a chart has nothing to draw
    for them.
    """

    group_by: str = Field(
        ...,
        pattern="^(category|subcategory)$"
    )
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = None

    slices: list[ChartSlice] = Field(default_factory=list)
    total: float = Field(
        default=0.0,
        ge=0,
        description="Grand total over all slices, rounded to cents"
    )
    expense_count: int = Field(default=0, ge=0)

    description: str = Field(
        ...,
        description="Human-readable description of what was summarized"
    )

    @property
    def data_found(self) -> bool:
        return len(self.slices) > 0
