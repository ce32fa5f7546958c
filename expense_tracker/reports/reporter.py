"""
Expense Reporting

DESIGN DECISION: Reports are computed from the store's current snapshot
every time they are asked for. There is no cache to invalidate, and at
personal-tracker volumes a full pass over the expenses is instant.

The reporter backs the history screen (filtered, newest-first list) and
the report screen (pie-chart slices per category or per subcategory for
a month and/or year).
"""

from typing import Optional

from expense_tracker.models.expense import Expense
from expense_tracker.models.report import BreakdownResult, ChartSlice
from expense_tracker.store import ExpenseStore


MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


class ExpenseReporter:
    """
    Read-only views over an ExpenseStore.

    GUARANTEES:
    - Only reports expenses that are actually stored
    - Filters left as None match everything
    - Slices with nothing spent are omitted
    """

    def __init__(self, store: ExpenseStore):
        self._store = store

    def available_years(self) -> list[int]:
        """Years that have at least one expense, newest first."""
        return sorted({e.date.year for e in self._store.expenses}, reverse=True)

    def filter_expenses(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        category_id: Optional[str] = None,
        subcategory_id: Optional[str] = None,
    ) -> list[Expense]:
        """
        Expenses matching every given filter, most recent first.

        Expenses on the same date keep the order they were recorded in.
        """
        if month is not None and not 1 <= month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {month}")

        matches = [
            e for e in self._store.expenses
            if (month is None or e.date.month == month)
            and (year is None or e.date.year == year)
            and (category_id is None or e.category_id == category_id)
            and (subcategory_id is None or e.subcategory_id == subcategory_id)
        ]
        matches.sort(key=lambda e: e.date, reverse=True)
        return matches

    def total(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        category_id: Optional[str] = None,
    ) -> float:
        """Total spent for the given filters, rounded to cents."""
        return round(sum(
            e.amount for e in self.filter_expenses(month, year, category_id)
        ), 2)

    def category_breakdown(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> list[ChartSlice]:
        """One slice per category, in category order."""
        totals: dict[str, float] = {}
        for expense in self.filter_expenses(month, year):
            totals[expense.category_id] = totals.get(expense.category_id, 0.0) + expense.amount

        slices = []
        for category in self._store.categories:
            value = round(totals.get(category.id, 0.0), 2)
            if value > 0:
                slices.append(ChartSlice(
                    key=category.id,
                    name=category.name,
                    value=value,
                    color=category.color,
                ))
        return slices

    def subcategory_breakdown(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
        subcategory_id: Optional[str] = None,
    ) -> list[ChartSlice]:
        """
        One slice per subcategory, grouped in category order.

        Subcategory slices take their category's color.
        """
        totals: dict[str, float] = {}
        for expense in self.filter_expenses(month, year, subcategory_id=subcategory_id):
            totals[expense.subcategory_id] = (
                totals.get(expense.subcategory_id, 0.0) + expense.amount
            )

        slices = []
        for category in self._store.categories:
            for subcategory in category.subcategories:
                value = round(totals.get(subcategory.id, 0.0), 2)
                if value > 0:
                    slices.append(ChartSlice(
                        key=subcategory.id,
                        name=subcategory.name,
                        value=value,
                        color=category.color,
                        category_name=category.name,
                    ))
        return slices

    def summarize(
        self,
        group_by: str = "category",
        month: Optional[int] = None,
        year: Optional[int] = None,
        subcategory_id: Optional[str] = None,
    ) -> BreakdownResult:
        """
        Chart data plus grand total for a period.

        Args:
            group_by: 'category' or 'subcategory'
            month: 1-12, or None for every month
            year: Calendar year, or None for every year
            subcategory_id: Narrow a subcategory breakdown to one subcategory
        """
        if group_by == "category":
            slices = self.category_breakdown(month, year)
        elif group_by == "subcategory":
            slices = self.subcategory_breakdown(month, year, subcategory_id)
        else:
            raise ValueError(f"Cannot group by {group_by!r}: use 'category' or 'subcategory'")

        keys = {s.key for s in slices}
        counted = [
            e for e in self.filter_expenses(month, year)
            if (e.category_id if group_by == "category" else e.subcategory_id) in keys
        ]

        desc_parts = [f"Spending by {group_by}"]
        period = self._period_str(month, year)
        if period:
            desc_parts.append(period)

        return BreakdownResult(
            group_by=group_by,
            month=month,
            year=year,
            slices=slices,
            total=round(sum(s.value for s in slices), 2),
            expense_count=len(counted),
            description=" ".join(desc_parts),
        )

    def _period_str(
        self,
        month: Optional[int],
        year: Optional[int],
    ) -> str:
        """Format the reporting period for a description."""
        if month is not None and year is not None:
            return f"in {MONTH_NAMES[month - 1]} {year}"
        elif month is not None:
            return f"in {MONTH_NAMES[month - 1]} of every year"
        elif year is not None:
            return f"in {year}"
        return ""
