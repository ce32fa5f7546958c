"""
Tests for the ExpenseReporter.
"""

import json
from datetime import date

import pytest

from expense_tracker.reports import ExpenseReporter


@pytest.fixture
def reporter(store) -> ExpenseReporter:
    """A reporter over the default categories and a few months of expenses."""
    store.add_expense(10.0, "2024-03-01", "1-1")
    store.add_expense(20.0, "2024-03-15", "1-2")
    store.add_expense(30.0, "2024-03-20", "2-1")
    store.add_expense(5.0, "2024-04-02", "1-1")
    store.add_expense(7.5, "2023-03-10", "2-3")
    return ExpenseReporter(store)


class TestFiltering:
    """Tests for the history view."""

    def test_available_years(self, reporter):
        assert reporter.available_years() == [2024, 2023]

    def test_no_years_without_expenses(self, store):
        assert ExpenseReporter(store).available_years() == []

    def test_filter_by_month_and_year(self, reporter):
        """Test that results are newest first."""
        dates = [e.date for e in reporter.filter_expenses(month=3, year=2024)]
        assert dates == [date(2024, 3, 20), date(2024, 3, 15), date(2024, 3, 1)]

    def test_filter_by_month_across_years(self, reporter):
        assert len(reporter.filter_expenses(month=3)) == 4

    def test_filter_by_category(self, reporter):
        amounts = [e.amount for e in reporter.filter_expenses(category_id="2")]
        assert amounts == [30.0, 7.5]

    def test_filter_by_subcategory(self, reporter):
        amounts = [e.amount for e in reporter.filter_expenses(subcategory_id="1-1")]
        assert amounts == [5.0, 10.0]

    def test_same_day_keeps_recording_order(self, store):
        first = store.add_expense(1.0, "2024-01-01", "1-1")
        second = store.add_expense(2.0, "2024-01-01", "1-2")
        assert ExpenseReporter(store).filter_expenses() == [first, second]

    @pytest.mark.parametrize("month", [0, 13])
    def test_invalid_month(self, reporter, month):
        with pytest.raises(ValueError):
            reporter.filter_expenses(month=month)

    def test_total(self, reporter):
        assert reporter.total(month=3, year=2024) == 60.0
        assert reporter.total(month=3) == 67.5
        assert reporter.total(category_id="1") == 35.0
        assert reporter.total() == 72.5


class TestBreakdowns:
    """Tests for the chart data."""

    def test_category_breakdown(self, reporter):
        slices = reporter.category_breakdown(month=3, year=2024)
        assert [(s.key, s.name, s.value) for s in slices] == [
            ("1", "Food", 30.0),
            ("2", "Transport", 30.0),
        ]
        assert slices[0].color == "#10B981"
        assert slices[0].category_name is None

    def test_category_breakdown_skips_empty_categories(self, reporter):
        slices = reporter.category_breakdown(month=4, year=2024)
        assert [s.key for s in slices] == ["1"]

    def test_subcategory_breakdown_uses_category_color(self, reporter):
        slices = reporter.subcategory_breakdown(month=3, year=2024)
        assert [(s.key, s.value) for s in slices] == [("1-1", 10.0), ("1-2", 20.0), ("2-1", 30.0)]
        assert slices[0].color == slices[1].color == "#10B981"
        assert slices[2].category_name == "Transport"

    def test_subcategory_breakdown_for_one_subcategory(self, reporter):
        slices = reporter.subcategory_breakdown(subcategory_id="1-1")
        assert [(s.key, s.value) for s in slices] == [("1-1", 15.0)]

    def test_share_of(self, reporter):
        slices = reporter.category_breakdown(month=3, year=2024)
        assert slices[0].share_of(60.0) == 0.5
        assert slices[0].share_of(0) == 0.0


class TestSummaries:
    """Tests for summarize()."""

    def test_month_and_year(self, reporter):
        result = reporter.summarize("category", month=3, year=2024)
        assert result.description == "Spending by category in March 2024"
        assert result.total == 60.0
        assert result.expense_count == 3
        assert result.data_found

    def test_month_of_every_year(self, reporter):
        result = reporter.summarize("category", month=3)
        assert result.description == "Spending by category in March of every year"
        assert result.total == 67.5

    def test_year_only(self, reporter):
        result = reporter.summarize("subcategory", year=2023)
        assert result.description == "Spending by subcategory in 2023"
        assert [s.key for s in result.slices] == ["2-3"]

    def test_all_time(self, reporter):
        assert reporter.summarize().description == "Spending by category"

    def test_empty_period(self, reporter):
        result = reporter.summarize(month=12, year=2020)
        assert not result.data_found
        assert result.total == 0.0
        assert result.expense_count == 0

    def test_bad_group_by(self, reporter):
        with pytest.raises(ValueError):
            reporter.summarize("tag")

    def test_orphan_expenses_are_not_charted(self, store):
        """Test that expenses with an unknown subcategory stay out of charts."""
        document = json.loads(store.export_data())
        document["expenses"] = [
            {"id": "e1", "amount": 4, "date": "2024-01-01", "subcategoryId": "1-1", "categoryId": "1"},
            {"id": "e2", "amount": 6, "date": "2024-01-01", "subcategoryId": "gone", "categoryId": "x"},
        ]
        assert store.import_data(json.dumps(document)) is True

        reporter = ExpenseReporter(store)
        assert len(reporter.filter_expenses()) == 2
        result = reporter.summarize("subcategory")
        assert result.total == 4.0
        assert result.expense_count == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
