"""Expense reporting package."""

from expense_tracker.reports.reporter import ExpenseReporter

__all__ = ["ExpenseReporter"]
