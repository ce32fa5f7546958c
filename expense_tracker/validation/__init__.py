"""Import validation package."""

from expense_tracker.validation.validator import ExchangeValidator

__all__ = ["ExchangeValidator"]
