"""
Expense Tracker - Core Package

The state layer of a personal expense and shopping-list tracker.
Views call into the stores defined here and re-render from their snapshots.

DESIGN PRINCIPLES:
1. Every committed change is written to storage before it is visible
2. Unreadable storage never stops the application from starting
3. Imports are all-or-nothing
4. Every mutation and every recovery is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Tracker Team"
