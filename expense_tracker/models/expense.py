"""
Core Data Models for Expense Tracker

These models define the schemas of everything the stores hold, persist and
exchange. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the same camelCase JSON the stored data has always used

DESIGN DECISION: Entities are frozen. A store never edits a model in place;
it builds a new instance, so snapshots handed to callers cannot drift.
"""

import datetime as dt
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Generate a fresh opaque identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# Shared by every stored entity: camelCase on the wire, snake_case in Python.
ENTITY_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
    frozen=True,
)


# =============================================================================
# CATEGORIES
# =============================================================================

class Subcategory(BaseModel):
    """
    Named grouping within a category.

    This is the unit an expense actually references. `category_id` points
    back at the owning category.
    """
    model_config = ENTITY_CONFIG

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique subcategory ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    category_id: str = Field(
        ...,
        min_length=1,
        description="ID of the owning category"
    )


class Category(BaseModel):
    """
    Top-level expense grouping with a display color.

    DESIGN DECISION: Colors accept 1-8 hex digits. Colors generated by
    older versions were random integers rendered in hex without padding,
    so '#3fa1' is a real stored value we must keep loading.
    """
    model_config = ENTITY_CONFIG

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique category ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    color: str = Field(
        ...,
        pattern="^#[0-9A-Fa-f]{1,8}$",
        description="Display color as a hex string"
    )
    subcategories: list[Subcategory] = Field(
        default_factory=list,
        description="Ordered subcategories of this category"
    )

    def find_subcategory(self, subcategory_id: str) -> Optional[Subcategory]:
        for subcategory in self.subcategories:
            if subcategory.id == subcategory_id:
                return subcategory
        return None


# =============================================================================
# EXPENSES
# =============================================================================

class Expense(BaseModel):
    """
    One recorded monetary outflow tied to a subcategory.

    `category_id` is denormalized for fast filtering. The store always
    derives it from the subcategory's owner when it writes an expense.
    """
    model_config = ENTITY_CONFIG

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique expense ID"
    )
    amount: float = Field(
        ...,
        gt=0,
        description="Amount spent"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the expense"
    )
    subcategory_id: str = Field(
        ...,
        min_length=1,
        description="ID of the subcategory this expense belongs to"
    )
    category_id: str = Field(
        ...,
        min_length=1,
        description="ID of the subcategory's owning category"
    )


# =============================================================================
# SHOPPING LISTS
# =============================================================================

class ShoppingItem(BaseModel):
    """A purchasable item on a shopping list."""
    model_config = ENTITY_CONFIG

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique item ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Item name"
    )
    quantity: int = Field(
        default=1,
        ge=1,
        description="How many units to buy"
    )
    value: float = Field(
        ...,
        ge=0,
        description="Unit value"
    )

    @property
    def subtotal(self) -> float:
        return round(self.quantity * self.value, 2)


class ShoppingList(BaseModel):
    """
    An independent named collection of items.

    Shopping lists have no relationship to categories or expenses.
    """
    model_config = ENTITY_CONFIG

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Unique list ID"
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="List title"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the list was first saved"
    )
    items: list[ShoppingItem] = Field(
        default_factory=list,
        description="Ordered items"
    )

    @property
    def total_value(self) -> float:
        """Sum of quantity x unit value over all items."""
        return round(sum(item.quantity * item.value for item in self.items), 2)

    @property
    def item_count(self) -> int:
        return len(self.items)
