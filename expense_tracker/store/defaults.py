"""Seed data and the category color palette."""

from expense_tracker.models.expense import Category, Subcategory


CATEGORY_PALETTE = (
    "#10B981",  # emerald
    "#3B82F6",  # blue
    "#F59E0B",  # amber
    "#EF4444",  # red
    "#8B5CF6",  # violet
    "#EC4899",  # pink
    "#14B8A6",  # teal
    "#F97316",  # orange
    "#6366F1",  # indigo
    "#84CC16",  # lime
)


def pick_color(category_count: int) -> str:
    """Next palette color for a store that already holds `category_count` categories."""
    return CATEGORY_PALETTE[category_count % len(CATEGORY_PALETTE)]


def default_categories() -> list[Category]:
    """
    The categories a fresh install starts with.

    Ids are fixed so that examples and older exports referring to '1-1'
    keep meaning the same thing.
    """
    return [
        Category(
            id="1",
            name="Food",
            color="#10B981",
            subcategories=[
                Subcategory(id="1-1", name="Groceries", category_id="1"),
                Subcategory(id="1-2", name="Restaurants", category_id="1"),
                Subcategory(id="1-3", name="Drinks", category_id="1"),
            ],
        ),
        Category(
            id="2",
            name="Transport",
            color="#3B82F6",
            subcategories=[
                Subcategory(id="2-1", name="Fuel", category_id="2"),
                Subcategory(id="2-2", name="Car maintenance", category_id="2"),
                Subcategory(id="2-3", name="Public transport", category_id="2"),
            ],
        ),
    ]
