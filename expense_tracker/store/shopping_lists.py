"""
Shopping List Store

Independent CRUD over named shopping lists, persisted as one JSON array
under its own storage key. Shopping lists have no relationship to the
expense data; the expense store only carries them through export/import.
"""

from collections.abc import Iterable
from typing import Optional, Union

from pydantic import TypeAdapter, ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.config import StorageSettings, get_settings
from expense_tracker.models.expense import ShoppingItem, ShoppingList
from expense_tracker.services.storage import KeyValueStorageInterface, StorageError


SHOPPING_LISTS = TypeAdapter(list[ShoppingList])

ItemInput = Union[ShoppingItem, dict]


class ShoppingListStore:
    """
    Holds shopping lists in memory and mirrors them to storage.

    Every mutation writes the full collection before the in-memory state
    changes, so a failed write leaves both sides as they were.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[StorageSettings] = None,
    ):
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._key = (settings or get_settings().storage).shopping_lists_key
        self._lists: list[ShoppingList] = []
        self.reload()

    @property
    def lists(self) -> list[ShoppingList]:
        return list(self._lists)

    @property
    def key(self) -> str:
        return self._key

    def reload(self) -> None:
        """
        Re-read all lists from storage.

        Missing data means no lists. Unreadable data is logged and also
        treated as no lists; the bad value stays in storage until the next
        write replaces it.
        """
        try:
            raw = self._storage.get(self._key)
        except StorageError as e:
            self._audit.log_load_failed(self._key, str(e), fallback="no shopping lists")
            self._lists = []
            return

        if raw is None:
            self._lists = []
            return

        try:
            self._lists = SHOPPING_LISTS.validate_json(raw)
        except ValidationError as e:
            self._audit.log_load_failed(self._key, str(e), fallback="no shopping lists")
            self._lists = []
            return

        self._audit.log_state_loaded(self._key, len(self._lists))

    def get(self, list_id: str) -> Optional[ShoppingList]:
        for shopping_list in self._lists:
            if shopping_list.id == list_id:
                return shopping_list
        return None

    def create(self, title: str, items: Iterable[ItemInput]) -> ShoppingList:
        """
        Save a new list.

        Raises:
            ValueError: If the title is blank or there are no items
            StorageError: If the list could not be persisted
        """
        shopping_list = ShoppingList(title=title, items=self._coerce_items(items))
        self._commit(self._lists + [shopping_list])
        self._audit.log_added(
            "shopping_list",
            shopping_list.id,
            f"'{shopping_list.title}' with {shopping_list.item_count} items",
        )
        return shopping_list

    def update(
        self,
        list_id: str,
        title: str,
        items: Iterable[ItemInput],
    ) -> Optional[ShoppingList]:
        """
        Replace the title and items of an existing list.

        The id and creation time are kept. Returns None, changing nothing,
        if no list has this id.
        """
        existing = self.get(list_id)
        if existing is None:
            self._audit.log_not_found("update", "shopping_list", list_id)
            return None

        updated = ShoppingList(
            id=existing.id,
            title=title,
            created_at=existing.created_at,
            items=self._coerce_items(items),
        )
        self._commit([updated if sl.id == list_id else sl for sl in self._lists])
        self._audit.log_updated(
            "shopping_list",
            list_id,
            f"'{updated.title}' with {updated.item_count} items",
        )
        return updated

    def delete(self, list_id: str) -> bool:
        """Remove a list. Returns False if there was nothing to remove."""
        remaining = [sl for sl in self._lists if sl.id != list_id]
        if len(remaining) == len(self._lists):
            self._audit.log_not_found("delete", "shopping_list", list_id)
            return False

        self._commit(remaining)
        self._audit.log_deleted("shopping_list", list_id)
        return True

    def replace_all(self, lists: list[ShoppingList]) -> None:
        """Swap in a whole new collection (used by import)."""
        self._commit(list(lists))

    def _coerce_items(self, items: Iterable[ItemInput]) -> list[ShoppingItem]:
        coerced = [
            item if isinstance(item, ShoppingItem) else ShoppingItem.model_validate(item)
            for item in items
        ]
        if not coerced:
            raise ValueError("A shopping list needs at least one item")
        return coerced

    def _commit(self, lists: list[ShoppingList]) -> None:
        raw = SHOPPING_LISTS.dump_json(lists, by_alias=True).decode("utf-8")
        try:
            self._storage.set(self._key, raw)
        except StorageError as e:
            self._audit.log_save_failed(self._key, str(e))
            raise
        self._lists = lists
