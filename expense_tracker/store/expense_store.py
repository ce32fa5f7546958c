"""
Expense Store

The application's only mutation surface for categories, subcategories and
expenses.

DESIGN DECISION: Persistence is an explicit step, not a reaction to state
changes. Every mutator computes the new collections, hands them to
`_commit`, and `_commit` writes storage *before* swapping in-memory state.
A mutation is complete only once it is durable; if the write fails the
mutator raises StorageError and nothing changed.

DESIGN DECISION: An expense's category is derived from its subcategory.
Callers may still pass `category_id`, but a value that disagrees with the
subcategory's owner is refused rather than stored or silently corrected.

Referential misses (deleting or updating an id that does not exist,
adding a subcategory to an unknown category) are no-ops, never errors.
"""

import json
from datetime import date
from typing import Optional, Union

from pydantic import TypeAdapter, ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.config import AppSettings, StorageSettings, get_settings
from expense_tracker.models.exchange import ExchangePayload
from expense_tracker.models.expense import Category, Expense, Subcategory
from expense_tracker.services.storage import KeyValueStorageInterface, StorageError
from expense_tracker.store.defaults import default_categories, pick_color
from expense_tracker.store.shopping_lists import ShoppingListStore
from expense_tracker.validation import ExchangeValidator


CATEGORIES = TypeAdapter(list[Category])
EXPENSES = TypeAdapter(list[Expense])

DateInput = Union[date, str]


class ExpenseStoreError(Exception):
    """Base exception for expense store operations."""
    pass


class CategoryMismatchError(ExpenseStoreError, ValueError):
    """The category given for an expense does not own its subcategory."""
    pass


class ExpenseStore:
    """
    In-memory categories and expenses with a durable mirror.

    Storage layout: categories and expenses live under two keys. Older
    installs kept both under one combined key; that snapshot is migrated
    on first load.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        shopping_lists: Optional[ShoppingListStore] = None,
        settings: Optional[StorageSettings] = None,
        app_settings: Optional[AppSettings] = None,
    ):
        """
        Initialize the store and load persisted state.

        Args:
            storage: Durable key-value medium
            audit_logger: Where mutations and recoveries are logged.
                          A private logger is created if omitted.
            shopping_lists: Shopping-list store to include in exports and
                            imports. If None, exchange covers expense data only.
            settings: Storage key names. Defaults to the global settings.
            app_settings: Export naming. Defaults to the global settings.
        """
        self._storage = storage
        self._audit = audit_logger or AuditLogger()
        self._shopping_lists = shopping_lists
        self._settings = settings or get_settings().storage
        self._app_settings = app_settings or get_settings().app
        self._validator = ExchangeValidator()

        self._categories: list[Category] = []
        self._expenses: list[Expense] = []
        self.reload()

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    @property
    def categories(self) -> list[Category]:
        return list(self._categories)

    @property
    def expenses(self) -> list[Expense]:
        return list(self._expenses)

    @property
    def shopping_lists(self) -> Optional[ShoppingListStore]:
        return self._shopping_lists

    # =========================================================================
    # LOAD / SAVE
    # =========================================================================

    def reload(self) -> None:
        """
        (Re)load state from storage.

        Never raises: unreadable data falls back to the default categories
        and an empty expense list, and the fallback is written back so the
        next start sees consistent data.
        """
        categories = self._read_collection(
            self._settings.categories_key, CATEGORIES, "default categories"
        )
        expenses = self._read_collection(
            self._settings.expenses_key, EXPENSES, "no expenses"
        )

        needs_save = False
        migrated = False
        if categories is None and expenses is None:
            legacy = self._read_legacy()
            if legacy is not None:
                categories, expenses = legacy
                migrated = needs_save = True

        if categories is None:
            categories = default_categories()
            self._audit.log_defaults_seeded(len(categories))
            needs_save = True
        if expenses is None:
            expenses = []
            needs_save = True

        if needs_save:
            try:
                self._commit(categories, expenses)
            except StorageError:
                # Start with the recovered state even if it cannot be saved yet
                self._categories, self._expenses = categories, expenses
            else:
                if migrated:
                    self._drop_legacy()
        else:
            self._categories, self._expenses = categories, expenses

    def _read_collection(
        self,
        key: str,
        adapter: TypeAdapter,
        fallback: str,
    ) -> Optional[list]:
        """Read and validate one stored array. None means "use the fallback"."""
        try:
            raw = self._storage.get(key)
        except StorageError as e:
            self._audit.log_load_failed(key, str(e), fallback)
            return None

        if raw is None:
            return None

        try:
            items = adapter.validate_json(raw)
        except ValidationError as e:
            self._audit.log_load_failed(key, str(e), fallback)
            return None

        self._audit.log_state_loaded(key, len(items))
        return items

    def _read_legacy(self) -> Optional[tuple[Optional[list[Category]], Optional[list[Expense]]]]:
        """
        Read the older combined {categories, expenses} snapshot.

        Each section falls back on its own, like the split keys do.
        Returns None when the snapshot holds nothing usable; it is then
        left in storage untouched.
        """
        key = self._settings.legacy_key
        try:
            raw = self._storage.get(key)
        except StorageError as e:
            self._audit.log_load_failed(key, str(e), "default categories")
            return None

        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            self._audit.log_load_failed(key, str(e), "default categories")
            return None
        if not isinstance(data, dict):
            self._audit.log_load_failed(key, "snapshot is not a JSON object", "default categories")
            return None

        categories = self._legacy_section(key, data, "categories", CATEGORIES, "default categories")
        expenses = self._legacy_section(key, data, "expenses", EXPENSES, "no expenses")
        if categories is None and expenses is None:
            return None

        self._audit.log_legacy_migrated(key, len(categories or []), len(expenses or []))
        return categories, expenses

    def _legacy_section(
        self,
        key: str,
        data: dict,
        section: str,
        adapter: TypeAdapter,
        fallback: str,
    ) -> Optional[list]:
        if data.get(section) is None:
            return None
        try:
            return adapter.validate_python(data[section])
        except ValidationError as e:
            self._audit.log_load_failed(f"{key}.{section}", str(e), fallback)
            return None

    def _drop_legacy(self) -> None:
        try:
            self._storage.delete(self._settings.legacy_key)
        except StorageError as e:
            self._audit.log_save_failed(self._settings.legacy_key, str(e))

    def _commit(
        self,
        categories: Optional[list[Category]] = None,
        expenses: Optional[list[Expense]] = None,
    ) -> None:
        """
        Persist then publish a new state.

        Collections left as None keep their current value. If a write
        fails, keys already written get their previous stored value back,
        so storage and memory both keep the old state.
        """
        categories = self._categories if categories is None else categories
        expenses = self._expenses if expenses is None else expenses

        writes = (
            (self._settings.categories_key, CATEGORIES.dump_json(categories, by_alias=True)),
            (self._settings.expenses_key, EXPENSES.dump_json(expenses, by_alias=True)),
        )
        written: list[tuple[str, Optional[str]]] = []
        for key, raw in writes:
            try:
                previous = self._storage.get(key)
                self._storage.set(key, raw.decode("utf-8"))
            except StorageError as e:
                self._audit.log_save_failed(key, str(e))
                self._restore(written)
                raise
            written.append((key, previous))

        self._categories = categories
        self._expenses = expenses

    def _restore(self, written: list[tuple[str, Optional[str]]]) -> None:
        """
        Put back the values a failed commit already replaced.

        Best effort: a key that cannot be restored is logged and skipped.
        """
        for key, previous in reversed(written):
            try:
                if previous is None:
                    self._storage.delete(key)
                else:
                    self._storage.set(key, previous)
            except StorageError as e:
                self._audit.log_save_failed(key, str(e))

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    def get_category(self, category_id: str) -> Optional[Category]:
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def get_subcategory(self, subcategory_id: str) -> Optional[Subcategory]:
        for category in self._categories:
            subcategory = category.find_subcategory(subcategory_id)
            if subcategory is not None:
                return subcategory
        return None

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def add_category(self, name: str) -> Category:
        """
        Append a new, empty category.

        The color is the next one in the palette. A blank name raises a
        pydantic ValidationError (a ValueError).
        """
        category = Category(name=name, color=pick_color(len(self._categories)))
        self._commit(categories=self._categories + [category])
        self._audit.log_added("category", category.id, category.name)
        return category

    def delete_category(self, category_id: str) -> bool:
        """
        Remove a category, its subcategories and every expense filed under it.

        Returns False, changing nothing, if the category does not exist.
        """
        if self.get_category(category_id) is None:
            self._audit.log_not_found("delete_category", "category", category_id)
            return False

        categories = [c for c in self._categories if c.id != category_id]
        expenses = [e for e in self._expenses if e.category_id != category_id]
        removed = len(self._expenses) - len(expenses)

        self._commit(categories, expenses)
        self._audit.log_deleted("category", category_id, cascaded_expenses=removed)
        return True

    def add_subcategory(self, name: str, category_id: str) -> Optional[Subcategory]:
        """
        Append a subcategory to a category.

        Returns None, changing nothing, if the category does not exist.
        """
        owner = self.get_category(category_id)
        if owner is None:
            self._audit.log_not_found("add_subcategory", "category", category_id)
            return None

        subcategory = Subcategory(name=name, category_id=category_id)
        updated = owner.model_copy(
            update={"subcategories": owner.subcategories + [subcategory]}
        )
        self._commit(categories=[
            updated if c.id == category_id else c for c in self._categories
        ])
        self._audit.log_added(
            "subcategory",
            subcategory.id,
            subcategory.name,
            details={"category_id": category_id},
        )
        return subcategory

    def delete_subcategory(self, subcategory_id: str) -> bool:
        """
        Remove a subcategory from whichever category holds it, along with
        every expense filed under it.
        """
        if self.get_subcategory(subcategory_id) is None:
            self._audit.log_not_found("delete_subcategory", "subcategory", subcategory_id)
            return False

        categories = [
            c.model_copy(update={
                "subcategories": [s for s in c.subcategories if s.id != subcategory_id]
            })
            if c.find_subcategory(subcategory_id) is not None else c
            for c in self._categories
        ]
        expenses = [e for e in self._expenses if e.subcategory_id != subcategory_id]
        removed = len(self._expenses) - len(expenses)

        self._commit(categories, expenses)
        self._audit.log_deleted("subcategory", subcategory_id, cascaded_expenses=removed)
        return True

    # =========================================================================
    # EXPENSES
    # =========================================================================

    def _owner_of(
        self,
        subcategory_id: str,
        category_id: Optional[str],
    ) -> Optional[str]:
        """
        Resolve the category an expense must be filed under.

        Returns None if the subcategory does not exist.

        Raises:
            CategoryMismatchError: If `category_id` is given and is not the
                                   subcategory's owner
        """
        subcategory = self.get_subcategory(subcategory_id)
        if subcategory is None:
            return None
        if category_id is not None and category_id != subcategory.category_id:
            raise CategoryMismatchError(
                f"Subcategory {subcategory_id!r} belongs to category "
                f"{subcategory.category_id!r}, not {category_id!r}"
            )
        return subcategory.category_id

    def add_expense(
        self,
        amount: float,
        date: DateInput,
        subcategory_id: str,
        category_id: Optional[str] = None,
    ) -> Optional[Expense]:
        """
        Record a new expense.

        Args:
            amount: Amount spent, greater than zero
            date: Date of the expense (date or ISO 'YYYY-MM-DD' string)
            subcategory_id: Subcategory to file it under
            category_id: Optional; must match the subcategory's owner if given

        Returns:
            The new expense, or None if the subcategory does not exist
        """
        owner = self._owner_of(subcategory_id, category_id)
        if owner is None:
            self._audit.log_not_found("add_expense", "subcategory", subcategory_id)
            return None

        expense = Expense(
            amount=amount,
            date=date,
            subcategory_id=subcategory_id,
            category_id=owner,
        )
        self._commit(expenses=self._expenses + [expense])
        self._audit.log_added(
            "expense",
            expense.id,
            f"{expense.amount:.2f} on {expense.date.isoformat()}",
            details={"subcategory_id": subcategory_id, "category_id": owner},
        )
        return expense

    def delete_expense(self, expense_id: str) -> bool:
        """Remove an expense. Returns False if there was nothing to remove."""
        expenses = [e for e in self._expenses if e.id != expense_id]
        if len(expenses) == len(self._expenses):
            self._audit.log_not_found("delete_expense", "expense", expense_id)
            return False

        self._commit(expenses=expenses)
        self._audit.log_deleted("expense", expense_id)
        return True

    def update_expense(
        self,
        expense_id: str,
        amount: float,
        date: DateInput,
        subcategory_id: str,
        category_id: Optional[str] = None,
    ) -> Optional[Expense]:
        """
        Replace amount, date, subcategory and category of an expense.

        The id and the expense's position are kept. Returns None, changing
        nothing, if the expense or the subcategory does not exist.
        """
        if self.get_expense(expense_id) is None:
            self._audit.log_not_found("update_expense", "expense", expense_id)
            return None

        owner = self._owner_of(subcategory_id, category_id)
        if owner is None:
            self._audit.log_not_found("update_expense", "subcategory", subcategory_id)
            return None

        updated = Expense(
            id=expense_id,
            amount=amount,
            date=date,
            subcategory_id=subcategory_id,
            category_id=owner,
        )
        self._commit(expenses=[
            updated if e.id == expense_id else e for e in self._expenses
        ])
        self._audit.log_updated(
            "expense",
            expense_id,
            f"{updated.amount:.2f} on {updated.date.isoformat()}",
            details={"subcategory_id": subcategory_id, "category_id": owner},
        )
        return updated

    # =========================================================================
    # EXPORT / IMPORT
    # =========================================================================

    def export_data(self) -> str:
        """
        Serialize the whole state to exchange-format JSON.

        Includes `shoppingLists` when a shopping-list store is attached.
        """
        shopping_lists = (
            self._shopping_lists.lists if self._shopping_lists is not None else None
        )
        payload = ExchangePayload(
            categories=self._categories,
            expenses=self._expenses,
            shopping_lists=shopping_lists,
        )
        self._audit.log_exported(
            len(self._categories),
            len(self._expenses),
            len(shopping_lists) if shopping_lists is not None else None,
        )
        return payload.to_json()

    def import_data(self, text: str) -> bool:
        """
        Replace the whole state with an exchange-format document.

        Categories and expenses are always replaced together. Shopping
        lists are replaced only if the document has them and a
        shopping-list store is attached.

        Returns:
            True if the state was replaced. False if the document was
            rejected or could not be saved; the previous state is then
            untouched. Never raises.
        """
        payload, result = self._validator.validate(text)
        if payload is None or not result.is_valid:
            self._audit.log_import_rejected(
                [issue.model_dump() for issue in result.issues if issue.severity == "error"]
            )
            return False

        previous = (self._categories, self._expenses)
        try:
            self._commit(payload.categories, payload.expenses)
        except StorageError as e:
            self._audit.log_import_rejected([], error_message=str(e))
            return False

        if payload.shopping_lists is not None and self._shopping_lists is not None:
            try:
                self._shopping_lists.replace_all(payload.shopping_lists)
            except StorageError as e:
                # Roll the expense data back so the import stays all-or-nothing
                try:
                    self._commit(*previous)
                except StorageError:
                    self._categories, self._expenses = previous
                self._audit.log_import_rejected([], error_message=str(e))
                return False

        self._audit.log_imported(
            len(payload.categories),
            len(payload.expenses),
            len(payload.shopping_lists) if payload.shopping_lists is not None else None,
        )
        return True

    def export_filename(self, today: Optional[date] = None) -> str:
        """Suggested file name for an export, e.g. 'expenses_backup_2024-03-01.json'."""
        today = today or date.today()
        return f"{self._app_settings.export_filename_prefix}_{today.isoformat()}.json"
