"""
Tests for settings and application wiring.
"""

import json

import pytest
from pydantic import ValidationError

from expense_tracker.app import create_app_components, create_storage
from expense_tracker.config import (
    AppSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)
from expense_tracker.services.storage import FileStorage, InMemoryStorage


@pytest.fixture(autouse=True)
def clean_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for configuration loading."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("EXPENSE_TRACKER_STORAGE_BACKEND", raising=False)
        storage = StorageSettings()
        assert storage.backend == "file"
        assert storage.categories_key == "expense_tracker_categories"
        assert storage.expenses_key == "expense_tracker_expenses"
        assert storage.legacy_key == "expense_tracker_data"
        assert storage.shopping_lists_key == "shopping-lists"
        assert storage.data_dir.name == ".expense_tracker"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_DATA_DIR", str(tmp_path))
        storage = StorageSettings()
        assert storage.backend == "memory"
        assert storage.data_dir == tmp_path

    def test_data_dir_expands_home(self):
        assert "~" not in str(StorageSettings(data_dir="~/tracker").data_dir)

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            StorageSettings(backend="cloud")

    def test_unsafe_key_rejected(self):
        with pytest.raises(ValidationError):
            StorageSettings(expenses_key="../expenses")

    def test_app_settings(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_EXPORT_FILENAME_PREFIX", "backup")
        monkeypatch.setenv("EXPENSE_TRACKER_AUDIT_HISTORY_SIZE", "10")
        app = AppSettings()
        assert app.export_filename_prefix == "backup"
        assert app.audit_history_size == 10

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_validate_all_settings(self):
        assert validate_all_settings() == {"storage": True, "app": True}

    def test_validate_all_settings_reports_errors(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_BACKEND", "cloud")
        results = validate_all_settings()
        assert results["storage"] is False
        assert "storage_error" in results
        assert results["app"] is True


class TestAppComponents:
    """Tests for create_app_components."""

    def test_memory_backend(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_BACKEND", "memory")
        assert isinstance(create_storage(Settings()), InMemoryStorage)

    def test_file_backend(self, monkeypatch, tmp_path):
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_BACKEND", "file")
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_DATA_DIR", str(tmp_path))
        storage = create_storage(Settings())
        assert isinstance(storage, FileStorage)
        assert storage.directory == tmp_path

    def test_components_share_storage(self, monkeypatch):
        monkeypatch.delenv("EXPENSE_TRACKER_STORAGE_BACKEND", raising=False)
        storage = InMemoryStorage()
        components = create_app_components(storage=storage, settings=Settings())

        assert components.storage is storage
        assert components.expense_store.shopping_lists is components.shopping_lists
        components.shopping_lists.create("Market", [{"name": "Rice", "value": 5.5}])
        assert len(json.loads(components.expense_store.export_data())["shoppingLists"]) == 1

    def test_reporter_sees_the_store(self):
        components = create_app_components(storage=InMemoryStorage(), settings=Settings())
        components.expense_store.add_expense(10.0, "2024-01-01", "1-1")
        assert components.reporter.total() == 10.0

    def test_file_backed_app_survives_restart(self, monkeypatch, tmp_path):
        """Test a full restart cycle against real files."""
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_BACKEND", "file")
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_DATA_DIR", str(tmp_path))

        first = create_app_components(settings=Settings())
        category = first.expense_store.add_category("Health")
        first.shopping_lists.create("Pharmacy", [{"name": "Aspirin", "value": 12}])

        second = create_app_components(settings=Settings())
        assert second.expense_store.get_category(category.id) is not None
        assert [sl.title for sl in second.shopping_lists.lists] == ["Pharmacy"]
        assert sorted(p.name for p in tmp_path.iterdir()) == [
            "expense_tracker_categories.json",
            "expense_tracker_expenses.json",
            "shopping-lists.json",
        ]

    def test_audit_history_size_from_settings(self, monkeypatch):
        monkeypatch.setenv("EXPENSE_TRACKER_AUDIT_HISTORY_SIZE", "2")
        components = create_app_components(storage=InMemoryStorage(), settings=Settings())
        for i in range(3):
            components.expense_store.add_category(f"C{i}")
        assert len(components.audit_logger.recent_events()) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
