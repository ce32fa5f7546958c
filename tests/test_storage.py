"""
Tests for the key-value storage backends.

FileStorage tests run in pytest's tmp_path.
"""

import pytest

from expense_tracker.services.storage import (
    FileStorage,
    InMemoryStorage,
    InvalidKeyError,
    StorageError,
)


class TestInMemoryStorage:
    """Tests for the dict-backed backend."""

    def test_get_missing_key(self):
        """Test that a missing key reads as None."""
        assert InMemoryStorage().get("nothing") is None

    def test_set_then_get(self):
        storage = InMemoryStorage()
        storage.set("expense_tracker_expenses", "[]")
        assert storage.get("expense_tracker_expenses") == "[]"
        assert storage.contains("expense_tracker_expenses")

    def test_initial_contents_are_copied(self):
        """Test that the initial dict is not shared."""
        initial = {"a": "1"}
        storage = InMemoryStorage(initial)
        storage.set("b", "2")
        assert initial == {"a": "1"}

    def test_set_rejects_non_text(self):
        """Test that only strings are stored."""
        with pytest.raises(StorageError):
            InMemoryStorage().set("a", b"[]")

    def test_delete(self):
        storage = InMemoryStorage({"a": "1"})
        assert storage.delete("a") is True
        assert storage.delete("a") is False
        assert storage.get("a") is None

    def test_keys_are_sorted(self):
        storage = InMemoryStorage({"b": "2", "a": "1"})
        assert storage.keys() == ["a", "b"]


class TestFileStorage:
    """Tests for the directory-backed backend."""

    def test_get_before_directory_exists(self, tmp_path):
        """Test reading from a directory that was never written."""
        storage = FileStorage(tmp_path / "data")
        assert storage.get("expense_tracker_categories") is None
        assert storage.keys() == []

    def test_set_creates_json_file(self, tmp_path):
        """Test that each key becomes <key>.json."""
        storage = FileStorage(tmp_path / "data")
        storage.set("shopping-lists", "[]")
        assert (tmp_path / "data" / "shopping-lists.json").read_text(encoding="utf-8") == "[]"

    def test_values_survive_a_new_instance(self, tmp_path):
        """Test durability across instances."""
        FileStorage(tmp_path).set("expense_tracker_expenses", '[{"id": "e1"}]')
        assert FileStorage(tmp_path).get("expense_tracker_expenses") == '[{"id": "e1"}]'

    def test_overwrite_replaces_value(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("k", "first")
        storage.set("k", "second")
        assert storage.get("k") == "second"

    def test_no_temp_files_left_behind(self, tmp_path):
        """Test that the atomic write cleans up after itself."""
        storage = FileStorage(tmp_path)
        storage.set("k", "value")
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    def test_unicode_round_trip(self, tmp_path):
        """Test that names with accents are kept as written."""
        storage = FileStorage(tmp_path)
        storage.set("k", '[{"name": "Alimentação"}]')
        assert storage.get("k") == '[{"name": "Alimentação"}]'

    def test_delete(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("k", "value")
        assert storage.delete("k") is True
        assert storage.delete("k") is False
        assert storage.get("k") is None

    def test_keys_lists_only_json_files(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("b", "2")
        storage.set("a", "1")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
        assert storage.keys() == ["a", "b"]

    @pytest.mark.parametrize("key", ["", "../escape", "a/b", "..", "with space", "key\n"])
    def test_invalid_keys_rejected(self, tmp_path, key):
        """Test that keys cannot leave the data directory."""
        storage = FileStorage(tmp_path)
        with pytest.raises(InvalidKeyError):
            storage.set(key, "value")

    def test_invalid_key_is_a_value_error(self, tmp_path):
        with pytest.raises(ValueError):
            FileStorage(tmp_path).get("a/b")

    def test_undecodable_file_raises_storage_error(self, tmp_path):
        """Test that a file that is not UTF-8 is reported, not returned."""
        (tmp_path / "k.json").write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(StorageError):
            FileStorage(tmp_path).get("k")

    def test_write_into_a_file_path_raises_storage_error(self, tmp_path):
        """Test that an unusable directory surfaces as StorageError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(StorageError):
            FileStorage(blocker).set("k", "value")

    def test_home_directory_is_expanded(self):
        storage = FileStorage("~/somewhere")
        assert "~" not in str(storage.directory)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
