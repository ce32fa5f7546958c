"""
Local Storage Implementations

DESIGN DECISION: Two backends.

- InMemoryStorage: a dict. Used by tests and by ephemeral sessions
  (EXPENSE_TRACKER_STORAGE_BACKEND=memory).
- FileStorage: one UTF-8 JSON file per key in a data directory. Writes go
  to a temporary file next to the target and are moved into place with
  os.replace, so a crash mid-write leaves the previous snapshot intact.

TRADEOFFS:
- No locking between processes. Two processes writing the same directory
  is last-write-wins, same as two browser tabs sharing local storage.
- Keys map straight to file names, so they are restricted to a safe
  character set.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional, Union

from expense_tracker.services.storage.interface import (
    InvalidKeyError,
    KeyValueStorageInterface,
    StorageError,
)


KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")
FILE_SUFFIX = ".json"


class InMemoryStorage(KeyValueStorageInterface):
    """Dictionary-backed storage. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StorageError(f"Storage values must be text, got {type(value).__name__}")
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._data)


class FileStorage(KeyValueStorageInterface):
    """
    Directory-backed storage.

    Each key is stored as `<directory>/<key>.json`. The directory is created
    on first write.
    """

    def __init__(self, directory: Union[Path, str]):
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, key: str) -> Path:
        if not KEY_PATTERN.fullmatch(key) or key in (".", ".."):
            raise InvalidKeyError(
                f"Invalid storage key {key!r}: use letters, digits, '.', '_' or '-'"
            )
        return self._directory / f"{key}{FILE_SUFFIX}"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read '{key}' from {path}: {e}")

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        temp_name = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                prefix=f"{key}-",
                suffix=".tmp",
                dir=self._directory,
                delete=False,
            ) as tmp:
                temp_name = tmp.name
                tmp.write(value)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(temp_name, path)
        except OSError as e:
            if temp_name and os.path.exists(temp_name):
                try:
                    os.unlink(temp_name)
                except OSError:
                    pass
            raise StorageError(f"Failed to write '{key}' to {path}: {e}")

    def delete(self, key: str) -> bool:
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to delete '{key}': {e}")

    def keys(self) -> list[str]:
        if not self._directory.is_dir():
            return []
        return sorted(
            path.name[:-len(FILE_SUFFIX)]
            for path in self._directory.iterdir()
            if path.is_file() and path.name.endswith(FILE_SUFFIX)
        )
