"""Key-value storage backends for the persisted memory blob."""

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

import portalocker

from storymind.exceptions import StorageError


class KeyValueStorage(ABC):
    """Minimal string key-value storage used by the cross-session store."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is missing.

        Raises:
            StorageError: If the backing store cannot be read
        """

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value under key.

        Raises:
            StorageError: If the backing store cannot be written
        """

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete a key (no-op if missing)."""


class MemoryStorage(KeyValueStorage):
    """Process-local storage, mainly for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage(KeyValueStorage):
    """One JSON file per key inside a directory, written atomically under a lock."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        safe_key = "".join(c if c.isalnum() or c in "-_" else "_" for c in key)
        return self.directory / f"{safe_key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}", key=key) from e

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                # Exclusive lock guards against a second writer touching the temp file
                portalocker.lock(f, portalocker.LOCK_EX)
                try:
                    f.write(value)
                    f.flush()
                finally:
                    portalocker.unlock(f)
            os.replace(str(tmp), str(path))
        except portalocker.exceptions.LockException as e:
            raise StorageError(f"Failed to acquire lock on {tmp}", key=key) from e
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}", key=key) from e

    def remove_item(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {path}: {e}", key=key) from e
