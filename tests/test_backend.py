"""Tests for key-value storage backends."""

import json

import pytest

from storymind.config import Config
from storymind.exceptions import StorageError
from storymind.models import MemoryState
from storymind.store import CrossSessionPatternStore, FileStorage, MemoryStorage, open_store

from .conftest import COFFEE_STORY


class TestMemoryStorage:
    def test_set_get_remove(self):
        storage = MemoryStorage()
        assert storage.get_item("key") is None

        storage.set_item("key", "value")
        assert storage.get_item("key") == "value"

        storage.remove_item("key")
        storage.remove_item("key")
        assert storage.get_item("key") is None

    def test_initial_items_are_copied(self):
        initial = {"key": "value"}
        storage = MemoryStorage(initial)
        storage.set_item("key", "changed")

        assert initial == {"key": "value"}


class TestFileStorage:
    def test_missing_key(self, tmp_path):
        assert FileStorage(tmp_path).get_item("nothing") is None

    def test_write_creates_directory(self, tmp_path):
        storage = FileStorage(tmp_path / "nested" / "store")
        storage.set_item("storymind-memory-store", '{"allSessions": []}')

        path = tmp_path / "nested" / "store" / "storymind-memory-store.json"
        assert path.exists()
        assert storage.get_item("storymind-memory-store") == '{"allSessions": []}'
        assert not path.with_suffix(".tmp").exists()

    def test_overwrite(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set_item("key", "first")
        storage.set_item("key", "second")

        assert storage.get_item("key") == "second"

    def test_key_is_sanitized(self, tmp_path):
        storage = FileStorage(tmp_path)

        assert storage.path_for("../escape/key") == tmp_path / "___escape_key.json"

    def test_remove(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set_item("key", "value")
        storage.remove_item("key")
        storage.remove_item("key")

        assert storage.get_item("key") is None

    def test_unreadable_file_raises_storage_error(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.path_for("key").write_bytes(b"\xff\xfe\x00invalid utf-8")

        with pytest.raises(StorageError) as exc_info:
            storage.get_item("key")
        assert exc_info.value.key == "key"

    def test_unwritable_directory_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(StorageError):
            FileStorage(blocker / "store").set_item("key", "value")


class TestFileBackedStore:
    def test_sessions_survive_reopen(self, tmp_path, clock):
        config = Config(storage_dir=tmp_path)
        with CrossSessionPatternStore(FileStorage(tmp_path), config, clock=clock) as store:
            session_id = store.add_session(COFFEE_STORY, MemoryState())

        reopened = CrossSessionPatternStore(FileStorage(tmp_path), config, clock=clock)
        assert [s.id for s in reopened.get_session_history()] == [session_id]

        blob = json.loads((tmp_path / "storymind-memory-store.json").read_text())
        assert blob["crossStoryPatterns"][0]["pattern"] == "coffee"

    def test_corrupt_file_starts_empty(self, tmp_path):
        (tmp_path / "storymind-memory-store.json").write_text("{ this is not json")

        store = CrossSessionPatternStore(FileStorage(tmp_path), Config(storage_dir=tmp_path))
        assert store.get_memory_statistics().total_sessions == 0

    def test_open_store_uses_configured_directory(self, tmp_path):
        store = open_store(Config(storage_dir=tmp_path, storage_key="custom"))
        store.add_session("Coffee time", MemoryState())

        assert (tmp_path / "custom.json").exists()

    def test_open_store_defaults_to_xdg_data(self, isolated_xdg):
        store = open_store()
        store.add_session("Coffee time", MemoryState())

        assert (isolated_xdg / "data" / "storymind" / "store" / "storymind-memory-store.json").exists()
