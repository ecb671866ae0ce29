"""Tests for the SQLite key-value store and TOML config."""

from pathlib import Path

import pytest

from stacks.config import (
    CONFIG_FILENAME,
    DEFAULT_STORAGE_KEY,
    StoreConfig,
    get_default_store_path,
    load_config,
    load_or_create_config,
    save_config,
)
from stacks.storage import LocalStorage, StorageProtocol


class TestLocalStorage:
    """String key-value semantics."""

    def test_missing_key_is_none(self, tmp_path):
        with LocalStorage(tmp_path / "s.db") as store:
            assert store.get_item("nope") is None

    def test_set_and_get(self, tmp_path):
        with LocalStorage(tmp_path / "s.db") as store:
            store.set_item("k", "[1, 2]")
            assert store.get_item("k") == "[1, 2]"

    def test_overwrite(self, tmp_path):
        with LocalStorage(tmp_path / "s.db") as store:
            store.set_item("k", "a")
            store.set_item("k", "b")
            assert store.get_item("k") == "b"
            assert store.keys() == ["k"]

    def test_remove(self, tmp_path):
        with LocalStorage(tmp_path / "s.db") as store:
            store.set_item("k", "a")
            assert store.remove_item("k") is True
            assert store.remove_item("k") is False
            assert store.get_item("k") is None

    def test_persists_across_reopen(self, tmp_path):
        path = tmp_path / "nested" / "s.db"
        store = LocalStorage(path)
        store.set_item("k", "kept")
        store.close()

        reopened = LocalStorage(path)
        assert reopened.get_item("k") == "kept"
        reopened.close()

    def test_close_twice(self, tmp_path):
        store = LocalStorage(tmp_path / "s.db")
        store.close()
        store.close()

    def test_satisfies_protocol(self, tmp_path):
        with LocalStorage(tmp_path / "s.db") as store:
            assert isinstance(store, StorageProtocol)


class TestConfig:
    """stacks.toml handling."""

    def test_create_default(self, tmp_path):
        config = load_or_create_config(tmp_path)
        assert (tmp_path / CONFIG_FILENAME).exists()
        assert config.storage_key == DEFAULT_STORAGE_KEY
        assert config.default_rating == 4.0

    def test_round_trip(self, tmp_path):
        save_config(StoreConfig(path=tmp_path, storage_key="custom", default_rating=3.5))
        config = load_config(tmp_path)
        assert config.storage_key == "custom"
        assert config.default_rating == 3.5
        assert config.created

    def test_missing_config_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path)

    def test_newer_version_rejected(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("[store]\nversion = 99\n")
        with pytest.raises(ValueError, match="newer than supported"):
            load_config(tmp_path)

    def test_bad_rating_rejected(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text('[display]\ndefault_rating = "lots"\n')
        with pytest.raises(ValueError):
            load_config(tmp_path)

    def test_partial_file_uses_defaults(self, tmp_path):
        (tmp_path / CONFIG_FILENAME).write_text("[store]\nversion = 1\n")
        config = load_config(tmp_path)
        assert config.storage_key == DEFAULT_STORAGE_KEY

    def test_default_store_path_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STACKS_STORE_PATH", str(tmp_path))
        assert get_default_store_path() == tmp_path.resolve()

    def test_default_store_path_home(self, monkeypatch):
        monkeypatch.delenv("STACKS_STORE_PATH", raising=False)
        assert get_default_store_path() == Path.home() / ".stacks"
