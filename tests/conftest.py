"""
Shared pytest fixtures for stacks tests.

Provides an in-memory storage backend so Shelf tests can count writes
without touching SQLite.
"""

from pathlib import Path
from typing import Optional

import pytest

from stacks.api import Shelf
from stacks.config import StoreConfig
from stacks.types import Entry


class MemoryStorage:
    """
    Dict-backed storage that records every write.

    Satisfies StorageProtocol.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str]] = []
        self.closed = False

    def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        self.data[key] = value

    def remove_item(self, key: str) -> bool:
        return self.data.pop(key, None) is not None

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def scenario_entries() -> list[Entry]:
    """The Dune / Arrival pair: an unpinned book and a pinned movie."""
    return [
        Entry(
            id="1", title="Dune", category="book",
            date_finished="2023-05-01", pinned=False,
            created_at="2023-05-02T00:00:00Z",
        ),
        Entry(
            id="2", title="Arrival", category="movie",
            date_finished="2023-01-01", pinned=True,
            created_at="2023-01-02T00:00:00Z",
        ),
    ]


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def memory_shelf(tmp_path, memory_storage):
    """Shelf over MemoryStorage; config points at tmp_path but nothing is written there."""
    shelf = Shelf(config=StoreConfig(path=tmp_path), storage=memory_storage)
    yield shelf
    shelf.close()


@pytest.fixture
def shelf(tmp_path: Path):
    """Real Shelf with SQLite storage in a temp directory."""
    s = Shelf(tmp_path)
    yield s
    s.close()
