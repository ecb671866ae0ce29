"""
Core API for the media log.

The Shelf owns the entry collection:
- load at startup (malformed state recovers as an empty shelf)
- apply view reducers for add / pin / delete
- write the whole collection back after every change
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .config import StoreConfig, get_default_store_path, load_or_create_config
from .logging_config import configure_ops_log
from .storage import STORAGE_FILENAME, LocalStorage, StorageProtocol
from .types import Entry, Filters, ShelfView, Stats
from .view import (
    available_years,
    build_view,
    compute_stats,
    create_entry,
    delete_entry,
    toggle_pinned,
)

logger = logging.getLogger(__name__)


class AmbiguousIdError(LookupError):
    """An ID prefix matched more than one entry."""

    def __init__(self, prefix: str, matches: list[str]):
        self.prefix = prefix
        self.matches = matches
        super().__init__(f"ID prefix {prefix!r} matches {len(matches)} entries")


def parse_entries(raw: Optional[str]) -> list[Entry]:
    """
    Decode the serialized collection.

    Anything unreadable (not JSON, not an array) yields an empty list.
    """
    if raw is None:
        return []
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Stored entries are not valid JSON, starting empty: %s", e)
        return []
    if not isinstance(data, list):
        logger.warning("Stored entries are %s, not a list; starting empty", type(data).__name__)
        return []
    return entries_from_list(data)


def entries_from_list(data: list) -> list[Entry]:
    """Build entries from decoded JSON, skipping elements that are not objects."""
    entries = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning("Skipping stored entry %d: not an object", i)
            continue
        entries.append(Entry.from_dict(item))
    return entries


def serialize_entries(entries: list[Entry]) -> str:
    return json.dumps([e.to_dict() for e in entries], ensure_ascii=False)


class Shelf:
    """
    The media log: an entry collection with write-through persistence.

    Example:
        shelf = Shelf()
        shelf.add("Dune", "book", creator="Frank Herbert")
        view = shelf.view(Filters(search="dune"))
    """

    def __init__(
        self,
        store_path: Optional[str | Path] = None,
        *,
        config: Optional[StoreConfig] = None,
        storage: Optional[StorageProtocol] = None,
    ) -> None:
        """
        Open a media log, creating the store directory if needed.

        Args:
            store_path: Path to store directory. Uses default if not specified.
            config: Pre-loaded StoreConfig (skips filesystem config discovery).
            storage: Injected storage backend (skips opening the SQLite file).
        """
        if config is not None:
            self._config = config
            self._store_path = Path(config.path)
        else:
            if store_path is not None:
                self._store_path = Path(store_path).expanduser().resolve()
            else:
                self._store_path = get_default_store_path()
            self._config = load_or_create_config(self._store_path)

        self._ops_handler = None
        if storage is None:
            storage = LocalStorage(self._store_path / STORAGE_FILENAME)
            self._ops_handler = configure_ops_log(self._store_path)
        self._storage = storage

        self._entries: list[Entry] = parse_entries(
            self._storage.get_item(self._config.storage_key)
        )
        logger.debug("Loaded %d entries from %s", len(self._entries), self._store_path)

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def store_path(self) -> Path:
        return self._store_path

    @property
    def entries(self) -> tuple[Entry, ...]:
        """The collection in stored order (newest additions first)."""
        return tuple(self._entries)

    def _persist(self) -> None:
        self._storage.set_item(self._config.storage_key, serialize_entries(self._entries))

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, id: str) -> Optional[Entry]:
        for e in self._entries:
            if e.id == id:
                return e
        return None

    def resolve_id(self, prefix: str) -> Optional[str]:
        """
        Resolve an exact ID or a unique ID prefix.

        Returns None when nothing matches.

        Raises:
            AmbiguousIdError: If the prefix matches several entries
        """
        if self.get(prefix) is not None:
            return prefix
        if not prefix:
            return None
        matches = [e.id for e in self._entries if e.id.startswith(prefix)]
        if len(matches) > 1:
            raise AmbiguousIdError(prefix, matches)
        return matches[0] if matches else None

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(
        self,
        title: str,
        category: str = "movie",
        *,
        creator: str = "",
        date_finished: Optional[str] = None,
        rating: float = 0,
        format: str = "",
        thoughts: str = "",
        highlights: str = "",
    ) -> Optional[Entry]:
        """
        Create an entry and put it at the front of the collection.

        Returns None (and writes nothing) when the title is blank.
        """
        entry = create_entry(
            title,
            category,
            creator=creator,
            date_finished=date_finished,
            rating=rating,
            format=format,
            thoughts=thoughts,
            highlights=highlights,
        )
        if entry is None:
            logger.debug("Rejected entry with blank title")
            return None
        self._entries = [entry, *self._entries]
        self._persist()
        logger.info("Added %s %r (%s)", entry.category, entry.title, entry.id)
        return entry

    def toggle_pin(self, id: str) -> Optional[Entry]:
        """Flip an entry's pinned flag. Returns the updated entry, or None if absent."""
        if self.get(id) is None:
            return None
        self._entries = toggle_pinned(self._entries, id)
        self._persist()
        entry = self.get(id)
        logger.info("%s %s", "Pinned" if entry.pinned else "Unpinned", id)
        return entry

    def delete(self, id: str) -> bool:
        """Remove an entry. Returns False (and writes nothing) if absent."""
        remaining = delete_entry(self._entries, id)
        if len(remaining) == len(self._entries):
            return False
        self._entries = remaining
        self._persist()
        logger.info("Deleted %s", id)
        return True

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def view(self, filters: Optional[Filters] = None) -> ShelfView:
        return build_view(self._entries, filters)

    def stats(self) -> Stats:
        return compute_stats(self._entries)

    def years(self) -> list[str]:
        return available_years(self._entries)

    # -------------------------------------------------------------------------
    # Export / import
    # -------------------------------------------------------------------------

    def export_data(self) -> list[dict[str, Any]]:
        """The collection in its serialized form."""
        return [e.to_dict() for e in self._entries]

    def import_data(self, data: Any, mode: str = "merge") -> dict[str, int]:
        """
        Load a serialized collection (e.g. exported from the browser app).

        Args:
            data: JSON array of entry objects
            mode: "merge" keeps existing entries and skips incoming IDs already
                  present; "replace" discards the current collection first.

        Returns:
            Counts: {"imported": N, "skipped": M}

        Raises:
            ValueError: If mode is unknown or data is not a list
        """
        if mode not in ("merge", "replace"):
            raise ValueError(f"mode must be 'merge' or 'replace', got {mode!r}")
        if not isinstance(data, list):
            raise ValueError("import data must be a JSON array of entries")

        incoming = entries_from_list(data)
        skipped = len(data) - len(incoming)

        current = [] if mode == "replace" else list(self._entries)
        seen = {e.id for e in current}
        added = []
        for entry in incoming:
            if not entry.id or entry.id in seen:
                skipped += 1
                continue
            seen.add(entry.id)
            added.append(entry)

        self._entries = current + added
        self._persist()
        logger.info("Imported %d entries (%s), skipped %d", len(added), mode, skipped)
        return {"imported": len(added), "skipped": skipped}

    def close(self) -> None:
        """Release storage and detach the ops log."""
        self._storage.close()
        if self._ops_handler is not None:
            logging.getLogger("stacks").removeHandler(self._ops_handler)
            self._ops_handler.close()
            self._ops_handler = None

    def __enter__(self) -> "Shelf":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
