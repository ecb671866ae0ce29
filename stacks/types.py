"""
Data types for the media log.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


# Year token for entries without a finish date
UNKNOWN_YEAR = "Unknown"

# Filter value that matches everything
ALL = "all"


class Category(str, Enum):
    """Known entry categories. Stored values outside this set pass through."""
    movie = "movie"
    tv = "tv"
    book = "book"


CATEGORY_LABELS = {
    "movie": "Movie",
    "tv": "TV Show",
    "book": "Book",
}

NO_THOUGHTS = "No notes yet — add them when inspiration hits."
NO_RESULTS = "No entries match those filters yet."


def utc_now() -> str:
    """Current UTC timestamp: YYYY-MM-DDTHH:MM:SS.mmmZ.

    Fixed width, so string comparison sorts chronologically.
    """
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Entry:
    """
    One logged movie, show or book.

    This is a read-only snapshot. Pinning produces a new Entry via
    dataclasses.replace(); content fields never change after creation.

    Attributes:
        id: Opaque unique identifier
        category: "movie", "tv", "book" or an unrecognized passthrough value
        title: Non-empty for anything created through create_entry()
        date_finished: YYYY-MM-DD, or None when unknown
        rating: Free numeric rating, 0 means unrated
        created_at: Fixed-width UTC ISO timestamp, used as the sort key
    """
    id: str
    category: str
    title: str
    creator: str = ""
    format: str = ""
    thoughts: str = ""
    highlights: str = ""
    date_finished: Optional[str] = None
    rating: float = 0
    pinned: bool = False
    created_at: str = ""

    @property
    def finished_year(self) -> str:
        """Year prefix of date_finished, or "Unknown"."""
        if self.date_finished:
            return self.date_finished[:4]
        return UNKNOWN_YEAR

    @property
    def haystack(self) -> str:
        """Lowercased text searched by the free-text filter."""
        return " ".join(
            [self.title, self.creator, self.thoughts, self.highlights]
        ).lower()

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the browser app's key names."""
        return {
            "id": self.id,
            "category": self.category,
            "title": self.title,
            "creator": self.creator,
            "dateFinished": self.date_finished or "",
            "rating": self.rating,
            "format": self.format,
            "thoughts": self.thoughts,
            "highlights": self.highlights,
            "pinned": self.pinned,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Entry":
        """Build an Entry from stored data, defaulting anything missing."""
        return cls(
            id=str(data.get("id") or ""),
            category=str(data.get("category") or ""),
            title=_text(data.get("title")),
            creator=_text(data.get("creator")),
            format=_text(data.get("format")),
            thoughts=_text(data.get("thoughts")),
            highlights=_text(data.get("highlights")),
            date_finished=_text(data.get("dateFinished")) or None,
            rating=_number(data.get("rating")),
            pinned=_flag(data.get("pinned")),
            created_at=_text(data.get("createdAt")),
        )

    def __str__(self) -> str:
        pin = " [pinned]" if self.pinned else ""
        return f"{self.id}{pin}: {format_category(self.category)} {self.title[:60]}"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _flag(value: Any) -> bool:
    # Hand-edited exports sometimes carry "true"/"false" strings
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _number(value: Any) -> float:
    if value is None or value == "":
        return 0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug("Unparseable rating %r, using 0", value)
        return 0


@dataclass(frozen=True)
class Filters:
    """Current filter selections. "all" disables a filter."""
    category: str = ALL
    year: str = ALL
    search: str = ""

    @property
    def needle(self) -> str:
        """Search text as matched: trimmed and lowercased."""
        return self.search.strip().lower()


@dataclass(frozen=True)
class Stats:
    """Global counts over the whole collection."""
    total: int = 0
    screen_count: int = 0
    book_count: int = 0

    def to_dict(self) -> dict[str, int]:
        from dataclasses import asdict
        return asdict(self)


@dataclass(frozen=True)
class ShelfView:
    """Everything a renderer needs for one pass.

    Assembled by view.build_view(), consumed by the CLI renderer.
    """
    entries: list[Entry] = field(default_factory=list)
    years: list[str] = field(default_factory=list)
    year: str = ALL
    stats: Stats = field(default_factory=Stats)

    def to_dict(self) -> dict:
        return {
            "entries": [e.to_dict() for e in self.entries],
            "years": list(self.years),
            "year": self.year,
            "stats": self.stats.to_dict(),
        }


# ---------------------------------------------------------------------------
# Display formatting
# ---------------------------------------------------------------------------

def format_category(category: str) -> str:
    return CATEGORY_LABELS.get(category, "Entry")


def format_rating(rating: float) -> str:
    """"4.5 ★" for rated entries, "—" otherwise."""
    if not rating:
        return "—"
    return f"{rating:g} ★"


def format_date(value: Optional[str]) -> str:
    """Render YYYY-MM-DD as "May 1, 2023". Returns "Date unknown" for bad input."""
    if not value:
        return "Date unknown"
    try:
        d = date.fromisoformat(value[:10])
    except ValueError:
        return "Date unknown"
    return f"{d:%b} {d.day}, {d.year}"
