"""
View engine for the media log.

Pure functions over a collection of entries:
- filter_and_sort(): category/year/search filters, then display order
- available_years(), compute_stats(): always over the full collection
- toggle_pinned(), delete_entry(), create_entry(): reducers returning new data

Nothing here touches storage or rendering. The Shelf persists the results.
"""

import logging
from dataclasses import replace
from typing import Iterable, Optional

from .types import ALL, Entry, Filters, ShelfView, Stats, new_id, utc_now

logger = logging.getLogger(__name__)


def matches(entry: Entry, filters: Filters) -> bool:
    """True when the entry passes category, year and search filters."""
    if filters.category != ALL and entry.category != filters.category:
        return False
    if filters.year != ALL and entry.finished_year != filters.year:
        return False
    needle = filters.needle
    if needle and needle not in entry.haystack:
        return False
    return True


def sort_for_display(entries: Iterable[Entry]) -> list[Entry]:
    """Pinned first, then most recently created first.

    created_at is compared as a string; the timestamps are fixed-width ISO.
    Python's sort stays stable with reverse=True, so exact ties keep
    their input order.
    """
    return sorted(entries, key=lambda e: (e.pinned, e.created_at), reverse=True)


def filter_and_sort(entries: Iterable[Entry], filters: Optional[Filters] = None) -> list[Entry]:
    """Entries passing all filters, in display order. Input is not modified."""
    filters = filters or Filters()
    return sort_for_display(e for e in entries if matches(e, filters))


def available_years(entries: Iterable[Entry]) -> list[str]:
    """Every finished year in the collection, newest first.

    "Unknown" sorts by plain string comparison, which puts it ahead of
    the digit years.
    """
    years = {e.finished_year for e in entries}
    return sorted((y for y in years if y), reverse=True)


def select_year(years: list[str], current: str) -> str:
    """Keep the selected year if it is still offered, else fall back to "all"."""
    if current == ALL or current in years:
        return current
    return ALL


def compute_stats(entries: Iterable[Entry]) -> Stats:
    """Totals across the whole collection, not the filtered view.

    Anything that is not a book counts as screen.
    """
    total = screen = books = 0
    for e in entries:
        total += 1
        if e.category == "book":
            books += 1
        else:
            screen += 1
    return Stats(total=total, screen_count=screen, book_count=books)


def build_view(entries: Iterable[Entry], filters: Optional[Filters] = None) -> ShelfView:
    """Recompute everything the list screen shows.

    The year selection is resolved against the available years before
    filtering, so a stale year never hides the whole list.
    """
    entries = list(entries)
    filters = filters or Filters()
    years = available_years(entries)
    year = select_year(years, filters.year)
    if year != filters.year:
        logger.debug("Year %r no longer present, resetting to %r", filters.year, year)
        filters = replace(filters, year=year)
    return ShelfView(
        entries=filter_and_sort(entries, filters),
        years=years,
        year=year,
        stats=compute_stats(entries),
    )


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------

def toggle_pinned(entries: Iterable[Entry], id: str) -> list[Entry]:
    """Flip the pinned flag of the entry with this id. No match is a no-op."""
    return [replace(e, pinned=not e.pinned) if e.id == id else e for e in entries]


def delete_entry(entries: Iterable[Entry], id: str) -> list[Entry]:
    """Drop the entry with this id. Confirmation is the caller's job."""
    return [e for e in entries if e.id != id]


def create_entry(
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
    Build a new, unpinned entry from submitted form values.

    Returns None when the title is blank after trimming; nothing is created.
    """
    title = (title or "").strip()
    if not title:
        return None
    return Entry(
        id=new_id(),
        category=category,
        title=title,
        creator=(creator or "").strip(),
        format=format or "",
        thoughts=(thoughts or "").strip(),
        highlights=(highlights or "").strip(),
        date_finished=date_finished or None,
        rating=rating or 0,
        pinned=False,
        created_at=utc_now(),
    )
