"""
Story Stacks - a personal log of finished movies, shows and books.

The view engine (filtering, ordering, year options, counts) is pure;
the Shelf adds write-through persistence on top.

Quick Start:
    from stacks import Shelf, Filters

    shelf = Shelf()  # uses ~/.stacks/ by default
    shelf.add("Dune", "book", creator="Frank Herbert", date_finished="2023-05-01")
    view = shelf.view(Filters(search="dune"))

CLI Usage:
    stacks add "Arrival" --date 2023-01-01 -r 4.5
    stacks list --category book --year 2023
    stacks pin 3f2a

Environment Variables:
    STACKS_STORE_PATH  - Override default store location
    STACKS_VERBOSE     - Set to 1 for debug logging

Configuration is persisted in stacks.toml within the store directory.
"""

from .api import AmbiguousIdError, Shelf
from .types import Category, Entry, Filters, ShelfView, Stats
from .view import (
    available_years,
    build_view,
    compute_stats,
    create_entry,
    delete_entry,
    filter_and_sort,
    select_year,
    sort_for_display,
    toggle_pinned,
)

__version__ = "0.1.0"
__all__ = [
    "Shelf",
    "AmbiguousIdError",
    "Category",
    "Entry",
    "Filters",
    "ShelfView",
    "Stats",
    "available_years",
    "build_view",
    "compute_stats",
    "create_entry",
    "delete_entry",
    "filter_and_sort",
    "select_year",
    "sort_for_display",
    "toggle_pinned",
]
