"""
CLI interface for the media log.

Usage:
    stacks add "Dune" -c book --creator "Frank Herbert" --date 2023-05-01
    stacks list --category book --search dune
    stacks pin 3f2a
    stacks del 3f2a
"""

import json
import os
import sys
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .api import AmbiguousIdError, Shelf
from .logging_config import configure_quiet_mode, enable_debug_mode
from .types import (
    ALL,
    NO_RESULTS,
    NO_THOUGHTS,
    Category,
    Entry,
    Filters,
    ShelfView,
    Stats,
    format_category,
    format_date,
    format_rating,
)

# Shortest ID prefix shown in summary lines
SHORT_ID_LENGTH = 8


# Quiet by default; STACKS_VERBOSE=1 enables debug output
if os.environ.get("STACKS_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"stacks {version('story-stacks')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_json_output = False
_full_output = False
_store_override: Optional[Path] = None


def _json_callback(value: bool):
    global _json_output
    _json_output = value


def _get_json_output() -> bool:
    return _json_output


def _full_callback(value: bool):
    global _full_output
    _full_output = value


def _get_full_output() -> bool:
    return _full_output


def _store_callback(value: Optional[Path]):
    global _store_override
    _store_override = value


def _get_store_override() -> Optional[Path]:
    return _store_override


app = typer.Typer(
    name="stacks",
    help="A personal log of the movies, shows and books you finish.",
    no_args_is_help=False,
    invoke_without_command=True,
    rich_markup_mode=None,
)


# -----------------------------------------------------------------------------
# Output Formatting
#
# Two text formats, controlled by the global --full flag:
#   default: one summary line per entry (id date category: title rating)
#   --full:  a card per entry with creator, format, thoughts, highlights
#
# JSON output (--json) replaces both.
# -----------------------------------------------------------------------------

def _format_summary_line(entry: Entry, id_width: int = SHORT_ID_LENGTH) -> str:
    """Single-line entry: short id, finish date, category, title, rating."""
    short_id = entry.id[:id_width].ljust(id_width)
    finished = entry.date_finished or "----------"
    pin = "*" if entry.pinned else " "
    return (
        f"{short_id} {finished} {pin} "
        f"{format_category(entry.category)}: {entry.title}  {format_rating(entry.rating)}"
    )


def render_card(entry: Entry) -> str:
    """Full display of one entry."""
    pin = "  [pinned]" if entry.pinned else ""
    lines = [
        f"{format_category(entry.category)}: {entry.title}{pin}",
        f"  {format_rating(entry.rating)}  ·  {format_date(entry.date_finished)}",
    ]
    if entry.creator:
        lines.append(f"  Creator: {entry.creator}")
    lines.append(f"  Format: {entry.format or '—'}")
    lines.append(f"  {entry.thoughts or NO_THOUGHTS}")
    if entry.highlights:
        lines.append(f"  > {entry.highlights}")
    lines.append(f"  id: {entry.id}")
    return "\n".join(lines)


def _format_stats(stats: Stats) -> str:
    return f"{stats.total} total · {stats.screen_count} screen · {stats.book_count} books"


def render_view(view: ShelfView, as_json: bool = False, full: bool = False) -> str:
    """Render a list screen: entries, then global stats."""
    if as_json:
        return json.dumps(view.to_dict(), indent=2, ensure_ascii=False)

    if not view.entries:
        body = NO_RESULTS
    elif full:
        body = "\n\n".join(render_card(e) for e in view.entries)
    else:
        body = "\n".join(_format_summary_line(e) for e in view.entries)
    return f"{body}\n\n{_format_stats(view.stats)}"


def _render_entry(entry: Entry) -> str:
    if _get_json_output():
        return json.dumps(entry.to_dict(), indent=2, ensure_ascii=False)
    if _get_full_output():
        return render_card(entry)
    return _format_summary_line(entry)


# -----------------------------------------------------------------------------
# Common Options
# -----------------------------------------------------------------------------

StoreOption = Annotated[
    Optional[Path],
    typer.Option(
        "--store", "-s",
        help="Path to the store directory (default: ~/.stacks/)"
    )
]


def _get_shelf(store: Optional[Path]) -> Shelf:
    """Open the shelf, turning setup failures into a clean CLI error.

    A subcommand's own --store wins, then the global --store, which also
    reads STACKS_STORE_PATH.
    """
    actual_store = store if store is not None else _get_store_override()
    try:
        return Shelf(actual_store)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _resolve_id(shelf: Shelf, id: str) -> Optional[str]:
    """Resolve a full or prefix ID, reporting failures on stderr."""
    try:
        resolved = shelf.resolve_id(id)
    except AmbiguousIdError as e:
        typer.echo(f"Error: {e}. Use a longer prefix.", err=True)
        return None
    if resolved is None:
        typer.echo(f"Not found: {id}", err=True)
    return resolved


def _validate_date(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    try:
        date.fromisoformat(value)
    except ValueError:
        typer.echo(f"Error: --date must be YYYY-MM-DD, got '{value}'", err=True)
        raise typer.Exit(1)
    return value


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    output_json: Annotated[bool, typer.Option(
        "--json", "-j",
        help="Output as JSON",
        callback=_json_callback,
        is_eager=True,
    )] = False,
    full_output: Annotated[bool, typer.Option(
        "--full", "-F",
        help="Show full entry cards",
        callback=_full_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    store: Annotated[Optional[Path], typer.Option(
        "--store", "-s",
        envvar="STACKS_STORE_PATH",
        help="Path to the store directory",
        callback=_store_callback,
        is_eager=True,
    )] = None,
):
    """A personal log of the movies, shows and books you finish."""
    # No subcommand: show everything
    if ctx.invoked_subcommand is None:
        with _get_shelf(None) as shelf:
            typer.echo(render_view(
                shelf.view(), as_json=_get_json_output(), full=_get_full_output(),
            ))


@app.command()
def add(
    title: Annotated[str, typer.Argument(help="Title of the movie, show or book")],
    category: Annotated[Category, typer.Option(
        "--category", "-c",
        case_sensitive=False,
        help="What kind of entry this is",
    )] = Category.movie,
    creator: Annotated[str, typer.Option(
        "--creator",
        help="Director, showrunner or author",
    )] = "",
    date_finished: Annotated[Optional[str], typer.Option(
        "--date", "-d",
        help="Date finished (YYYY-MM-DD)",
    )] = None,
    rating: Annotated[Optional[float], typer.Option(
        "--rating", "-r",
        help="Your rating (default from config)",
    )] = None,
    format: Annotated[str, typer.Option(
        "--format", "-f",
        help="Format, e.g. Cinema, Streaming, Paperback, Audiobook",
    )] = "",
    thoughts: Annotated[str, typer.Option(
        "--thoughts", "-t",
        help="Your notes",
    )] = "",
    highlights: Annotated[str, typer.Option(
        "--highlights",
        help="Favourite quote or moment",
    )] = "",
    store: StoreOption = None,
):
    """
    Log a finished movie, show or book.

    \b
    Examples:
        stacks add "Arrival" --date 2023-01-01 -r 4.5
        stacks add "Dune" -c book --creator "Frank Herbert"
    """
    if not title.strip():
        typer.echo("Error: Title is required", err=True)
        raise typer.Exit(1)
    date_finished = _validate_date(date_finished)

    with _get_shelf(store) as shelf:
        entry = shelf.add(
            title,
            category.value,
            creator=creator,
            date_finished=date_finished,
            rating=shelf.config.default_rating if rating is None else rating,
            format=format,
            thoughts=thoughts,
            highlights=highlights,
        )
        typer.echo(_render_entry(entry))


@app.command("list")
def list_entries(
    category: Annotated[str, typer.Option(
        "--category", "-c",
        help="Only this category (movie, tv, book) or 'all'",
    )] = ALL,
    year: Annotated[str, typer.Option(
        "--year", "-y",
        help="Only entries finished this year, 'Unknown', or 'all'",
    )] = ALL,
    search: Annotated[str, typer.Option(
        "--search", "-q",
        help="Case-insensitive text in title, creator, thoughts or highlights",
    )] = "",
    store: StoreOption = None,
):
    """List entries, pinned first, then newest first."""
    filters = Filters(category=category, year=year, search=search)
    with _get_shelf(store) as shelf:
        view = shelf.view(filters)
    if view.year != year:
        typer.echo(f"No entries finished in {year}; showing all years.", err=True)
    typer.echo(render_view(view, as_json=_get_json_output(), full=_get_full_output()))


@app.command()
def show(
    id: Annotated[str, typer.Argument(help="Entry ID or unique prefix")],
    store: StoreOption = None,
):
    """Show one entry in full."""
    with _get_shelf(store) as shelf:
        resolved = _resolve_id(shelf, id)
        if resolved is None:
            raise typer.Exit(1)
        entry = shelf.get(resolved)
    if _get_json_output():
        typer.echo(json.dumps(entry.to_dict(), indent=2, ensure_ascii=False))
    else:
        typer.echo(render_card(entry))


@app.command()
def pin(
    id: Annotated[str, typer.Argument(help="Entry ID or unique prefix")],
    store: StoreOption = None,
):
    """Pin an entry to the top of the list, or unpin it if already pinned."""
    with _get_shelf(store) as shelf:
        resolved = _resolve_id(shelf, id)
        if resolved is None:
            raise typer.Exit(1)
        entry = shelf.toggle_pin(resolved)
        typer.echo(_render_entry(entry))


@app.command("del")
def del_cmd(
    id: Annotated[list[str], typer.Argument(help="ID(s) or unique prefixes of entries to delete")],
    yes: Annotated[bool, typer.Option(
        "--yes", "-y",
        help="Delete without asking",
    )] = False,
    store: StoreOption = None,
):
    """
    Delete entries.

    Asks for confirmation per entry unless --yes is given.
    """
    had_errors = False
    with _get_shelf(store) as shelf:
        for one_id in id:
            resolved = _resolve_id(shelf, one_id)
            if resolved is None:
                had_errors = True
                continue
            entry = shelf.get(resolved)
            if not yes and not typer.confirm(f'Delete "{entry.title}"?'):
                continue
            shelf.delete(resolved)
            typer.echo(f"Deleted {resolved}")

    if had_errors:
        raise typer.Exit(1)


@app.command("delete", hidden=True)
def delete(
    id: Annotated[list[str], typer.Argument(help="ID(s) of entries to delete")],
    yes: Annotated[bool, typer.Option("--yes", "-y")] = False,
    store: StoreOption = None,
):
    """Delete entries (alias for 'del')."""
    del_cmd(id=id, yes=yes, store=store)


@app.command()
def stats(
    store: StoreOption = None,
):
    """Counts across the whole log."""
    with _get_shelf(store) as shelf:
        result = shelf.stats()
    if _get_json_output():
        typer.echo(json.dumps(result.to_dict()))
    else:
        typer.echo(_format_stats(result))


@app.command()
def years(
    store: StoreOption = None,
):
    """Years that appear in the log, newest first."""
    with _get_shelf(store) as shelf:
        values = shelf.years()
    if _get_json_output():
        typer.echo(json.dumps(values))
    elif values:
        for v in values:
            typer.echo(v)
    else:
        typer.echo("No entries yet.")


@app.command("export")
def export_cmd(
    file: Annotated[str, typer.Argument(help="Output file, or '-' for stdout")] = "-",
    store: StoreOption = None,
):
    """Export all entries as a JSON array (the browser app's format)."""
    with _get_shelf(store) as shelf:
        data = shelf.export_data()
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if file == "-":
        typer.echo(text)
    else:
        try:
            Path(file).write_text(text + "\n", encoding="utf-8")
        except OSError as e:
            typer.echo(f"Error: cannot write {file}: {e.strerror or e}", err=True)
            raise typer.Exit(1)
        typer.echo(f"Exported {len(data)} entries to {file}", err=True)


@app.command("import")
def import_cmd(
    file: Annotated[str, typer.Argument(help="JSON file to import, or '-' for stdin")],
    mode: Annotated[str, typer.Option(
        "--mode", "-m",
        help="'merge' keeps existing entries; 'replace' discards them",
    )] = "merge",
    yes: Annotated[bool, typer.Option(
        "--yes", "-y",
        help="Replace without asking",
    )] = False,
    store: StoreOption = None,
):
    """Import entries from a JSON export."""
    if mode not in ("merge", "replace"):
        typer.echo(f"Error: --mode must be 'merge' or 'replace', got '{mode}'", err=True)
        raise typer.Exit(1)

    if file == "-":
        text = sys.stdin.read()
    else:
        path = Path(file)
        if not path.exists():
            typer.echo(f"Error: file not found: {file}", err=True)
            raise typer.Exit(1)
        text = path.read_text(encoding="utf-8")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        typer.echo(f"Error: {file} is not valid JSON: {e}", err=True)
        raise typer.Exit(1)
    if not isinstance(data, list):
        typer.echo("Error: expected a JSON array of entries", err=True)
        raise typer.Exit(1)

    if mode == "replace" and not yes:
        if not typer.confirm(
            f"This will delete all existing entries and import {len(data)} from {file}. Continue?"
        ):
            raise typer.Exit(0)

    with _get_shelf(store) as shelf:
        result = shelf.import_data(data, mode=mode)

    typer.echo(
        f"Imported {result['imported']} entries, skipped {result['skipped']}.",
        err=True,
    )


# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(e, context="stacks CLI", store_path=_get_store_override())
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
