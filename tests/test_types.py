"""Tests for Entry serialization and display formatting."""

import re

import pytest

from stacks.types import (
    NO_THOUGHTS,
    Entry,
    Filters,
    format_category,
    format_date,
    format_rating,
    utc_now,
)


class TestEntry:
    """Entry dataclass."""

    def test_finished_year(self):
        e = Entry(id="1", category="book", title="Dune", date_finished="2023-05-01")
        assert e.finished_year == "2023"

    def test_finished_year_unknown(self):
        assert Entry(id="1", category="book", title="Dune").finished_year == "Unknown"

    def test_haystack_joins_searchable_fields(self):
        e = Entry(id="1", category="book", title="Dune", creator="Frank Herbert",
                  thoughts="Spice", highlights="Fear", format="Paperback")
        assert e.haystack == "dune frank herbert spice fear"

    def test_frozen(self):
        e = Entry(id="1", category="book", title="Dune")
        with pytest.raises(AttributeError):
            e.title = "Other"

    def test_str(self):
        e = Entry(id="abc", category="tv", title="Severance", pinned=True)
        assert str(e) == "abc [pinned]: TV Show Severance"


class TestSerialization:
    """Stored form uses the browser app's key names."""

    def test_to_dict_keys(self):
        e = Entry(id="1", category="book", title="Dune", date_finished="2023-05-01",
                  created_at="2023-05-02T00:00:00.000Z", rating=4.5)
        d = e.to_dict()
        assert d["dateFinished"] == "2023-05-01"
        assert d["createdAt"] == "2023-05-02T00:00:00.000Z"
        assert d["rating"] == 4.5
        assert d["pinned"] is False

    def test_missing_date_serializes_empty(self):
        d = Entry(id="1", category="book", title="Dune").to_dict()
        assert d["dateFinished"] == ""

    def test_from_browser_record(self):
        record = {
            "id": "5b1c",
            "category": "movie",
            "title": "Arrival",
            "creator": "Denis Villeneuve",
            "dateFinished": "2023-01-01",
            "rating": 4.5,
            "format": "Cinema",
            "thoughts": "",
            "highlights": "",
            "pinned": True,
            "createdAt": "2023-01-02T00:00:00.000Z",
        }
        e = Entry.from_dict(record)
        assert e.id == "5b1c"
        assert e.pinned is True
        assert e.date_finished == "2023-01-01"
        assert e.to_dict() == record

    def test_from_sparse_record(self):
        e = Entry.from_dict({"id": 7, "title": "Heat"})
        assert e.id == "7"
        assert e.category == ""
        assert e.creator == ""
        assert e.date_finished is None
        assert e.rating == 0
        assert e.pinned is False

    def test_empty_date_is_unknown_year(self):
        e = Entry.from_dict({"id": "1", "title": "Heat", "dateFinished": ""})
        assert e.date_finished is None
        assert e.finished_year == "Unknown"

    def test_bad_rating_defaults_to_zero(self):
        assert Entry.from_dict({"id": "1", "title": "x", "rating": "great"}).rating == 0
        assert Entry.from_dict({"id": "1", "title": "x", "rating": "3.5"}).rating == 3.5

    @pytest.mark.parametrize("raw, expected", [
        (True, True),
        (False, False),
        (None, False),
        ("false", False),
        ("False", False),
        ("", False),
        ("true", True),
        (1, True),
    ])
    def test_pinned_string_values(self, raw, expected):
        assert Entry.from_dict({"id": "1", "title": "x", "pinned": raw}).pinned is expected

    def test_no_thoughts_text(self):
        assert NO_THOUGHTS == "No notes yet — add them when inspiration hits."


class TestFilters:
    """Filter defaults and search normalization."""

    def test_defaults(self):
        f = Filters()
        assert (f.category, f.year, f.search) == ("all", "all", "")

    def test_needle(self):
        assert Filters(search="  DuNe ").needle == "dune"


class TestFormatting:
    """Display helpers."""

    @pytest.mark.parametrize("category,label", [
        ("movie", "Movie"),
        ("tv", "TV Show"),
        ("book", "Book"),
        ("podcast", "Entry"),
        ("", "Entry"),
    ])
    def test_format_category(self, category, label):
        assert format_category(category) == label

    def test_format_rating(self):
        assert format_rating(4.5) == "4.5 ★"
        assert format_rating(4.0) == "4 ★"
        assert format_rating(0) == "—"

    def test_format_date(self):
        assert format_date("2023-05-01") == "May 1, 2023"

    def test_format_date_unknown(self):
        assert format_date(None) == "Date unknown"
        assert format_date("") == "Date unknown"
        assert format_date("not-a-date") == "Date unknown"

    def test_utc_now_fixed_width(self):
        ts = utc_now()
        assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", ts)
