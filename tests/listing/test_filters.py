"""Filter engine tests.

Tests for TextSearch, EnumFilter, FlagFilter, DateRange and FilterSet.
Records are plain dicts; the engine reads them the same way it reads
ORM objects.
"""
from datetime import date, datetime

import pytest

from listing import (
    DateRange, EnumFilter, FilterSet, FlagFilter, TextSearch, coerce_date, resolve,
)

RECORDS = [
    {"id": "U1", "name": "Aoki", "email": "aoki@example.com", "status": "認証済み",
     "rating": 4, "registered": date(2024, 1, 1), "is_new": True},
    {"id": "U2", "name": "Baba", "email": "baba@example.com", "status": "未認証",
     "rating": 2, "registered": date(2024, 2, 1), "is_new": False},
    {"id": "U3", "name": "Aoki", "email": "a3@example.com", "status": "認証済み",
     "rating": 5, "registered": date(2024, 3, 1), "is_new": True},
    {"id": "U4", "name": "Chiba", "email": None, "status": "未認証",
     "rating": 4, "registered": None, "is_new": False},
]


def ids(records):
    return [r["id"] for r in records]


# ============================================================
# Helpers
# ============================================================
class TestHelpers:
    """Tests for resolve / coerce_date."""

    def test_resolve_dict_attr_and_callable(self):
        class Obj:
            name = "obj"

        assert resolve({"name": "d"}, "name") == "d"
        assert resolve(Obj(), "name") == "obj"
        assert resolve(Obj(), "missing") is None
        assert resolve({"a": 1}, lambda r: r["a"] + 1) == 2

    @pytest.mark.parametrize("value, expected", [
        ("2024-09-01", datetime(2024, 9, 1)),
        ("2024/09/01", datetime(2024, 9, 1)),
        ("2024-09-01 14:30", datetime(2024, 9, 1, 14, 30)),
        ("2024-09-01T14:30:05", datetime(2024, 9, 1, 14, 30, 5)),
        (date(2024, 9, 1), datetime(2024, 9, 1)),
        ("not a date", None),
        (20240901, None),
    ])
    def test_coerce_date(self, value, expected):
        assert coerce_date(value) == expected


# ============================================================
# TextSearch
# ============================================================
class TestTextSearch:
    """Tests for case-insensitive substring search."""

    def setup_method(self):
        self.filters = FilterSet([TextSearch("search", ["name", "email"])])

    def test_empty_term_keeps_everything(self):
        for term in (None, "", "   "):
            self.filters.set("search", term)
            assert ids(self.filters.apply(RECORDS)) == ["U1", "U2", "U3", "U4"]

    def test_case_insensitive(self):
        self.filters.set("search", "aoki")
        assert ids(self.filters.apply(RECORDS)) == ["U1", "U3"]

    def test_matches_any_field(self):
        self.filters.set("search", "a3@")
        assert ids(self.filters.apply(RECORDS)) == ["U3"]

    def test_no_match(self):
        self.filters.set("search", "zzz")
        assert self.filters.apply(RECORDS) == []

    def test_requires_fields(self):
        with pytest.raises(ValueError):
            TextSearch("search", [])


# ============================================================
# EnumFilter / FlagFilter
# ============================================================
class TestEnumFilter:
    """Tests for exact-match enum filters."""

    def setup_method(self):
        self.filters = FilterSet([EnumFilter("status"), EnumFilter("rating")])

    @pytest.mark.parametrize("sentinel", ["全て", "すべて", "", None])
    def test_sentinel_disables(self, sentinel):
        self.filters.set("status", sentinel)
        assert len(self.filters.apply(RECORDS)) == 4

    def test_exact_match(self):
        self.filters.set("status", "未認証")
        assert ids(self.filters.apply(RECORDS)) == ["U2", "U4"]

    def test_string_matches_number(self):
        self.filters.set("rating", "4")
        assert ids(self.filters.apply(RECORDS)) == ["U1", "U4"]

    def test_filters_are_anded(self):
        self.filters.set("status", "認証済み")
        self.filters.set("rating", 5)
        assert ids(self.filters.apply(RECORDS)) == ["U3"]


class TestFlagFilter:
    """Tests for toggle filters."""

    def test_flag(self):
        filters = FilterSet([FlagFilter("new_only", lambda r: r["is_new"])])
        assert len(filters.apply(RECORDS)) == 4
        filters.set("new_only", True)
        assert ids(filters.apply(RECORDS)) == ["U1", "U3"]
        filters.set("new_only", False)
        assert len(filters.apply(RECORDS)) == 4


# ============================================================
# DateRange
# ============================================================
class TestDateRange:
    """Tests for inclusive date ranges."""

    def setup_method(self):
        self.filters = FilterSet([DateRange("registered")])

    def test_inclusive_bounds(self):
        self.filters.set("registered", ("2024-01-01", "2024-02-01"))
        assert ids(self.filters.apply(RECORDS)) == ["U1", "U2"]

    def test_single_bound(self):
        self.filters.set("registered", {"start": "2024/02/01", "end": None})
        assert ids(self.filters.apply(RECORDS)) == ["U2", "U3"]
        self.filters.set("registered", (None, date(2024, 1, 31)))
        assert ids(self.filters.apply(RECORDS)) == ["U1"]

    def test_day_granularity_with_datetimes(self):
        rows = [{"id": "H1", "registered": datetime(2024, 9, 15, 23, 59)}]
        self.filters.set("registered", ("2024-09-15", "2024-09-15"))
        assert ids(self.filters.apply(rows)) == ["H1"]

    def test_no_bounds_keeps_missing_dates(self):
        self.filters.set("registered", ("", ""))
        assert len(self.filters.apply(RECORDS)) == 4

    def test_active_bound_excludes_missing_dates(self):
        self.filters.set("registered", ("2000-01-01", None))
        assert "U4" not in ids(self.filters.apply(RECORDS))

    def test_malformed_bound_is_ignored(self):
        self.filters.set("registered", ("昨日", "2024-01-15"))
        assert ids(self.filters.apply(RECORDS)) == ["U1"]

    def test_start_after_end_matches_nothing(self):
        self.filters.set("registered", ("2024-03-01", "2024-01-01"))
        assert self.filters.apply(RECORDS) == []


# ============================================================
# FilterSet
# ============================================================
class TestFilterSet:
    """Tests for FilterSet bookkeeping."""

    def test_duplicate_name(self):
        with pytest.raises(ValueError):
            FilterSet([EnumFilter("status"), EnumFilter("status")])

    def test_unknown_name(self):
        filters = FilterSet([EnumFilter("status")])
        with pytest.raises(ValueError):
            filters.set("nope", "x")

    def test_values_and_clear(self):
        filters = FilterSet([EnumFilter("status"), TextSearch("search", ["name"])])
        filters.set("status", "未認証")
        assert filters.values == {"status": "未認証"}
        assert filters.get("status") == "未認証"
        assert [c.name for c, _ in filters.active()] == ["status"]

        filters.clear()
        assert filters.values == {}
        assert filters.active() == []

    def test_apply_keeps_order_and_is_idempotent(self):
        filters = FilterSet([TextSearch("search", ["name"])])
        filters.set("search", "a")
        once = filters.apply(RECORDS)
        assert filters.apply(once) == once

    def test_criteria_listed_in_order(self):
        filters = FilterSet([EnumFilter("status"), DateRange("registered")])
        assert filters.names == ["status", "registered"]
        assert [type(c).__name__ for c in filters.criteria()] == [
            "EnumFilter", "DateRange"
        ]
