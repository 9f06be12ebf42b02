"""ListView tests.

Exercises the full load -> filter -> sort -> paginate pipeline.
"""
from datetime import date

import pytest

from listing import (
    DateRange, EnumFilter, FilterSet, ListView, Paginator, SortDirection,
    SortKey, SortState, TextSearch,
)


def ids(records):
    return [r["id"] for r in records]


@pytest.fixture
def store():
    return [
        {"id": "U1", "name": "Aoki", "registered": date(2024, 1, 1), "status": "A"},
        {"id": "U2", "name": "Baba", "registered": date(2024, 2, 1), "status": "B"},
        {"id": "U3", "name": "Aoki", "registered": date(2024, 3, 1), "status": "A"},
    ]


@pytest.fixture
def view(store):
    filters = FilterSet([
        TextSearch("search", ["name"]),
        EnumFilter("status"),
        DateRange("registered"),
    ])
    sort = SortState(
        [SortKey("registered"), SortKey("name")], "registered",
        default_direction=SortDirection.ASC,
    )
    return ListView("users", lambda: store, filters, sort,
                    Paginator(options=[1, 30], size=30))


class TestPipeline:
    """Search, sort and page over a small store."""

    def test_search_then_sort_then_page(self, view):
        view.set_filter("search", "Aoki")
        assert ids(view.rows()) == ["U1", "U3"]

        view.sort_by("registered")
        assert ids(view.rows()) == ["U3", "U1"]

        view.set_page_size(1)
        view.go_to_page(2)
        page = view.page()
        assert ids(page.items) == ["U1"]
        assert page.page_count == 2

    def test_rows_are_idempotent(self, view):
        view.set_filter("status", "A")
        assert view.rows() == view.rows()

    def test_loader_called_each_time(self, view, store):
        assert view.page().total == 3
        store.append({"id": "U4", "name": "Chiba",
                      "registered": date(2024, 4, 1), "status": "B"})
        assert view.page().total == 4

    def test_no_match_is_empty_page(self, view):
        view.set_filter("search", "zzz")
        page = view.page()
        assert page.is_empty
        assert page.page_count == 0

    def test_clear_filters(self, view):
        view.set_filter("status", "B")
        assert ids(view.rows()) == ["U2"]
        view.clear_filters()
        assert len(view.rows()) == 3


class TestPageResets:
    """Changing filters or sort returns to page 1."""

    @pytest.fixture
    def paged(self, view):
        view.set_page_size(1)
        view.next_page()
        view.next_page()
        assert view.page_number == 3
        return view

    def test_filter_resets_page(self, paged):
        paged.set_filter("status", "A")
        assert paged.page_number == 1

    def test_sort_resets_page(self, paged):
        paged.sort_by("name")
        assert paged.page_number == 1

    def test_set_sort_resets_page(self, paged):
        paged.set_sort("name", SortDirection.ASC)
        assert paged.page_number == 1
        assert ids(paged.page().items) == ["U1"]

    def test_previous_page(self, paged):
        paged.previous_page()
        assert paged.page_number == 2

    def test_next_page_stops_at_end(self, paged):
        paged.next_page()
        assert paged.page_number == 3
