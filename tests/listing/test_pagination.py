"""Pagination tests."""
import pytest

from config.settings import settings
from listing import Page, Paginator, page_count, paginate

ROWS = list(range(1, 76))  # 75 件


class TestPageCount:
    """Tests for page_count."""

    @pytest.mark.parametrize("total, size, expected", [
        (0, 30, 0),
        (1, 30, 1),
        (30, 30, 1),
        (31, 30, 2),
        (75, 30, 3),
    ])
    def test_page_count(self, total, size, expected):
        assert page_count(total, size) == expected

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            page_count(10, 0)


class TestPaginate:
    """Tests for paginate / Page."""

    def test_middle_page(self):
        page = paginate(ROWS, 2, 30)
        assert page.items == list(range(31, 61))
        assert (page.start_index, page.end_index) == (31, 60)
        assert page.has_previous and page.has_next
        assert page.summary() == "75 件中 31-60 件"

    def test_last_page_is_partial(self):
        page = paginate(ROWS, 3, 30)
        assert len(page.items) == 15
        assert not page.has_next

    def test_page_clamped(self):
        assert paginate(ROWS, 99, 30).number == 3
        assert paginate(ROWS, 0, 30).number == 1

    def test_empty(self):
        page = paginate([], 1, 30)
        assert page.is_empty
        assert page.items == []
        assert page.page_count == 0
        assert page.number == 1
        assert (page.start_index, page.end_index) == (0, 0)
        assert page.summary() == "0 件"
        assert not page.has_next and not page.has_previous

    def test_default_page(self):
        assert Page().is_empty


class TestPaginator:
    """Tests for Paginator state."""

    def test_defaults_from_settings(self):
        paginator = Paginator()
        assert paginator.options == settings.page_size_options
        assert paginator.size == settings.default_page_size
        assert paginator.page == 1

    def test_next_previous_stop_at_edges(self):
        paginator = Paginator()
        paginator.apply(ROWS)
        paginator.previous()
        assert paginator.page == 1
        for _ in range(5):
            paginator.next()
        assert paginator.page == 3
        paginator.previous()
        assert paginator.page == 2

    def test_set_size_resets_page(self):
        paginator = Paginator()
        paginator.apply(ROWS)
        paginator.go_to(3)
        paginator.set_size(50)
        assert paginator.page == 1
        assert paginator.apply(ROWS).page_count == 2

    def test_size_must_be_an_option(self):
        paginator = Paginator()
        with pytest.raises(ValueError):
            paginator.set_size(7)
        with pytest.raises(ValueError):
            Paginator(options=[10, 20], size=30)
        with pytest.raises(ValueError):
            Paginator(options=[0, 10])

    def test_apply_clamps_when_records_shrink(self):
        paginator = Paginator()
        paginator.apply(ROWS)
        paginator.go_to(3)
        page = paginator.apply(ROWS[:10])
        assert page.number == 1
        assert paginator.page == 1

    def test_go_to_clamps(self):
        paginator = Paginator(options=[1, 2])
        paginator.apply(["a", "b", "c"])
        paginator.go_to(10)
        assert paginator.page == 3
        paginator.go_to(-1)
        assert paginator.page == 1

    def test_custom_options_default_size(self):
        paginator = Paginator(options=[5, 10])
        assert paginator.size == 5
