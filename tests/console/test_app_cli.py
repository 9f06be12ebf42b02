"""Terminal entry point tests (app.main)."""
import pytest

from app import main, parse_filters


class TestParseFilters:
    """Tests for key=value parsing."""

    def test_pairs(self):
        assert parse_filters(["rating=5", " status = 公開中 "]) == {
            "rating": "5", "status": "公開中",
        }

    def test_value_may_contain_equals(self):
        assert parse_filters(["search=a=b"]) == {"search": "a=b"}

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_filters(["rating"])


class TestMain:
    """End-to-end runs against the seeded in-memory database."""

    def test_list_sections(self, capsys):
        assert main(["--list", "--log-level", "ERROR"]) == 0
        out = capsys.readouterr().out
        assert "users" in out
        assert "banners" in out

    def test_search_users(self, capsys):
        assert main(["users", "--search", "青木", "--log-level", "ERROR"]) == 0
        out = capsys.readouterr().out
        assert "2 件中 1-2 件" in out
        assert out.index("U012") < out.index("U011")

    def test_ascending_sort(self, capsys):
        assert main(["users", "--search", "青木", "--asc", "--log-level", "ERROR"]) == 0
        out = capsys.readouterr().out
        assert out.index("U011") < out.index("U012")

    def test_filters_and_paging(self, capsys):
        assert main(["reviews", "--filter", "rating=5", "--page", "9",
                     "--log-level", "ERROR"]) == 0
        out = capsys.readouterr().out
        assert "3 件中 1-3 件" in out
        assert "page 1/1" in out

    def test_date_range(self, capsys):
        assert main(["matching_history", "--from", "2024-09-15",
                     "--log-level", "ERROR"]) == 0
        out = capsys.readouterr().out
        assert "HIST001" in out and "HIST002" in out
        assert "HIST003" not in out

    def test_empty_result(self, capsys):
        assert main(["users", "--search", "存在しない", "--log-level", "ERROR"]) == 0
        assert "該当するデータがありません" in capsys.readouterr().out

    def test_no_seed(self, capsys):
        assert main(["faqs", "--no-seed", "--log-level", "ERROR"]) == 0
        assert "該当するデータがありません" in capsys.readouterr().out

    @pytest.mark.parametrize("argv", [
        ["dashboard"],
        ["users", "--page-size", "7"],
        ["users", "--filter", "nope=1"],
        ["users", "--sort", "nope"],
        ["partners", "--from", "2024-01-01"],
        ["users", "--db", "postgresql://localhost/console"],
    ])
    def test_errors_return_2(self, argv):
        assert main(argv + ["--log-level", "CRITICAL"]) == 2
