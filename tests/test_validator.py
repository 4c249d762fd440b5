"""Tests for fetch sanity checks."""

from src.api.schemas import AppRecord
from src.pipeline.validator import check_fetch, is_empty_fetch


def make_apps(n, start=1, name="App"):
    return [AppRecord(appid=i, name=f"{name} {i}") for i in range(start, start + n)]


class TestEmptyFetch:
    def test_empty_is_flagged(self):
        assert is_empty_fetch([]) is True
        assert is_empty_fetch(make_apps(1)) is False

    def test_empty_first_fetch(self):
        issues = check_fetch([], [])
        assert issues == ["Catalog returned no apps"]

    def test_empty_after_data(self):
        issues = check_fetch(make_apps(3), [])
        assert len(issues) == 1
        assert "all 3 known apps" in issues[0]


class TestCheckFetch:
    def test_clean_fetch(self):
        assert check_fetch(make_apps(10), make_apps(11)) == []

    def test_first_fetch_clean(self):
        assert check_fetch([], make_apps(5)) == []

    def test_large_shrink(self):
        issues = check_fetch(make_apps(100), make_apps(40))
        assert any("shrank from 100 to 40" in i for i in issues)

    def test_small_shrink_ok(self):
        assert check_fetch(make_apps(100), make_apps(60)) == []

    def test_all_unnamed(self):
        fetched = [AppRecord(appid=1, name=""), AppRecord(appid=2, name="")]
        assert "No apps in the catalog have a name" in check_fetch([], fetched)
