"""Unit tests for the generic repository helpers."""

from __future__ import annotations

import pytest

from catalog.models import Category
from catalog.repositories.base import DEFAULT_LIMIT, MAX_LIMIT, Window, parse_sort_tokens
from catalog.repositories.category import CategoryRepository
from tests.factories.catalog import CategoryFactory


@pytest.mark.parametrize(
    ("limit", "offset", "expected"),
    [
        (None, None, (DEFAULT_LIMIT, 0)),
        (0, 0, (DEFAULT_LIMIT, 0)),
        (-3, -1, (DEFAULT_LIMIT, 0)),
        (5, 20, (5, 20)),
        (MAX_LIMIT + 1, 0, (MAX_LIMIT, 0)),
    ],
)
def test_window_clamp(limit, offset, expected):
    window = Window.clamp(limit, offset)
    assert (window.limit, window.offset) == expected


def test_parse_sort_tokens():
    assert parse_sort_tokens(["-id", "name", " ", "-"]) == [("id", True), ("name", False)]


class TestCategoryRepository:
    @pytest.fixture()
    def repo(self, session):
        return CategoryRepository()

    def test_list_defaults_to_newest_first(self, repo):
        first, second = CategoryFactory(), CategoryFactory()

        page = repo.list()

        assert [c.id for c in page.items] == [second.id, first.id]

    def test_list_sort_whitelist(self, repo):
        CategoryFactory(name="b")
        CategoryFactory(name="a")

        assert [c.name for c in repo.list(sort=["name"]).items] == ["a", "b"]
        assert len(repo.list(sort=["password_hash"]).items) == 2

    def test_filters_ignore_unknown_keys(self, repo):
        CategoryFactory(name="Dogs")

        assert repo.exists(name="Dogs")
        assert not repo.exists(name="Cats")
        assert repo.find_one(bogus="x") is not None

    def test_assign_updates_rejects_non_whitelisted_fields(self, repo):
        category = CategoryFactory(name="Dogs")

        with pytest.raises(ValueError):
            repo.assign_updates(category, {"id": 99})
        repo.assign_updates(category, {"name": "  Hounds "})

        assert repo.get(category.id).name == "Hounds"

    def test_delete_where_reports_rowcount(self, repo):
        category = CategoryFactory()

        assert repo.delete_where(Category.id == category.id) == 1
        assert repo.delete_where(Category.id == category.id) == 0
