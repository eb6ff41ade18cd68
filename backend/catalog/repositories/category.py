"""Category repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from catalog.models.category import Category
from catalog.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[Category]):
    """Persistence-only repository for :class:`Category`."""

    model = Category

    def _sortable_fields(self):
        return {"id": Category.id, "name": Category.name, "created_at": Category.created_at}

    def _filterable_fields(self):
        return {"name": Category.name}

    def _updatable_fields(self):
        return {"name"}

    def get_by_name(self, name: str) -> Category | None:
        stmt = select(Category).where(Category.name == name.strip())
        return cast(Category | None, self.session.execute(stmt).scalars().first())
