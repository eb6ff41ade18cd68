from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from catalog.models.category import Category
from catalog.repositories.base import Page, Window
from catalog.services._shared.base import BaseService
from catalog.services._shared.errors import AlreadyExistsError, InvalidError, NotFoundError
from catalog.services.catalog.dto import CategoryOut


def _to_out(row: Category) -> CategoryOut:
    return CategoryOut(id=row.id, name=row.name)


class CategoryService(BaseService):
    """Category use cases: create, list, get, rename, delete."""

    def create(self, name: str) -> int:
        """:raises AlreadyExistsError: Name already used."""
        with self.rw_uow() as uow:
            if uow.categories.get_by_name(name) is not None:
                raise AlreadyExistsError("Category", f"name {name!r} is taken")
            try:
                row = uow.categories.add(Category(name=name))
            except ValueError as exc:
                raise InvalidError(str(exc)) from exc
            except IntegrityError as exc:
                raise AlreadyExistsError("Category", f"name {name!r} is taken") from exc
            return row.id

    def list(self, window: Window) -> Page[CategoryOut]:
        with self.ro_uow() as uow:
            page = uow.categories.list(window)
            return Page(
                items=[_to_out(r) for r in page.items], limit=page.limit, offset=page.offset
            )

    def get(self, category_id: int) -> CategoryOut:
        """:raises NotFoundError: Unknown id."""
        with self.ro_uow() as uow:
            row = uow.categories.get(category_id)
            if row is None:
                raise NotFoundError("Category", category_id)
            return _to_out(row)

    def update(self, category_id: int, name: str) -> int:
        """Rename a category. :raises NotFoundError, AlreadyExistsError:"""
        with self.rw_uow() as uow:
            row = uow.categories.get(category_id)
            if row is None:
                raise NotFoundError("Category", category_id)
            clash = uow.categories.get_by_name(name)
            if clash is not None and clash.id != row.id:
                raise AlreadyExistsError("Category", f"name {name!r} is taken")
            try:
                uow.categories.assign_updates(row, {"name": name})
            except ValueError as exc:
                raise InvalidError(str(exc)) from exc
            return row.id

    def delete(self, category_id: int) -> int:
        """Delete a category and, by cascade, its products."""
        with self.rw_uow() as uow:
            row = uow.categories.get(category_id)
            if row is None:
                raise NotFoundError("Category", category_id)
            uow.categories.delete(row)
            return category_id
