from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from catalog.models.product import Product
from catalog.repositories.base import Page, Window
from catalog.services._shared.base import BaseService
from catalog.services._shared.errors import AlreadyExistsError, InvalidError, NotFoundError
from catalog.services.catalog.dto import ProductCreateIn, ProductOut, ProductUpdateIn


def _to_out(row: Product) -> ProductOut:
    return ProductOut(id=row.id, name=row.name, category_id=row.category_id)


def _to_page(page: Page[Product]) -> Page[ProductOut]:
    return Page(items=[_to_out(r) for r in page.items], limit=page.limit, offset=page.offset)


class ProductService(BaseService):
    """Product use cases. Every product belongs to an existing category."""

    def create(self, data: ProductCreateIn) -> int:
        """:raises NotFoundError: Unknown category. :raises AlreadyExistsError: Name taken."""
        with self.rw_uow() as uow:
            if uow.categories.get(data.category_id) is None:
                raise NotFoundError("Category", data.category_id)
            if uow.products.exists(name=data.name.strip()):
                raise AlreadyExistsError("Product", f"name {data.name!r} is taken")
            try:
                row = uow.products.add(Product(name=data.name, category_id=data.category_id))
            except ValueError as exc:
                raise InvalidError(str(exc)) from exc
            except IntegrityError as exc:
                raise AlreadyExistsError("Product", f"name {data.name!r} is taken") from exc
            return row.id

    def list(self, window: Window) -> Page[ProductOut]:
        """Newest products first."""
        with self.ro_uow() as uow:
            return _to_page(uow.products.list(window))

    def list_by_category(self, category_id: int, window: Window) -> Page[ProductOut]:
        """:raises NotFoundError: Unknown category."""
        with self.ro_uow() as uow:
            if uow.categories.get(category_id) is None:
                raise NotFoundError("Category", category_id)
            return _to_page(uow.products.list(window, filters={"category_id": category_id}))

    def update(self, data: ProductUpdateIn) -> int:
        """
        Rename a product and optionally move it to another category.

        :raises NotFoundError: Unknown product, product not in
            ``old_category_id``, or unknown ``new_category_id``.
        :raises AlreadyExistsError: Name taken by another product.
        """
        with self.rw_uow() as uow:
            row = uow.products.get(data.id)
            if row is None:
                raise NotFoundError("Product", data.id)
            if data.old_category_id is not None and row.category_id != data.old_category_id:
                raise NotFoundError("Product", f"{data.id} in category {data.old_category_id}")

            changes: dict[str, object] = {"name": data.name}
            if data.new_category_id is not None and data.new_category_id != row.category_id:
                if uow.categories.get(data.new_category_id) is None:
                    raise NotFoundError("Category", data.new_category_id)
                changes["category_id"] = data.new_category_id

            clash = uow.products.find_one(name=data.name.strip())
            if clash is not None and clash.id != row.id:
                raise AlreadyExistsError("Product", f"name {data.name!r} is taken")
            try:
                uow.products.assign_updates(row, changes)
            except ValueError as exc:
                raise InvalidError(str(exc)) from exc
            return row.id

    def delete(self, product_id: int) -> int:
        with self.rw_uow() as uow:
            if uow.products.delete_where(Product.id == product_id) == 0:
                raise NotFoundError("Product", product_id)
            return product_id
