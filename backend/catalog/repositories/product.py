"""Product repository."""

from __future__ import annotations

from catalog.models.product import Product
from catalog.repositories.base import BaseRepository


class ProductRepository(BaseRepository[Product]):
    """Persistence-only repository for :class:`Product`."""

    model = Product

    def _sortable_fields(self):
        return {"id": Product.id, "name": Product.name, "created_at": Product.created_at}

    def _filterable_fields(self):
        return {"name": Product.name, "category_id": Product.category_id}

    def _updatable_fields(self):
        return {"name", "category_id"}
