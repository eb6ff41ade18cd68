from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CategoryOut:
    """
    Read-model for a category.

    :param id: Category id.
    :param name: Unique category name.
    """

    id: int
    name: str


@dataclass(frozen=True, slots=True)
class ProductOut:
    """
    Read-model for a product.

    :param id: Product id.
    :param name: Unique product name.
    :param category_id: Owning category id.
    """

    id: int
    name: str
    category_id: int


@dataclass(frozen=True, slots=True)
class ProductCreateIn:
    name: str
    category_id: int


@dataclass(frozen=True, slots=True)
class ProductUpdateIn:
    """
    Update command for a product.

    :param id: Product to update.
    :param name: New name.
    :param old_category_id: Category the caller believes the product is in
        (``None`` skips the check).
    :param new_category_id: Target category (``None`` keeps the current one).
    """

    id: int
    name: str
    old_category_id: int | None = None
    new_category_id: int | None = None
