"""Catalog product model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from catalog.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .category import Category


class Product(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Product listed under exactly one :class:`Category`.

    Fields
    ------
    name : str
        Unique product name.
    category_id : int
        Owning category; products are removed with their category.
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
    )

    category: Mapped[Category] = relationship(back_populates="products")

    __table_args__ = (
        UniqueConstraint("name", name="uq_products_name"),
        Index("ix_products_category_id", "category_id"),
    )

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Product name is required.")
        return value.strip()
