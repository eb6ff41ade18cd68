"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import CredentialsSchema, TokenPairSchema
from .catalog import (
    CategorySchema,
    CategoryWriteSchema,
    ProductCreateSchema,
    ProductFilterSchema,
    ProductSchema,
    ProductUpdateSchema,
)
from .common import IdSchema, MetaSchema, WindowQuerySchema, build_meta

__all__ = [
    "CredentialsSchema",
    "TokenPairSchema",
    "CategorySchema",
    "CategoryWriteSchema",
    "ProductSchema",
    "ProductCreateSchema",
    "ProductUpdateSchema",
    "ProductFilterSchema",
    "IdSchema",
    "MetaSchema",
    "WindowQuerySchema",
    "build_meta",
]
