"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from catalog.repositories.base import BaseRepository, Page, Window, apply_sorting
from catalog.repositories.category import CategoryRepository
from catalog.repositories.product import ProductRepository
from catalog.repositories.refresh_token import RefreshTokenRepository
from catalog.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Window",
    "apply_sorting",
    # Domain
    "CategoryRepository",
    "ProductRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
