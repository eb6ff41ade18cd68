"""Persisted refresh-token grants."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.core.extensions import db

from .base import PKMixin, ReprMixin

if TYPE_CHECKING:
    from .user import User


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    One active session grant owned by a :class:`User`.

    Only the salted hash of the secret is stored; the plaintext is handed to
    the client exactly once when the row is created.

    Fields
    ------
    token_hash : str
        Adaptive hash of the base64 plaintext secret.
    user_id : int
        Owning user. Rows disappear with their user (``ON DELETE CASCADE``).
    expire_at : int
        Absolute expiry as a unix timestamp (seconds, UTC).
    expire_duration : int
        TTL in minutes the row was created with.
    """

    __tablename__ = "refresh_tokens"

    token_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    expire_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expire_duration: Mapped[int] = mapped_column(Integer, nullable=False)

    user: Mapped[User] = relationship(back_populates="refresh_tokens")

    __table_args__ = (
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_expire_at", "expire_at"),
    )
