"""Refresh-token repository: the SQL implementation of the store port."""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from catalog.models.refresh_token import RefreshToken
from catalog.repositories.base import BaseRepository
from catalog.services._shared.errors import (
    AlreadyExistsError,
    NotFoundError,
    is_foreign_key_violation,
)
from catalog.services._shared.ports.refresh_token_store import RefreshTokenRecord


def to_unix(moment: datetime) -> int:
    """Return ``moment`` as integer unix seconds."""
    return int(moment.timestamp())


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    Deletes are set-based so callers can tell "deleted now" from "already
    gone" by the returned row count. That is the anti-replay primitive the
    refresh rotation relies on.
    """

    model = RefreshToken

    def _filterable_fields(self):
        return {"user_id": RefreshToken.user_id}

    def create(self, *, user_id: int, token_hash: str, ttl_minutes: int, now: datetime) -> int:
        """Insert a new grant and return its id.

        :raises NotFoundError: When ``user_id`` does not reference a user.
        :raises AlreadyExistsError: On any other uniqueness collision.
        """
        row = RefreshToken(
            user_id=user_id,
            token_hash=token_hash,
            expire_at=to_unix(now + timedelta(minutes=ttl_minutes)),
            expire_duration=ttl_minutes,
        )
        try:
            with self.session.begin_nested():
                self.add(row)
        except IntegrityError as exc:
            if is_foreign_key_violation(exc):
                raise NotFoundError("User", user_id) from exc
            raise AlreadyExistsError("RefreshToken", "token collision") from exc
        return row.id

    def get_by_id(self, token_id: int) -> RefreshTokenRecord | None:
        stmt = select(RefreshToken).where(RefreshToken.id == token_id)
        row = self.session.execute(stmt).scalars().first()
        if row is None:
            return None
        return RefreshTokenRecord(
            id=row.id,
            user_id=row.user_id,
            token_hash=row.token_hash,
            expire_at=row.expire_at,
            expire_duration=row.expire_duration,
        )

    def delete_by_id(self, token_id: int) -> bool:
        """Conditionally delete one grant; ``False`` when it was already gone."""
        return self.delete_where(RefreshToken.id == token_id) == 1

    def delete_by_user_id(self, user_id: int) -> int:
        return self.delete_where(RefreshToken.user_id == user_id)

    def delete_expired(self, now: datetime) -> int:
        """Remove every grant whose expiry is at or before ``now``."""
        return self.delete_where(RefreshToken.expire_at <= to_unix(now))
