from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Protocol

from catalog.services._shared.errors import NotFoundError


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for a persisted refresh grant.

    :ivar id: Opaque grant identifier embedded in access tokens.
    :ivar user_id: Owner user id.
    :ivar token_hash: Adaptive hash of the plaintext secret.
    :ivar expire_at: Absolute expiry, unix seconds (UTC).
    :ivar expire_duration: TTL in minutes the grant was created with.
    """

    id: int
    user_id: int
    token_hash: str
    expire_at: int
    expire_duration: int

    def is_expired(self, now: datetime) -> bool:
        return self.expire_at <= int(now.timestamp())


class RefreshTokenStore(Protocol):
    """
    Persistence port for refresh grants.

    Implementations never commit; the caller's unit of work does. Deletes
    must be conditional so that exactly one of several concurrent callers
    observes a successful single-row delete.
    """

    def create(self, *, user_id: int, token_hash: str, ttl_minutes: int, now: datetime) -> int:
        """Persist a grant and return its id."""

    def get_by_id(self, token_id: int) -> RefreshTokenRecord | None:
        """Fetch a grant snapshot (``None`` when absent)."""

    def delete_by_id(self, token_id: int) -> bool:
        """Delete one grant. :returns: ``False`` if it was already gone."""

    def delete_by_user_id(self, user_id: int) -> int:
        """Delete every grant of a user. :returns: Rows removed."""

    def delete_expired(self, now: datetime) -> int:
        """Delete every grant expired at ``now``. :returns: Rows removed."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh grant store.

    .. note::
       Uses a threading lock so conditional deletes stay atomic under the
       concurrent refresh tests.
    """

    def __init__(self, *, known_user_ids: set[int] | None = None) -> None:
        self._rows: dict[int, RefreshTokenRecord] = {}
        self._seq = 0
        self._known_user_ids = known_user_ids
        self._lock = threading.Lock()

    def create(self, *, user_id: int, token_hash: str, ttl_minutes: int, now: datetime) -> int:
        if self._known_user_ids is not None and user_id not in self._known_user_ids:
            raise NotFoundError("User", user_id)
        with self._lock:
            self._seq += 1
            self._rows[self._seq] = RefreshTokenRecord(
                id=self._seq,
                user_id=user_id,
                token_hash=token_hash,
                expire_at=int((now + timedelta(minutes=ttl_minutes)).timestamp()),
                expire_duration=ttl_minutes,
            )
            return self._seq

    def get_by_id(self, token_id: int) -> RefreshTokenRecord | None:
        with self._lock:
            row = self._rows.get(token_id)
            return replace(row) if row else None

    def delete_by_id(self, token_id: int) -> bool:
        with self._lock:
            return self._rows.pop(token_id, None) is not None

    def delete_by_user_id(self, user_id: int) -> int:
        with self._lock:
            ids = [k for k, v in self._rows.items() if v.user_id == user_id]
            for k in ids:
                del self._rows[k]
            return len(ids)

    def delete_expired(self, now: datetime) -> int:
        with self._lock:
            ids = [k for k, v in self._rows.items() if v.is_expired(now)]
            for k in ids:
                del self._rows[k]
            return len(ids)

    def all(self) -> list[RefreshTokenRecord]:
        """Snapshot of every stored row (test inspection helper)."""
        with self._lock:
            return list(self._rows.values())
