from __future__ import annotations

import base64
import logging
import secrets

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from catalog.models.user import User
from catalog.repositories.refresh_token import RefreshTokenRepository
from catalog.services._shared.base import BaseService, Clock, ServiceContext
from catalog.services._shared.errors import (
    ExpiredError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
)
from catalog.services._shared.ports import RefreshTokenRecord, RefreshTokenStore

log = logging.getLogger(__name__)

DEFAULT_TOKEN_BYTES = 32
DEFAULT_TTL_MINUTES = 60 * 24 * 7


def generate_secret(nbytes: int = DEFAULT_TOKEN_BYTES) -> str:
    """Return ``nbytes`` of CSPRNG output as unpadded standard base64."""
    return base64.b64encode(secrets.token_bytes(nbytes)).decode("ascii").rstrip("=")


class RefreshTokenService(BaseService):
    """
    Generate, persist, verify and invalidate refresh grants.

    The plaintext secret is returned by :meth:`create` only; storage holds
    the salted adaptive hash. Methods other than :meth:`sweep_expired` do not
    open a unit of work; callers run them inside their own ``rw_uow()`` so
    rotation (delete then create) commits atomically.
    """

    def __init__(
        self,
        *,
        store: RefreshTokenStore | None = None,
        ttl_minutes: int = DEFAULT_TTL_MINUTES,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        ctx: ServiceContext | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(ctx=ctx, clock=clock)
        self.store: RefreshTokenStore = store or RefreshTokenRepository()
        self.ttl_minutes = ttl_minutes
        self.token_bytes = token_bytes

    def create(self, user: User) -> tuple[int, str]:
        """
        Issue a fresh grant for ``user``.

        :returns: ``(token_id, plaintext)``.
        :raises NotFoundError: If the user row no longer exists.
        """
        plaintext = generate_secret(self.token_bytes)
        token_id = self.store.create(
            user_id=user.id,
            token_hash=generate_password_hash(plaintext),
            ttl_minutes=self.ttl_minutes,
            now=self.now(),
        )
        return token_id, plaintext

    def get_by_id(self, token_id: int) -> RefreshTokenRecord:
        """
        Fetch a grant, refusing stale ones.

        :raises NotFoundError: No row with that id.
        :raises ExpiredError: The row exists but its expiry has passed.
        """
        record = self.store.get_by_id(token_id)
        if record is None:
            log.warning("refresh token not found", extra={"token_id": token_id})
            raise NotFoundError("RefreshToken", token_id)
        if record.is_expired(self.now()):
            log.warning("refresh token expired", extra={"token_id": token_id})
            raise ExpiredError("refresh token expired")
        return record

    def delete(self, token_id: int) -> None:
        """
        Conditionally delete one grant.

        :raises NotFoundError: When no row was deleted (already consumed).
        """
        if not self.store.delete_by_id(token_id):
            raise NotFoundError("RefreshToken", token_id)

    def delete_by_user_id(self, user_id: int) -> int:
        """Invalidate every grant of ``user_id``. Zero rows is not an error."""
        return self.store.delete_by_user_id(user_id)

    def verify(self, plaintext: str, stored_hash: str) -> None:
        """
        Compare a presented secret against the stored hash.

        :raises InvalidTokenError: On mismatch (tamper or replay signal).
        """
        if not plaintext or not check_password_hash(stored_hash, plaintext):
            log.warning("refresh token hash mismatch")
            raise InvalidTokenError("refresh token has been modified or corrupted")

    def sweep_expired(self) -> int:
        """
        Delete every expired grant in its own transaction.

        Best effort: failures are logged and reported as ``0``.
        """
        try:
            with self.rw_uow():
                removed = self.store.delete_expired(self.now())
        except (SQLAlchemyError, ServiceError):
            log.exception("refresh token sweep failed")
            return 0
        if removed:
            log.info("swept %d expired refresh tokens", removed)
        return removed
