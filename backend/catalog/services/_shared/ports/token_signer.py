from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from catalog.services._shared.errors import ExpiredError, InvalidTokenError


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """
    Claims carried by an access token.

    :param username: Subject of the token.
    :type username: str
    :param refresh_token_id: Refresh grant the access token is bound to.
    :type refresh_token_id: int
    :param expires_at: Absolute expiry; ``None`` before signing.
    :type expires_at: datetime | None
    """

    username: str
    refresh_token_id: int
    expires_at: datetime | None = None


class TokenSigner(Protocol):
    """Port for issuing and validating access tokens."""

    def create(self, claims: AccessClaims) -> str: ...

    def parse(self, token: str, *, allow_expired: bool = False) -> AccessClaims: ...

    def verify(self, token: str) -> None: ...


class StubTokenSigner(TokenSigner):
    """Deterministic signer used in unit tests; tokens are opaque handles."""

    def __init__(self, *, ttl: timedelta = timedelta(minutes=15), fail: bool = False) -> None:
        self._ttl = ttl
        self._seq = 0
        self._issued: dict[str, AccessClaims] = {}
        self.fail = fail

    def create(self, claims: AccessClaims) -> str:
        if self.fail:
            raise RuntimeError("signing backend unavailable")
        self._seq += 1
        token = f"access.{claims.username}.{claims.refresh_token_id}.{self._seq}"
        self._issued[token] = AccessClaims(
            username=claims.username,
            refresh_token_id=claims.refresh_token_id,
            expires_at=datetime.now(UTC) + self._ttl,
        )
        return token

    def parse(self, token: str, *, allow_expired: bool = False) -> AccessClaims:
        claims = self._issued.get(token)
        if claims is None:
            raise InvalidTokenError("access token is invalid")
        if not allow_expired and claims.expires_at and claims.expires_at <= datetime.now(UTC):
            raise ExpiredError("access token expired")
        return claims

    def verify(self, token: str) -> None:
        self.parse(token)
