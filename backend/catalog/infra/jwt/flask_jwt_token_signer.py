from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

import jwt as pyjwt
from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException

from catalog.services._shared.errors import ExpiredError, InternalError, InvalidTokenError
from catalog.services._shared.ports import AccessClaims, TokenSigner

log = logging.getLogger(__name__)

REFRESH_TOKEN_ID_CLAIM = "refresh_token_id"


@dataclass(slots=True)
class JWTTokenSigner(TokenSigner):
    """
    Access-token signer backed by Flask-JWT-Extended.

    Tokens are MAC-signed with ``JWT_SECRET_KEY`` using ``JWT_ALGORITHM``
    (HS512). ``sub`` carries the username and ``refresh_token_id`` binds the
    token to one refresh grant.

    .. note::
       Requires an active Flask app context with JWT settings loaded.
    """

    ttl: timedelta | None = None

    def _ttl(self) -> timedelta:
        if self.ttl is not None:
            return self.ttl
        return timedelta(minutes=int(current_app.config.get("ACCESS_TOKEN_TTL_MINUTES", 15)))

    def create(self, claims: AccessClaims) -> str:
        try:
            return cast(
                str,
                create_access_token(
                    identity=claims.username,
                    additional_claims={REFRESH_TOKEN_ID_CLAIM: int(claims.refresh_token_id)},
                    expires_delta=self._ttl(),
                ),
            )
        except (pyjwt.PyJWTError, JWTExtendedException, TypeError, ValueError) as exc:
            raise InternalError("failed to sign access token") from exc

    def parse(self, token: str, *, allow_expired: bool = False) -> AccessClaims:
        """
        Validate signature and structure, returning the embedded claims.

        :param token: Encoded access JWT.
        :param allow_expired: Skip the ``exp`` check (signature still enforced).
        :raises ExpiredError: When the token is past its expiry.
        :raises InvalidTokenError: On bad signature, malformed token or claims.
        """
        if not token:
            raise InvalidTokenError("access token is empty")
        try:
            payload = cast(dict[str, Any], decode_token(token, allow_expired=allow_expired))
        except pyjwt.ExpiredSignatureError as exc:
            raise ExpiredError("access token expired") from exc
        except (pyjwt.InvalidTokenError, JWTExtendedException) as exc:
            raise InvalidTokenError("access token is invalid") from exc

        if payload.get("type") != "access":
            raise InvalidTokenError("access token is invalid")
        username = payload.get("sub")
        token_id = payload.get(REFRESH_TOKEN_ID_CLAIM)
        if not isinstance(username, str) or not isinstance(token_id, int):
            raise InvalidTokenError("access token is invalid")

        exp = payload.get("exp")
        return AccessClaims(
            username=username,
            refresh_token_id=token_id,
            expires_at=datetime.fromtimestamp(int(exp), tz=UTC) if exp is not None else None,
        )

    def verify(self, token: str) -> None:
        self.parse(token)
