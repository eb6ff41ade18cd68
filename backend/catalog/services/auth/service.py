from __future__ import annotations

import logging

from catalog.models.user import User
from catalog.services._shared.base import BaseService, Clock, ServiceContext
from catalog.services._shared.dto import Credentials, TokenPair
from catalog.services._shared.errors import (
    ExpiredError,
    InternalError,
    InvalidError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
)
from catalog.services._shared.ports import AccessClaims, TokenSigner
from catalog.services.refresh_tokens.service import RefreshTokenService
from catalog.services.users.service import UserService
from catalog.services.users.validation import validate_username

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Authentication protocol: sign-up, sign-in and refresh with rotation.

    The protocol state lives in persisted users and refresh grants; every
    operation runs in one read-write unit of work, so the invalidation of
    old grants and the creation of the new one commit together.

    Sign-in policy: a successful sign-in invalidates *all* of the user's
    refresh grants (single active session).
    """

    def __init__(
        self,
        *,
        signer: TokenSigner,
        refresh_tokens: RefreshTokenService | None = None,
        users: UserService | None = None,
        ctx: ServiceContext | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param signer: Access-token signer.
        :param refresh_tokens: Refresh grant service (SQL-backed by default).
        :param users: Credential store (SQL-backed by default).
        :param clock: Time source shared with the default refresh service.
        """
        super().__init__(ctx=ctx, clock=clock)
        self.signer = signer
        self.refresh_tokens = refresh_tokens or RefreshTokenService(clock=self.clock)
        self.users = users or UserService()

    # ------------------------------------------------------------------ #
    # Sign-up / sign-in
    # ------------------------------------------------------------------ #

    def sign_up(self, credentials: Credentials) -> TokenPair:
        """
        Register a user and issue their first token pair.

        :raises InvalidError: Username breaks the naming rules.
        :raises AlreadyExistsError: Username already taken.
        """
        validate_username(credentials.username)
        with self.rw_uow():
            user = self.users.create(credentials)
            pair = self._create_token_pair(user)
        log.info("user signed up", extra={"user_id": user.id})
        return pair

    def sign_in(self, credentials: Credentials) -> TokenPair:
        """
        Verify credentials, drop every prior grant and issue a new pair.

        :raises NotFoundError: Unknown username.
        :raises InvalidTokenError: Password mismatch.
        """
        validate_username(credentials.username)
        with self.rw_uow():
            user = self.users.verify(credentials)
            revoked = self.refresh_tokens.delete_by_user_id(user.id)
            pair = self._create_token_pair(user)
        log.info("user signed in (revoked %d grants)", revoked, extra={"user_id": user.id})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def refresh(self, pair: TokenPair) -> TokenPair:
        """
        Exchange a token pair for a new one, consuming the refresh grant.

        Steps, strictly in order: parse the access token (signature checked,
        expiry tolerated), load the grant it references, verify the presented
        secret, delete the grant, issue a fresh pair. The delete is
        conditional; if another request consumed the grant first, this call
        fails without issuing anything.

        :raises InvalidError: Either token is empty.
        :raises InvalidTokenError: Bad signature, secret mismatch or replay.
        :raises ExpiredError: Grant expired or no longer present.
        """
        if not pair.access_token or not pair.refresh_token:
            raise InvalidError("access and refresh tokens are required")

        claims = self.signer.parse(pair.access_token, allow_expired=True)

        with self.rw_uow():
            try:
                record = self.refresh_tokens.get_by_id(claims.refresh_token_id)
            except NotFoundError as exc:
                raise ExpiredError("refresh token expired") from exc

            self.refresh_tokens.verify(pair.refresh_token, record.token_hash)

            user = self.users.users.get(record.user_id)
            if user is None or user.username != claims.username:
                log.warning(
                    "access token bound to a foreign refresh token",
                    extra={"token_id": record.id},
                )
                raise InvalidTokenError("refresh token has been modified or corrupted")

            try:
                self.refresh_tokens.delete(record.id)
            except NotFoundError as exc:
                log.warning("refresh token replay detected", extra={"token_id": record.id})
                raise InvalidTokenError("refresh token has already been used") from exc

            new_pair = self._create_token_pair(user)
        return new_pair

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _create_token_pair(self, user: User) -> TokenPair:
        """
        Create a refresh grant, then sign an access token bound to it.

        The access token embeds the grant id, so the grant always comes
        first. Any failure surfaces as one error and no partial pair.
        """
        try:
            token_id, plaintext = self.refresh_tokens.create(user)
            access = self.signer.create(
                AccessClaims(username=user.username, refresh_token_id=token_id)
            )
        except ServiceError:
            raise
        except Exception as exc:
            raise InternalError("failed to create token pair") from exc
        return TokenPair(access_token=access, refresh_token=plaintext)
