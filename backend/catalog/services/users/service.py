from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from catalog.models.user import User
from catalog.repositories.user import UserRepository
from catalog.services._shared.base import BaseService, ServiceContext
from catalog.services._shared.dto import Credentials
from catalog.services._shared.errors import (
    AlreadyExistsError,
    InvalidError,
    InvalidTokenError,
    NotFoundError,
)

log = logging.getLogger(__name__)


class UserService(BaseService):
    """
    Credential store: persists usernames with hashed passwords.

    Like :class:`~catalog.services.refresh_tokens.service.RefreshTokenService`
    it runs inside the caller's unit of work and never commits.
    """

    def __init__(
        self, *, users: UserRepository | None = None, ctx: ServiceContext | None = None
    ) -> None:
        super().__init__(ctx=ctx)
        self.users = users or UserRepository()

    def create(self, credentials: Credentials) -> User:
        """
        Persist a new user; the model setter hashes the password.

        :raises AlreadyExistsError: Username already taken.
        :raises InvalidError: Empty password.
        """
        if self.users.exists_by_username(credentials.username):
            raise AlreadyExistsError("User", f"username {credentials.username!r} is taken")
        user = User(username=credentials.username)
        try:
            user.password = credentials.password
        except ValueError as exc:
            raise InvalidError(str(exc)) from exc
        try:
            with self.users.session.begin_nested():
                self.users.add(user)
        except IntegrityError as exc:
            # Lost a race against a concurrent sign-up
            raise AlreadyExistsError(
                "User", f"username {credentials.username!r} is taken"
            ) from exc
        return user

    def get_by_username(self, username: str) -> User:
        """:raises NotFoundError: No such user."""
        user = self.users.get_by_username(username)
        if user is None:
            raise NotFoundError("User", username)
        return user

    def verify(self, credentials: Credentials) -> User:
        """
        Check a username/password pair.

        :raises NotFoundError: Unknown username.
        :raises InvalidTokenError: Password mismatch.
        """
        user = self.users.get_by_username(credentials.username)
        if user is None:
            log.warning("sign-in for unknown user")
            raise NotFoundError("User", credentials.username)
        if not user.verify_password(credentials.password):
            log.warning("password mismatch", extra={"user_id": user.id})
            raise InvalidTokenError("invalid credentials")
        return user
