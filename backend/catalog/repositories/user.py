"""User repository for credential persistence."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from catalog.models.user import User
from catalog.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER handles tokens, only DB-level user management.
    """

    model = User

    def _filterable_fields(self):
        return {"username": User.username}

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by exact username.

        :param username: Username to search (trimmed).
        :type username: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.username == username.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_username(self, username: str) -> bool:
        stmt = select(User.id).where(User.username == username.strip())
        return bool(self.session.execute(stmt).first())
