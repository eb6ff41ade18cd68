"""Username rules shared by sign-up and sign-in."""

from __future__ import annotations

import re

from catalog.services._shared.errors import InvalidError

MIN_USERNAME_LEN = 4
MAX_USERNAME_LEN = 31

_LATIN_LETTER = re.compile(r"[A-Za-z]")
_ALLOWED = re.compile(r"[A-Za-z0-9_]+")


def validate_username(username: str) -> str:
    """
    Check a username against the account naming rules.

    - length between 4 and 31 characters;
    - first character is a Latin letter;
    - only Latin letters, digits and underscores.

    :returns: The username unchanged.
    :raises InvalidError: When any rule is violated.
    """
    size = len(username)
    if size < MIN_USERNAME_LEN or size > MAX_USERNAME_LEN:
        raise InvalidError(
            f"username length must be between {MIN_USERNAME_LEN} and "
            f"{MAX_USERNAME_LEN} (actual {size})"
        )
    if not _LATIN_LETTER.fullmatch(username[0]):
        raise InvalidError("username first character must be a latin letter")
    if not _ALLOWED.fullmatch(username):
        raise InvalidError("username must contain only latin letters, digits and underscores")
    return username
