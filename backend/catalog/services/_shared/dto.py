from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Credentials:
    """
    Username/password pair presented on sign-up and sign-in.

    :param username: Login handle.
    :type username: str
    :param password: Raw password (never logged, never stored).
    :type password: str
    """

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access/refresh pair handed to clients.

    :param access_token: Signed access JWT.
    :type access_token: str
    :param refresh_token: Plaintext refresh secret (base64, unpadded).
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str

    def __repr__(self) -> str:
        return "TokenPair(access_token='***', refresh_token='***')"
