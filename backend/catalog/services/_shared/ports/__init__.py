"""
catalog.services._shared.ports
==============================

*Ports* (hexagonal interfaces) that define the contracts for access-token
signing and refresh-grant persistence.

Modules
-------
- :mod:`token_signer`:
    Defines :class:`~.TokenSigner` and :class:`~.AccessClaims`.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore` and :class:`~.RefreshTokenRecord`.

Concrete adapters live under ``catalog.infra`` (JWT) and
``catalog.repositories`` (SQL). In-memory doubles sit next to each port.
"""

from __future__ import annotations

from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
)
from .token_signer import AccessClaims, StubTokenSigner, TokenSigner

__all__ = [
    "AccessClaims",
    "TokenSigner",
    "StubTokenSigner",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "InMemoryRefreshTokenStore",
]
