"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between
repositories, adapters and application services.

Every error carries an :class:`ErrorKind`. The kind set is closed and declared
statically; the transport boundary maps it to an HTTP status in
``catalog/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError


class ErrorKind(str, Enum):
    """Closed set of error categories understood by the transport boundary."""

    INTERNAL = "internal"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    INVALID = "invalid"
    EXPIRED = "expired"
    INVALID_TOKEN = "invalid_token"


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_username').

    Returns
    -------
    bool
        True if the IntegrityError message mentions the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    """Return ``True`` when ``exc`` was raised by a foreign-key constraint."""
    message = str(exc.orig).lower() if exc.orig else ""
    return "foreign key" in message or "fk_" in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - ``kind`` survives wrapping: re-raise with ``raise X(...) from exc``.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str = "internal error") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InternalError(ServiceError):
    """Unexpected failure: signing, hashing, driver or network errors."""

    kind = ErrorKind.INTERNAL


class InvalidError(ServiceError):
    """Structurally invalid input rejected before any side effect."""

    kind = ErrorKind.INVALID


class ExpiredError(ServiceError):
    """A token exists (or existed) but is past its expiry."""

    kind = ErrorKind.EXPIRED


class InvalidTokenError(ServiceError):
    """Signature mismatch, malformed token or secret-vs-hash mismatch."""

    kind = ErrorKind.INVALID_TOKEN


# --------------------------------------------------------------------------- #
# Entity-scoped errors
# --------------------------------------------------------------------------- #


@dataclass(eq=False)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int
    kind = ErrorKind.NOT_FOUND

    def __post_init__(self) -> None:
        ServiceError.__init__(self, f"{self.entity} not found: {self.key}")


@dataclass(eq=False)
class AlreadyExistsError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "Category").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str
    kind = ErrorKind.ALREADY_EXISTS

    def __post_init__(self) -> None:
        ServiceError.__init__(self, f"{self.entity} already exists: {self.detail}")


class DualWriteError(ServiceError):
    """
    Raised when at least one sink of a concurrent dual write failed.

    :param failures: Mapping of sink name to the error it produced.
    :type failures: dict[str, Exception]
    """

    kind = ErrorKind.INTERNAL

    def __init__(self, failures: dict[str, Exception]) -> None:
        self.failures = dict(failures)
        joined = "; ".join(f"{source}: {err}" for source, err in sorted(self.failures.items()))
        super().__init__(f"dual write failed ({joined})")

    @property
    def sources(self) -> list[str]:
        """Names of the failed sinks, sorted."""
        return sorted(self.failures)
