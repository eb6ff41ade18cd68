"""Typed records exchanged by the Pet Store poller."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

INTERNAL_SOURCE = "internal"
EXTERNAL_SOURCE = "external"


@dataclass(frozen=True, slots=True)
class PetCategory:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Pet:
    """
    One record of the Pet Store feed.

    :param id: Upstream pet id, also the cache key.
    :param name: Pet name, mirrored as a product name.
    :param category: Upstream category, mirrored as a catalog category.
    """

    id: int
    name: str
    category: PetCategory

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Pet:
        """
        Build a pet from its JSON shape.

        Missing ``name`` or ``category`` fields default to empty values like
        the upstream feed does; a missing ``id`` is an error.

        :raises KeyError: ``id`` absent.
        :raises TypeError: ``raw`` or ``category`` is not a mapping.
        :raises ValueError: Non-numeric ids.
        """
        if not isinstance(raw, Mapping):
            raise TypeError("pet record must be an object")
        category = raw.get("category") or {}
        if not isinstance(category, Mapping):
            raise TypeError("pet category must be an object")
        return cls(
            id=int(raw["id"]),
            name=str(raw.get("name") or ""),
            category=PetCategory(
                id=int(category.get("id") or 0),
                name=str(category.get("name") or ""),
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": {"id": self.category.id, "name": self.category.name},
        }


@dataclass(frozen=True, slots=True)
class SaveResult:
    """
    Outcome of one sink write.

    ``success`` is derived from ``error`` so the two can never disagree.

    :param id: Id returned by the sink (0 when the sink has none or failed).
    :param source: Sink tag, ``"internal"`` or ``"external"``.
    :param error: Failure raised by the sink, if any.
    """

    id: int
    source: str
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None
