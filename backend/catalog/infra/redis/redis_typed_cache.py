# comments in English; reST docstrings
from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, TypeVar

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from catalog.services._shared.errors import AlreadyExistsError, InternalError, NotFoundError

T = TypeVar("T")


@dataclass(slots=True)
class RedisTypedCache(Generic[T]):
    """
    Key -> typed value cache backed by Redis strings holding JSON.

    Values go through ``encode``/``decode`` so callers only ever see ``T``;
    malformed payloads surface as :class:`InternalError` instead of leaking
    untyped dictionaries.

    :param r: A Redis client (already connected).
    :param namespace: Key prefix, e.g. ``"pet"``.
    :param ttl: Expiry applied on insert.
    :param encode: ``T`` -> JSON-compatible mapping.
    :param decode: JSON mapping -> ``T``.
    :param entity: Entity name used in error messages.
    """

    r: redis.Redis
    namespace: str
    ttl: timedelta
    encode: Callable[[T], Mapping[str, Any]]
    decode: Callable[[Mapping[str, Any]], T]
    entity: str = "Item"

    def _k(self, key: str | int) -> str:
        return f"{self.namespace}:{key}"

    def add(self, key: str | int, value: T) -> None:
        """
        Insert ``value`` only if ``key`` is absent (``SET NX EX``).

        :raises AlreadyExistsError: The key is already cached.
        :raises InternalError: Redis is unreachable.
        """
        ttl_seconds = max(1, int(self.ttl.total_seconds()))
        payload = json.dumps(dict(self.encode(value)))
        try:
            stored = self.r.set(self._k(key), payload, nx=True, ex=ttl_seconds)
        except RedisError as exc:
            raise InternalError(f"failed to add {self.entity} {key} to cache") from exc
        if not stored:
            raise AlreadyExistsError(self.entity, f"{key} is already cached")

    def get(self, key: str | int) -> T:
        """
        Return the cached value.

        :raises NotFoundError: Missing or expired key.
        :raises InternalError: Redis failure or undecodable payload.
        """
        try:
            raw = self.r.get(self._k(key))
        except RedisError as exc:
            raise InternalError(f"failed to read {self.entity} {key} from cache") from exc
        if raw is None:
            raise NotFoundError(self.entity, key)
        try:
            return self.decode(json.loads(raw))
        except (ValueError, KeyError, TypeError) as exc:
            raise InternalError(f"corrupted cache entry for {self.entity} {key}") from exc
