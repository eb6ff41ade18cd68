"""Local short-lived cache of ingested pets (the internal sink)."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

import redis  # type: ignore[import-untyped]

from catalog.infra.redis.redis_typed_cache import RedisTypedCache
from catalog.poller.dto import Pet

log = logging.getLogger(__name__)

NAMESPACE = "petstore:pet"


def _decode(raw: Mapping[str, Any]) -> Pet:
    return Pet.from_dict(raw)


class PetCache:
    """
    Pet cache keyed by upstream pet id.

    :param r: Connected Redis client.
    :param ttl_minutes: Lifetime of a cached pet.
    """

    def __init__(self, r: redis.Redis, *, ttl_minutes: int) -> None:
        self._cache: RedisTypedCache[Pet] = RedisTypedCache(
            r=r,
            namespace=NAMESPACE,
            ttl=timedelta(minutes=ttl_minutes),
            encode=Pet.to_dict,
            decode=_decode,
            entity="Pet",
        )

    def create(self, pet: Pet) -> int:
        """
        Cache ``pet`` for the configured TTL.

        The cache has no id of its own, so the returned id is always 0.

        :raises AlreadyExistsError: Already cached.
        :raises InternalError: Redis failure.
        """
        self._cache.add(pet.id, pet)
        log.info("pet %s added to cache", pet.id, extra={"unit": "petstore", "pet_id": pet.id})
        return 0

    def get_by_id(self, pet_id: int) -> Pet:
        """:raises NotFoundError: Not cached or expired."""
        pet = self._cache.get(pet_id)
        log.debug("pet %s found in cache", pet_id, extra={"unit": "petstore", "pet_id": pet_id})
        return pet
