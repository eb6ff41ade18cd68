"""Unit tests for the Redis-backed pet cache (fakeredis)."""

from __future__ import annotations

import pytest

from catalog.poller.cache import NAMESPACE, PetCache
from catalog.poller.dto import Pet, PetCategory
from catalog.services._shared.errors import AlreadyExistsError, InternalError, NotFoundError

PET = Pet(id=7, name="Rex", category=PetCategory(id=1, name="Dogs"))


@pytest.fixture()
def cache(redis_client) -> PetCache:
    return PetCache(redis_client, ttl_minutes=30)


def test_create_then_get_returns_typed_pet(cache):
    assert cache.create(PET) == 0

    assert cache.get_by_id(7) == PET


def test_entries_expire_with_configured_ttl(cache, redis_client):
    cache.create(PET)

    assert 0 < redis_client.ttl(f"{NAMESPACE}:7") <= 30 * 60


def test_create_twice_raises_already_exists(cache):
    cache.create(PET)

    with pytest.raises(AlreadyExistsError):
        cache.create(PET)


def test_missing_pet_raises_not_found(cache):
    with pytest.raises(NotFoundError):
        cache.get_by_id(404)


def test_corrupted_entry_raises_internal(cache, redis_client):
    redis_client.set(f"{NAMESPACE}:9", b"{not json")

    with pytest.raises(InternalError):
        cache.get_by_id(9)
