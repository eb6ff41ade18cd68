"""Unit tests for RefreshTokenRepository (the SQL refresh store)."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from catalog.repositories.refresh_token import RefreshTokenRepository, to_unix
from catalog.services._shared.errors import NotFoundError
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def repo(session):
    return RefreshTokenRepository()


def test_create_and_get_by_id(repo):
    user = UserFactory()

    token_id = repo.create(user_id=user.id, token_hash="h", ttl_minutes=10, now=NOW)
    record = repo.get_by_id(token_id)

    assert record is not None
    assert record.user_id == user.id
    assert record.token_hash == "h"
    assert record.expire_at == to_unix(NOW + timedelta(minutes=10))
    assert record.expire_duration == 10


def test_create_for_missing_user_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        repo.create(user_id=424242, token_hash="h", ttl_minutes=10, now=NOW)


def test_get_by_id_missing_returns_none(repo):
    assert repo.get_by_id(424242) is None


def test_delete_by_id_is_conditional(repo):
    grant = RefreshTokenFactory()

    assert repo.delete_by_id(grant.id) is True
    assert repo.delete_by_id(grant.id) is False


def test_delete_by_user_id(repo):
    user = UserFactory()
    RefreshTokenFactory(user=user)
    RefreshTokenFactory(user=user)
    other = RefreshTokenFactory()

    assert repo.delete_by_user_id(user.id) == 2
    assert repo.get_by_id(other.id) is not None


def test_delete_expired_uses_inclusive_bound(repo):
    user = UserFactory()
    at_bound = RefreshTokenFactory(user=user, expire_at=to_unix(NOW))
    later = RefreshTokenFactory(user=user, expire_at=to_unix(NOW) + 1)

    assert repo.delete_expired(NOW) == 1
    assert repo.get_by_id(at_bound.id) is None
    assert repo.get_by_id(later.id) is not None


def test_rows_disappear_with_their_user(repo, session):
    grant = RefreshTokenFactory()
    grant_id = grant.id

    session.delete(grant.user)
    session.flush()

    assert repo.get_by_id(grant_id) is None
