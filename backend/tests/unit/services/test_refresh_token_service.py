"""Unit tests for RefreshTokenService wired to the in-memory store."""

from __future__ import annotations

import base64
import threading
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace

import pytest

from catalog.services._shared.errors import ExpiredError, InvalidTokenError, NotFoundError
from catalog.services._shared.ports import InMemoryRefreshTokenStore
from catalog.services.refresh_tokens.service import RefreshTokenService, generate_secret


class FakeClock:
    """Settable clock for deterministic expiry checks."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2030, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture()
def store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def service(store, clock) -> RefreshTokenService:
    return RefreshTokenService(store=store, ttl_minutes=1, clock=clock)


@pytest.fixture()
def user():
    return SimpleNamespace(id=1, username="alice")


def test_generate_secret_is_unpadded_base64_of_requested_size():
    secret = generate_secret(32)

    assert "=" not in secret
    padded = secret + "=" * (-len(secret) % 4)
    assert len(base64.b64decode(padded)) == 32
    assert generate_secret(32) != secret


def test_create_stores_hash_never_plaintext(service, store, user):
    token_id, plaintext = service.create(user)

    (row,) = store.all()
    assert row.id == token_id
    assert row.user_id == user.id
    assert row.token_hash != plaintext
    assert plaintext not in row.token_hash
    assert row.expire_duration == 1


def test_verify_accepts_plaintext_and_rejects_anything_else(service, user):
    token_id, plaintext = service.create(user)
    record = service.get_by_id(token_id)

    service.verify(plaintext, record.token_hash)
    with pytest.raises(InvalidTokenError):
        service.verify(plaintext + "x", record.token_hash)
    with pytest.raises(InvalidTokenError):
        service.verify("", record.token_hash)


def test_get_by_id_unknown_raises_not_found(service):
    with pytest.raises(NotFoundError):
        service.get_by_id(999)


def test_get_by_id_past_ttl_raises_expired_not_stale_record(service, clock, user):
    token_id, _ = service.create(user)
    assert service.get_by_id(token_id).id == token_id

    clock.advance(minutes=1, seconds=1)

    with pytest.raises(ExpiredError):
        service.get_by_id(token_id)


def test_zero_ttl_is_expired_on_next_lookup(store, clock, user):
    service = RefreshTokenService(store=store, ttl_minutes=0, clock=clock)
    token_id, _ = service.create(user)

    with pytest.raises(ExpiredError):
        service.get_by_id(token_id)


def test_delete_is_conditional(service, user):
    token_id, _ = service.create(user)

    service.delete(token_id)
    with pytest.raises(NotFoundError):
        service.delete(token_id)


def test_delete_by_user_id_removes_only_that_user(service, store, user):
    service.create(user)
    service.create(user)
    service.create(SimpleNamespace(id=2, username="bob"))

    assert service.delete_by_user_id(user.id) == 2
    assert service.delete_by_user_id(user.id) == 0
    assert [r.user_id for r in store.all()] == [2]


def test_concurrent_deletes_have_exactly_one_winner(service, user):
    token_id, _ = service.create(user)
    barrier = threading.Barrier(8)
    outcomes: list[str] = []
    lock = threading.Lock()

    def consume() -> None:
        barrier.wait()
        try:
            service.delete(token_id)
            result = "won"
        except NotFoundError:
            result = "lost"
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=consume) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("won") == 1
    assert outcomes.count("lost") == 7


def test_create_for_unknown_user_raises_not_found(clock):
    store = InMemoryRefreshTokenStore(known_user_ids={1})
    service = RefreshTokenService(store=store, clock=clock)

    with pytest.raises(NotFoundError):
        service.create(SimpleNamespace(id=2, username="ghost"))


def test_delete_expired_sweeps_only_stale_rows(store, clock, user):
    short = RefreshTokenService(store=store, ttl_minutes=1, clock=clock)
    long = RefreshTokenService(store=store, ttl_minutes=60, clock=clock)
    short.create(user)
    keep_id, _ = long.create(user)

    clock.advance(minutes=5)

    assert store.delete_expired(clock()) == 1
    assert [r.id for r in store.all()] == [keep_id]
