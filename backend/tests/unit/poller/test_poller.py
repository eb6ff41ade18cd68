"""Unit tests for the polling loop."""

from __future__ import annotations

import threading

import pytest

from catalog.poller.dto import Pet, PetCategory
from catalog.poller.poller import PetStorePoller
from catalog.services._shared.errors import DualWriteError, InternalError


def _pet(pet_id: int) -> Pet:
    return Pet(id=pet_id, name=f"pet{pet_id}", category=PetCategory(id=1, name="Dogs"))


class StubFetcher:
    def __init__(self, pets=None, *, fail: bool = False) -> None:
        self.pets = pets or []
        self.fail = fail
        self.calls = 0

    def fetch(self):
        self.calls += 1
        if self.fail:
            raise InternalError("feed down")
        return list(self.pets)


class StubIngestion:
    def __init__(self, failing_ids=()) -> None:
        self.failing_ids = set(failing_ids)
        self.saved: list[int] = []
        self.closed = False

    def save(self, pet: Pet):
        if pet.id in self.failing_ids:
            raise DualWriteError({"external": InternalError("boom")})
        self.saved.append(pet.id)
        return []

    def close(self) -> None:
        self.closed = True


def test_failed_record_does_not_abort_the_batch():
    ingestion = StubIngestion(failing_ids={2})
    poller = PetStorePoller(
        fetcher=StubFetcher([_pet(1), _pet(2), _pet(3)]), ingestion=ingestion, interval=1
    )

    report = poller.poll_once()

    assert ingestion.saved == [1, 3]
    assert (report.fetched, report.saved, report.failed) == (3, 2, 1)


def test_fetch_failure_is_logged_not_raised(caplog):
    ingestion = StubIngestion()
    poller = PetStorePoller(fetcher=StubFetcher(fail=True), ingestion=ingestion, interval=1)

    report = poller.poll_once()

    assert report.fetch_failed is True
    assert ingestion.saved == []
    assert any("pet fetch failed" in r.getMessage() for r in caplog.records)


def test_run_stops_on_event_and_closes_ingestion():
    fetcher = StubFetcher([_pet(1)])
    ingestion = StubIngestion()
    poller = PetStorePoller(fetcher=fetcher, ingestion=ingestion, interval=0.01)
    stop = threading.Event()

    worker = threading.Thread(target=poller.run, args=(stop,))
    worker.start()
    for _ in range(500):
        if fetcher.calls >= 2:
            break
        stop.wait(0.01)
    stop.set()
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert ingestion.closed is True


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        PetStorePoller(fetcher=StubFetcher(), ingestion=StubIngestion(), interval=0)


class CrashingFetcher(StubFetcher):
    def fetch(self):
        self.calls += 1
        raise RuntimeError("decoder exploded")


class CrashingIngestion(StubIngestion):
    def save(self, pet: Pet):
        if pet.id in self.failing_ids:
            raise RuntimeError("cannot schedule new futures after shutdown")
        return super().save(pet)


def _run_until(poller: PetStorePoller, fetcher: StubFetcher, calls: int) -> None:
    stop = threading.Event()
    worker = threading.Thread(target=poller.run, args=(stop,))
    worker.start()
    for _ in range(500):
        if fetcher.calls >= calls:
            break
        stop.wait(0.01)
    stop.set()
    worker.join(timeout=5)
    assert not worker.is_alive()


def test_unexpected_save_error_is_counted_as_failure(caplog):
    ingestion = CrashingIngestion(failing_ids={1})
    poller = PetStorePoller(fetcher=StubFetcher([_pet(1), _pet(2)]), ingestion=ingestion, interval=1)

    report = poller.poll_once()

    assert ingestion.saved == [2]
    assert (report.saved, report.failed) == (1, 1)
    assert any("unexpected error saving pet 1" in r.getMessage() for r in caplog.records)


def test_unexpected_fetch_error_keeps_the_loop_running():
    fetcher = CrashingFetcher()
    poller = PetStorePoller(fetcher=fetcher, ingestion=StubIngestion(), interval=0.01)

    _run_until(poller, fetcher, calls=3)

    assert fetcher.calls >= 3


def test_crashing_tick_does_not_stop_the_loop(monkeypatch):
    fetcher = StubFetcher([_pet(1)])
    poller = PetStorePoller(fetcher=fetcher, ingestion=StubIngestion(), interval=0.01)
    original = poller.poll_once
    ticks = []

    def flaky_poll_once():
        ticks.append(1)
        if len(ticks) == 1:
            fetcher.calls += 1
            raise RuntimeError("tick blew up")
        return original()

    monkeypatch.setattr(poller, "poll_once", flaky_poll_once)

    _run_until(poller, fetcher, calls=2)

    assert len(ticks) >= 2
