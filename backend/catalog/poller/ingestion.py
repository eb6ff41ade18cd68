"""Concurrent dual write of one pet into the cache and the remote catalog."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Protocol

from catalog.poller.dto import EXTERNAL_SOURCE, INTERNAL_SOURCE, Pet, SaveResult
from catalog.services._shared.errors import DualWriteError, NotFoundError

log = logging.getLogger(__name__)


class PetSink(Protocol):
    def create(self, pet: Pet) -> int: ...


class PetLookup(PetSink, Protocol):
    def get_by_id(self, pet_id: int) -> Pet: ...


class PetIngestionService:
    """
    Persist a pet exactly once into two independent sinks.

    A pet already present in the internal (cache) sink is skipped. Otherwise
    both sinks are written in parallel and joined; if either failed the call
    raises :class:`DualWriteError` naming every failed source.

    :param internal: Cache sink; also answers the existence check.
    :param external: Remote catalog sink.
    :param executor: Pool running the two writes. Owned when not given.
    """

    def __init__(
        self,
        *,
        internal: PetLookup,
        external: PetSink,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self.internal = internal
        self.external = external
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="pet-ingestion"
        )

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def _is_known(self, pet: Pet) -> bool:
        try:
            self.internal.get_by_id(pet.id)
        except NotFoundError:
            return False
        return True

    def _write(self, source: str, create: Callable[[Pet], int], pet: Pet) -> SaveResult:
        try:
            return SaveResult(id=create(pet), source=source)
        except Exception as exc:  # reported through SaveResult
            return SaveResult(id=0, source=source, error=exc)

    def save(self, pet: Pet) -> list[SaveResult]:
        """
        Write ``pet`` to both sinks unless it is already cached.

        :returns: Per-sink results (empty when the pet was already known).
        :raises DualWriteError: At least one sink failed.
        """
        if self._is_known(pet):
            log.debug("pet %s already ingested", pet.id, extra={"unit": "petstore", "pet_id": pet.id})
            return []

        futures: list[Future[SaveResult]] = [
            self._executor.submit(self._write, INTERNAL_SOURCE, self.internal.create, pet),
            self._executor.submit(self._write, EXTERNAL_SOURCE, self.external.create, pet),
        ]
        results = [future.result() for future in futures]

        failures = {r.source: r.error for r in results if not r.success and r.error is not None}
        if failures:
            raise DualWriteError(failures)
        return results
