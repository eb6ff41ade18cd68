"""Fixed-interval Pet Store polling loop."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from catalog.poller.dto import Pet
from catalog.poller.fetcher import PetStoreFetcher
from catalog.poller.ingestion import PetIngestionService
from catalog.services._shared.errors import ServiceError

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PollReport:
    fetched: int = 0
    saved: int = 0
    failed: int = 0
    fetch_failed: bool = False


class PetStorePoller:
    """
    Fetch the feed and ingest every pet, tick after tick.

    A failed record is logged and skipped; a failed fetch aborts the tick and
    is logged. Nothing here raises to the caller: the next tick retries.
    """

    def __init__(
        self,
        *,
        fetcher: PetStoreFetcher,
        ingestion: PetIngestionService,
        interval: float,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.fetcher = fetcher
        self.ingestion = ingestion
        self.interval = float(interval)

    def _save(self, pet: Pet) -> bool:
        try:
            self.ingestion.save(pet)
        except ServiceError as exc:
            log.error(
                "failed to save pet %s: %s",
                pet.id,
                exc,
                extra={"unit": "petstore", "pet_id": pet.id},
            )
            return False
        except Exception:
            log.exception(
                "unexpected error saving pet %s", pet.id, extra={"unit": "petstore", "pet_id": pet.id}
            )
            return False
        return True

    def poll_once(self) -> PollReport:
        try:
            pets = self.fetcher.fetch()
        except ServiceError as exc:
            log.error("pet fetch failed: %s", exc, extra={"unit": "petstore"})
            return PollReport(fetch_failed=True)
        except Exception:
            log.exception("unexpected error fetching pets", extra={"unit": "petstore"})
            return PollReport(fetch_failed=True)

        saved = sum(1 for pet in pets if self._save(pet))
        report = PollReport(fetched=len(pets), saved=saved, failed=len(pets) - saved)
        log.info(
            "poll finished: fetched=%d saved=%d failed=%d",
            report.fetched,
            report.saved,
            report.failed,
            extra={"unit": "petstore"},
        )
        return report

    def run(self, stop_event: threading.Event) -> None:
        """Poll immediately, then every ``interval`` seconds until ``stop_event`` is set."""
        log.info("pet store poller started (interval=%ss)", self.interval)
        while not stop_event.is_set():
            try:
                self.poll_once()
            except Exception:
                log.exception("poll tick crashed", extra={"unit": "petstore"})
            if stop_event.wait(self.interval):
                break
        self.ingestion.close()
        log.info("pet store poller stopped")
