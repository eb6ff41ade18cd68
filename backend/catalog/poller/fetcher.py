"""Fetch the Pet Store feed."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import requests

from catalog.poller.dto import Pet
from catalog.services._shared.errors import InternalError

log = logging.getLogger(__name__)


@dataclass(slots=True)
class PetStoreFetcher:
    """One ``GET`` of ``source_url`` returning a JSON array of pets."""

    source_url: str
    timeout: float = 10.0
    session: requests.Session = field(default_factory=requests.Session)

    def fetch(self) -> list[Pet]:
        """
        :raises InternalError: Network, HTTP status or decode failure.
        """
        try:
            response = self.session.get(self.source_url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise InternalError("failed to fetch pets") from exc
        except ValueError as exc:
            raise InternalError("pet feed is not valid JSON") from exc

        if not isinstance(payload, list):
            raise InternalError("pet feed is not a JSON array")
        try:
            pets = [Pet.from_dict(item) for item in payload]
        except (KeyError, TypeError, ValueError) as exc:
            raise InternalError("pet feed contains a malformed record") from exc
        log.info("fetched %d pets", len(pets), extra={"unit": "petstore"})
        return pets
