"""Pet Store ingestion poller.

Fetches the public Pet Store feed and mirrors each pet into a Redis cache and
into a remote catalog API.
"""

from __future__ import annotations

from flask import Flask

from catalog.core.extensions import get_redis
from catalog.poller.cache import PetCache
from catalog.poller.client import CatalogApiClient
from catalog.poller.dto import Pet, PetCategory, SaveResult
from catalog.poller.fetcher import PetStoreFetcher
from catalog.poller.ingestion import PetIngestionService
from catalog.poller.poller import PetStorePoller, PollReport


def build_poller(app: Flask) -> PetStorePoller:
    """Assemble a poller from ``PETSTORE_*`` and ``CATALOG_API_*`` settings.

    Requires ``REDIS_URL`` to be configured.
    """
    config = app.config
    timeout = float(config.get("PETSTORE_HTTP_TIMEOUT_SECONDS", 10))
    cache = PetCache(get_redis(app), ttl_minutes=int(config["PETSTORE_CACHE_TTL_MINUTES"]))
    client = CatalogApiClient(
        base_url=config["CATALOG_API_URL"],
        username=config["CATALOG_API_USERNAME"],
        password=config["CATALOG_API_PASSWORD"],
        timeout=timeout,
    )
    return PetStorePoller(
        fetcher=PetStoreFetcher(source_url=config["PETSTORE_SOURCE_URL"], timeout=timeout),
        ingestion=PetIngestionService(internal=cache, external=client),
        interval=float(config["PETSTORE_POLL_INTERVAL_SECONDS"]),
    )


__all__ = [
    "CatalogApiClient",
    "Pet",
    "PetCache",
    "PetCategory",
    "PetIngestionService",
    "PetStoreFetcher",
    "PetStorePoller",
    "PollReport",
    "SaveResult",
    "build_poller",
]
