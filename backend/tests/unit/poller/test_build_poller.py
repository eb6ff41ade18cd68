"""Tests for assembling the poller from application settings."""

from __future__ import annotations

import pytest

from catalog.core.extensions import REDIS_EXTENSION_KEY, get_redis
from catalog.poller import build_poller


@pytest.fixture()
def app_with_redis(app, redis_client):
    app.extensions[REDIS_EXTENSION_KEY] = redis_client
    yield app
    app.extensions.pop(REDIS_EXTENSION_KEY, None)


def test_get_redis_requires_url(app):
    with app.app_context(), pytest.raises(RuntimeError):
        get_redis()


def test_build_poller_uses_configured_settings(app_with_redis, redis_client):
    poller = build_poller(app_with_redis)
    try:
        assert poller.interval == app_with_redis.config["PETSTORE_POLL_INTERVAL_SECONDS"]
        assert poller.fetcher.source_url == app_with_redis.config["PETSTORE_SOURCE_URL"]
        assert poller.ingestion.external.base_url == "http://catalog.test"
        assert get_redis(app_with_redis) is redis_client
    finally:
        poller.ingestion.close()
