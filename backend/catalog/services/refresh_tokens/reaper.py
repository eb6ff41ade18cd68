"""Background sweeper removing expired refresh grants on a fixed interval."""

from __future__ import annotations

import logging
import threading

from flask import Flask

from catalog.services.refresh_tokens.service import RefreshTokenService

log = logging.getLogger(__name__)


class RefreshTokenReaper:
    """Run :meth:`RefreshTokenService.sweep_expired` every ``interval`` seconds."""

    def __init__(self, app: Flask, *, interval: float) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._app = app
        self._interval = float(interval)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread if not already running."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._worker_loop, name="refresh-token-reaper", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Signal the worker and wait for it to finish its current sweep."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self) -> int:
        with self._app.app_context():
            ttl = int(self._app.config.get("REFRESH_TOKEN_TTL_MINUTES", 60 * 24 * 7))
            return RefreshTokenService(ttl_minutes=ttl).sweep_expired()

    def _worker_loop(self) -> None:
        log.info("refresh token reaper started (interval=%ss)", self._interval)
        while not self._stop_event.wait(self._interval):
            try:
                self.run_once()
            except Exception:  # keep sweeping
                log.exception("refresh token sweep crashed")
        log.info("refresh token reaper stopped")


def init_app(app: Flask) -> RefreshTokenReaper | None:
    """Start the reaper when ``REFRESH_REAPER_ENABLED`` is set."""
    if not app.config.get("REFRESH_REAPER_ENABLED"):
        return None
    reaper = RefreshTokenReaper(
        app, interval=float(app.config.get("REFRESH_REAPER_INTERVAL_SECONDS", 300))
    )
    reaper.start()
    app.extensions["refresh_token_reaper"] = reaper
    return reaper
