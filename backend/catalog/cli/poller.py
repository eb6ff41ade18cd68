"""Flask CLI commands running the Pet Store poller."""

from __future__ import annotations

import logging
import signal
import threading

import click
from flask import current_app
from flask.cli import with_appcontext

from catalog.poller import build_poller

LOGGER = logging.getLogger(__name__)


def _build():
    try:
        return build_poller(current_app)
    except RuntimeError as exc:
        raise click.ClickException(f"Poller unavailable: {exc}") from exc


@click.group("poller")
def poller_cli() -> None:
    """Pet Store ingestion commands."""


@poller_cli.command("once")
@with_appcontext
def once_command() -> None:
    """Run a single poll tick and print its summary."""
    poller = _build()
    try:
        report = poller.poll_once()
    finally:
        poller.ingestion.close()
    if report.fetch_failed:
        raise click.ClickException("Fetching the pet feed failed; see logs.")
    click.echo(f"fetched={report.fetched} saved={report.saved} failed={report.failed}")


@poller_cli.command("run")
@with_appcontext
def run_command() -> None:
    """Poll on a fixed interval until interrupted (SIGINT/SIGTERM)."""
    poller = _build()
    stop_event = threading.Event()

    def _stop(signum, _frame) -> None:
        LOGGER.info("received signal %s, stopping poller", signum)
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)
    poller.run(stop_event)
