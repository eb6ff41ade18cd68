"""Smoke tests for the maintenance CLI commands."""

from __future__ import annotations

from tests.factories.refresh_token import RefreshTokenFactory


def test_tokens_sweep_reports_removed_count(app, session) -> None:
    RefreshTokenFactory(expire_duration=-10)
    session.commit()

    result = app.test_cli_runner().invoke(args=["tokens", "sweep"])

    assert result.exit_code == 0
    assert "Removed 1 expired refresh token(s)." in result.output


def test_tokens_sweep_with_nothing_to_do(app, session) -> None:
    result = app.test_cli_runner().invoke(args=["tokens", "sweep"])

    assert result.exit_code == 0
    assert "Removed 0 expired refresh token(s)." in result.output


def test_poller_once_without_redis_fails_cleanly(app) -> None:
    result = app.test_cli_runner().invoke(args=["poller", "once"])

    assert result.exit_code == 1
    assert "REDIS_URL is not configured" in result.output
