"""Flask CLI commands for refresh-token maintenance."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from catalog.services.refresh_tokens.service import RefreshTokenService


@click.group("tokens")
def tokens_cli() -> None:
    """Refresh-token maintenance commands."""


@tokens_cli.command("sweep")
@with_appcontext
def sweep_command() -> None:
    """Delete every expired refresh token once."""
    ttl = int(current_app.config.get("REFRESH_TOKEN_TTL_MINUTES", 60 * 24 * 7))
    removed = RefreshTokenService(ttl_minutes=ttl).sweep_expired()
    click.echo(f"Removed {removed} expired refresh token(s).")
