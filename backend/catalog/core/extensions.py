"""Global Flask extension instances and initialization helpers.

Redis is only needed by the ingestion poller, so the client is created lazily
on first use and cached per application in ``app.extensions``.
"""

from __future__ import annotations

import sqlite3

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData, event
from sqlalchemy.engine import Engine

REDIS_EXTENSION_KEY = "redis_client"

# Constraint names are stable so Alembic diffs and IntegrityError matching work
metadata = MetaData(
    naming_convention={
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless the pragma is set per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_app(app: Flask) -> None:
    """Bind SQLAlchemy, migrations and JWT to ``app``.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`catalog.models` package so Alembic sees the full metadata.
    """
    db.init_app(app)

    from catalog import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    app.extensions.pop(REDIS_EXTENSION_KEY, None)


def get_redis(app: Flask | None = None) -> redis.Redis:
    """Return the application's Redis client, connecting on first use.

    :raises RuntimeError: ``REDIS_URL`` is unset or the server is unreachable.
    """
    app = app or current_app._get_current_object()  # type: ignore[attr-defined]
    client = app.extensions.get(REDIS_EXTENSION_KEY)
    if client is not None:
        return client

    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        raise RuntimeError("REDIS_URL is not configured")
    client = redis.Redis.from_url(redis_url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions[REDIS_EXTENSION_KEY] = client
    return client
