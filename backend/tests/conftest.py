"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Service code that
commits through a unit of work only releases its SAVEPOINT; the outer
transaction is rolled back after every test.
"""

from __future__ import annotations

import os

import fakeredis
import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from catalog.core.extensions import db as _db  # Flask-SQLAlchemy instance
from catalog.factory import create_app  # application factory under test


class TestConfig:
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - Never starts the refresh-token reaper.
    - Avoids hitting external services (no Redis, no outbound HTTP).
    """

    TESTING = True
    DEBUG = False
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-entropy-for-hs512-signing-0123456789"
    JWT_ALGORITHM = "HS512"
    JWT_TOKEN_LOCATION = ["headers"]
    API_BASE_PREFIX = "/api"
    ACCESS_TOKEN_TTL_MINUTES = 15
    REFRESH_TOKEN_TTL_MINUTES = 60
    REFRESH_TOKEN_BYTES = 32
    REFRESH_REAPER_ENABLED = False
    REFRESH_REAPER_INTERVAL_SECONDS = 300
    REDIS_URL = None
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = "WARNING"
    CORS_ORIGINS = "*"
    PETSTORE_SOURCE_URL = "https://petstore.test/v2/pet/findByStatus?status=available"
    PETSTORE_POLL_INTERVAL_SECONDS = 60
    PETSTORE_CACHE_TTL_MINUTES = 30
    PETSTORE_HTTP_TIMEOUT_SECONDS = 2
    CATALOG_API_URL = "http://catalog.test"
    CATALOG_API_USERNAME = "petstore"
    CATALOG_API_PASSWORD = "petstore-pw"


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestConfig` applied and logging
        noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


def _enable_sqlite_savepoints(engine) -> None:
    """Let pysqlite honour SAVEPOINTs inside the per-test outer transaction.

    The driver never emits ``BEGIN`` on its own, so a SAVEPOINT would become
    the outermost transaction and releasing it would commit for real. Hand
    transaction control to SQLAlchemy instead.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session."""
    with app.app_context():
        # Connections opened before the listeners would keep driver transactions
        _db.engine.dispose()
        _enable_sqlite_savepoints(_db.engine)
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in an outer transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; automatically rolled
        back after each test.

    Notes
    -----
    ``join_transaction_mode="create_savepoint"`` makes every
    ``session.commit()``/``rollback()`` act on a SAVEPOINT, so the outer
    transaction opened here always survives until teardown.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(
        bind=connection,
        future=True,
        autoflush=False,
        join_transaction_mode="create_savepoint",
    )
    scoped = scoped_session(SessionFactory)

    # Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture()
def redis_client():
    """In-memory Redis double."""
    r = fakeredis.FakeRedis()
    yield r
    r.flushall()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper to the transactional session fixture.

    Pure unit tests that never touch the database do not request ``session``
    and therefore do not pay for it.
    """
    from tests.factories import SQLAlchemySession

    if "session" in request.fixturenames:
        SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
