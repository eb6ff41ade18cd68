"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'


# Load .env in development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        Server-held key used by ``flask-jwt-extended`` to sign access tokens.
    JWT_ALGORITHM: str
        MAC algorithm for access tokens (fixed to ``HS512``).
    ACCESS_TOKEN_TTL_MINUTES: int
        Lifetime of a signed access token.
    REFRESH_TOKEN_TTL_MINUTES: int
        Lifetime of a persisted refresh token.
    REFRESH_TOKEN_BYTES: int
        Size of the random refresh-token secret before base64 encoding.
    REFRESH_REAPER_ENABLED: bool
        Start the background sweeper of expired refresh tokens.
    REFRESH_REAPER_INTERVAL_SECONDS: int
        Period of the sweeper.
    REQUEST_TIMEOUT_SECONDS: int
        Per-request deadline applied to database statements and workers.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    REDIS_URL: str | None
        Redis connection string (poller cache). Optional for the API.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_ALGORITHM = "HS512"
    JWT_TOKEN_LOCATION = ["headers"]

    # Token lifetimes
    ACCESS_TOKEN_TTL_MINUTES = env_int("ACCESS_TOKEN_TTL_MINUTES", 15)
    REFRESH_TOKEN_TTL_MINUTES = env_int("REFRESH_TOKEN_TTL_MINUTES", 60 * 24 * 7)
    REFRESH_TOKEN_BYTES = 32
    REFRESH_REAPER_ENABLED = env_bool("REFRESH_REAPER_ENABLED", False)
    REFRESH_REAPER_INTERVAL_SECONDS = env_int("REFRESH_REAPER_INTERVAL_SECONDS", 300)

    # Request deadline
    REQUEST_TIMEOUT_SECONDS = env_int("REQUEST_TIMEOUT_SECONDS", 5)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Redis
    REDIS_URL = os.getenv("REDIS_URL")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Pet Store poller
    PETSTORE_SOURCE_URL = os.getenv(
        "PETSTORE_SOURCE_URL", "https://petstore.swagger.io/v2/pet/findByStatus?status=available"
    )
    PETSTORE_POLL_INTERVAL_SECONDS = env_int("PETSTORE_POLL_INTERVAL_SECONDS", 60)
    PETSTORE_CACHE_TTL_MINUTES = env_int("PETSTORE_CACHE_TTL_MINUTES", 60 * 12)
    PETSTORE_HTTP_TIMEOUT_SECONDS = env_int("PETSTORE_HTTP_TIMEOUT_SECONDS", 10)
    CATALOG_API_URL = os.getenv("CATALOG_API_URL", "http://localhost:8000")
    CATALOG_API_USERNAME = os.getenv("CATALOG_API_USERNAME", "petstore")
    CATALOG_API_PASSWORD = os.getenv("CATALOG_API_PASSWORD", "CHANGE_ME")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and honors ``SQLALCHEMY_ECHO`` for verbose
    SQL logging when requested.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Never starts the refresh-token reaper thread.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    REFRESH_REAPER_ENABLED = False
    REDIS_URL = None
    PROPAGATE_EXCEPTIONS = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled. Every statement is bounded by
    ``REQUEST_TIMEOUT_SECONDS`` through PostgreSQL's ``statement_timeout``.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False
    REFRESH_REAPER_ENABLED = env_bool("REFRESH_REAPER_ENABLED", True)
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "connect_args": {
            "options": f"-c statement_timeout={BaseConfig.REQUEST_TIMEOUT_SECONDS * 1000}"
        },
    }


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
