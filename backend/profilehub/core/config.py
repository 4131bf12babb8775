"""Settings classes read from the environment, selected by ``APP_ENV``."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# development | testing | production
ENV_VAR: Final[str] = "APP_ENV"

DEV_JWT_SECRET: Final[str] = "CHANGE_ME_JWT"

# .env is optional
load_dotenv()

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhdw]?)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}
_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})


def env_bool(name: str, default: bool = False) -> bool:
    """``1``, ``true``, ``yes``, ``y`` and ``on`` (any case) are true; unset returns ``default``."""
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    """Parse an integer environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


def parse_duration(value: str | int | float | timedelta) -> timedelta:
    """Convert a compact duration such as ``"15m"`` or ``"7d"`` to a timedelta.

    Parameters
    ----------
    value:
        ``timedelta`` (returned as-is), a number of seconds, or a string made
        of digits with an optional unit suffix (``s``, ``m``, ``h``, ``d``,
        ``w``). A bare number is read as seconds.

    Returns
    -------
    datetime.timedelta
        Parsed, strictly positive duration.

    Raises
    ------
    ValueError
        If the value cannot be parsed or is not positive.
    """
    if isinstance(value, timedelta):
        delta = value
    elif isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    elif isinstance(value, int | float):
        delta = timedelta(seconds=value)
    else:
        match = _DURATION_RE.match(str(value))
        if match is None:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        delta = timedelta(**{_DURATION_UNITS[unit.lower()]: int(amount)})
    if delta.total_seconds() <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return delta


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret. Defaults to a development placeholder.
    JWT_SECRET: str
        Signing secret for access tokens.
    JWT_EXPIRES_IN: str
        Access token lifetime (``"15m"`` by default).
    JWT_REFRESH_SECRET: str | None
        Signing secret for refresh tokens. When unset the access secret is
        reused and a warning is logged at startup.
    JWT_REFRESH_EXPIRES_IN: str
        Refresh token lifetime (``"7d"`` by default).
    BCRYPT_ROUNDS: int
        bcrypt cost factor applied to every new password hash.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    DB_POOL_SIZE / DB_MAX_OVERFLOW / DB_POOL_TIMEOUT / DB_POOL_RECYCLE: int
        Connection pool bounds; ``DB_POOL_TIMEOUT`` is the acquire timeout in
        seconds. Ignored for SQLite.
    REDIS_URL: str | None
        When set, access-token revocations are stored in Redis instead of the
        process-local registry.
    UPLOAD_FOLDER: str
        Root directory for uploaded profile pictures.
    MAX_PICTURE_BYTES: int
        Upper bound for a single profile picture upload.
    DEFAULT_PROFILE_PICTURE: str
        File under ``UPLOAD_FOLDER/profile-pictures`` served to users without
        a picture.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    """

    API_BASE_PREFIX = "/api"
    APP_VERSION = os.getenv("APP_VERSION", "dev")

    # Secrets / tokens
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET = os.getenv("JWT_SECRET", DEV_JWT_SECRET)
    JWT_EXPIRES_IN = os.getenv("JWT_EXPIRES_IN", "15m")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET") or None
    JWT_REFRESH_EXPIRES_IN = os.getenv("JWT_REFRESH_EXPIRES_IN", "7d")
    JWT_ALGORITHM = "HS256"
    BCRYPT_ROUNDS = env_int("BCRYPT_ROUNDS", 10)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    DB_POOL_SIZE = env_int("DB_POOL_SIZE", 10)
    DB_MAX_OVERFLOW = env_int("DB_MAX_OVERFLOW", 0)
    DB_POOL_TIMEOUT = env_int("DB_POOL_TIMEOUT", 30)
    DB_POOL_RECYCLE = env_int("DB_POOL_RECYCLE", 1800)

    # Redis (optional revocation backend)
    REDIS_URL = os.getenv("REDIS_URL") or None

    # Uploads
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.abspath("./uploads"))
    MAX_PICTURE_BYTES = env_int("MAX_PICTURE_BYTES", 2 * 1024 * 1024)
    MAX_CONTENT_LENGTH = MAX_PICTURE_BYTES + 64 * 1024
    DEFAULT_PROFILE_PICTURE = os.getenv("DEFAULT_PROFILE_PICTURE", "default.png")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging, CORS & rate limits
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")
    CORS_MAX_AGE = 600
    RATELIMIT_ENABLED = env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    AUTH_SIGNIN_RATE_LIMIT = os.getenv("AUTH_SIGNIN_RATE_LIMIT", "10 per minute")

    # Deployment
    REQUIRE_STRONG_SECRETS = False
    USE_PROXYFIX = env_bool("USE_PROXYFIX", False)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Lowers the bcrypt cost so the suite stays fast.
    - Disables rate limiting and never talks to Redis.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    JWT_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    BCRYPT_ROUNDS = 4
    REDIS_URL = None
    RATELIMIT_ENABLED = False
    PROPAGATE_EXCEPTIONS = False


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    REQUIRE_STRONG_SECRETS = True
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def engine_options(config: Mapping[str, object]) -> dict[str, object]:
    """Build ``SQLALCHEMY_ENGINE_OPTIONS`` with pool bounds for server databases.

    SQLite uses a single-connection pool in tests, so pool sizing is skipped.
    """
    uri = str(config.get("SQLALCHEMY_DATABASE_URI", ""))
    if uri.startswith("sqlite"):
        return {}
    return {
        "pool_size": int(config.get("DB_POOL_SIZE", 10)),  # type: ignore[call-overload]
        "max_overflow": int(config.get("DB_MAX_OVERFLOW", 0)),  # type: ignore[call-overload]
        "pool_timeout": int(config.get("DB_POOL_TIMEOUT", 30)),  # type: ignore[call-overload]
        "pool_recycle": int(config.get("DB_POOL_RECYCLE", 1800)),  # type: ignore[call-overload]
        "pool_pre_ping": True,
    }
