"""Extension singletons bound to the app in :func:`init_app`."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

# Constraint names must be deterministic for Alembic diffs (uq_users_email, pk_users).
NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
migrate = Migrate(render_as_batch=True)
limiter = Limiter(key_func=get_remote_address)

# Shared client for revocations; stays None without REDIS_URL.
redis_client: redis.Redis | None = None


def _connect_redis(url: str) -> redis.Redis:
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Redis at {url!r} is unreachable") from exc
    return client


def init_app(app: Flask) -> None:
    """
    Bind the database, migrations and limiter, then connect Redis if configured.

    The models package is imported here so ``flask db`` sees the ``users``
    table. A configured but unreachable Redis aborts startup with
    :class:`RuntimeError`.
    """
    global redis_client

    db.init_app(app)
    from profilehub import models  # noqa: F401

    migrate.init_app(app, db)
    limiter.init_app(app)

    url = app.config.get("REDIS_URL")
    redis_client = _connect_redis(url) if url else None
    if redis_client is None:
        app.extensions.pop("redis_client", None)
    else:
        app.extensions["redis_client"] = redis_client
