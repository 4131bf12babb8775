"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases. Units of work
commit and roll back SAVEPOINTs nested inside the per-test transaction.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from profilehub.core.config import TestingConfig
from profilehub.core.extensions import db as _db
from profilehub.core.security import get_auth_components
from profilehub.factory import create_app
from tests.factories.user import DEFAULT_PASSWORD as PASSWORD


@pytest.fixture(scope="session")
def upload_root(tmp_path_factory):
    return tmp_path_factory.mktemp("uploads")


@pytest.fixture(scope="session")
def app(upload_root):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied, uploads
        redirected to a temporary folder and logging noise reduced.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)

    class Config(TestingConfig):
        UPLOAD_FOLDER = str(upload_root)
        LOG_LEVEL = "WARNING"

    app = create_app(Config, instance_relative_config=False)
    yield app
    get_auth_components(app).revocations.close()  # type: ignore[attr-defined]


def _enable_sqlite_savepoints(engine) -> None:
    """Let pysqlite emit BEGIN itself so SAVEPOINTs nest correctly."""
    if engine.url.get_backend_name() != "sqlite":
        return

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):  # pragma: no cover
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):  # pragma: no cover
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    The application context stays pushed for the whole session, so test-client
    requests reuse it and never tear down the transactional session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        _enable_sqlite_savepoints(_db.engine)
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session.

    Yields
    ------
    sqlalchemy.engine.Connection
        Connection reused by nested transactions in each test.
    """
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in a nested transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection; automatically rolled
        back after each test.

    Notes
    -----
    The session joins the connection in ``create_savepoint`` mode: every
    ``commit()`` issued by a Unit of Work releases a SAVEPOINT and every
    ``rollback()`` returns to one, while the outer transaction is rolled back
    when the test ends.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(
        bind=connection,
        join_transaction_mode="create_savepoint",
        autoflush=False,
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


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def auth(app):
    """Auth collaborators registered on the testing app."""
    return get_auth_components(app)


@pytest.fixture()
def client(app, session):
    return app.test_client()


@pytest.fixture()
def signed_up(client, faker):
    """Register a fresh user through the API and return the response data."""

    def _sign_up(*, name: str | None = None, email: str | None = None, password: str = PASSWORD):
        payload = {
            "name": name or faker.user_name()[:20].ljust(3, "x"),
            "email": email or faker.unique.email(),
            "password": password,
        }
        resp = client.post("/api/v1/auth/signup", json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["data"]

    return _sign_up


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield
