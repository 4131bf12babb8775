"""Units of Work over the Flask-SQLAlchemy scoped session."""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.exc import InvalidRequestError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, SessionTransaction

from profilehub.core.extensions import db
from profilehub.repositories import UserRepository
from profilehub.services._shared.errors import TransientStoreError
from profilehub.services._shared.ports import PasswordHasher
from profilehub.uow.base import UnitOfWork

logger = logging.getLogger(__name__)

# Store unreachable, connection dropped, or no pooled connection within DB_POOL_TIMEOUT.
TRANSIENT_ERRORS = (OperationalError, PoolTimeoutError)

READ_ONLY_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})


def _raise_transient(exc: BaseException | None) -> None:
    if isinstance(exc, TRANSIENT_ERRORS):
        raise TransientStoreError() from exc


class SQLAlchemyRepositoryContainer:
    """Repositories bound to one session."""

    def __init__(self, *, session: Session, password_hasher: PasswordHasher | None = None) -> None:
        self.session = session
        self.users = UserRepository(session=session, hasher=password_hasher)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-write scope on ``db.session``.

    A clean exit commits; an exception (or a failed commit) rolls back.
    Transient store failures are re-raised as :class:`TransientStoreError`.
    """

    def __init__(self, *, password_hasher: PasswordHasher | None = None) -> None:
        super().__init__(session=db.session, password_hasher=password_hasher)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            _raise_transient(exc)
            return
        try:
            self.commit()
        except Exception as commit_exc:
            self.rollback()
            _raise_transient(commit_exc)
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        with suppress(SQLAlchemyError):
            self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read scope on ``db.session`` that refuses writes.

    On entry it begins its own transaction when the session is idle; if a
    transaction is already running (earlier work in the request, or a test
    SAVEPOINT) it joins it and leaves it alone on exit. In both cases a
    ``before_flush`` listener rejects any pending ORM change, and ``commit()``
    raises.

    :param enforce_db_readonly: When the scope owns its transaction, also send
        ``SET TRANSACTION READ ONLY`` to PostgreSQL/MySQL.
    """

    def __init__(
        self,
        *,
        password_hasher: PasswordHasher | None = None,
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session, password_hasher=password_hasher)
        self.enforce_db_readonly = enforce_db_readonly
        self._owned: SessionTransaction | None = None
        self._guard_on = False

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        self._owned = self._begin_if_idle()
        self._install_guard()
        if self._owned is not None and self.enforce_db_readonly:
            self._mark_read_only()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            owned, self._owned = self._owned, None
            if owned is not None:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
                owned.__exit__(exc_type, exc, tb)
        finally:
            self._remove_guard()
        _raise_transient(exc)

    def commit(self) -> None:
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()

    def _begin_if_idle(self) -> SessionTransaction | None:
        try:
            txn = self.session.begin()
        except InvalidRequestError:
            # already inside a transaction; join it
            return None
        txn.__enter__()
        return txn

    def _mark_read_only(self) -> None:
        try:
            if self.session.get_bind().dialect.name in READ_ONLY_DIALECTS:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except TRANSIENT_ERRORS as exc:
            self.__exit__(type(exc), exc, None)
        except SQLAlchemyError as exc:
            logger.warning("uow.readonly_unsupported", extra={"error": str(exc)})

    def _reject_writes(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: ORM flush blocked, session has pending changes.")

    def _listen_target(self) -> Session:
        # session events need the real Session behind the scoped_session proxy
        registry = getattr(self.session, "registry", None)
        return registry() if callable(registry) else self.session

    def _install_guard(self) -> None:
        if not self._guard_on:
            event.listen(self._listen_target(), "before_flush", self._reject_writes)
            self._guard_on = True

    def _remove_guard(self) -> None:
        if self._guard_on:
            with suppress(InvalidRequestError):
                event.remove(self._listen_target(), "before_flush", self._reject_writes)
            self._guard_on = False
