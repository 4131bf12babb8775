"""Plumbing shared by the application services."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from profilehub.repositories.base import Pagination
from profilehub.services._shared.ports import PasswordHasher
from profilehub.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

MAX_PAGE_SIZE = 100


@dataclass(slots=True)
class ServiceContext:
    """
    Who is calling and under which request id.

    :param actor_id: Id of the authenticated user, ``None`` for anonymous calls.
    :param request_id: Correlation id copied into service log lines.
    """

    actor_id: str | None = None
    request_id: str | None = None


class BaseService:
    """
    Parent of :class:`AuthService` and :class:`ProfileService`.

    Services reach the store only through a Unit of Work created here; they
    never import ``db.session`` or Flask. The optional password hasher is
    passed down so ``UserRepository.create``/``save`` can hash credentials.
    """

    def __init__(
        self,
        *,
        password_hasher: PasswordHasher | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        self.hasher = password_hasher
        self.ctx = ctx or ServiceContext()

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """Scope that commits on success and rolls back on error."""
        return SQLAlchemyUnitOfWork(password_hasher=self.hasher)

    def ro_uow(self, *, enforce_db_readonly: bool = True) -> SQLAlchemyReadOnlyUnitOfWork:
        """Scope that refuses writes and always rolls back.

        :param enforce_db_readonly: Also issue ``SET TRANSACTION READ ONLY``
            on backends that understand it.
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            password_hasher=self.hasher,
            enforce_db_readonly=enforce_db_readonly,
        )

    def ensure_pagination(
        self, *, page: int, limit: int, sort: Iterable[str] | None = None
    ) -> Pagination:
        """Clamp ``page`` to >= 1 and ``limit`` to 1..MAX_PAGE_SIZE."""
        return Pagination(
            page=max(1, int(page)),
            limit=max(1, min(int(limit), MAX_PAGE_SIZE)),
            sort=list(sort or []),
        )
