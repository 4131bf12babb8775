"""Unit of Work contract seen by the services."""

from __future__ import annotations

from abc import ABC, abstractmethod

from profilehub.repositories.user import UserRepository


class UnitOfWork(ABC):
    """
    One transactional scope over the user store.

    ``users`` is bound to the scope's session; leaving the ``with`` block
    decides the outcome (commit for read-write scopes, rollback for read-only
    ones and on error).
    """

    users: UserRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork:
        raise NotImplementedError

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None:
        raise NotImplementedError

    @abstractmethod
    def commit(self) -> None:
        """Make the scope's writes durable."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard the scope's writes."""
