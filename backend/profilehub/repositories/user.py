"""User repository: the credential store seen by the service layer."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, cast

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from profilehub.models.user import User
from profilehub.repositories.base import BaseRepository
from profilehub.services._shared.errors import (
    DuplicateEmailError,
    ValidationError,
    violates,
)
from profilehub.services._shared.ports import PasswordHasher


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Password hashing is an explicit step of :meth:`create` and :meth:`save`:
    callers pass the plaintext and the repository hashes it before the row is
    flushed. The repository never commits; the Unit of Work does.

    :param session: SQLAlchemy session bound by the Unit of Work.
    :param hasher: Password hasher used by :meth:`create` and :meth:`save`.
    """

    model = User

    def __init__(self, session: Session | None = None, hasher: PasswordHasher | None = None) -> None:
        super().__init__(session)
        self._hasher = hasher

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        return {
            "name": User.name,
            "email": User.email,
            "created_at": User.created_at,
        }

    def _default_sort(self) -> list[str]:
        return ["-created_at"]

    def _updatable_fields(self) -> set[str]:
        """Profile fields; credentials go through :meth:`save`."""
        return {"name", "email", "bio", "location", "profile_picture", "video_links"}

    # ---------------------------- Lookup helpers ----------------------------

    def get(self, entity_id: Any) -> User | None:
        """Fetch a user by id; malformed identifiers read as missing."""
        if not isinstance(entity_id, uuid.UUID):
            try:
                entity_id = uuid.UUID(str(entity_id))
            except (TypeError, ValueError):
                return None
        return super().get(entity_id)

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email, compared exactly as stored.

        :param email: Email address to search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email)
        result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email)
        return self.session.execute(stmt).first() is not None

    def list_with_video_links(self) -> list[User]:
        """Users that may own video links, newest first.

        Emptiness of the JSON list is checked by the caller: JSON length
        functions differ between PostgreSQL and SQLite.
        """
        stmt = (
            select(User)
            .where(User.video_links.is_not(None))
            .order_by(User.created_at.desc(), User.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())

    # ---------------------------- Writes ----------------------------

    def create(self, *, name: str, email: str, password: str) -> User:
        """Hash ``password`` and insert a new user.

        :raises ValidationError: If a model validator rejects a field.
        :raises DuplicateEmailError: If ``uq_users_email`` is violated.
        """
        try:
            user = User(name=name, email=email, password_hash=self._hash(password))
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        self.session.add(user)
        self._flush_mapped()
        return user

    def save(self, user: User, *, new_password: str | None = None) -> User:
        """Flush pending changes on ``user``.

        ``new_password`` is the explicit "password changed" signal: when given,
        it is hashed and stored before the flush.

        :raises ValidationError: If a model validator rejects a field.
        :raises DuplicateEmailError: If an email change collides.
        """
        if new_password is not None:
            try:
                user.password_hash = self._hash(new_password)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
        self.session.add(user)
        self._flush_mapped()
        return user

    def assign_updates(self, instance: User, fields: Mapping[str, Any], *, flush: bool = True) -> User:
        try:
            super().assign_updates(instance, fields, flush=False)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if flush:
            self._flush_mapped()
        return instance

    # ---------------------------- Internals ----------------------------

    def _hash(self, password: str) -> str:
        if self._hasher is None:
            raise RuntimeError("UserRepository requires a PasswordHasher for password writes.")
        return self._hasher.hash(password)

    def _flush_mapped(self) -> None:
        try:
            self.flush()
        except IntegrityError as exc:
            if violates(exc, "uq_users_email", column="users.email"):
                raise DuplicateEmailError() from exc
            raise
