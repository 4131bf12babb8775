"""Unit-of-work behaviour against the transactional test session."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from profilehub.models.user import User
from profilehub.services._shared.errors import TransientStoreError
from profilehub.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from profilehub.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, session):
        with RWuow() as uow:
            user = UserFactory.build()
            uow.session.add(user)
        user_id = user.id

        session.expire_all()
        assert session.get(User, user_id) is not None

    def test_rolls_back_on_error(self, session):
        with pytest.raises(LookupError), RWuow() as uow:
            user = UserFactory.build(email="rolled@example.com")
            uow.session.add(user)
            uow.session.flush()
            raise LookupError("boom")

        assert session.query(User).filter_by(email="rolled@example.com").count() == 0

    def test_operational_error_becomes_transient(self, session):
        orig = Exception("connection refused")
        with pytest.raises(TransientStoreError) as info, RWuow():
            raise OperationalError("SELECT 1", {}, orig)
        assert isinstance(info.value.__cause__, OperationalError)


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_allows_reads(self, session):
        with RWuow() as uow:
            uow.session.add(UserFactory.build())

        with ROuow() as uow:
            assert uow.session.query(User).count() >= 1

    def test_blocks_orm_flush_writes(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_guard_removed_on_exit(self, session):
        with ROuow():
            pass

        with RWuow() as uow:
            uow.session.add(UserFactory.build(email="after-ro@example.com"))

        assert session.query(User).filter_by(email="after-ro@example.com").count() == 1

    def test_repositories_share_session(self, session):
        with ROuow() as uow:
            assert uow.users.session is uow.session
