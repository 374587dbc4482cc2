"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

import pytest

from tasktracker.models import User
from tasktracker.services._shared.deadline import Deadline
from tasktracker.services._shared.errors import OperationTimeoutError
from tasktracker.uow import SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN we create a user via repo inside the context and leave without exception
        THEN the transaction is committed and the row is visible afterwards.
        """
        initial = db.session.query(User).count()

        with SQLAlchemyUnitOfWork() as uow:
            u = UserFactory.build()  # build = no persist
            uow.users.add(u)

        after = db.session.query(User).count()
        assert after == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN the transaction is rolled back and no rows are persisted.
        """
        initial = db.session.query(User).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            u = UserFactory.build()
            uow.users.add(u)
            raise RuntimeError("boom")

        after = db.session.query(User).count()
        assert after == initial

    def test_writer_uow_rolls_back_when_deadline_expires_before_commit(self, app, db, session):
        """
        GIVEN a writer UoW whose deadline passes during the block
        WHEN the block finishes without error
        THEN the pre-commit check raises and nothing is persisted.
        """
        now = {"t": 0.0}
        deadline = Deadline.after(1, clock=lambda: now["t"])
        initial = db.session.query(User).count()

        with pytest.raises(OperationTimeoutError, match="commit"):
            with SQLAlchemyUnitOfWork(deadline=deadline) as uow:
                uow.users.add(UserFactory.build())
                now["t"] = 5.0

        assert db.session.query(User).count() == initial

    def test_repositories_share_the_session(self, app, db, session):
        with SQLAlchemyUnitOfWork() as uow:
            assert uow.users.session is uow.teams.session is uow.tasks.session
