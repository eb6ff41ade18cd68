"""
Unit tests for SQLAlchemyUnitOfWork (writer), using factories.
"""

from __future__ import annotations

import pytest

from catalog.models import Category
from catalog.uow import SQLAlchemyUnitOfWork
from tests.factories.catalog import CategoryFactory


class TestSQLAlchemyUnitOfWorkWriter:
    def test_writer_uow_commits_on_success(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN we create a category via repo inside the context and leave without exception
        THEN the transaction is committed and the row is visible afterwards.
        """
        initial = db.session.query(Category).count()

        with SQLAlchemyUnitOfWork() as uow:
            uow.categories.add(CategoryFactory.build())

        after = db.session.query(Category).count()
        assert after == initial + 1

    def test_writer_uow_rolls_back_on_exception(self, app, db, session):
        """
        GIVEN a writer UoW
        WHEN an exception is raised inside the context
        THEN the transaction is rolled back and no rows are persisted.
        """
        initial = db.session.query(Category).count()

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.categories.add(CategoryFactory.build())
            raise RuntimeError("boom")

        after = db.session.query(Category).count()
        assert after == initial

    def test_repositories_share_the_uow_session(self, app, db, session):
        with SQLAlchemyUnitOfWork() as uow:
            assert uow.users.session is uow.refresh_tokens.session
            assert uow.categories.session is uow.products.session
