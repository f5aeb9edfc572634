"""
Unit tests for the SQLAlchemy unit of work over a temporary SQLite database.
"""

import asyncio
import time

import pytest

from subtrack.application.interfaces.exceptions import (
    TransactionAlreadyActiveError,
    TransactionNotActiveError,
)
from subtrack.domain.entities.user import User


def _user(email: str = "uow@example.com") -> User:
    return User(email=email, password_hash="hash", name="UoW")


class TestSqlAlchemyUnitOfWork:
    """Transaction lifecycle."""

    @pytest.mark.asyncio
    async def test_commit_on_success(self, uow_factory):
        user = _user()

        async with uow_factory.create_unit_of_work() as uow:
            await uow.users.add(user)

        async with uow_factory.create_unit_of_work() as uow:
            assert await uow.users.get_by_id(user.id) is not None

    @pytest.mark.asyncio
    async def test_rollback_on_exception(self, uow_factory):
        user = _user()

        with pytest.raises(RuntimeError):
            async with uow_factory.create_unit_of_work() as uow:
                await uow.users.add(user)
                raise RuntimeError("boom")

        async with uow_factory.create_unit_of_work() as uow:
            assert await uow.users.get_by_id(user.id) is None

    @pytest.mark.asyncio
    async def test_rollback_on_timeout(self, uow_factory):
        user = _user()

        async def slow_body():
            async with uow_factory.create_unit_of_work() as uow:
                await uow.users.add(user)
                await uow.execute(lambda session: time.sleep(0.3))

        with pytest.raises(TimeoutError):
            await asyncio.wait_for(slow_body(), timeout=0.05)

        async with uow_factory.create_unit_of_work() as uow:
            assert await uow.users.get_by_id(user.id) is None

    @pytest.mark.asyncio
    async def test_explicit_begin_commit(self, uow_factory):
        uow = uow_factory.create_unit_of_work()

        assert not await uow.is_active()
        await uow.begin_transaction()
        assert await uow.is_active()
        await uow.users.add(_user())
        await uow.commit()
        assert not await uow.is_active()

    @pytest.mark.asyncio
    async def test_begin_twice(self, uow_factory):
        uow = uow_factory.create_unit_of_work()
        await uow.begin_transaction()

        with pytest.raises(TransactionAlreadyActiveError):
            await uow.begin_transaction()

        await uow.rollback()

    @pytest.mark.asyncio
    async def test_operations_require_transaction(self, uow_factory):
        uow = uow_factory.create_unit_of_work()

        with pytest.raises(TransactionNotActiveError):
            await uow.users.get_by_id("nobody")
        with pytest.raises(TransactionNotActiveError):
            await uow.commit()

    @pytest.mark.asyncio
    async def test_rollback_without_transaction_is_noop(self, uow_factory):
        await uow_factory.create_unit_of_work().rollback()
