"""Tests for unit_of_work commit/rollback and contention mapping."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from src.wt_common.database import _engine_kwargs, is_contention_error, unit_of_work
from src.wt_common.errors import AlreadySettledError, TransactionConflictError


class TestUnitOfWork:
    async def test_commits_on_success(self) -> None:
        db = AsyncMock()
        async with unit_of_work(db) as session:
            assert session is db
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

    async def test_rolls_back_on_app_error(self) -> None:
        db = AsyncMock()
        with pytest.raises(AlreadySettledError):
            async with unit_of_work(db):
                raise AlreadySettledError("w1", "WON")
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_timeout_becomes_conflict(self) -> None:
        db = AsyncMock()
        with pytest.raises(TransactionConflictError, match="timed out"):
            async with unit_of_work(db, timeout=0.01):
                await asyncio.sleep(1)
        db.rollback.assert_awaited_once()

    async def test_slow_commit_is_not_reported_as_conflict(self) -> None:
        db = AsyncMock()
        applied: list[bool] = []

        async def _slow_commit() -> None:
            applied.append(True)
            await asyncio.sleep(0.2)

        db.commit.side_effect = _slow_commit
        async with unit_of_work(db, timeout=0.05):
            pass
        assert applied == [True]
        db.rollback.assert_not_awaited()

    async def test_lock_contention_becomes_conflict(self) -> None:
        db = AsyncMock()
        with pytest.raises(TransactionConflictError):
            async with unit_of_work(db):
                raise OperationalError("UPDATE wagers", {}, Exception("database is locked"))
        db.rollback.assert_awaited_once()

    async def test_other_driver_errors_propagate(self) -> None:
        db = AsyncMock()
        with pytest.raises(IntegrityError):
            async with unit_of_work(db):
                raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        db.rollback.assert_awaited_once()


class TestIsContentionError:
    @pytest.mark.parametrize("sqlstate", ["40001", "40P01", "55P03", "57014"])
    def test_postgres_sqlstates(self, sqlstate: str) -> None:
        exc = OperationalError("stmt", {}, SimpleNamespace(sqlstate=sqlstate))
        assert is_contention_error(exc)

    def test_unrelated_error(self) -> None:
        exc = IntegrityError("stmt", {}, SimpleNamespace(sqlstate="23505"))
        assert not is_contention_error(exc)


class TestEngineKwargs:
    def test_sqlite_has_no_pool_sizing(self) -> None:
        assert _engine_kwargs("sqlite+aiosqlite:///x.db") == {}

    def test_postgres_pool_sizing(self) -> None:
        assert _engine_kwargs("postgresql+asyncpg://localhost/db")["pool_size"] == 20
