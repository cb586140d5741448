"""Shared test fixtures.

Store-backed tests run against a fresh file-backed SQLite database per test
(aiosqlite). A file rather than :memory: so that several sessions can hold
their own connections, which the concurrent-settlement tests need.
"""

from collections.abc import AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

# Every ORM module must be imported before create_all (ledger_entries → wagers → lines FKs)
import src.wt_account.infrastructure.db_models  # noqa: F401
import src.wt_odds.infrastructure.db_models  # noqa: F401
import src.wt_wager.infrastructure.db_models  # noqa: F401
from src.main import app
from src.wt_common.database import Base, get_db_session


@pytest.fixture
async def engine(tmp_path) -> AsyncIterator[AsyncEngine]:  # type: ignore[no-untyped-def]
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'wager_tracker.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client for the FastAPI app, wired to the per-test SQLite store."""

    async def _session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
