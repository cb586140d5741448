import asyncio
import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings
from src.wt_common.errors import TransactionConflictError

logger = logging.getLogger(__name__)

# serialization_failure, deadlock_detected, lock_not_available, query_canceled
_CONTENTION_SQLSTATES = frozenset({"40001", "40P01", "55P03", "57014"})


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


def _engine_kwargs(url: str) -> dict[str, object]:
    # SQLite (tests, local dev) uses its own pool class without size knobs
    if url.startswith("sqlite"):
        return {}
    return {"pool_size": 20, "max_overflow": 10}


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_kwargs(settings.DATABASE_URL),
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


def is_contention_error(exc: DBAPIError) -> bool:
    """True when the driver reports lock contention rather than a real failure."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _CONTENTION_SQLSTATES:
        return True
    return "database is locked" in str(orig)


@asynccontextmanager
async def unit_of_work(
    db: AsyncSession, timeout: float | None = None
) -> AsyncIterator[AsyncSession]:
    """Run the enclosed block as one all-or-nothing transaction.

    Commits on success and rolls back on any exception. The block body is
    bounded by TX_TIMEOUT_SECONDS; a timeout or driver contention surfaces as
    TransactionConflictError so the caller retries the whole operation.

    COMMIT runs outside the timeout: a commit the server applied is never
    reported as retryable.
    """
    limit = settings.TX_TIMEOUT_SECONDS if timeout is None else timeout
    try:
        async with asyncio.timeout(limit):
            yield db
        await db.commit()
    except TimeoutError as exc:
        await db.rollback()
        logger.warning("Transaction exceeded %.1fs, rolled back", limit)
        raise TransactionConflictError("Transaction timed out, retry the operation") from exc
    except DBAPIError as exc:
        await db.rollback()
        if is_contention_error(exc):
            logger.warning("Transaction contention, rolled back: %s", exc.orig)
            raise TransactionConflictError() from exc
        raise
    except BaseException:
        await db.rollback()
        raise
