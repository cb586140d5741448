"""AccountRepository: concrete implementation of AccountRepositoryProtocol.

Reads of users and ledger entries plus user creation. Balance changes are NOT
made here; they go through LedgerWriter so each one is paired with its entry.

asyncpg NULL parameter pattern: CAST(:param AS TEXT) IS NULL required for None values.
"""

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_account.domain.models import LedgerEntry, User
from src.wt_common.datetime_utils import as_utc

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_INSERT_USER_SQL = text("""
    INSERT INTO users (id, display_name, balance_cents, created_at)
    VALUES (:id, :display_name, 0, :created_at)
""").bindparams(bindparam("created_at", type_=DateTime(timezone=True)))

_GET_USER_SQL = text("""
    SELECT id, display_name, balance_cents, created_at
    FROM users
    WHERE id = :user_id
""")

_LIST_USERS_SQL = text("""
    SELECT id, display_name, balance_cents, created_at
    FROM users
    ORDER BY created_at DESC, id DESC
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, user_id, wager_id, entry_type, amount_cents,
           balance_after_cents, description, created_at
    FROM ledger_entries
    WHERE (CAST(:user_id AS TEXT) IS NULL OR user_id = CAST(:user_id AS TEXT))
      AND (CAST(:entry_type AS TEXT) IS NULL OR entry_type = CAST(:entry_type AS TEXT))
      AND (CAST(:wager_id AS TEXT) IS NULL OR wager_id = CAST(:wager_id AS TEXT))
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < CAST(:cursor_id AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")

_LEDGER_MISMATCH_SQL = text("""
    SELECT u.id AS user_id,
           u.balance_cents AS balance_cents,
           COALESCE(SUM(l.amount_cents), 0) AS ledger_total
    FROM users u
    LEFT JOIN ledger_entries l ON l.user_id = u.id
    WHERE (CAST(:user_id AS TEXT) IS NULL OR u.id = CAST(:user_id AS TEXT))
    GROUP BY u.id, u.balance_cents
    HAVING u.balance_cents <> COALESCE(SUM(l.amount_cents), 0)
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_user(row: object) -> User:
    return User(
        id=row.id,  # type: ignore[attr-defined]
        display_name=row.display_name,  # type: ignore[attr-defined]
        balance_cents=row.balance_cents,  # type: ignore[attr-defined]
        created_at=as_utc(row.created_at),  # type: ignore[attr-defined]
    )


def row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        wager_id=row.wager_id,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount_cents=row.amount_cents,  # type: ignore[attr-defined]
        balance_after_cents=row.balance_after_cents,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=as_utc(row.created_at),  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AccountRepository:
    async def insert_user(self, db: AsyncSession, user: User) -> User:
        await db.execute(
            _INSERT_USER_SQL,
            {"id": user.id, "display_name": user.display_name, "created_at": user.created_at},
        )
        return user

    async def get_user(self, db: AsyncSession, user_id: str) -> User | None:
        result = await db.execute(_GET_USER_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_user(row) if row else None

    async def list_users(self, db: AsyncSession) -> list[User]:
        result = await db.execute(_LIST_USERS_SQL)
        return [_row_to_user(row) for row in result.fetchall()]

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str | None,
        entry_type: str | None,
        wager_id: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "user_id": user_id,
                "entry_type": entry_type,
                "wager_id": wager_id,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [row_to_ledger(row) for row in result.fetchall()]

    async def find_ledger_mismatches(
        self, db: AsyncSession, user_id: str | None = None
    ) -> list[tuple[str, int, int]]:
        """(user_id, balance, Σ ledger) for every user whose balance disagrees with the ledger."""
        result = await db.execute(_LEDGER_MISMATCH_SQL, {"user_id": user_id})
        return [
            (row.user_id, int(row.balance_cents), int(row.ledger_total))
            for row in result.fetchall()
        ]
