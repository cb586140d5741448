"""WagerRepository: concrete implementation of WagerRepositoryProtocol.

A wager row is inserted once at acceptance and updated exactly once more, by
the conditional PENDING → terminal UPDATE in mark_settled. That UPDATE is the
mutual-exclusion point for settlement: of two concurrent settlers only one
gets a row back.

asyncpg NULL parameter pattern: CAST(:param AS TEXT) IS NULL required for None values.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_common.datetime_utils import as_utc
from src.wt_odds.infrastructure.persistence import point_to_str
from src.wt_wager.domain.models import GradableWager, Wager

_TS = DateTime(timezone=True)

_WAGER_COLUMNS = (
    "id, user_id, line_id, stake_cents, accepted_price, accepted_point, "
    "status, placed_at, settled_at"
)

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_INSERT_WAGER_SQL = text("""
    INSERT INTO wagers
        (id, user_id, line_id, stake_cents, accepted_price, accepted_point,
         status, placed_at)
    VALUES
        (:id, :user_id, :line_id, :stake_cents, :accepted_price, :accepted_point,
         'PENDING', :placed_at)
""").bindparams(bindparam("placed_at", type_=_TS))

_GET_WAGER_SQL = text(f"SELECT {_WAGER_COLUMNS} FROM wagers WHERE id = :wager_id")

_MARK_SETTLED_SQL = text(f"""
    UPDATE wagers
    SET status = :status, settled_at = :settled_at
    WHERE id = :wager_id AND status = 'PENDING'
    RETURNING {_WAGER_COLUMNS}
""").bindparams(bindparam("settled_at", type_=_TS))

_LIST_WAGERS_SQL = text(f"""
    SELECT {_WAGER_COLUMNS}
    FROM wagers
    WHERE (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
      AND (CAST(:user_id AS TEXT) IS NULL OR user_id = CAST(:user_id AS TEXT))
      AND (CAST(:cursor_id AS TEXT) IS NULL OR id < CAST(:cursor_id AS TEXT))
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_GRADABLE_SQL = text("""
    SELECT w.id AS wager_id, m.market_type, l.selection, w.accepted_point,
           e.home_score, e.away_score
    FROM wagers w
    JOIN lines l ON l.id = w.line_id
    JOIN markets m ON m.id = l.market_id
    JOIN events e ON e.id = m.event_id
    WHERE w.status = 'PENDING'
      AND e.status = 'FINAL'
      AND e.home_score IS NOT NULL
      AND e.away_score IS NOT NULL
    ORDER BY w.id ASC
    LIMIT :limit
""")

# --- settlement audits ---

_DUPLICATE_SETTLEMENTS_SQL = text("""
    SELECT wager_id, COUNT(*) AS entries
    FROM ledger_entries
    WHERE wager_id IS NOT NULL
      AND entry_type IN ('WAGER_PAYOUT', 'WAGER_REFUND')
    GROUP BY wager_id
    HAVING COUNT(*) > 1
""")

_MISSING_SETTLEMENTS_SQL = text("""
    SELECT w.id, w.status
    FROM wagers w
    WHERE w.status IN ('WON', 'PUSH', 'VOID')
      AND NOT EXISTS (
          SELECT 1 FROM ledger_entries l
          WHERE l.wager_id = w.id
            AND l.entry_type = CASE w.status WHEN 'WON' THEN 'WAGER_PAYOUT'
                                             ELSE 'WAGER_REFUND' END
      )
""")

_UNEXPECTED_SETTLEMENTS_SQL = text("""
    SELECT l.wager_id, w.status, l.entry_type
    FROM ledger_entries l
    JOIN wagers w ON w.id = l.wager_id
    WHERE l.entry_type IN ('WAGER_PAYOUT', 'WAGER_REFUND')
      AND (w.status IN ('PENDING', 'LOST')
           OR (w.status = 'WON' AND l.entry_type <> 'WAGER_PAYOUT')
           OR (w.status IN ('PUSH', 'VOID') AND l.entry_type <> 'WAGER_REFUND'))
""")

_MISSING_STAKES_SQL = text("""
    SELECT w.id
    FROM wagers w
    WHERE NOT EXISTS (
        SELECT 1 FROM ledger_entries l
        WHERE l.wager_id = w.id
          AND l.entry_type = 'WAGER_STAKE'
          AND l.amount_cents = -w.stake_cents
    )
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _to_point(raw: object) -> Decimal | None:
    return None if raw is None else Decimal(str(raw))


def _row_to_wager(row: object) -> Wager:
    settled_at = row.settled_at  # type: ignore[attr-defined]
    return Wager(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        line_id=row.line_id,  # type: ignore[attr-defined]
        stake_cents=row.stake_cents,  # type: ignore[attr-defined]
        accepted_price=row.accepted_price,  # type: ignore[attr-defined]
        accepted_point=_to_point(row.accepted_point),  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        placed_at=as_utc(row.placed_at),  # type: ignore[attr-defined]
        settled_at=as_utc(settled_at) if settled_at is not None else None,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class WagerRepository:
    async def insert_wager(self, db: AsyncSession, wager: Wager) -> Wager:
        await db.execute(
            _INSERT_WAGER_SQL,
            {
                "id": wager.id,
                "user_id": wager.user_id,
                "line_id": wager.line_id,
                "stake_cents": wager.stake_cents,
                "accepted_price": wager.accepted_price,
                "accepted_point": point_to_str(wager.accepted_point),
                "placed_at": wager.placed_at,
            },
        )
        return wager

    async def get_wager(self, db: AsyncSession, wager_id: str) -> Wager | None:
        row = (await db.execute(_GET_WAGER_SQL, {"wager_id": wager_id})).fetchone()
        return _row_to_wager(row) if row else None

    async def mark_settled(
        self, db: AsyncSession, wager_id: str, status: str, settled_at: datetime
    ) -> Wager | None:
        row = (
            await db.execute(
                _MARK_SETTLED_SQL,
                {"wager_id": wager_id, "status": status, "settled_at": settled_at},
            )
        ).fetchone()
        return _row_to_wager(row) if row else None

    async def list_wagers(
        self,
        db: AsyncSession,
        status: str | None,
        user_id: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Wager]:
        result = await db.execute(
            _LIST_WAGERS_SQL,
            {"status": status, "user_id": user_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_wager(row) for row in result.fetchall()]

    async def list_gradable(self, db: AsyncSession, limit: int) -> list[GradableWager]:
        result = await db.execute(_LIST_GRADABLE_SQL, {"limit": limit})
        return [
            GradableWager(
                wager_id=row.wager_id,
                market_type=row.market_type,
                selection=row.selection,
                accepted_point=_to_point(row.accepted_point),
                home_score=int(row.home_score),
                away_score=int(row.away_score),
            )
            for row in result.fetchall()
        ]

    async def find_duplicate_settlements(self, db: AsyncSession) -> list[tuple[str, int]]:
        rows = (await db.execute(_DUPLICATE_SETTLEMENTS_SQL)).fetchall()
        return [(row.wager_id, int(row.entries)) for row in rows]

    async def find_missing_settlements(self, db: AsyncSession) -> list[tuple[str, str]]:
        rows = (await db.execute(_MISSING_SETTLEMENTS_SQL)).fetchall()
        return [(row.id, row.status) for row in rows]

    async def find_unexpected_settlements(
        self, db: AsyncSession
    ) -> list[tuple[str, str, str]]:
        rows = (await db.execute(_UNEXPECTED_SETTLEMENTS_SQL)).fetchall()
        return [(row.wager_id, row.status, row.entry_type) for row in rows]

    async def find_missing_stakes(self, db: AsyncSession) -> list[str]:
        rows = (await db.execute(_MISSING_STAKES_SQL)).fetchall()
        return [row.id for row in rows]
