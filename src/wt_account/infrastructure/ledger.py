"""LedgerWriter: the only code path that changes users.balance_cents.

Every call applies the balance delta with one conditional UPDATE and appends
the matching ledger entry in the caller's transaction, so the two can never
be observed apart. The conditional UPDATE refuses to take a balance below
zero; 0 rows back means the user is missing or the funds are insufficient.

Transaction ownership: the CALLER wraps calls in ``unit_of_work(db)``.
"""

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_account.domain.models import LedgerEntry
from src.wt_common.datetime_utils import utc_now
from src.wt_common.enums import LedgerEntryType
from src.wt_common.errors import InsufficientBalanceError, InternalError, UserNotFoundError
from src.wt_common.id_generator import generate_id

_APPLY_DELTA_SQL = text("""
    UPDATE users
    SET balance_cents = balance_cents + :amount
    WHERE id = :user_id AND balance_cents + :amount >= 0
    RETURNING balance_cents
""")

_GET_BALANCE_SQL = text("SELECT balance_cents FROM users WHERE id = :user_id")

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (id, user_id, wager_id, entry_type, amount_cents,
         balance_after_cents, description, created_at)
    VALUES
        (:id, :user_id, :wager_id, :entry_type, :amount_cents,
         :balance_after_cents, :description, :created_at)
""").bindparams(bindparam("created_at", type_=DateTime(timezone=True)))


class LedgerWriter:
    async def post(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        entry_type: LedgerEntryType,
        amount_cents: int,
        description: str,
        wager_id: str | None = None,
    ) -> LedgerEntry:
        """Apply ``amount_cents`` to the user's balance and append the entry justifying it."""
        if amount_cents == 0:
            raise InternalError("Ledger entries must move a non-zero amount")

        row = (
            await db.execute(_APPLY_DELTA_SQL, {"user_id": user_id, "amount": amount_cents})
        ).fetchone()
        if row is None:
            current = (await db.execute(_GET_BALANCE_SQL, {"user_id": user_id})).fetchone()
            if current is None:
                raise UserNotFoundError(user_id)
            raise InsufficientBalanceError(-amount_cents, current.balance_cents)

        entry = LedgerEntry(
            id=generate_id(),
            user_id=user_id,
            entry_type=entry_type.value,
            amount_cents=amount_cents,
            balance_after_cents=row.balance_cents,
            description=description,
            wager_id=wager_id,
            created_at=utc_now(),
        )
        await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "id": entry.id,
                "user_id": entry.user_id,
                "wager_id": entry.wager_id,
                "entry_type": entry.entry_type,
                "amount_cents": entry.amount_cents,
                "balance_after_cents": entry.balance_after_cents,
                "description": entry.description,
                "created_at": entry.created_at,
            },
        )
        return entry
