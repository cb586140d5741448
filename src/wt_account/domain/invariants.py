"""Ledger-balance equality check.

For every user: users.balance_cents == Σ ledger_entries.amount_cents.
Every mutating operation must preserve it; tests call this after each step
and the periodic auditor runs it against production data.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_account.domain.repository import AccountRepositoryProtocol
from src.wt_account.infrastructure.persistence import AccountRepository

logger = logging.getLogger(__name__)


async def verify_ledger_balance_invariant(
    db: AsyncSession,
    user_id: str | None = None,
    repo: AccountRepositoryProtocol | None = None,
) -> list[str]:
    """Returns list of violation strings; empty when every (or the given) user balances."""
    repo = repo or AccountRepository()
    violations: list[str] = []
    for uid, balance, ledger_total in await repo.find_ledger_mismatches(db, user_id):
        msg = (
            f"Ledger-balance mismatch: user={uid} balance={balance} "
            f"!= ledger_total={ledger_total} (drift {balance - ledger_total})"
        )
        violations.append(msg)
        logger.error(msg)
    return violations
