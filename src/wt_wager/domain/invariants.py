"""Settlement bookkeeping checks.

- every wager has its stake-debit entry (amount == -stake)
- at most one payout/refund entry per wager
- WON has a WAGER_PAYOUT, PUSH/VOID a WAGER_REFUND, LOST and PENDING neither
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_wager.domain.repository import WagerRepositoryProtocol
from src.wt_wager.infrastructure.persistence import WagerRepository

logger = logging.getLogger(__name__)


async def verify_settlement_invariants(
    db: AsyncSession, repo: WagerRepositoryProtocol | None = None
) -> list[str]:
    """Returns list of violation strings; empty when all wagers are booked correctly."""
    repo = repo or WagerRepository()
    violations: list[str] = []

    for wager_id in await repo.find_missing_stakes(db):
        violations.append(f"Missing stake entry: wager={wager_id}")
    for wager_id, count in await repo.find_duplicate_settlements(db):
        violations.append(f"Duplicate settlement entries: wager={wager_id} count={count}")
    for wager_id, status in await repo.find_missing_settlements(db):
        violations.append(f"Missing settlement entry: wager={wager_id} status={status}")
    for wager_id, status, entry_type in await repo.find_unexpected_settlements(db):
        violations.append(
            f"Unexpected settlement entry: wager={wager_id} status={status} entry={entry_type}"
        )

    for msg in violations:
        logger.error(msg)
    return violations
