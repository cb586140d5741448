"""Admin application service: operator grading trigger and consistency audits."""
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_account.domain.invariants import verify_ledger_balance_invariant
from src.wt_wager.application.schemas import GradingSweepResult
from src.wt_wager.application.service import WagerApplicationService
from src.wt_wager.domain.invariants import verify_settlement_invariants


class AdminService:
    def __init__(self, wagers: WagerApplicationService | None = None) -> None:
        self._wagers = wagers or WagerApplicationService()

    async def run_grading_sweep(self, db: AsyncSession) -> GradingSweepResult:
        return await self._wagers.run_grading_sweep(db)

    async def verify_all_invariants(self, db: AsyncSession) -> dict[str, Any]:
        violations = await verify_ledger_balance_invariant(db)
        violations += await verify_settlement_invariants(db)
        return {"ok": not violations, "violations": violations}
