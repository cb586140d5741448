"""WagerApplicationService: wager acceptance, settlement and grading.

place_wager and settle_wager are the only ways into the wagers table, and
together with the account deposit/withdraw paths the only callers of
LedgerWriter. Each runs as one unit_of_work: the wager row, the ledger entry
and the balance change commit together or not at all.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.wt_account.application.schemas import LedgerEntryItem, cursor_decode, cursor_encode
from src.wt_account.domain.repository import AccountRepositoryProtocol, LedgerWriterProtocol
from src.wt_account.infrastructure.ledger import LedgerWriter
from src.wt_account.infrastructure.persistence import AccountRepository
from src.wt_common.database import unit_of_work
from src.wt_common.datetime_utils import utc_now
from src.wt_common.enums import LedgerEntryType, WagerStatus
from src.wt_common.errors import (
    AlreadySettledError,
    InsufficientBalanceError,
    LineNotFoundError,
    TransactionConflictError,
    UserNotFoundError,
    WagerNotFoundError,
)
from src.wt_common.id_generator import generate_id
from src.wt_odds.domain.repository import OddsRepositoryProtocol
from src.wt_odds.infrastructure.persistence import OddsRepository
from src.wt_wager.application.schemas import (
    GradingSweepResult,
    PlaceWagerResponse,
    SettleWagerResponse,
    WagerListResponse,
    WagerResponse,
)
from src.wt_wager.domain.acceptance import ensure_betting_open
from src.wt_wager.domain.commands import PlaceWagerCommand, SettleWagerCommand
from src.wt_wager.domain.grading import grade_selection
from src.wt_wager.domain.models import Wager
from src.wt_wager.domain.repository import WagerRepositoryProtocol
from src.wt_wager.domain.state_machine import transition
from src.wt_wager.infrastructure.persistence import WagerRepository

logger = logging.getLogger(__name__)

MAX_WAGER_PAGE = 100
GRADING_BATCH_SIZE = 500


class WagerApplicationService:
    def __init__(
        self,
        repo: WagerRepositoryProtocol | None = None,
        odds_repo: OddsRepositoryProtocol | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
        ledger: LedgerWriterProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
        close_buffer_minutes: int | None = None,
    ) -> None:
        self._repo: WagerRepositoryProtocol = repo or WagerRepository()
        self._odds: OddsRepositoryProtocol = odds_repo or OddsRepository()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._ledger: LedgerWriterProtocol = ledger or LedgerWriter()
        self._clock = clock
        self._close_buffer_minutes = close_buffer_minutes

    @property
    def close_buffer_minutes(self) -> int:
        if self._close_buffer_minutes is not None:
            return self._close_buffer_minutes
        return settings.BETTING_CLOSE_BUFFER_MINUTES

    # ------------------------------------------------------------------
    # Acceptance
    # ------------------------------------------------------------------

    async def place_wager(self, db: AsyncSession, cmd: PlaceWagerCommand) -> PlaceWagerResponse:
        """Accept a wager at the line's current terms and debit the stake.

        Checks run in order: line exists, event open for betting, user exists,
        balance covers the stake. Any failure leaves no trace.
        """
        async with unit_of_work(db):
            ctx = await self._odds.get_line_context(db, cmd.line_id)
            if ctx is None:
                raise LineNotFoundError(cmd.line_id)
            now = self._clock()
            ensure_betting_open(ctx, now, self.close_buffer_minutes)

            user = await self._accounts.get_user(db, cmd.user_id)
            if user is None:
                raise UserNotFoundError(cmd.user_id)
            if user.balance_cents < cmd.stake_cents:
                raise InsufficientBalanceError(cmd.stake_cents, user.balance_cents)

            wager = await self._repo.insert_wager(
                db,
                Wager(
                    id=generate_id(),
                    user_id=cmd.user_id,
                    line_id=cmd.line_id,
                    stake_cents=cmd.stake_cents,
                    accepted_price=ctx.line.price,
                    accepted_point=ctx.line.point,
                    status=WagerStatus.PENDING.value,
                    placed_at=now,
                ),
            )
            # Conditional debit: a concurrent spend between the check above and
            # here still fails with InsufficientBalanceError and rolls back.
            entry = await self._ledger.post(
                db,
                user_id=cmd.user_id,
                entry_type=LedgerEntryType.WAGER_STAKE,
                amount_cents=-cmd.stake_cents,
                description=(
                    f"Wager stake for {ctx.home_team} vs {ctx.away_team} - "
                    f"{ctx.market_type} {ctx.line.selection}"
                ),
                wager_id=wager.id,
            )

        logger.info(
            "Accepted wager %s: user=%s line=%s stake=%d price=%d",
            wager.id,
            wager.user_id,
            wager.line_id,
            wager.stake_cents,
            wager.accepted_price,
        )
        return PlaceWagerResponse(
            wager=WagerResponse.from_domain(wager, ctx),
            stake_entry=LedgerEntryItem.from_domain(entry),
            balance_after_cents=entry.balance_after_cents,
        )

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def settle_wager(self, db: AsyncSession, cmd: SettleWagerCommand) -> SettleWagerResponse:
        """Move a PENDING wager to its terminal status and book the credit, exactly once.

        The PENDING → terminal UPDATE is conditional; a settler that finds the
        row already moved gets AlreadySettledError with the status that won.
        """
        try:
            async with unit_of_work(db):
                wager = await self._repo.get_wager(db, cmd.wager_id)
                if wager is None:
                    raise WagerNotFoundError(cmd.wager_id)
                effect = transition(wager, cmd.outcome)

                settled = await self._repo.mark_settled(
                    db, wager.id, effect.new_status.value, self._clock()
                )
                if settled is None:
                    current = await self._repo.get_wager(db, wager.id)
                    if current is None:
                        raise WagerNotFoundError(wager.id)
                    raise AlreadySettledError(wager.id, current.status)

                entry = None
                if effect.entry_type is not None:
                    entry = await self._ledger.post(
                        db,
                        user_id=settled.user_id,
                        entry_type=effect.entry_type,
                        amount_cents=effect.amount_cents,
                        description=self._settlement_description(effect.entry_type, wager.id),
                        wager_id=wager.id,
                    )
                    balance_after = entry.balance_after_cents
                else:
                    user = await self._accounts.get_user(db, settled.user_id)
                    balance_after = user.balance_cents if user else None
        except AlreadySettledError as exc:
            logger.warning(
                "Rejected settlement of wager %s as %s: already %s",
                exc.wager_id,
                cmd.outcome.value,
                exc.status,
            )
            raise

        logger.info(
            "Settled wager %s as %s: credit=%d",
            settled.id,
            settled.status,
            effect.amount_cents,
        )
        return SettleWagerResponse(
            wager=WagerResponse.from_domain(settled),
            ledger_entry=LedgerEntryItem.from_domain(entry) if entry else None,
            balance_delta_cents=effect.amount_cents,
            balance_after_cents=balance_after,
        )

    @staticmethod
    def _settlement_description(entry_type: LedgerEntryType, wager_id: str) -> str:
        if entry_type is LedgerEntryType.WAGER_PAYOUT:
            return f"Payout for winning wager {wager_id}"
        return f"Refund for pushed/voided wager {wager_id}"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_wager(self, db: AsyncSession, wager_id: str) -> WagerResponse:
        wager = await self._repo.get_wager(db, wager_id)
        if wager is None:
            raise WagerNotFoundError(wager_id)
        ctx = await self._odds.get_line_context(db, wager.line_id)
        return WagerResponse.from_domain(wager, ctx)

    async def list_wagers(
        self,
        db: AsyncSession,
        status: str | None = None,
        user_id: str | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> WagerListResponse:
        limit = max(1, min(limit, MAX_WAGER_PAGE))
        cursor_id = cursor_decode(cursor)
        wagers = await self._repo.list_wagers(db, status, user_id, cursor_id, limit + 1)
        has_more = len(wagers) > limit
        page = wagers[:limit]
        contexts = await self._odds.get_line_contexts(db, [w.line_id for w in page])
        return WagerListResponse(
            items=[WagerResponse.from_domain(w, contexts.get(w.line_id)) for w in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )

    # ------------------------------------------------------------------
    # Automated grading
    # ------------------------------------------------------------------

    async def run_grading_sweep(
        self, db: AsyncSession, limit: int = GRADING_BATCH_SIZE
    ) -> GradingSweepResult:
        """Grade and settle PENDING wagers on FINAL events with a recorded score.

        Each wager settles in its own unit of work, so one conflict does not
        hold back the rest; conflicted wagers stay PENDING for the next sweep.
        """
        result = GradingSweepResult()
        candidates = await self._repo.list_gradable(db, limit)
        # Release the read transaction before the per-wager units of work
        await db.commit()

        for candidate in candidates:
            outcome = grade_selection(
                candidate.market_type,
                candidate.selection,
                candidate.accepted_point,
                candidate.home_score,
                candidate.away_score,
            )
            try:
                await self.settle_wager(db, SettleWagerCommand(candidate.wager_id, outcome))
            except AlreadySettledError:
                result.skipped += 1
            except TransactionConflictError:
                logger.warning(
                    "Grading conflict on wager %s, left for next sweep", candidate.wager_id
                )
                result.conflicts += 1
            else:
                result.settled += 1

        if candidates:
            logger.info(
                "Grading sweep: settled=%d skipped=%d conflicts=%d",
                result.settled,
                result.skipped,
                result.conflicts,
            )
        return result
