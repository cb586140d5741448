"""AccountApplicationService: thin composition layer.

User creation, deposit and withdraw run inside ``unit_of_work(db)``.
Reads (get_user, list_users, list_ledger) run without an explicit transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.wt_account.application.schemas import (
    BalanceChangeResponse,
    LedgerEntryItem,
    LedgerResponse,
    UserResponse,
    cursor_decode,
    cursor_encode,
)
from src.wt_account.domain.models import User
from src.wt_account.domain.repository import AccountRepositoryProtocol, LedgerWriterProtocol
from src.wt_account.infrastructure.ledger import LedgerWriter
from src.wt_account.infrastructure.persistence import AccountRepository
from src.wt_common.database import unit_of_work
from src.wt_common.datetime_utils import utc_now
from src.wt_common.enums import LedgerEntryType
from src.wt_common.errors import UserNotFoundError
from src.wt_common.id_generator import generate_id

logger = logging.getLogger(__name__)

MAX_LEDGER_PAGE = 100


class AccountApplicationService:
    def __init__(
        self,
        repo: AccountRepositoryProtocol | None = None,
        ledger: LedgerWriterProtocol | None = None,
    ) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()
        self._ledger: LedgerWriterProtocol = ledger or LedgerWriter()

    async def create_user(
        self,
        db: AsyncSession,
        display_name: str,
        starting_balance_cents: int | None = None,
    ) -> UserResponse:
        """Create a user; the opening balance is booked as a DEPOSIT entry, never set directly."""
        starting = (
            settings.DEFAULT_STARTING_BALANCE_CENTS
            if starting_balance_cents is None
            else starting_balance_cents
        )
        user = User(
            id=generate_id(), display_name=display_name, balance_cents=0, created_at=utc_now()
        )
        async with unit_of_work(db):
            await self._repo.insert_user(db, user)
            if starting > 0:
                entry = await self._ledger.post(
                    db,
                    user_id=user.id,
                    entry_type=LedgerEntryType.DEPOSIT,
                    amount_cents=starting,
                    description="Opening balance",
                )
                user.balance_cents = entry.balance_after_cents
        logger.info("Created user %s with opening balance %d", user.id, user.balance_cents)
        return UserResponse.from_domain(user)

    async def get_user(self, db: AsyncSession, user_id: str) -> UserResponse:
        user = await self._repo.get_user(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return UserResponse.from_domain(user)

    async def list_users(self, db: AsyncSession) -> list[UserResponse]:
        return [UserResponse.from_domain(u) for u in await self._repo.list_users(db)]

    async def deposit(
        self, db: AsyncSession, user_id: str, amount_cents: int
    ) -> BalanceChangeResponse:
        async with unit_of_work(db):
            entry = await self._ledger.post(
                db,
                user_id=user_id,
                entry_type=LedgerEntryType.DEPOSIT,
                amount_cents=amount_cents,
                description="External deposit",
            )
        return BalanceChangeResponse.from_entry(entry)

    async def withdraw(
        self, db: AsyncSession, user_id: str, amount_cents: int
    ) -> BalanceChangeResponse:
        async with unit_of_work(db):
            entry = await self._ledger.post(
                db,
                user_id=user_id,
                entry_type=LedgerEntryType.WITHDRAWAL,
                amount_cents=-amount_cents,
                description="External withdrawal",
            )
        return BalanceChangeResponse.from_entry(entry)

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str | None = None,
        entry_type: str | None = None,
        wager_id: str | None = None,
        cursor: str | None = None,
        limit: int = 50,
    ) -> LedgerResponse:
        limit = max(1, min(limit, MAX_LEDGER_PAGE))
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_ledger_entries(
            db, user_id, entry_type, wager_id, cursor_id, limit + 1
        )
        has_more = len(entries) > limit
        page = entries[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(
            items=[LedgerEntryItem.from_domain(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
