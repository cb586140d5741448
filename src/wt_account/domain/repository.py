"""Repository Protocols: dependency inversion for testability.

Unit tests inject mocks that conform to these Protocols.
Infrastructure layer provides the real implementations.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_account.domain.models import LedgerEntry, User
from src.wt_common.enums import LedgerEntryType


class AccountRepositoryProtocol(Protocol):
    async def insert_user(self, db: AsyncSession, user: User) -> User: ...

    async def get_user(self, db: AsyncSession, user_id: str) -> User | None: ...

    async def list_users(self, db: AsyncSession) -> list[User]: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str | None,
        entry_type: str | None,
        wager_id: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[LedgerEntry]: ...

    async def find_ledger_mismatches(
        self, db: AsyncSession, user_id: str | None = None
    ) -> list[tuple[str, int, int]]: ...


class LedgerWriterProtocol(Protocol):
    async def post(
        self,
        db: AsyncSession,
        *,
        user_id: str,
        entry_type: LedgerEntryType,
        amount_cents: int,
        description: str,
        wager_id: str | None = None,
    ) -> LedgerEntry: ...
