"""Repository Protocol for wagers."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_wager.domain.models import GradableWager, Wager


class WagerRepositoryProtocol(Protocol):
    async def insert_wager(self, db: AsyncSession, wager: Wager) -> Wager: ...

    async def get_wager(self, db: AsyncSession, wager_id: str) -> Wager | None: ...

    async def mark_settled(
        self, db: AsyncSession, wager_id: str, status: str, settled_at: datetime
    ) -> Wager | None:
        """Conditional PENDING → status. None when the wager is missing or no longer PENDING."""
        ...

    async def list_wagers(
        self,
        db: AsyncSession,
        status: str | None,
        user_id: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Wager]: ...

    async def list_gradable(self, db: AsyncSession, limit: int) -> list[GradableWager]: ...

    async def find_duplicate_settlements(self, db: AsyncSession) -> list[tuple[str, int]]: ...

    async def find_missing_settlements(self, db: AsyncSession) -> list[tuple[str, str]]: ...

    async def find_unexpected_settlements(
        self, db: AsyncSession
    ) -> list[tuple[str, str, str]]: ...

    async def find_missing_stakes(self, db: AsyncSession) -> list[str]: ...
