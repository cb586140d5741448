"""Repository Protocol for the odds snapshot store."""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_odds.domain.models import Event, League, Line, LineContext, Market


class OddsRepositoryProtocol(Protocol):
    async def get_league_by_name(self, db: AsyncSession, name: str) -> League | None: ...

    async def insert_league(self, db: AsyncSession, league: League) -> League: ...

    async def get_event(self, db: AsyncSession, event_id: str) -> Event | None: ...

    async def find_event(
        self,
        db: AsyncSession,
        league_id: str,
        home_team: str,
        away_team: str,
        starts_at: datetime,
    ) -> Event | None: ...

    async def insert_event(self, db: AsyncSession, event: Event) -> Event: ...

    async def update_event_status(
        self, db: AsyncSession, event_id: str, expected_status: str, status: str
    ) -> bool: ...

    async def set_final_score(
        self, db: AsyncSession, event_id: str, home_score: int, away_score: int
    ) -> bool: ...

    async def list_events(
        self, db: AsyncSession, status: str | None, league_id: str | None
    ) -> list[tuple[Event, str]]: ...

    async def get_market(self, db: AsyncSession, market_id: str) -> Market | None: ...

    async def find_market(
        self, db: AsyncSession, event_id: str, market_type: str
    ) -> Market | None: ...

    async def insert_market(self, db: AsyncSession, market: Market) -> Market: ...

    async def list_markets_for_events(
        self, db: AsyncSession, event_ids: list[str]
    ) -> list[Market]: ...

    async def insert_line(self, db: AsyncSession, line: Line) -> Line: ...

    async def get_line_context(self, db: AsyncSession, line_id: str) -> LineContext | None: ...

    async def get_line_contexts(
        self, db: AsyncSession, line_ids: list[str]
    ) -> dict[str, LineContext]:
        """Contexts keyed by line id; ids with no row are absent."""
        ...

    async def get_latest_line(
        self, db: AsyncSession, market_id: str, selection: str
    ) -> Line | None: ...

    async def latest_lines_for_markets(
        self, db: AsyncSession, market_ids: list[str]
    ) -> list[Line]: ...
