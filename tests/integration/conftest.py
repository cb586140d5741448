"""Integration-test fixtures: a small odds board and funded users in the SQLite store."""

from collections.abc import Awaitable, Callable
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_account.application.service import AccountApplicationService
from src.wt_common.database import unit_of_work
from src.wt_common.datetime_utils import utc_now
from src.wt_common.enums import MarketType, Selection
from src.wt_odds.application.service import OddsApplicationService

SeedLine = Callable[..., Awaitable[dict]]


@pytest.fixture
def odds_service() -> OddsApplicationService:
    return OddsApplicationService()


@pytest.fixture
def account_service() -> AccountApplicationService:
    return AccountApplicationService()


@pytest.fixture
def seed_line(db: AsyncSession, odds_service: OddsApplicationService) -> SeedLine:
    """Create league/event/market as needed and record one line; returns its ids."""

    async def _seed(
        *,
        starts_in: timedelta = timedelta(hours=2),
        market_type: MarketType = MarketType.SPREAD,
        selection: Selection = Selection.HOME,
        point: Decimal | None = Decimal("-3.5"),
        price: int = -110,
        home_team: str = "Los Angeles Lakers",
        away_team: str = "Boston Celtics",
    ) -> dict:
        async with unit_of_work(db):
            league = await odds_service.get_or_create_league(db, "NBA")
            event, _ = await odds_service.upsert_event(
                db, league.id, home_team, away_team, utc_now() + starts_in
            )
            market = await odds_service.get_or_create_market(db, event.id, market_type)
        line = await odds_service.record_line(
            db,
            market_id=market.id,
            selection=selection,
            point=point,
            price=price,
            source="test:Test Book",
        )
        return {"event_id": event.id, "market_id": market.id, "line_id": line.id}

    return _seed


@pytest.fixture
def make_user(
    db: AsyncSession, account_service: AccountApplicationService
) -> Callable[..., Awaitable[str]]:
    async def _make(balance_cents: int = 20000, name: str = "Adit") -> str:
        user = await account_service.create_user(db, name, balance_cents)
        return user.id

    return _make
