"""OddsApplicationService: the odds snapshot store.

Lines are recorded, never edited. Ingestion turns an already-fetched provider
payload into leagues, events, markets and fresh lines; the wager engine only
reads from here (get_line / get_latest_line).
"""

import logging
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.wt_common.cents import validate_american_odds
from src.wt_common.database import unit_of_work
from src.wt_common.datetime_utils import as_utc, utc_now
from src.wt_common.enums import EventStatus, MarketType, Selection
from src.wt_common.errors import (
    EventNotFoundError,
    InvalidEventTransitionError,
    InvalidOddsError,
    MarketNotFoundError,
)
from src.wt_common.id_generator import generate_id
from src.wt_odds.application.schemas import (
    EventResponse,
    IngestResult,
    LineResponse,
    ProviderGame,
)
from src.wt_odds.domain.models import (
    Event,
    EventBoard,
    League,
    Line,
    LineContext,
    Market,
    MarketWithLines,
)
from src.wt_odds.domain.provider_mapping import (
    map_market_type,
    map_selection,
    pick_bookmaker,
    round_price,
)
from src.wt_odds.domain.repository import OddsRepositoryProtocol
from src.wt_odds.infrastructure.persistence import OddsRepository

logger = logging.getLogger(__name__)

_STATUS_ORDER = {EventStatus.SCHEDULED: 0, EventStatus.LIVE: 1, EventStatus.FINAL: 2}


class OddsApplicationService:
    def __init__(self, repo: OddsRepositoryProtocol | None = None) -> None:
        self._repo: OddsRepositoryProtocol = repo or OddsRepository()

    # ------------------------------------------------------------------
    # Lines
    # ------------------------------------------------------------------

    async def record_line(
        self,
        db: AsyncSession,
        market_id: str,
        selection: Selection,
        point: Decimal | None,
        price: int,
        source: str,
        captured_at: datetime | None = None,
    ) -> LineResponse:
        validate_american_odds(price)
        async with unit_of_work(db):
            market = await self._repo.get_market(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            line = await self._repo.insert_line(
                db,
                Line(
                    id=generate_id(),
                    market_id=market_id,
                    selection=selection.value,
                    point=point,
                    price=price,
                    source=source,
                    captured_at=as_utc(captured_at) if captured_at else utc_now(),
                ),
            )
        return LineResponse.from_domain(line)

    async def get_line(self, db: AsyncSession, line_id: str) -> LineContext | None:
        return await self._repo.get_line_context(db, line_id)

    async def get_latest_line(
        self, db: AsyncSession, market_id: str, selection: Selection
    ) -> Line | None:
        return await self._repo.get_latest_line(db, market_id, selection.value)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def list_events(
        self,
        db: AsyncSession,
        status: EventStatus | None = None,
        league_id: str | None = None,
    ) -> list[EventResponse]:
        rows = await self._repo.list_events(db, status.value if status else None, league_id)
        markets = await self._repo.list_markets_for_events(db, [event.id for event, _ in rows])
        lines = await self._repo.latest_lines_for_markets(db, [m.id for m in markets])

        lines_by_market: dict[str, list[Line]] = {}
        for line in lines:
            lines_by_market.setdefault(line.market_id, []).append(line)
        markets_by_event: dict[str, list[MarketWithLines]] = {}
        for market in markets:
            markets_by_event.setdefault(market.event_id, []).append(
                MarketWithLines(market=market, latest_lines=lines_by_market.get(market.id, []))
            )

        return [
            EventResponse.from_board(
                EventBoard(
                    event=event,
                    league_name=league_name,
                    markets=markets_by_event.get(event.id, []),
                )
            )
            for event, league_name in rows
        ]

    async def set_event_status(
        self, db: AsyncSession, event_id: str, status: EventStatus
    ) -> Event:
        """Move an event forward (SCHEDULED → LIVE → FINAL).

        Re-sending the current status is a no-op; backward moves are rejected.
        """
        async with unit_of_work(db):
            event = await self._repo.get_event(db, event_id)
            if event is None:
                raise EventNotFoundError(event_id)
            current = EventStatus(event.status)
            if current is status:
                return event
            if _STATUS_ORDER[status] < _STATUS_ORDER[current]:
                raise InvalidEventTransitionError(event_id, current.value, status.value)
            if not await self._repo.update_event_status(db, event_id, current.value, status.value):
                moved = await self._repo.get_event(db, event_id)
                raise InvalidEventTransitionError(
                    event_id, moved.status if moved else current.value, status.value
                )
            event.status = status.value
        logger.info("Event %s moved %s -> %s", event_id, current.value, status.value)
        return event

    async def record_final_score(
        self, db: AsyncSession, event_id: str, home_score: int, away_score: int
    ) -> Event:
        async with unit_of_work(db):
            if not await self._repo.set_final_score(db, event_id, home_score, away_score):
                raise EventNotFoundError(event_id)
            event = await self._repo.get_event(db, event_id)
        logger.info("Final score for event %s: %d-%d", event_id, home_score, away_score)
        return event  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Find-or-create (caller owns the transaction)
    # ------------------------------------------------------------------

    async def get_or_create_league(self, db: AsyncSession, name: str) -> League:
        league = await self._repo.get_league_by_name(db, name)
        if league is None:
            league = await self._repo.insert_league(db, League(id=generate_id(), name=name))
        return league

    async def upsert_event(
        self,
        db: AsyncSession,
        league_id: str,
        home_team: str,
        away_team: str,
        starts_at: datetime,
    ) -> tuple[Event, bool]:
        """Returns (event, created)."""
        starts_at = as_utc(starts_at)
        event = await self._repo.find_event(db, league_id, home_team, away_team, starts_at)
        if event is not None:
            return event, False
        event = Event(
            id=generate_id(),
            league_id=league_id,
            home_team=home_team,
            away_team=away_team,
            starts_at=starts_at,
            status=EventStatus.SCHEDULED.value,
        )
        return await self._repo.insert_event(db, event), True

    async def get_or_create_market(
        self, db: AsyncSession, event_id: str, market_type: MarketType
    ) -> Market:
        market = await self._repo.find_market(db, event_id, market_type.value)
        if market is None:
            market = await self._repo.insert_market(
                db, Market(id=generate_id(), event_id=event_id, market_type=market_type.value)
            )
        return market

    # ------------------------------------------------------------------
    # Provider ingestion
    # ------------------------------------------------------------------

    async def ingest_provider_payload(self, db: AsyncSession, games: list[dict]) -> IngestResult:
        parsed: list[ProviderGame] = []
        for raw in games:
            try:
                parsed.append(ProviderGame.model_validate(raw))
            except ValidationError as exc:
                game_id = raw.get("id") if isinstance(raw, dict) else None
                logger.warning(
                    "Skipping malformed provider game %s: %d validation errors",
                    game_id,
                    exc.error_count(),
                )

        events_created = 0
        lines_created = 0
        async with unit_of_work(db):
            for game in parsed:
                created, lines = await self._ingest_game(db, game)
                events_created += int(created)
                lines_created += lines

        logger.info(
            "Ingested %d games: %d events created, %d lines recorded, %d skipped",
            len(parsed),
            events_created,
            lines_created,
            len(games) - len(parsed),
        )
        return IngestResult(
            events_created=events_created,
            lines_created=lines_created,
            games_processed=len(parsed),
            games_skipped=len(games) - len(parsed),
        )

    async def _ingest_game(self, db: AsyncSession, game: ProviderGame) -> tuple[bool, int]:
        league = await self.get_or_create_league(db, game.sport_title)
        event, created = await self.upsert_event(
            db, league.id, game.home_team, game.away_team, game.commence_time
        )
        bookmaker = pick_bookmaker(game.bookmakers)
        if bookmaker is None:
            return created, 0

        source = f"{bookmaker.key}:{bookmaker.title}"
        lines = 0
        for provider_market in bookmaker.markets:
            market_type = map_market_type(provider_market.key)
            if market_type is None:
                continue
            market = await self.get_or_create_market(db, event.id, market_type)
            captured_at = provider_market.last_update or bookmaker.last_update or utc_now()
            for outcome in provider_market.outcomes:
                selection = map_selection(
                    market_type, outcome.name, game.home_team, game.away_team
                )
                if selection is None:
                    continue
                price = round_price(outcome.price)
                try:
                    validate_american_odds(price)
                except InvalidOddsError:
                    logger.warning(
                        "Skipping %s %s price %s for event %s: not American odds",
                        market_type.value,
                        selection.value,
                        outcome.price,
                        event.id,
                    )
                    continue
                await self._repo.insert_line(
                    db,
                    Line(
                        id=generate_id(),
                        market_id=market.id,
                        selection=selection.value,
                        point=None if outcome.point is None else Decimal(str(outcome.point)),
                        price=price,
                        source=source,
                        captured_at=as_utc(captured_at),
                    ),
                )
                lines += 1
        return created, lines
