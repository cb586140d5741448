"""Store-backed tests for the odds snapshot store and provider ingestion."""

from decimal import Decimal

import pytest

from src.wt_common.enums import EventStatus, MarketType, Selection
from src.wt_common.errors import (
    EventNotFoundError,
    InvalidEventTransitionError,
    MarketNotFoundError,
)


def _game(home_price: float, away_price: float, last_update: str) -> dict:
    return {
        "id": "nba-lal-bos",
        "sport_title": "NBA",
        "commence_time": "2030-03-01T19:30:00Z",
        "home_team": "Los Angeles Lakers",
        "away_team": "Boston Celtics",
        "bookmakers": [
            {
                "key": "draftkings",
                "title": "DraftKings",
                "markets": [
                    {
                        "key": "spreads",
                        "last_update": last_update,
                        "outcomes": [
                            {"name": "Los Angeles Lakers", "price": home_price, "point": -3.5},
                            {"name": "Boston Celtics", "price": away_price, "point": 3.5},
                        ],
                    }
                ],
            }
        ],
    }


class TestIngestion:
    async def test_reingest_appends_and_board_shows_latest(self, db, odds_service) -> None:
        first = await odds_service.ingest_provider_payload(
            db, [_game(-110, -110, "2030-03-01T10:00:00Z")]
        )
        second = await odds_service.ingest_provider_payload(
            db, [_game(-125, 105, "2030-03-01T11:00:00Z")]
        )

        assert (first.events_created, first.lines_created) == (1, 2)
        assert (second.events_created, second.lines_created) == (0, 2)

        events = await odds_service.list_events(db)
        assert len(events) == 1
        board = events[0]
        assert board.league_name == "NBA"
        assert board.starts_at.startswith("2030-03-01T19:30:00")
        [market] = board.markets
        assert market.market_type == "SPREAD"
        prices = {line.selection: (line.price, line.point) for line in market.lines}
        assert prices == {"HOME": (-125, "-3.5"), "AWAY": (105, "3.5")}
        assert all(line.source == "draftkings:DraftKings" for line in market.lines)

    async def test_latest_line_lookup(self, db, odds_service) -> None:
        await odds_service.ingest_provider_payload(db, [_game(-110, -110, "2030-03-01T10:00:00Z")])
        await odds_service.ingest_provider_payload(db, [_game(-120, 100, "2030-03-01T09:00:00Z")])
        market_id = (await odds_service.list_events(db))[0].markets[0].id

        latest = await odds_service.get_latest_line(db, market_id, Selection.HOME)

        # Captured-at decides, not insertion order
        assert latest is not None
        assert latest.price == -110

    async def test_status_filter(self, db, odds_service, seed_line) -> None:
        ids = await seed_line()
        await odds_service.set_event_status(db, ids["event_id"], EventStatus.LIVE)

        assert await odds_service.list_events(db, status=EventStatus.SCHEDULED) == []
        assert len(await odds_service.list_events(db, status=EventStatus.LIVE)) == 1


class TestRecordLine:
    async def test_lines_are_kept_as_history(self, db, odds_service, seed_line) -> None:
        ids = await seed_line(price=-110)

        await odds_service.record_line(
            db, ids["market_id"], Selection.HOME, Decimal("-4"), -105, "manual"
        )

        original = await odds_service.get_line(db, ids["line_id"])
        assert original is not None
        assert original.line.price == -110
        assert original.line.point == Decimal("-3.5")
        latest = await odds_service.get_latest_line(db, ids["market_id"], Selection.HOME)
        assert latest.price == -105
        assert latest.point == Decimal("-4")

    async def test_line_context(self, db, odds_service, seed_line) -> None:
        ids = await seed_line(market_type=MarketType.MONEYLINE, point=None, price=+150)

        ctx = await odds_service.get_line(db, ids["line_id"])

        assert ctx.market_type == "MONEYLINE"
        assert ctx.event_status == "SCHEDULED"
        assert ctx.line.point is None
        assert ctx.home_team == "Los Angeles Lakers"

    async def test_unknown_market(self, db, odds_service) -> None:
        with pytest.raises(MarketNotFoundError):
            await odds_service.record_line(db, "missing", Selection.HOME, None, -110, "manual")


class TestEventLifecycle:
    async def test_forward_only(self, db, odds_service, seed_line) -> None:
        ids = await seed_line()

        live = await odds_service.set_event_status(db, ids["event_id"], EventStatus.LIVE)
        assert live.status == "LIVE"
        repeated = await odds_service.set_event_status(db, ids["event_id"], EventStatus.LIVE)
        assert repeated.status == "LIVE"
        with pytest.raises(InvalidEventTransitionError):
            await odds_service.set_event_status(db, ids["event_id"], EventStatus.SCHEDULED)

    async def test_final_score_marks_final(self, db, odds_service, seed_line) -> None:
        ids = await seed_line()

        event = await odds_service.record_final_score(db, ids["event_id"], 110, 104)

        assert event.status == "FINAL"
        assert (event.home_score, event.away_score) == (110, 104)
        assert event.has_final_score

    async def test_unknown_event(self, db, odds_service) -> None:
        with pytest.raises(EventNotFoundError):
            await odds_service.set_event_status(db, "missing", EventStatus.LIVE)
        with pytest.raises(EventNotFoundError):
            await odds_service.record_final_score(db, "missing", 1, 0)
