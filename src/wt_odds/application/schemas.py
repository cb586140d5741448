"""Pydantic schemas for the wt_odds API and the provider ingestion payload."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.wt_common.enums import EventStatus, Selection
from src.wt_odds.domain.models import EventBoard, Line

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class RecordLineRequest(BaseModel):
    market_id: str
    selection: Selection
    point: Decimal | None = Field(None, description="Spread or total; omit for moneyline")
    price: int = Field(..., description="American odds, e.g. -110 or +150")
    source: str = Field("manual", min_length=1, max_length=200)
    captured_at: datetime | None = None


class EventStatusRequest(BaseModel):
    status: EventStatus


class FinalScoreRequest(BaseModel):
    home_score: int = Field(..., ge=0)
    away_score: int = Field(..., ge=0)


class IngestRequest(BaseModel):
    # Games are validated one by one so a single malformed game cannot sink the batch
    games: list[dict] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Provider payload (The Odds API v4 shape, already fetched)
# ---------------------------------------------------------------------------


class ProviderOutcome(BaseModel):
    name: str
    price: float
    point: float | None = None


class ProviderMarket(BaseModel):
    key: str
    last_update: datetime | None = None
    outcomes: list[ProviderOutcome] = Field(default_factory=list)


class ProviderBookmaker(BaseModel):
    key: str
    title: str
    last_update: datetime | None = None
    markets: list[ProviderMarket] = Field(default_factory=list)


class ProviderGame(BaseModel):
    id: str | None = None
    sport_title: str
    commence_time: datetime
    home_team: str
    away_team: str
    bookmakers: list[ProviderBookmaker] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LineResponse(BaseModel):
    id: str
    market_id: str
    selection: str
    point: str | None
    price: int
    source: str
    captured_at: str

    @classmethod
    def from_domain(cls, line: Line) -> "LineResponse":
        return cls(
            id=line.id,
            market_id=line.market_id,
            selection=line.selection,
            point=None if line.point is None else str(line.point),
            price=line.price,
            source=line.source,
            captured_at=line.captured_at.isoformat(),
        )


class MarketResponse(BaseModel):
    id: str
    market_type: str
    lines: list[LineResponse]


class EventResponse(BaseModel):
    id: str
    league_id: str
    league_name: str
    home_team: str
    away_team: str
    starts_at: str
    status: str
    home_score: int | None
    away_score: int | None
    markets: list[MarketResponse] = Field(default_factory=list)

    @classmethod
    def from_board(cls, board: EventBoard) -> "EventResponse":
        event = board.event
        return cls(
            id=event.id,
            league_id=event.league_id,
            league_name=board.league_name,
            home_team=event.home_team,
            away_team=event.away_team,
            starts_at=event.starts_at.isoformat(),
            status=event.status,
            home_score=event.home_score,
            away_score=event.away_score,
            markets=[
                MarketResponse(
                    id=m.market.id,
                    market_type=m.market.market_type,
                    lines=[LineResponse.from_domain(line) for line in m.latest_lines],
                )
                for m in board.markets
            ],
        )


class IngestResult(BaseModel):
    events_created: int
    lines_created: int
    games_processed: int
    games_skipped: int = 0
