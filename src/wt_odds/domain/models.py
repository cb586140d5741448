"""Domain models for wt_odds: pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass
class League:
    id: str
    name: str


@dataclass
class Event:
    id: str
    league_id: str
    home_team: str
    away_team: str
    starts_at: datetime
    status: str                      # EventStatus value
    home_score: int | None = None
    away_score: int | None = None

    @property
    def has_final_score(self) -> bool:
        return self.home_score is not None and self.away_score is not None


@dataclass
class Market:
    id: str
    event_id: str
    market_type: str                 # MarketType value


@dataclass(frozen=True)
class Line:
    """Immutable price quote. A re-quote is a new Line, never an update."""

    id: str
    market_id: str
    selection: str                   # Selection value
    point: Decimal | None            # spread / total; None for moneyline
    price: int                       # American odds
    source: str
    captured_at: datetime


@dataclass(frozen=True)
class LineContext:
    """A Line with the market and event facts the acceptance rule needs."""

    line: Line
    market_type: str
    event_id: str
    event_status: str
    starts_at: datetime
    home_team: str
    away_team: str


@dataclass
class MarketWithLines:
    market: Market
    latest_lines: list[Line] = field(default_factory=list)   # one per selection


@dataclass
class EventBoard:
    """Event listing row: the event, its league name and latest prices per market."""

    event: Event
    league_name: str
    markets: list[MarketWithLines] = field(default_factory=list)
