"""Pydantic schemas for wt_wager API."""

from pydantic import BaseModel, Field

from src.wt_account.application.schemas import LedgerEntryItem
from src.wt_odds.domain.models import LineContext
from src.wt_wager.domain.commands import PlaceWagerCommand, SettleWagerCommand
from src.wt_wager.domain.models import Wager

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PlaceWagerRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    line_id: str = Field(..., min_length=1)
    stake_cents: int = Field(..., ge=1, description="Stake in cents")

    def to_command(self) -> PlaceWagerCommand:
        return PlaceWagerCommand(
            user_id=self.user_id, line_id=self.line_id, stake_cents=self.stake_cents
        )


class SettleWagerRequest(BaseModel):
    # Free-form here; SettleWagerCommand rejects anything outside WON/LOST/PUSH/VOID
    outcome: str

    def to_command(self, wager_id: str) -> SettleWagerCommand:
        return SettleWagerCommand.of(wager_id, self.outcome)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class WagerLineResponse(BaseModel):
    """What the wager is on: the event, market and selection behind its line."""

    event_id: str
    home_team: str
    away_team: str
    starts_at: str
    event_status: str
    market_type: str
    selection: str

    @classmethod
    def from_context(cls, ctx: LineContext) -> "WagerLineResponse":
        return cls(
            event_id=ctx.event_id,
            home_team=ctx.home_team,
            away_team=ctx.away_team,
            starts_at=ctx.starts_at.isoformat(),
            event_status=ctx.event_status,
            market_type=ctx.market_type,
            selection=ctx.line.selection,
        )


class WagerResponse(BaseModel):
    id: str
    user_id: str
    line_id: str
    stake_cents: int
    accepted_price: int
    accepted_point: str | None
    status: str
    potential_payout_cents: int
    placed_at: str
    settled_at: str | None
    line: WagerLineResponse | None = None

    @classmethod
    def from_domain(cls, wager: Wager, ctx: LineContext | None = None) -> "WagerResponse":
        return cls(
            id=wager.id,
            user_id=wager.user_id,
            line_id=wager.line_id,
            stake_cents=wager.stake_cents,
            accepted_price=wager.accepted_price,
            accepted_point=None if wager.accepted_point is None else str(wager.accepted_point),
            status=wager.status,
            potential_payout_cents=wager.potential_payout_cents,
            placed_at=wager.placed_at.isoformat() if wager.placed_at else "",
            settled_at=wager.settled_at.isoformat() if wager.settled_at else None,
            line=WagerLineResponse.from_context(ctx) if ctx else None,
        )


class PlaceWagerResponse(BaseModel):
    wager: WagerResponse
    stake_entry: LedgerEntryItem
    balance_after_cents: int


class SettleWagerResponse(BaseModel):
    wager: WagerResponse
    ledger_entry: LedgerEntryItem | None
    balance_delta_cents: int
    balance_after_cents: int | None


class WagerListResponse(BaseModel):
    items: list[WagerResponse]
    next_cursor: str | None
    has_more: bool


class GradingSweepResult(BaseModel):
    settled: int = 0
    skipped: int = 0
    conflicts: int = 0
