"""Wager domain model: pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.wt_common.cents import calculate_payout
from src.wt_common.enums import WagerStatus


@dataclass
class Wager:
    id: str
    user_id: str
    line_id: str
    stake_cents: int
    # Terms captured at acceptance; later re-quotes of the line never change them
    accepted_price: int  # American odds
    accepted_point: Decimal | None
    status: str = WagerStatus.PENDING.value
    placed_at: datetime | None = None
    settled_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == WagerStatus.PENDING.value

    @property
    def potential_payout_cents(self) -> int:
        return calculate_payout(self.stake_cents, self.accepted_price)


@dataclass
class GradableWager:
    """A PENDING wager joined with what grading needs from its line and event."""

    wager_id: str
    market_type: str
    selection: str
    accepted_point: Decimal | None
    home_score: int
    away_score: int
