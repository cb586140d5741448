"""Acceptance rule: can a wager still be placed on this line right now?"""

from datetime import datetime, timedelta

from src.wt_common.enums import EventStatus
from src.wt_common.errors import BettingClosedError
from src.wt_odds.domain.models import LineContext


def ensure_betting_open(ctx: LineContext, now: datetime, buffer_minutes: int) -> None:
    """Raise BettingClosedError unless the event is SCHEDULED and starts more than
    ``buffer_minutes`` from ``now``. Exactly at the buffer counts as closed."""
    if ctx.event_status != EventStatus.SCHEDULED.value:
        raise BettingClosedError(f"event {ctx.event_id} is {ctx.event_status}")
    if ctx.starts_at - now <= timedelta(minutes=buffer_minutes):
        raise BettingClosedError(
            f"event {ctx.event_id} starts at {ctx.starts_at.isoformat()}, "
            f"inside the {buffer_minutes}-minute betting cutoff"
        )
