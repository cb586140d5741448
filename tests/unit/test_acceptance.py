"""Tests for the betting-cutoff acceptance rule."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.wt_common.errors import BettingClosedError
from src.wt_odds.domain.models import Line, LineContext
from src.wt_wager.domain.acceptance import ensure_betting_open

NOW = datetime(2026, 3, 1, 19, 0, tzinfo=timezone.utc)


def _ctx(starts_in: timedelta, status: str = "SCHEDULED") -> LineContext:
    line = Line(
        id="l1",
        market_id="m1",
        selection="HOME",
        point=Decimal("-3.5"),
        price=-110,
        source="manual",
        captured_at=NOW - timedelta(hours=1),
    )
    return LineContext(
        line=line,
        market_type="SPREAD",
        event_id="e1",
        event_status=status,
        starts_at=NOW + starts_in,
        home_team="Los Angeles Lakers",
        away_team="Boston Celtics",
    )


class TestEnsureBettingOpen:
    def test_six_minutes_out_is_open(self) -> None:
        ensure_betting_open(_ctx(timedelta(minutes=6)), NOW, 5)  # Should not raise

    def test_four_minutes_out_is_closed(self) -> None:
        with pytest.raises(BettingClosedError, match="cutoff"):
            ensure_betting_open(_ctx(timedelta(minutes=4)), NOW, 5)

    def test_exactly_at_buffer_is_closed(self) -> None:
        with pytest.raises(BettingClosedError):
            ensure_betting_open(_ctx(timedelta(minutes=5)), NOW, 5)

    def test_one_second_past_buffer_is_open(self) -> None:
        ensure_betting_open(_ctx(timedelta(minutes=5, seconds=1)), NOW, 5)

    def test_already_started_is_closed(self) -> None:
        with pytest.raises(BettingClosedError):
            ensure_betting_open(_ctx(timedelta(minutes=-30)), NOW, 5)

    @pytest.mark.parametrize("status", ["LIVE", "FINAL"])
    def test_non_scheduled_event_is_closed(self, status: str) -> None:
        with pytest.raises(BettingClosedError, match=status):
            ensure_betting_open(_ctx(timedelta(hours=2), status=status), NOW, 5)

    def test_zero_buffer(self) -> None:
        ensure_betting_open(_ctx(timedelta(seconds=1)), NOW, 0)
