"""Automated grading of a selection against a final score.

MONEYLINE: picked side outright → WON, tie → PUSH, otherwise LOST.
SPREAD:    margin of the picked side + point  > 0 WON, == 0 PUSH, < 0 LOST.
TOTAL:     combined score vs point; OVER wins above, UNDER below, equal is PUSH.

A spread or total wager accepted without a point cannot be graded and is VOID.
"""

from decimal import Decimal

from src.wt_common.enums import MarketType, Selection, WagerOutcome


def _from_sign(value: Decimal | int) -> WagerOutcome:
    if value > 0:
        return WagerOutcome.WON
    if value < 0:
        return WagerOutcome.LOST
    return WagerOutcome.PUSH


def grade_selection(
    market_type: str,
    selection: str,
    point: Decimal | None,
    home_score: int,
    away_score: int,
) -> WagerOutcome:
    market = MarketType(market_type)
    picked = Selection(selection)

    if market is MarketType.TOTAL:
        if point is None or picked not in (Selection.OVER, Selection.UNDER):
            return WagerOutcome.VOID
        diff = Decimal(home_score + away_score) - point
        return _from_sign(diff if picked is Selection.OVER else -diff)

    if picked is Selection.HOME:
        margin = home_score - away_score
    elif picked is Selection.AWAY:
        margin = away_score - home_score
    else:
        return WagerOutcome.VOID

    if market is MarketType.MONEYLINE:
        return _from_sign(margin)
    if point is None:
        return WagerOutcome.VOID
    return _from_sign(margin + point)
