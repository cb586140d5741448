"""Pure mapping rules from an odds-provider payload to our market vocabulary.

The provider speaks in market keys (h2h / spreads / totals) and outcome names
(team names, "Over", "Under"). Anything we do not recognise maps to None and
the caller skips it.
"""

import math
from collections.abc import Sequence
from typing import Any

from src.wt_common.enums import MarketType, Selection

_MARKET_KEYS: dict[str, MarketType] = {
    "h2h": MarketType.MONEYLINE,
    "spreads": MarketType.SPREAD,
    "totals": MarketType.TOTAL,
}


def map_market_type(market_key: str) -> MarketType | None:
    return _MARKET_KEYS.get(market_key)


def map_selection(
    market_type: MarketType, outcome_name: str, home_team: str, away_team: str
) -> Selection | None:
    if market_type is MarketType.TOTAL:
        name = outcome_name.strip().lower()
        if name.startswith("over"):
            return Selection.OVER
        if name.startswith("under"):
            return Selection.UNDER
        return None
    if outcome_name == home_team:
        return Selection.HOME
    if outcome_name == away_team:
        return Selection.AWAY
    return None


def round_price(price: float) -> int:
    """Round a provider price to whole American odds, halves away from zero."""
    if price < 0:
        return -math.floor(-price + 0.5)
    return math.floor(price + 0.5)


def _outcome_count(bookmaker: Any) -> int:
    return sum(len(market.outcomes) for market in bookmaker.markets)


def pick_bookmaker(bookmakers: Sequence[Any]) -> Any | None:
    """The bookmaker quoting the most outcomes; the first one wins ties."""
    best = None
    for bookmaker in bookmakers:
        if best is None or _outcome_count(bookmaker) > _outcome_count(best):
            best = bookmaker
    return best
