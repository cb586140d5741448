"""Integer arithmetic utilities for the cents-based wager ledger.

All stakes, payouts and balances use int (cents). No float, no Decimal:
payouts are computed with integer round-half-up so that repeated settlements
never drift from the ledger.
"""

from src.wt_common.errors import InvalidOddsError


def _div_round_half_up(numerator: int, denominator: int) -> int:
    """round(numerator / denominator) with halves rounded up, for numerator >= 0."""
    return (2 * numerator + denominator) // (2 * denominator)


def calculate_payout(stake_cents: int, american_odds: int) -> int:
    """Total returned on a winning wager (stake + profit), in cents.

    odds > 0:  payout = round(stake * odds / 100) + stake
    odds < 0:  payout = round(stake * 100 / |odds|) + stake

    >>> calculate_payout(5000, -110)
    9545
    """
    if american_odds == 0:
        raise InvalidOddsError(american_odds)
    if stake_cents < 0:
        raise ValueError(f"Stake must be non-negative, got {stake_cents}")
    if american_odds > 0:
        profit = _div_round_half_up(stake_cents * american_odds, 100)
    else:
        profit = _div_round_half_up(stake_cents * 100, -american_odds)
    return profit + stake_cents


def potential_profit(stake_cents: int, american_odds: int) -> int:
    return calculate_payout(stake_cents, american_odds) - stake_cents


def validate_american_odds(price: int) -> None:
    """Reject prices with no American-odds meaning: 0 and anything strictly inside (-100, 100)."""
    if -100 < price < 100:
        raise InvalidOddsError(price)


def cents_to_display(cents: int) -> str:
    """Convert cents to display string: 6500 -> '$65.00', -1200 -> '-$12.00'."""
    if cents < 0:
        abs_cents = -cents
        return f"-${abs_cents // 100:,}.{abs_cents % 100:02d}"
    return f"${cents // 100:,}.{cents % 100:02d}"
