"""Global enums: must match DB CHECK constraints exactly.

See alembic/versions/003_create_odds_tables.py, 004_create_wagers.py and
005_create_ledger_entries.py.
"""

from enum import Enum


class EventStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    LIVE = "LIVE"
    FINAL = "FINAL"


class MarketType(str, Enum):
    MONEYLINE = "MONEYLINE"
    SPREAD = "SPREAD"
    TOTAL = "TOTAL"


class Selection(str, Enum):
    HOME = "HOME"
    AWAY = "AWAY"
    OVER = "OVER"
    UNDER = "UNDER"


class WagerStatus(str, Enum):
    PENDING = "PENDING"
    WON = "WON"
    LOST = "LOST"
    PUSH = "PUSH"
    VOID = "VOID"

    @property
    def is_terminal(self) -> bool:
        return self is not WagerStatus.PENDING


class WagerOutcome(str, Enum):
    """Grading result supplied to settlement: the terminal subset of WagerStatus."""

    WON = "WON"
    LOST = "LOST"
    PUSH = "PUSH"
    VOID = "VOID"


class LedgerEntryType(str, Enum):
    # Wager lifecycle (written by wt_wager only)
    WAGER_STAKE = "WAGER_STAKE"      # stake debit at acceptance
    WAGER_PAYOUT = "WAGER_PAYOUT"    # stake + profit on WON
    WAGER_REFUND = "WAGER_REFUND"    # stake only on PUSH / VOID
    # External
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
