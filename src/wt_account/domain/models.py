"""Domain models for wt_account: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    id: str
    display_name: str
    balance_cents: int   # materialized Σ ledger_entries.amount_cents
    created_at: datetime | None = None


@dataclass(frozen=True)
class LedgerEntry:
    id: str
    user_id: str
    entry_type: str                  # LedgerEntryType value
    amount_cents: int                # positive=credit negative=debit
    balance_after_cents: int         # user balance snapshot after this entry
    description: str
    wager_id: str | None = None
    created_at: datetime | None = None
