"""Pydantic schemas and cursor utilities for wt_account API."""

import base64
import binascii
import json

from pydantic import BaseModel, Field

from src.wt_account.domain.models import LedgerEntry, User
from src.wt_common.cents import cents_to_display
from src.wt_common.enums import LedgerEntryType

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: str) -> str:
    """Encode the last seen row id into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> str | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        return str(payload["id"])
    except (binascii.Error, ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateUserRequest(BaseModel):
    display_name: str = Field(..., min_length=1, max_length=100)
    starting_balance_cents: int | None = Field(
        None, ge=0, description="Initial deposit in cents; defaults to the configured amount"
    )


class DepositRequest(BaseModel):
    amount_cents: int = Field(..., gt=0, description="Amount to deposit in cents")


class WithdrawRequest(BaseModel):
    amount_cents: int = Field(..., gt=0, description="Amount to withdraw in cents")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    id: str
    display_name: str
    balance_cents: int
    balance_display: str
    created_at: str

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            display_name=user.display_name,
            balance_cents=user.balance_cents,
            balance_display=cents_to_display(user.balance_cents),
            created_at=user.created_at.isoformat() if user.created_at else "",
        )


class LedgerEntryItem(BaseModel):
    id: str
    user_id: str
    wager_id: str | None
    entry_type: LedgerEntryType
    amount_cents: int
    amount_display: str
    balance_after_cents: int
    description: str
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, entry: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=entry.id,
            user_id=entry.user_id,
            wager_id=entry.wager_id,
            entry_type=LedgerEntryType(entry.entry_type),
            amount_cents=entry.amount_cents,
            amount_display=cents_to_display(entry.amount_cents),
            balance_after_cents=entry.balance_after_cents,
            description=entry.description,
            created_at=entry.created_at.isoformat() if entry.created_at else "",
        )


class BalanceChangeResponse(BaseModel):
    user_id: str
    balance_cents: int
    balance_display: str
    ledger_entry: LedgerEntryItem

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "BalanceChangeResponse":
        return cls(
            user_id=entry.user_id,
            balance_cents=entry.balance_after_cents,
            balance_display=cents_to_display(entry.balance_after_cents),
            ledger_entry=LedgerEntryItem.from_domain(entry),
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
