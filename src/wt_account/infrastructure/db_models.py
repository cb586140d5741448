"""SQLAlchemy ORM models for wt_account.

Alembic migrations (002_create_users.py, 005_create_ledger_entries.py) are the
authoritative DDL for PostgreSQL; these mappings mirror them and are used to
build the schema for SQLite-backed tests. Persistence uses raw text() SQL.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from src.wt_common.database import Base


class UserORM(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("balance_cents >= 0", name="ck_users_balance_gte_0"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    balance_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class LedgerEntryORM(Base):
    __tablename__ = "ledger_entries"
    __table_args__ = (
        CheckConstraint(
            "entry_type IN ('WAGER_STAKE', 'WAGER_PAYOUT', 'WAGER_REFUND', "
            "'DEPOSIT', 'WITHDRAWAL')",
            name="ck_ledger_entry_type",
        ),
        CheckConstraint(
            "(entry_type IN ('WAGER_STAKE', 'WITHDRAWAL') AND amount_cents < 0) "
            "OR (entry_type IN ('WAGER_PAYOUT', 'WAGER_REFUND', 'DEPOSIT') "
            "AND amount_cents > 0)",
            name="ck_ledger_amount_sign",
        ),
        CheckConstraint(
            "(entry_type LIKE 'WAGER_%') = (wager_id IS NOT NULL)", name="ck_ledger_wager_ref"
        ),
        CheckConstraint("balance_after_cents >= 0", name="ck_ledger_balance_after_gte_0"),
        Index("idx_ledger_user_id", "user_id", "id"),
        Index("idx_ledger_wager_id", "wager_id"),
        # At most one payout/refund per wager: the storage-level backstop
        # against double settlement.
        Index(
            "uq_ledger_wager_settlement",
            "wager_id",
            unique=True,
            sqlite_where=text("entry_type IN ('WAGER_PAYOUT', 'WAGER_REFUND')"),
            postgresql_where=text("entry_type IN ('WAGER_PAYOUT', 'WAGER_REFUND')"),
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    wager_id: Mapped[str | None] = mapped_column(ForeignKey("wagers.id"), nullable=True)
    entry_type: Mapped[str] = mapped_column(String(20), nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    balance_after_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # NOTE: No updated_at; ledger_entries is append-only
