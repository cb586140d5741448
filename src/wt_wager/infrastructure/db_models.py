"""SQLAlchemy ORM model for the wagers table.

Alembic migration 004_create_wagers.py is the authoritative DDL; this mapping
mirrors it for SQLite-backed tests. Queries use raw SQL.
"""

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.wt_common.database import Base


class WagerORM(Base):
    __tablename__ = "wagers"
    __table_args__ = (
        CheckConstraint(
            "status IN ('PENDING', 'WON', 'LOST', 'PUSH', 'VOID')", name="ck_wagers_status"
        ),
        CheckConstraint("stake_cents > 0", name="ck_wagers_stake_gt_0"),
        CheckConstraint(
            "(status = 'PENDING') = (settled_at IS NULL)", name="ck_wagers_settled_at"
        ),
        Index("idx_wagers_user_id", "user_id", "id"),
        Index("idx_wagers_status", "status"),
        Index("idx_wagers_line_id", "line_id"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)
    line_id: Mapped[str] = mapped_column(ForeignKey("lines.id"), nullable=False)
    stake_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    accepted_price: Mapped[int] = mapped_column(Integer, nullable=False)
    accepted_point: Mapped[str | None] = mapped_column(String(16), nullable=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="PENDING")
    placed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    settled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
