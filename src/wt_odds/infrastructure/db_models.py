"""SQLAlchemy ORM models for the odds snapshot store.

Alembic migration 003_create_odds_tables.py is the authoritative DDL for
PostgreSQL; these mappings mirror it and build the schema for SQLite-backed
tests. Persistence uses raw text() SQL.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.wt_common.database import Base


class LeagueORM(Base):
    __tablename__ = "leagues"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class EventORM(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("status IN ('SCHEDULED', 'LIVE', 'FINAL')", name="ck_events_status"),
        Index("idx_events_starts_at", "starts_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    league_id: Mapped[str] = mapped_column(ForeignKey("leagues.id"), nullable=False)
    home_team: Mapped[str] = mapped_column(String(100), nullable=False)
    away_team: Mapped[str] = mapped_column(String(100), nullable=False)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[str] = mapped_column(String(12), nullable=False, default="SCHEDULED")
    home_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    away_score: Mapped[int | None] = mapped_column(Integer, nullable=True)


class MarketORM(Base):
    __tablename__ = "markets"
    __table_args__ = (
        CheckConstraint(
            "market_type IN ('MONEYLINE', 'SPREAD', 'TOTAL')", name="ck_markets_type"
        ),
        Index("uq_markets_event_type", "event_id", "market_type", unique=True),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    event_id: Mapped[str] = mapped_column(ForeignKey("events.id"), nullable=False)
    market_type: Mapped[str] = mapped_column(String(12), nullable=False)


class LineORM(Base):
    __tablename__ = "lines"
    __table_args__ = (
        CheckConstraint(
            "selection IN ('HOME', 'AWAY', 'OVER', 'UNDER')", name="ck_lines_selection"
        ),
        CheckConstraint("price <= -100 OR price >= 100", name="ck_lines_price"),
        Index("idx_lines_market_selection", "market_id", "selection", "captured_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    market_id: Mapped[str] = mapped_column(ForeignKey("markets.id"), nullable=False)
    selection: Mapped[str] = mapped_column(String(8), nullable=False)
    point: Mapped[str | None] = mapped_column(String(16), nullable=True)  # decimal as string
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(200), nullable=False)
    captured_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # NOTE: No updated_at; lines are append-only
