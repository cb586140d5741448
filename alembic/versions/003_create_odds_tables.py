"""003: create leagues, events, markets and lines tables

Revision ID: 003
Revises: 002
Create Date: 2025-10-01
"""
from typing import Sequence, Union

from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE leagues (
            id      VARCHAR(32)     PRIMARY KEY,
            name    VARCHAR(100)    NOT NULL,
            CONSTRAINT uq_leagues_name UNIQUE (name)
        );
    """)
    op.execute("""
        CREATE TABLE events (
            id          VARCHAR(32)     PRIMARY KEY,
            league_id   VARCHAR(32)     NOT NULL REFERENCES leagues (id),
            home_team   VARCHAR(100)    NOT NULL,
            away_team   VARCHAR(100)    NOT NULL,
            starts_at   TIMESTAMPTZ     NOT NULL,
            status      VARCHAR(12)     NOT NULL DEFAULT 'SCHEDULED',
            home_score  INTEGER,
            away_score  INTEGER,
            CONSTRAINT ck_events_status CHECK (status IN ('SCHEDULED', 'LIVE', 'FINAL'))
        );
    """)
    op.execute("CREATE INDEX idx_events_starts_at ON events (starts_at);")
    op.execute("""
        CREATE TABLE markets (
            id          VARCHAR(32)     PRIMARY KEY,
            event_id    VARCHAR(32)     NOT NULL REFERENCES events (id),
            market_type VARCHAR(12)     NOT NULL,
            CONSTRAINT ck_markets_type CHECK (market_type IN ('MONEYLINE', 'SPREAD', 'TOTAL'))
        );
    """)
    op.execute("CREATE UNIQUE INDEX uq_markets_event_type ON markets (event_id, market_type);")
    op.execute("""
        CREATE TABLE lines (
            id          VARCHAR(32)     PRIMARY KEY,
            market_id   VARCHAR(32)     NOT NULL REFERENCES markets (id),
            selection   VARCHAR(8)      NOT NULL,
            point       VARCHAR(16),
            price       INTEGER         NOT NULL,
            source      VARCHAR(200)    NOT NULL,
            captured_at TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_lines_selection CHECK (selection IN ('HOME', 'AWAY', 'OVER', 'UNDER')),
            CONSTRAINT ck_lines_price CHECK (price <= -100 OR price >= 100)
        );
    """)
    op.execute(
        "CREATE INDEX idx_lines_market_selection ON lines (market_id, selection, captured_at);"
    )
    op.execute("""
        CREATE TRIGGER trg_lines_append_only
            BEFORE UPDATE OR DELETE ON lines
            FOR EACH ROW EXECUTE FUNCTION fn_forbid_mutation();
    """)
    op.execute("COMMENT ON TABLE lines IS 'Price quotes: append-only, a re-quote is a new row';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS lines CASCADE;")
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
    op.execute("DROP TABLE IF EXISTS events CASCADE;")
    op.execute("DROP TABLE IF EXISTS leagues CASCADE;")
