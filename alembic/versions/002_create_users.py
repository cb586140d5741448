"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2025-10-01
"""
from typing import Sequence, Union

from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE users (
            id              VARCHAR(32)     PRIMARY KEY,
            display_name    VARCHAR(100)    NOT NULL,
            balance_cents   BIGINT          NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_users_balance_gte_0 CHECK (balance_cents >= 0),
            CONSTRAINT ck_users_display_name_len CHECK (LENGTH(display_name) >= 1)
        );
    """)
    op.execute(
        "COMMENT ON COLUMN users.balance_cents IS "
        "'Materialized sum of ledger_entries.amount_cents; written only by LedgerWriter';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
