"""004: create wagers table

Revision ID: 004
Revises: 003
Create Date: 2025-10-01
"""
from typing import Sequence, Union

from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE wagers (
            id              VARCHAR(32)     PRIMARY KEY,
            user_id         VARCHAR(32)     NOT NULL REFERENCES users (id),
            line_id         VARCHAR(32)     NOT NULL REFERENCES lines (id),
            stake_cents     BIGINT          NOT NULL,
            accepted_price  INTEGER         NOT NULL,
            accepted_point  VARCHAR(16),
            status          VARCHAR(10)     NOT NULL DEFAULT 'PENDING',
            placed_at       TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            settled_at      TIMESTAMPTZ,
            CONSTRAINT ck_wagers_status CHECK (
                status IN ('PENDING', 'WON', 'LOST', 'PUSH', 'VOID')
            ),
            CONSTRAINT ck_wagers_stake_gt_0 CHECK (stake_cents > 0),
            CONSTRAINT ck_wagers_settled_at CHECK (
                (status = 'PENDING') = (settled_at IS NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_wagers_user_id ON wagers (user_id, id);")
    op.execute("CREATE INDEX idx_wagers_status ON wagers (status);")
    op.execute("CREATE INDEX idx_wagers_line_id ON wagers (line_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wagers CASCADE;")
