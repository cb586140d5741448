"""005: create ledger_entries table

Revision ID: 005
Revises: 004
Create Date: 2025-10-01
"""
from typing import Sequence, Union

from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id                  VARCHAR(32)     PRIMARY KEY,
            user_id             VARCHAR(32)     NOT NULL REFERENCES users (id),
            wager_id            VARCHAR(32)     REFERENCES wagers (id),
            entry_type          VARCHAR(20)     NOT NULL,
            amount_cents        BIGINT          NOT NULL,
            balance_after_cents BIGINT          NOT NULL,
            description         VARCHAR(500)    NOT NULL,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_entry_type CHECK (
                entry_type IN (
                    'WAGER_STAKE', 'WAGER_PAYOUT', 'WAGER_REFUND',
                    'DEPOSIT', 'WITHDRAWAL'
                )
            ),
            CONSTRAINT ck_ledger_amount_sign CHECK (
                (entry_type IN ('WAGER_STAKE', 'WITHDRAWAL') AND amount_cents < 0)
                OR (entry_type IN ('WAGER_PAYOUT', 'WAGER_REFUND', 'DEPOSIT') AND amount_cents > 0)
            ),
            CONSTRAINT ck_ledger_wager_ref CHECK (
                (entry_type LIKE 'WAGER_%') = (wager_id IS NOT NULL)
            ),
            CONSTRAINT ck_ledger_balance_after_gte_0 CHECK (balance_after_cents >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_ledger_user_id ON ledger_entries (user_id, id);")
    op.execute("CREATE INDEX idx_ledger_wager_id ON ledger_entries (wager_id);")
    # At most one payout/refund per wager, whatever the application does
    op.execute("""
        CREATE UNIQUE INDEX uq_ledger_wager_settlement
        ON ledger_entries (wager_id)
        WHERE entry_type IN ('WAGER_PAYOUT', 'WAGER_REFUND');
    """)
    op.execute("""
        CREATE TRIGGER trg_ledger_append_only
            BEFORE UPDATE OR DELETE ON ledger_entries
            FOR EACH ROW EXECUTE FUNCTION fn_forbid_mutation();
    """)
    op.execute(
        "COMMENT ON TABLE ledger_entries IS "
        "'Balance movements: append-only, amounts in cents, sum per user == users.balance_cents';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
