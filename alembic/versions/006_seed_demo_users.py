"""006: seed demo users

Each user's opening balance is booked as a DEPOSIT entry so that
balance == Σ ledger holds from the first row.

Revision ID: 006
Revises: 005
Create Date: 2025-10-01
"""

from typing import Sequence, Union

from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_DEMO_USERS = (
    ("0000000000000000001", "Adit"),
    ("0000000000000000002", "Arvind"),
    ("0000000000000000003", "Vikas"),
)
_OPENING_BALANCE = 20000


def upgrade() -> None:
    for user_id, name in _DEMO_USERS:
        op.execute(f"""
            INSERT INTO users (id, display_name, balance_cents)
            VALUES ('{user_id}', '{name}', {_OPENING_BALANCE});
        """)
        op.execute(f"""
            INSERT INTO ledger_entries
                (id, user_id, entry_type, amount_cents, balance_after_cents, description)
            VALUES
                ('{user_id}', '{user_id}', 'DEPOSIT', {_OPENING_BALANCE},
                 {_OPENING_BALANCE}, 'Opening balance');
        """)


def downgrade() -> None:
    ids = ", ".join(f"'{user_id}'" for user_id, _ in _DEMO_USERS)
    op.execute("ALTER TABLE ledger_entries DISABLE TRIGGER trg_ledger_append_only;")
    op.execute(f"DELETE FROM ledger_entries WHERE user_id IN ({ids});")
    op.execute("ALTER TABLE ledger_entries ENABLE TRIGGER trg_ledger_append_only;")
    op.execute(f"DELETE FROM users WHERE id IN ({ids});")
