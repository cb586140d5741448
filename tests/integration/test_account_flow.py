"""Store-backed tests for users, deposits, withdrawals and the ledger."""

import pytest
from sqlalchemy import text

from src.wt_account.domain.invariants import verify_ledger_balance_invariant
from src.wt_common.errors import InsufficientBalanceError, UserNotFoundError


class TestAccountFlow:
    async def test_default_opening_balance(self, db, account_service) -> None:
        user = await account_service.create_user(db, "Arvind")

        assert user.balance_cents == 10000
        ledger = await account_service.list_ledger(db, user_id=user.id)
        assert [(e.entry_type.value, e.amount_cents) for e in ledger.items] == [("DEPOSIT", 10000)]
        assert ledger.items[0].description == "Opening balance"

    async def test_deposit_then_withdraw(self, db, account_service, make_user) -> None:
        user_id = await make_user(20000)

        deposited = await account_service.deposit(db, user_id, 5000)
        withdrawn = await account_service.withdraw(db, user_id, 12500)

        assert deposited.balance_cents == 25000
        assert withdrawn.balance_cents == 12500
        assert withdrawn.ledger_entry.amount_cents == -12500
        assert (await account_service.get_user(db, user_id)).balance_cents == 12500
        assert await verify_ledger_balance_invariant(db) == []

    async def test_overdraw_is_rejected_and_leaves_no_entry(
        self, db, account_service, make_user
    ) -> None:
        user_id = await make_user(3000)

        with pytest.raises(InsufficientBalanceError) as exc_info:
            await account_service.withdraw(db, user_id, 3001)

        assert exc_info.value.available == 3000
        assert (await account_service.get_user(db, user_id)).balance_cents == 3000
        ledger = await account_service.list_ledger(db, user_id=user_id)
        assert len(ledger.items) == 1
        assert await verify_ledger_balance_invariant(db) == []

    async def test_unknown_user(self, db, account_service) -> None:
        with pytest.raises(UserNotFoundError):
            await account_service.deposit(db, "missing", 100)
        with pytest.raises(UserNotFoundError):
            await account_service.get_user(db, "missing")

    async def test_ledger_pages_newest_first(self, db, account_service, make_user) -> None:
        user_id = await make_user(1000)
        for amount in (100, 200, 300):
            await account_service.deposit(db, user_id, amount)

        first = await account_service.list_ledger(db, user_id=user_id, limit=2)
        second = await account_service.list_ledger(
            db, user_id=user_id, cursor=first.next_cursor, limit=2
        )

        assert [e.amount_cents for e in first.items] == [300, 200]
        assert first.has_more is True
        assert [e.amount_cents for e in second.items] == [100, 1000]
        assert second.has_more is False

    async def test_ledger_filter_by_type(self, db, account_service, make_user) -> None:
        user_id = await make_user(1000)
        await account_service.withdraw(db, user_id, 400)

        page = await account_service.list_ledger(db, user_id=user_id, entry_type="WITHDRAWAL")

        assert [e.amount_cents for e in page.items] == [-400]

    async def test_balance_drift_is_detected(self, db, make_user) -> None:
        user_id = await make_user(1000)
        # Bypass the ledger on purpose
        await db.execute(
            text("UPDATE users SET balance_cents = balance_cents + 1 WHERE id = :id"),
            {"id": user_id},
        )
        await db.commit()

        violations = await verify_ledger_balance_invariant(db, user_id=user_id)

        assert len(violations) == 1
        assert "drift 1" in violations[0]

    async def test_list_users(self, db, account_service, make_user) -> None:
        await make_user(100, name="Adit")
        await make_user(200, name="Vikas")

        users = await account_service.list_users(db)

        assert {u.display_name for u in users} == {"Adit", "Vikas"}
