"""Store-backed tests for the automated grading sweep."""

from decimal import Decimal

from src.wt_account.domain.invariants import verify_ledger_balance_invariant
from src.wt_admin.application.service import AdminService
from src.wt_common.enums import MarketType, Selection
from src.wt_wager.application.service import WagerApplicationService
from src.wt_wager.domain.commands import PlaceWagerCommand
from src.wt_wager.domain.invariants import verify_settlement_invariants


async def _place(db, line_id: str, user_id: str, stake: int) -> str:  # type: ignore[no-untyped-def]
    result = await WagerApplicationService().place_wager(
        db, PlaceWagerCommand(user_id, line_id, stake)
    )
    return result.wager.id


class TestGradingSweep:
    async def test_grades_final_events_only(
        self, db, odds_service, account_service, seed_line, make_user
    ) -> None:
        user_id = await make_user(20000)
        spread = await seed_line(market_type=MarketType.SPREAD, point=Decimal("-3.5"), price=-110)
        other = await seed_line(home_team="Denver Nuggets", away_team="Miami Heat")
        covered = await _place(db, spread["line_id"], user_id, 5000)
        untouched = await _place(db, other["line_id"], user_id, 1000)

        await odds_service.record_final_score(db, spread["event_id"], 110, 100)
        result = await AdminService().run_grading_sweep(db)

        assert (result.settled, result.skipped, result.conflicts) == (1, 0, 0)
        wagers = WagerApplicationService()
        assert (await wagers.get_wager(db, covered)).status == "WON"
        assert (await wagers.get_wager(db, untouched)).status == "PENDING"
        assert (await account_service.get_user(db, user_id)).balance_cents == 20000 - 6000 + 9545
        assert await verify_ledger_balance_invariant(db) == []
        assert await verify_settlement_invariants(db) == []

    async def test_both_sides_of_a_spread(self, db, odds_service, seed_line, make_user) -> None:
        user_id = await make_user(20000)
        home = await seed_line(market_type=MarketType.SPREAD, point=Decimal("-3"), price=-110)
        away_line = await odds_service.record_line(
            db, home["market_id"], Selection.AWAY, Decimal("3"), -110, "manual"
        )
        home_wager = await _place(db, home["line_id"], user_id, 1000)
        away_wager = await _place(db, away_line.id, user_id, 1000)

        await odds_service.record_final_score(db, home["event_id"], 104, 100)
        result = await WagerApplicationService().run_grading_sweep(db)

        assert result.settled == 2
        page = await WagerApplicationService().list_wagers(db, user_id=user_id)
        statuses = {w.id: w.status for w in page.items}
        assert statuses == {home_wager: "WON", away_wager: "LOST"}
        assert await verify_settlement_invariants(db) == []

    async def test_whole_number_spread_pushes(
        self, db, odds_service, account_service, seed_line, make_user
    ) -> None:
        user_id = await make_user(20000)
        ids = await seed_line(market_type=MarketType.SPREAD, point=Decimal("-3"), price=-110)
        await _place(db, ids["line_id"], user_id, 1000)

        await odds_service.record_final_score(db, ids["event_id"], 103, 100)
        await WagerApplicationService().run_grading_sweep(db)

        assert (await account_service.get_user(db, user_id)).balance_cents == 20000
        assert await verify_settlement_invariants(db) == []

    async def test_second_sweep_finds_nothing(self, db, odds_service, seed_line, make_user) -> None:
        user_id = await make_user(20000)
        ids = await seed_line(market_type=MarketType.MONEYLINE, point=None, price=150)
        await _place(db, ids["line_id"], user_id, 100)
        await odds_service.record_final_score(db, ids["event_id"], 90, 100)

        first = await WagerApplicationService().run_grading_sweep(db)
        second = await WagerApplicationService().run_grading_sweep(db)

        assert first.settled == 1
        assert second.settled == 0
        assert await verify_ledger_balance_invariant(db) == []
