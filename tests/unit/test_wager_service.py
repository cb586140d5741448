"""Unit tests for WagerApplicationService with mock repositories and ledger."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.wt_account.domain.models import LedgerEntry, User
from src.wt_common.enums import WagerOutcome
from src.wt_common.errors import (
    AlreadySettledError,
    BettingClosedError,
    InsufficientBalanceError,
    LineNotFoundError,
    TransactionConflictError,
    UserNotFoundError,
    WagerNotFoundError,
)
from src.wt_odds.domain.models import Line, LineContext
from src.wt_wager.application.service import WagerApplicationService
from src.wt_wager.domain.commands import PlaceWagerCommand, SettleWagerCommand
from src.wt_wager.domain.models import GradableWager, Wager

NOW = datetime(2026, 3, 1, 19, 0, tzinfo=timezone.utc)


def _ctx(starts_in: timedelta = timedelta(hours=2), status: str = "SCHEDULED") -> LineContext:
    return LineContext(
        line=Line(
            id="l1",
            market_id="m1",
            selection="HOME",
            point=Decimal("-3.5"),
            price=-110,
            source="manual",
            captured_at=NOW,
        ),
        market_type="SPREAD",
        event_id="e1",
        event_status=status,
        starts_at=NOW + starts_in,
        home_team="Los Angeles Lakers",
        away_team="Boston Celtics",
    )


def _wager(status: str = "PENDING") -> Wager:
    return Wager(
        id="w1",
        user_id="u1",
        line_id="l1",
        stake_cents=5000,
        accepted_price=-110,
        accepted_point=Decimal("-3.5"),
        status=status,
        placed_at=NOW,
    )


def _entry(entry_type: str, amount: int, balance_after: int) -> LedgerEntry:
    return LedgerEntry(
        id="le1",
        user_id="u1",
        entry_type=entry_type,
        amount_cents=amount,
        balance_after_cents=balance_after,
        description="test",
        wager_id="w1",
        created_at=NOW,
    )


def _service(
    repo: AsyncMock | None = None,
    odds: AsyncMock | None = None,
    accounts: AsyncMock | None = None,
    ledger: AsyncMock | None = None,
) -> WagerApplicationService:
    return WagerApplicationService(
        repo=repo or AsyncMock(),
        odds_repo=odds or AsyncMock(),
        account_repo=accounts or AsyncMock(),
        ledger=ledger or AsyncMock(),
        clock=lambda: NOW,
        close_buffer_minutes=5,
    )


class TestPlaceWager:
    async def test_accepts_at_current_terms(self) -> None:
        repo, odds, accounts, ledger = AsyncMock(), AsyncMock(), AsyncMock(), AsyncMock()
        odds.get_line_context.return_value = _ctx()
        accounts.get_user.return_value = User(id="u1", display_name="Adit", balance_cents=20000)
        repo.insert_wager.side_effect = lambda db, wager: wager
        ledger.post.return_value = _entry("WAGER_STAKE", -5000, 15000)
        db = AsyncMock()

        result = await _service(repo, odds, accounts, ledger).place_wager(
            db, PlaceWagerCommand("u1", "l1", 5000)
        )

        assert result.balance_after_cents == 15000
        assert result.wager.accepted_price == -110
        assert result.wager.accepted_point == "-3.5"
        assert result.wager.potential_payout_cents == 9545
        kwargs = ledger.post.call_args.kwargs
        assert kwargs["amount_cents"] == -5000
        assert kwargs["wager_id"] == result.wager.id
        assert kwargs["description"] == (
            "Wager stake for Los Angeles Lakers vs Boston Celtics - SPREAD HOME"
        )
        db.commit.assert_awaited_once()

    async def test_unknown_line(self) -> None:
        odds = AsyncMock()
        odds.get_line_context.return_value = None
        db = AsyncMock()

        with pytest.raises(LineNotFoundError):
            await _service(odds=odds).place_wager(db, PlaceWagerCommand("u1", "nope", 100))
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_closed_event_checked_before_user(self) -> None:
        odds, accounts = AsyncMock(), AsyncMock()
        odds.get_line_context.return_value = _ctx(starts_in=timedelta(minutes=4))

        with pytest.raises(BettingClosedError):
            await _service(odds=odds, accounts=accounts).place_wager(
                AsyncMock(), PlaceWagerCommand("u1", "l1", 100)
            )
        accounts.get_user.assert_not_awaited()

    async def test_unknown_user(self) -> None:
        repo, odds, accounts = AsyncMock(), AsyncMock(), AsyncMock()
        odds.get_line_context.return_value = _ctx()
        accounts.get_user.return_value = None

        with pytest.raises(UserNotFoundError):
            await _service(repo, odds, accounts).place_wager(
                AsyncMock(), PlaceWagerCommand("ghost", "l1", 100)
            )
        repo.insert_wager.assert_not_awaited()

    async def test_insufficient_balance(self) -> None:
        repo, odds, accounts, ledger = AsyncMock(), AsyncMock(), AsyncMock(), AsyncMock()
        odds.get_line_context.return_value = _ctx()
        accounts.get_user.return_value = User(id="u1", display_name="Adit", balance_cents=4999)

        with pytest.raises(InsufficientBalanceError) as exc_info:
            await _service(repo, odds, accounts, ledger).place_wager(
                AsyncMock(), PlaceWagerCommand("u1", "l1", 5000)
            )
        assert exc_info.value.available == 4999
        repo.insert_wager.assert_not_awaited()
        ledger.post.assert_not_awaited()


class TestSettleWager:
    async def test_won_posts_payout(self) -> None:
        repo, ledger = AsyncMock(), AsyncMock()
        repo.get_wager.return_value = _wager()
        repo.mark_settled.return_value = _wager(status="WON")
        ledger.post.return_value = _entry("WAGER_PAYOUT", 9545, 24545)

        result = await _service(repo=repo, ledger=ledger).settle_wager(
            AsyncMock(), SettleWagerCommand("w1", WagerOutcome.WON)
        )

        assert result.wager.status == "WON"
        assert result.balance_delta_cents == 9545
        assert result.balance_after_cents == 24545
        repo.mark_settled.assert_awaited_once()
        assert repo.mark_settled.call_args.args[1:3] == ("w1", "WON")
        kwargs = ledger.post.call_args.kwargs
        assert kwargs["amount_cents"] == 9545
        assert kwargs["description"] == "Payout for winning wager w1"

    async def test_push_posts_refund(self) -> None:
        repo, ledger = AsyncMock(), AsyncMock()
        repo.get_wager.return_value = _wager()
        repo.mark_settled.return_value = _wager(status="PUSH")
        ledger.post.return_value = _entry("WAGER_REFUND", 5000, 20000)

        result = await _service(repo=repo, ledger=ledger).settle_wager(
            AsyncMock(), SettleWagerCommand("w1", WagerOutcome.PUSH)
        )

        assert result.balance_delta_cents == 5000
        assert ledger.post.call_args.kwargs["description"] == "Refund for pushed/voided wager w1"

    async def test_lost_reads_balance_without_posting(self) -> None:
        repo, accounts, ledger = AsyncMock(), AsyncMock(), AsyncMock()
        repo.get_wager.return_value = _wager()
        repo.mark_settled.return_value = _wager(status="LOST")
        accounts.get_user.return_value = User(id="u1", display_name="Adit", balance_cents=15000)

        result = await _service(repo=repo, accounts=accounts, ledger=ledger).settle_wager(
            AsyncMock(), SettleWagerCommand("w1", WagerOutcome.LOST)
        )

        assert result.ledger_entry is None
        assert result.balance_delta_cents == 0
        assert result.balance_after_cents == 15000
        ledger.post.assert_not_awaited()

    async def test_missing_wager(self) -> None:
        repo = AsyncMock()
        repo.get_wager.return_value = None

        with pytest.raises(WagerNotFoundError):
            await _service(repo=repo).settle_wager(
                AsyncMock(), SettleWagerCommand("w1", WagerOutcome.WON)
            )

    async def test_already_settled_read(self) -> None:
        repo, ledger = AsyncMock(), AsyncMock()
        repo.get_wager.return_value = _wager(status="LOST")

        with pytest.raises(AlreadySettledError) as exc_info:
            await _service(repo=repo, ledger=ledger).settle_wager(
                AsyncMock(), SettleWagerCommand("w1", WagerOutcome.WON)
            )
        assert exc_info.value.status == "LOST"
        repo.mark_settled.assert_not_awaited()
        ledger.post.assert_not_awaited()

    async def test_lost_race_reports_winning_status(self) -> None:
        repo, ledger = AsyncMock(), AsyncMock()
        # Read sees PENDING, the conditional update finds it already moved
        repo.get_wager.side_effect = [_wager(), _wager(status="VOID")]
        repo.mark_settled.return_value = None
        db = AsyncMock()

        with pytest.raises(AlreadySettledError) as exc_info:
            await _service(repo=repo, ledger=ledger).settle_wager(
                db, SettleWagerCommand("w1", WagerOutcome.WON)
            )
        assert exc_info.value.status == "VOID"
        ledger.post.assert_not_awaited()
        db.rollback.assert_awaited_once()


class TestWagerReads:
    async def test_list_joins_line_context(self) -> None:
        repo, odds = AsyncMock(), AsyncMock()
        repo.list_wagers.return_value = [_wager()]
        odds.get_line_contexts.return_value = {"l1": _ctx()}

        page = await _service(repo, odds).list_wagers(AsyncMock())

        odds.get_line_contexts.assert_awaited_once()
        assert odds.get_line_contexts.call_args.args[1] == ["l1"]
        line = page.items[0].line
        assert line is not None
        assert (line.home_team, line.selection, line.event_status) == (
            "Los Angeles Lakers",
            "HOME",
            "SCHEDULED",
        )

    async def test_missing_context_leaves_line_empty(self) -> None:
        repo, odds = AsyncMock(), AsyncMock()
        repo.get_wager.return_value = _wager()
        odds.get_line_context.return_value = None

        result = await _service(repo, odds).get_wager(AsyncMock(), "w1")

        assert result.id == "w1"
        assert result.line is None


class TestGradingSweep:
    async def test_settles_each_candidate(self) -> None:
        repo, ledger = AsyncMock(), AsyncMock()
        repo.list_gradable.return_value = [
            GradableWager("w1", "SPREAD", "HOME", Decimal("-3.5"), 110, 100),
        ]
        repo.get_wager.return_value = _wager()
        repo.mark_settled.return_value = _wager(status="WON")
        ledger.post.return_value = _entry("WAGER_PAYOUT", 9545, 24545)

        result = await _service(repo=repo, ledger=ledger).run_grading_sweep(AsyncMock())

        assert (result.settled, result.skipped, result.conflicts) == (1, 0, 0)
        assert repo.mark_settled.call_args.args[2] == "WON"

    async def test_counts_skips_and_conflicts(self) -> None:
        svc = _service()
        svc._repo.list_gradable.return_value = [  # type: ignore[attr-defined]
            GradableWager("w1", "MONEYLINE", "HOME", None, 1, 0),
            GradableWager("w2", "MONEYLINE", "AWAY", None, 1, 0),
        ]
        svc.settle_wager = AsyncMock(  # type: ignore[method-assign]
            side_effect=[AlreadySettledError("w1", "WON"), TransactionConflictError()]
        )

        result = await svc.run_grading_sweep(AsyncMock())

        assert (result.settled, result.skipped, result.conflicts) == (0, 1, 1)
        outcomes = [c.args[1].outcome for c in svc.settle_wager.call_args_list]
        assert outcomes == [WagerOutcome.WON, WagerOutcome.LOST]

    async def test_empty(self) -> None:
        svc = _service()
        svc._repo.list_gradable.return_value = []  # type: ignore[attr-defined]
        result = await svc.run_grading_sweep(AsyncMock())
        assert result.settled == 0
