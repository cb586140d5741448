"""Settlement state machine: the single place that decides what a settlement does.

    PENDING --WON-->  WON   (credit stake + profit, WAGER_PAYOUT)
    PENDING --LOST--> LOST  (no ledger entry)
    PENDING --PUSH--> PUSH  (credit stake, WAGER_REFUND)
    PENDING --VOID--> VOID  (credit stake, WAGER_REFUND)

Every other status is terminal: any outcome applied to it is rejected with
AlreadySettledError carrying the status the wager already has.
"""

from dataclasses import dataclass

from src.wt_common.cents import calculate_payout
from src.wt_common.enums import LedgerEntryType, WagerOutcome, WagerStatus
from src.wt_common.errors import AlreadySettledError, InvalidOutcomeError
from src.wt_wager.domain.models import Wager


@dataclass(frozen=True)
class SettlementEffect:
    new_status: WagerStatus
    entry_type: LedgerEntryType | None  # None: nothing is credited (LOST)
    amount_cents: int

    @property
    def credits(self) -> bool:
        return self.entry_type is not None


def parse_outcome(outcome: object) -> WagerOutcome:
    """Coerce operator/grader input to a WagerOutcome; anything else is InvalidOutcomeError."""
    if isinstance(outcome, WagerOutcome):
        return outcome
    try:
        return WagerOutcome(outcome)
    except ValueError:
        raise InvalidOutcomeError(outcome) from None


def transition(wager: Wager, outcome: object) -> SettlementEffect:
    """Pure transition: (wager status, outcome) → effect, or raise. Does not touch the wager."""
    parsed = parse_outcome(outcome)
    if WagerStatus(wager.status).is_terminal:
        raise AlreadySettledError(wager.id, wager.status)

    if parsed is WagerOutcome.WON:
        return SettlementEffect(
            new_status=WagerStatus.WON,
            entry_type=LedgerEntryType.WAGER_PAYOUT,
            amount_cents=calculate_payout(wager.stake_cents, wager.accepted_price),
        )
    if parsed is WagerOutcome.LOST:
        return SettlementEffect(new_status=WagerStatus.LOST, entry_type=None, amount_cents=0)
    # PUSH and VOID both hand the stake back
    return SettlementEffect(
        new_status=WagerStatus(parsed.value),
        entry_type=LedgerEntryType.WAGER_REFUND,
        amount_cents=wager.stake_cents,
    )
