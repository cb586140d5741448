"""Typed inputs to the two mutating wager operations.

Built once at the boundary (HTTP router, grading sweep, tests) and trusted by
the service afterwards; construction fails fast on malformed input.
"""

from dataclasses import dataclass

from src.wt_common.enums import WagerOutcome
from src.wt_common.errors import InvalidStakeError
from src.wt_wager.domain.state_machine import parse_outcome


@dataclass(frozen=True)
class PlaceWagerCommand:
    user_id: str
    line_id: str
    stake_cents: int

    def __post_init__(self) -> None:
        # bool is an int subclass; True is not a stake
        if (
            not isinstance(self.stake_cents, int)
            or isinstance(self.stake_cents, bool)
            or self.stake_cents < 1
        ):
            raise InvalidStakeError(self.stake_cents)


@dataclass(frozen=True)
class SettleWagerCommand:
    wager_id: str
    outcome: WagerOutcome

    @classmethod
    def of(cls, wager_id: str, outcome: object) -> "SettleWagerCommand":
        return cls(wager_id=wager_id, outcome=parse_outcome(outcome))
