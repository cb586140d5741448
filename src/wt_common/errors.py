"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: User
  2xxx: Balance / ledger
  3xxx: Odds (events, markets, lines)
  4xxx: Wager
  9xxx: System

Each error also carries a ``kind`` from a small failure taxonomy
(NOT_FOUND, BETTING_CLOSED, ...) so callers can branch on the failure
family without importing every class. Only TRANSACTION_CONFLICT is retryable.
"""

from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    BETTING_CLOSED = "BETTING_CLOSED"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    ALREADY_SETTLED = "ALREADY_SETTLED"
    INVALID_OUTCOME = "INVALID_OUTCOME"
    INVALID_ODDS = "INVALID_ODDS"
    INVALID_STATE = "INVALID_STATE"
    INVALID_INPUT = "INVALID_INPUT"
    TRANSACTION_CONFLICT = "TRANSACTION_CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL = "INTERNAL"


class AppError(Exception):
    """Base application error."""

    kind: ErrorKind = ErrorKind.INTERNAL
    retryable: bool = False

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)

    def details(self) -> dict[str, object]:
        """Envelope `data` for this failure: the kind plus any fields a caller branches on."""
        return {"kind": self.kind.value}


# --- 1xxx: User ---

class UserNotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, user_id: str) -> None:
        super().__init__(1001, f"User not found: {user_id}", 404)


# --- 2xxx: Balance / ledger ---

class InsufficientBalanceError(AppError):
    kind = ErrorKind.INSUFFICIENT_BALANCE

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(
            2001,
            f"Insufficient balance: required {required} cents, available {available} cents",
            422,
        )

    def details(self) -> dict[str, object]:
        return {**super().details(), "required": self.required, "available": self.available}


# --- 3xxx: Odds ---

class LineNotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, line_id: str) -> None:
        super().__init__(3001, f"Line not found: {line_id}", 404)


class EventNotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, event_id: str) -> None:
        super().__init__(3002, f"Event not found: {event_id}", 404)


class MarketNotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, market_id: str) -> None:
        super().__init__(3003, f"Market not found: {market_id}", 404)


class InvalidOddsError(AppError):
    kind = ErrorKind.INVALID_ODDS

    def __init__(self, odds: int) -> None:
        super().__init__(3004, f"Invalid American odds: {odds}", 422)


class InvalidEventTransitionError(AppError):
    kind = ErrorKind.INVALID_STATE

    def __init__(self, event_id: str, current: str, requested: str) -> None:
        super().__init__(
            3005, f"Event {event_id} cannot move from {current} to {requested}", 422
        )


# --- 4xxx: Wager ---

class WagerNotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, wager_id: str) -> None:
        super().__init__(4001, f"Wager not found: {wager_id}", 404)


class BettingClosedError(AppError):
    kind = ErrorKind.BETTING_CLOSED

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(4002, f"Betting closed: {reason}", 422)

    def details(self) -> dict[str, object]:
        return {**super().details(), "reason": self.reason}


class AlreadySettledError(AppError):
    kind = ErrorKind.ALREADY_SETTLED

    def __init__(self, wager_id: str, status: str) -> None:
        self.wager_id = wager_id
        self.status = status
        super().__init__(4003, f"Wager {wager_id} is already settled with status: {status}", 409)

    def details(self) -> dict[str, object]:
        return {**super().details(), "wager_id": self.wager_id, "status": self.status}


class InvalidOutcomeError(AppError):
    kind = ErrorKind.INVALID_OUTCOME

    def __init__(self, outcome: object) -> None:
        super().__init__(
            4004, f"Invalid outcome {outcome!r}: must be WON, LOST, PUSH, or VOID", 422
        )


class InvalidStakeError(AppError):
    kind = ErrorKind.INVALID_INPUT

    def __init__(self, stake_cents: object) -> None:
        super().__init__(
            4005, f"Stake must be a positive whole number of cents, got {stake_cents!r}", 422
        )


# --- 9xxx: System ---

class RateLimitError(AppError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class TransactionConflictError(AppError):
    """The unit of work was rolled back due to contention or timeout; retry it whole."""

    kind = ErrorKind.TRANSACTION_CONFLICT
    retryable = True

    def __init__(self, detail: str = "Transaction conflict, retry the operation") -> None:
        super().__init__(9003, detail, 409)
