"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Account
  2xxx: Funds
  3xxx: Workflow (deposit / withdrawal / KYC)
  4xxx: Position
  5xxx: IPO
  6xxx: Timed trade
  9xxx: System
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

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


class NotFoundError(AppError):
    """Shared base for every 'record does not exist' error."""

    def __init__(self, code: int, entity: str, entity_id: str) -> None:
        super().__init__(code, f"{entity} not found: {entity_id}", 404)


# --- 1xxx: Account ---

class AccountNotFoundError(NotFoundError):
    def __init__(self, account_id: str) -> None:
        super().__init__(1001, "Account", account_id)


class AccountDisabledError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(1002, f"Account is disabled: {account_id}", 403)


class AccountExistsError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(1003, f"Account already exists: {account_id}", 409)


# --- 2xxx: Funds ---

class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2001, f"Invalid amount: {detail}", 422)


class InsufficientFundsError(AppError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            2002,
            f"Insufficient funds: required {required}, spendable {available}",
            422,
        )


# --- 3xxx: Workflow ---

class AlreadyDecidedError(AppError):
    """Idempotency protection: the record is already in a terminal state."""

    def __init__(self, record_id: str, status: str) -> None:
        super().__init__(3001, f"{record_id} already decided (status={status})", 409)


class RequestNotFoundError(NotFoundError):
    def __init__(self, request_id: str) -> None:
        super().__init__(3002, "Request", request_id)


class ReasonRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(3003, "A rejection reason is required", 422)


class MethodUnavailableError(AppError):
    def __init__(self, method_id: str) -> None:
        super().__init__(3004, f"Payment method not available: {method_id}", 422)


class KycAlreadySubmittedError(AppError):
    def __init__(self, account_id: str, status: str) -> None:
        super().__init__(3005, f"KYC for {account_id} is already {status}", 409)


# --- 4xxx: Position ---

class InsufficientPositionError(AppError):
    def __init__(self, symbol: str, requested: int, held: int) -> None:
        super().__init__(
            4001,
            f"Insufficient position in {symbol}: requested {requested}, held {held}",
            422,
        )


# --- 5xxx: IPO ---

class BelowMinimumInvestmentError(AppError):
    def __init__(self, amount: Decimal, minimum: Decimal) -> None:
        super().__init__(
            5001, f"Minimum investment is {minimum}, application is {amount}", 422
        )


class IpoNotFoundError(NotFoundError):
    def __init__(self, ipo_id: str) -> None:
        super().__init__(5002, "IPO", ipo_id)


class IpoNotLiveError(AppError):
    def __init__(self, ipo_id: str, status: str) -> None:
        super().__init__(5003, f"IPO {ipo_id} is not live (status={status})", 422)


class IpoApplicationNotFoundError(NotFoundError):
    def __init__(self, application_id: str) -> None:
        super().__init__(5004, "IPO application", application_id)


# --- 6xxx: Timed trade ---

class TradeNotFoundError(NotFoundError):
    def __init__(self, trade_id: str) -> None:
        super().__init__(6001, "Timed trade", trade_id)


class TimerUnavailableError(AppError):
    def __init__(self, duration_minutes: int) -> None:
        super().__init__(6002, f"Timer not available or disabled: {duration_minutes}min", 422)


class InvalidTradeResultError(AppError):
    def __init__(self, result: str) -> None:
        super().__init__(6003, f"Invalid trade result: {result}", 422)


class TimerInUseError(AppError):
    def __init__(self, duration_minutes: int) -> None:
        super().__init__(
            6004, f"Timer {duration_minutes}min has pending trades and cannot be removed", 409
        )


# --- 9xxx: System ---

class InvariantViolationError(AppError):
    """A ledger invariant would be broken. Signals a defect, not a user error."""

    def __init__(self, detail: str) -> None:
        super().__init__(9001, f"Invariant violation: {detail}", 500)


class ConcurrentUpdateError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(9002, f"Account {account_id} was modified concurrently", 409)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9003, detail, 500)


class IdempotencyConflictError(AppError):
    """A correlation id was reused for a different ledger movement."""

    def __init__(self, correlation_id: str, kind: str) -> None:
        super().__init__(
            9004,
            f"{kind} already recorded for {correlation_id} with a different amount",
            409,
        )
