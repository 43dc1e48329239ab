"""Global enums. Values must match the DB CHECK constraints exactly."""

from enum import Enum


class AccountStatus(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    DISABLED = "DISABLED"


class KycStatus(str, Enum):
    NOT_SUBMITTED = "NOT_SUBMITTED"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LedgerEntryKind(str, Enum):
    # Cash in / out
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    FEE = "FEE"
    ADJUSTMENT = "ADJUSTMENT"
    # Holds (zero balance delta, signed hold delta)
    WITHDRAWAL_BLOCK = "WITHDRAWAL_BLOCK"
    WITHDRAWAL_RELEASE = "WITHDRAWAL_RELEASE"
    IPO_BLOCK = "IPO_BLOCK"
    IPO_RELEASE = "IPO_RELEASE"
    TRADE_BLOCK = "TRADE_BLOCK"
    TRADE_RELEASE = "TRADE_RELEASE"
    # Consumption of held / traded funds
    IPO_DEBIT = "IPO_DEBIT"
    TRADE_DEBIT = "TRADE_DEBIT"
    TRADE_CREDIT = "TRADE_CREDIT"


class RequestKind(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    KYC = "KYC"


class RequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class IpoStatus(str, Enum):
    UPCOMING = "UPCOMING"
    LIVE = "LIVE"
    CLOSED = "CLOSED"


class DiscountType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


class IpoApplicationStatus(str, Enum):
    PENDING_ALLOTMENT = "PENDING_ALLOTMENT"
    ALLOTTED = "ALLOTTED"
    NOT_ALLOTTED = "NOT_ALLOTTED"


class TradeResult(str, Enum):
    PENDING = "PENDING"
    WIN = "WIN"
    LOSE = "LOSE"
    DRAW = "DRAW"


class NotificationCategory(str, Enum):
    IPO_ALERTS = "IPO_ALERTS"
    WALLET_UPDATES = "WALLET_UPDATES"
    APPROVALS = "APPROVALS"
    SYSTEM_ALERTS = "SYSTEM_ALERTS"
