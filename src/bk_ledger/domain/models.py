"""Domain models for bk_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.bk_common.enums import AccountStatus, KycStatus


@dataclass
class Account:
    id: str
    balance: Decimal          # cash owned, includes blocked funds
    blocked: Decimal          # reserved for pending withdrawals / IPO bids / timed trades
    status: AccountStatus
    kyc_status: KycStatus
    version: int
    entry_seq: int            # number of ledger entries appended so far
    created_at: datetime
    updated_at: datetime

    @property
    def spendable(self) -> Decimal:
        return self.balance - self.blocked


@dataclass(frozen=True)
class LedgerEntry:
    id: str
    account_id: str
    seq: int                         # 1-based, per account, strictly increasing
    kind: str                        # LedgerEntryKind value
    amount: Decimal                  # signed balance delta
    hold_delta: Decimal              # signed blocked delta (non-zero only for holds)
    balance_after: Decimal
    blocked_after: Decimal
    correlation_id: str
    description: str | None = None
    created_at: datetime | None = None

    @property
    def idempotency_key(self) -> tuple[str, str]:
        return (self.correlation_id, self.kind)


@dataclass(frozen=True)
class StoredRecord:
    """A JSON document kept next to the ledger (request, trade, position, config).

    Account-scoped records are written in the same commit as the entries
    that move their money; ``account_id`` is None for admin configuration.
    """

    record_type: str
    record_id: str
    account_id: str | None
    payload: dict[str, Any]
