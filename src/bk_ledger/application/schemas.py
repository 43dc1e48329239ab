"""Pydantic schemas and cursor utilities for the bk_ledger API."""

import base64
import json
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from src.bk_common.money import money_to_display
from src.bk_ledger.domain.models import Account, LedgerEntry

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_seq: int) -> str:
    """Encode the last seen entry seq into an opaque Base64 cursor string."""
    payload = json.dumps({"seq": last_seq})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen seq. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["seq"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AdjustBalanceRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    direction: Literal["CREDIT", "DEBIT"]
    reason: str = Field(..., min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    account_id: str
    status: str
    kyc_status: str
    balance: Decimal
    balance_display: str
    blocked: Decimal
    blocked_display: str
    spendable: Decimal
    spendable_display: str
    version: int

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            account_id=account.id,
            status=account.status.value,
            kyc_status=account.kyc_status.value,
            balance=account.balance,
            balance_display=money_to_display(account.balance),
            blocked=account.blocked,
            blocked_display=money_to_display(account.blocked),
            spendable=account.spendable,
            spendable_display=money_to_display(account.spendable),
            version=account.version,
        )


class LedgerEntryItem(BaseModel):
    id: str
    seq: int
    kind: str
    amount: Decimal
    amount_display: str
    hold_delta: Decimal
    balance_after: Decimal
    blocked_after: Decimal
    correlation_id: str
    description: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_entry(cls, e: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=e.id,
            seq=e.seq,
            kind=e.kind,
            amount=e.amount,
            amount_display=money_to_display(e.amount),
            hold_delta=e.hold_delta,
            balance_after=e.balance_after,
            blocked_after=e.blocked_after,
            correlation_id=e.correlation_id,
            description=e.description,
            created_at=e.created_at.isoformat() if e.created_at else "",
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool


class AuditResponse(BaseModel):
    ok: bool
    accounts_checked: int
    violations: list[str]
