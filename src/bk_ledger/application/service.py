"""LedgerApplicationService: account lifecycle, balance reads, admin adjustments.

Mutations go through ``LedgerStore.transaction``; notifications are emitted
only after the transaction block has exited, i.e. after commit.
"""

import logging
from decimal import Decimal

from src.bk_common.enums import AccountStatus, LedgerEntryKind, NotificationCategory
from src.bk_common.id_generator import generate_id
from src.bk_common.money import money_to_display
from src.bk_ledger.application.schemas import (
    AccountResponse,
    AuditResponse,
    LedgerEntryItem,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.bk_ledger.domain.invariants import verify_conservation
from src.bk_ledger.domain.models import LedgerEntry
from src.bk_ledger.domain.store import LedgerStore
from src.bk_notify.domain.emitter import NotificationEmitter

logger = logging.getLogger(__name__)


class LedgerApplicationService:
    def __init__(self, store: LedgerStore, emitter: NotificationEmitter) -> None:
        self._store = store
        self._emitter = emitter

    async def open_account(self, account_id: str) -> AccountResponse:
        """Registration: the account starts PENDING until an admin approves it."""
        account = await self._store.open_account(account_id, AccountStatus.PENDING)
        await self._emitter.emit_admin(
            NotificationCategory.APPROVALS,
            "New registration",
            f"Account {account_id} is awaiting approval",
        )
        return AccountResponse.from_account(account)

    async def get_balance(self, account_id: str) -> AccountResponse:
        account = await self._store.get_account(account_id)
        return AccountResponse.from_account(account)

    async def list_ledger(
        self,
        account_id: str,
        cursor: str | None,
        limit: int,
        kind: str | None,
    ) -> LedgerResponse:
        await self._store.get_account(account_id)
        before_seq = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._store.repo.list_entries(account_id, before_seq, limit + 1, kind)
        has_more = len(entries) > limit
        page = entries[:limit]
        next_cursor = cursor_encode(page[-1].seq) if has_more and page else None
        return LedgerResponse(
            items=[LedgerEntryItem.from_entry(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def set_account_status(
        self, account_id: str, status: AccountStatus
    ) -> AccountResponse:
        async with self._store.transaction(account_id) as txn:
            previous = txn.account.status
            txn.set_status(status)
        logger.info("Account %s status %s -> %s", account_id, previous.value, status.value)
        if status == AccountStatus.ACTIVE:
            await self._emitter.emit(
                account_id,
                NotificationCategory.APPROVALS,
                "Account approved",
                "Your account has been approved. You can now start trading.",
            )
        elif status == AccountStatus.DISABLED:
            await self._emitter.emit(
                account_id,
                NotificationCategory.APPROVALS,
                "Account disabled",
                "Your account registration was not approved.",
            )
        return AccountResponse.from_account(txn.account)

    async def adjust_balance(
        self,
        account_id: str,
        amount: Decimal,
        direction: str,
        reason: str,
        correlation_id: str | None = None,
    ) -> tuple[AccountResponse, LedgerEntry]:
        correlation_id = correlation_id or generate_id("ADJ")
        async with self._store.transaction(account_id) as txn:
            if direction == "CREDIT":
                entry = await txn.credit(
                    amount, LedgerEntryKind.ADJUSTMENT, correlation_id, reason
                )
            else:
                entry = await txn.debit(
                    amount, LedgerEntryKind.ADJUSTMENT, correlation_id, reason
                )
        logger.info(
            "Balance adjusted: %s %s %s (%s) entry=%s",
            account_id, direction, entry.amount, reason, entry.id,
        )
        verb = "added to" if entry.amount > 0 else "deducted from"
        await self._emitter.emit(
            account_id,
            NotificationCategory.WALLET_UPDATES,
            "Balance adjusted",
            f"{money_to_display(abs(entry.amount))} was {verb} your wallet: {reason}",
        )
        return AccountResponse.from_account(txn.account), entry

    async def audit(self) -> AuditResponse:
        accounts = await self._store.repo.list_accounts()
        violations = await verify_conservation(self._store.repo)
        return AuditResponse(
            ok=not violations,
            accounts_checked=len(accounts),
            violations=violations,
        )
