"""Ledger Store: the only writer of account balances and holds.

Every mutation runs inside ``LedgerStore.transaction(account_id)``:

    per-account lock -> load account -> stage changes on a copy
    -> repository.commit(account, entries) -> on-commit hooks -> unlock

Anything raised inside the block discards the staged copy, so a failed
validation leaves no partial ledger writes behind. Entries are keyed by
(correlation_id, kind) within an account; replaying a key returns the
entry recorded the first time and changes nothing; replaying a key with a
different amount is refused.

Records staged with ``LedgerTransaction.persist`` (workflow requests, IPO
applications, timed trades, positions) go to the repository in the same
commit as the entries, then the in-memory view is updated by the hook.
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import replace
from decimal import Decimal

from src.bk_common.datetime_utils import utc_now
from src.bk_common.enums import AccountStatus, KycStatus, LedgerEntryKind
from src.bk_common.errors import (
    AccountDisabledError,
    AccountNotFoundError,
    IdempotencyConflictError,
    InsufficientFundsError,
    InvariantViolationError,
)
from src.bk_common.id_generator import generate_id
from src.bk_common.locks import KeyedLock
from src.bk_common.money import ZERO, require_positive
from src.bk_ledger.domain.models import Account, LedgerEntry, StoredRecord
from src.bk_ledger.domain.repository import LedgerRepositoryProtocol

logger = logging.getLogger(__name__)


class LedgerTransaction:
    """Staged, not-yet-committed changes to one account."""

    def __init__(self, account: Account, repo: LedgerRepositoryProtocol) -> None:
        self.account = account
        self._repo = repo
        self._entries: list[LedgerEntry] = []
        self._records: list[StoredRecord] = []
        self._on_commit: list[Callable[[], None]] = []
        self._flags_changed = False

    @property
    def entries(self) -> list[LedgerEntry]:
        return list(self._entries)

    @property
    def records(self) -> list[StoredRecord]:
        return list(self._records)

    @property
    def dirty(self) -> bool:
        return bool(self._entries) or bool(self._records) or self._flags_changed

    # ------------------------------------------------------------------
    # Cash movements
    # ------------------------------------------------------------------

    async def credit(
        self,
        amount: Decimal,
        kind: LedgerEntryKind,
        correlation_id: str,
        description: str | None = None,
    ) -> LedgerEntry:
        amount = require_positive(amount)
        replayed = await self._replayed(correlation_id, kind, amount, ZERO)
        if replayed is not None:
            return replayed
        return self._append(kind, amount, ZERO, correlation_id, description)

    async def debit(
        self,
        amount: Decimal,
        kind: LedgerEntryKind,
        correlation_id: str,
        description: str | None = None,
    ) -> LedgerEntry:
        amount = require_positive(amount)
        replayed = await self._replayed(correlation_id, kind, -amount, ZERO)
        if replayed is not None:
            return replayed
        if self.account.spendable < amount:
            raise InsufficientFundsError(amount, self.account.spendable)
        return self._append(kind, -amount, ZERO, correlation_id, description)

    # ------------------------------------------------------------------
    # Holds (zero balance delta)
    # ------------------------------------------------------------------

    async def block(
        self,
        amount: Decimal,
        kind: LedgerEntryKind,
        correlation_id: str,
        description: str | None = None,
    ) -> LedgerEntry:
        amount = require_positive(amount)
        replayed = await self._replayed(correlation_id, kind, ZERO, amount)
        if replayed is not None:
            return replayed
        if self.account.spendable < amount:
            raise InsufficientFundsError(amount, self.account.spendable)
        return self._append(kind, ZERO, amount, correlation_id, description)

    async def release(
        self,
        amount: Decimal,
        kind: LedgerEntryKind,
        correlation_id: str,
        description: str | None = None,
    ) -> LedgerEntry:
        amount = require_positive(amount)
        replayed = await self._replayed(correlation_id, kind, ZERO, -amount)
        if replayed is not None:
            return replayed
        if amount > self.account.blocked:
            raise _violation(
                f"release of {amount} on {self.account.id} exceeds blocked "
                f"{self.account.blocked} ({correlation_id})"
            )
        return self._append(kind, ZERO, -amount, correlation_id, description)

    # ------------------------------------------------------------------
    # Account flags (no ledger effect)
    # ------------------------------------------------------------------

    def require_enabled(self) -> None:
        """User-initiated submissions are refused on a soft-disabled account."""
        if self.account.status == AccountStatus.DISABLED:
            raise AccountDisabledError(self.account.id)

    def set_status(self, status: AccountStatus) -> None:
        self.account.status = status
        self._flags_changed = True

    def set_kyc_status(self, kyc_status: KycStatus) -> None:
        self.account.kyc_status = kyc_status
        self._flags_changed = True

    def on_commit(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` after a successful commit, still under the account lock."""
        self._on_commit.append(callback)

    def persist(self, record: StoredRecord, apply: Callable[[], None]) -> None:
        """Write ``record`` in this commit and run ``apply`` once it has landed."""
        self._records.append(record)
        self._on_commit.append(apply)

    def run_commit_hooks(self) -> None:
        for callback in self._on_commit:
            callback()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _replayed(
        self,
        correlation_id: str,
        kind: LedgerEntryKind,
        amount: Decimal,
        hold_delta: Decimal,
    ) -> LedgerEntry | None:
        if not correlation_id:
            raise _violation("ledger mutation without a correlation id")
        key = (correlation_id, LedgerEntryKind(kind).value)
        existing = next((e for e in self._entries if e.idempotency_key == key), None)
        if existing is None:
            existing = await self._repo.find_entry(self.account.id, *key)
        if existing is None:
            return None
        if existing.amount != amount or existing.hold_delta != hold_delta:
            logger.warning(
                "Correlation id %s reused for %s on %s: stored %s/%s, requested %s/%s",
                correlation_id, key[1], self.account.id,
                existing.amount, existing.hold_delta, amount, hold_delta,
            )
            raise IdempotencyConflictError(correlation_id, key[1])
        logger.debug(
            "Replayed %s/%s on %s, returning entry %s",
            key[1], key[0], self.account.id, existing.id,
        )
        return existing

    def _append(
        self,
        kind: LedgerEntryKind,
        amount: Decimal,
        hold_delta: Decimal,
        correlation_id: str,
        description: str | None,
    ) -> LedgerEntry:
        acct = self.account
        acct.balance += amount
        acct.blocked += hold_delta
        acct.entry_seq += 1
        acct.updated_at = utc_now()
        _check_account(acct)
        entry = LedgerEntry(
            id=generate_id("TXN"),
            account_id=acct.id,
            seq=acct.entry_seq,
            kind=LedgerEntryKind(kind).value,
            amount=amount,
            hold_delta=hold_delta,
            balance_after=acct.balance,
            blocked_after=acct.blocked,
            correlation_id=correlation_id,
            description=description,
            created_at=acct.updated_at,
        )
        self._entries.append(entry)
        return entry


class LedgerStore:
    """Injected into every component that moves money. No module-level instance."""

    def __init__(
        self,
        repo: LedgerRepositoryProtocol,
        locks: KeyedLock | None = None,
    ) -> None:
        self._repo = repo
        self._locks = locks or KeyedLock()

    @property
    def repo(self) -> LedgerRepositoryProtocol:
        return self._repo

    async def open_account(
        self, account_id: str, status: AccountStatus = AccountStatus.ACTIVE
    ) -> Account:
        now = utc_now()
        account = Account(
            id=account_id,
            balance=ZERO,
            blocked=ZERO,
            status=status,
            kyc_status=KycStatus.NOT_SUBMITTED,
            version=0,
            entry_seq=0,
            created_at=now,
            updated_at=now,
        )
        async with self._locks.hold(account_id):
            created = await self._repo.insert_account(account)
        logger.info("Account opened: %s (status=%s)", account_id, status.value)
        return created

    async def get_account(self, account_id: str) -> Account:
        account = await self._repo.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    @asynccontextmanager
    async def transaction(self, account_id: str) -> AsyncIterator[LedgerTransaction]:
        async with self._locks.hold(account_id):
            stored = await self.get_account(account_id)
            txn = LedgerTransaction(replace(stored), self._repo)
            yield txn
            if txn.dirty:
                txn.account = await self._repo.commit(
                    txn.account, stored.version, txn.entries, txn.records
                )
            txn.run_commit_hooks()

    # Records outside any account transaction (admin configuration) and reload.

    async def save_record(self, record: StoredRecord) -> None:
        await self._repo.save_record(record)

    async def delete_record(self, record_type: str, record_id: str) -> None:
        await self._repo.delete_record(record_type, record_id)

    async def load_records(self, record_type: str) -> list[StoredRecord]:
        return await self._repo.list_records(record_type)

    # Single-operation shortcuts, each its own transaction.

    async def credit(
        self, account_id: str, amount: Decimal, kind: LedgerEntryKind, correlation_id: str
    ) -> LedgerEntry:
        async with self.transaction(account_id) as txn:
            return await txn.credit(amount, kind, correlation_id)

    async def debit(
        self, account_id: str, amount: Decimal, kind: LedgerEntryKind, correlation_id: str
    ) -> LedgerEntry:
        async with self.transaction(account_id) as txn:
            return await txn.debit(amount, kind, correlation_id)

    async def block(
        self, account_id: str, amount: Decimal, kind: LedgerEntryKind, correlation_id: str
    ) -> LedgerEntry:
        async with self.transaction(account_id) as txn:
            return await txn.block(amount, kind, correlation_id)

    async def release(
        self, account_id: str, amount: Decimal, kind: LedgerEntryKind, correlation_id: str
    ) -> LedgerEntry:
        async with self.transaction(account_id) as txn:
            return await txn.release(amount, kind, correlation_id)


def _check_account(account: Account) -> None:
    if account.balance < ZERO:
        raise _violation(f"{account.id} balance {account.balance} < 0")
    if account.blocked < ZERO:
        raise _violation(f"{account.id} blocked {account.blocked} < 0")
    if account.blocked > account.balance:
        raise _violation(
            f"{account.id} blocked {account.blocked} > balance {account.balance}"
        )


def _violation(detail: str) -> InvariantViolationError:
    logger.error("Ledger invariant violated: %s", detail)
    return InvariantViolationError(detail)
