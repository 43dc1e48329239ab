"""InMemoryLedgerRepository: default backend (LEDGER_BACKEND=memory).

Stores copies, never the caller's objects, so staged changes inside a
LedgerTransaction cannot leak into stored state before commit.
"""

from collections.abc import Sequence
from dataclasses import replace

from src.bk_common.errors import AccountExistsError, ConcurrentUpdateError
from src.bk_ledger.domain.models import Account, LedgerEntry, StoredRecord


class InMemoryLedgerRepository:
    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._entries: dict[str, list[LedgerEntry]] = {}
        self._by_key: dict[tuple[str, str, str], LedgerEntry] = {}
        self._records: dict[tuple[str, str], StoredRecord] = {}

    async def get_account(self, account_id: str) -> Account | None:
        account = self._accounts.get(account_id)
        return replace(account) if account else None

    async def insert_account(self, account: Account) -> Account:
        if account.id in self._accounts:
            raise AccountExistsError(account.id)
        self._accounts[account.id] = replace(account)
        self._entries[account.id] = []
        return replace(account)

    async def list_accounts(self) -> list[Account]:
        return [replace(a) for a in self._accounts.values()]

    async def find_entry(
        self, account_id: str, correlation_id: str, kind: str
    ) -> LedgerEntry | None:
        return self._by_key.get((account_id, correlation_id, kind))

    async def commit(
        self,
        account: Account,
        expected_version: int,
        entries: list[LedgerEntry],
        records: Sequence[StoredRecord] = (),
    ) -> Account:
        stored = self._accounts.get(account.id)
        if stored is None or stored.version != expected_version:
            raise ConcurrentUpdateError(account.id)
        committed = replace(account, version=expected_version + 1)
        self._accounts[account.id] = committed
        log = self._entries[account.id]
        for entry in entries:
            log.append(entry)
            self._by_key[(entry.account_id, entry.correlation_id, entry.kind)] = entry
        for record in records:
            self._records[(record.record_type, record.record_id)] = record
        return replace(committed)

    async def list_entries(
        self,
        account_id: str,
        before_seq: int | None,
        limit: int,
        kind: str | None,
    ) -> list[LedgerEntry]:
        page: list[LedgerEntry] = []
        for entry in reversed(self._entries.get(account_id, [])):
            if before_seq is not None and entry.seq >= before_seq:
                continue
            if kind is not None and entry.kind != kind:
                continue
            page.append(entry)
            if len(page) >= limit:
                break
        return page

    async def all_entries(self, account_id: str) -> list[LedgerEntry]:
        return list(self._entries.get(account_id, []))

    async def save_record(self, record: StoredRecord) -> None:
        self._records[(record.record_type, record.record_id)] = record

    async def delete_record(self, record_type: str, record_id: str) -> None:
        self._records.pop((record_type, record_id), None)

    async def list_records(self, record_type: str) -> list[StoredRecord]:
        return [r for (t, _), r in self._records.items() if t == record_type]
