"""Repository Protocol: dependency inversion for testability.

Unit tests use the in-memory implementation or a mock conforming to this
Protocol. The SQL implementation owns its own sessions, so callers never
pass a session around.
"""

from collections.abc import Sequence
from typing import Protocol

from src.bk_ledger.domain.models import Account, LedgerEntry, StoredRecord


class LedgerRepositoryProtocol(Protocol):
    async def get_account(self, account_id: str) -> Account | None: ...

    async def insert_account(self, account: Account) -> Account: ...

    async def list_accounts(self) -> list[Account]: ...

    async def find_entry(
        self, account_id: str, correlation_id: str, kind: str
    ) -> LedgerEntry | None: ...

    async def commit(
        self,
        account: Account,
        expected_version: int,
        entries: list[LedgerEntry],
        records: Sequence[StoredRecord] = (),
    ) -> Account:
        """Persist the staged account state, its new entries and records in one step.

        Raises ConcurrentUpdateError when the stored version is not
        ``expected_version``.
        """
        ...

    async def list_entries(
        self,
        account_id: str,
        before_seq: int | None,
        limit: int,
        kind: str | None,
    ) -> list[LedgerEntry]: ...

    async def all_entries(self, account_id: str) -> list[LedgerEntry]: ...

    async def save_record(self, record: StoredRecord) -> None: ...

    async def delete_record(self, record_type: str, record_id: str) -> None: ...

    async def list_records(self, record_type: str) -> list[StoredRecord]: ...
