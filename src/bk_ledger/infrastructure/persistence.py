"""SqlLedgerRepository: durable backend (LEDGER_BACKEND=sql).

The account row is written with a compare-and-set on ``version``; a
result of 0 rows means another writer committed first and the whole
commit is rolled back with ConcurrentUpdateError. Entries are inserted in
the same database transaction as the account update.

Records staged on the transaction (requests, IPO applications, timed
trades, positions) are upserted into ``ledger_records`` inside that same
database transaction, so a hold never outlives the record that owns it.

Transaction ownership: each repository call opens its own session and,
for writes, its own ``db.begin()`` block.
"""

import json
from collections.abc import Sequence

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bk_common.enums import AccountStatus, KycStatus
from src.bk_common.errors import AccountExistsError, ConcurrentUpdateError
from src.bk_ledger.domain.models import Account, LedgerEntry, StoredRecord

# ---------------------------------------------------------------------------
# SQL: accounts
# ---------------------------------------------------------------------------

_ACCOUNT_COLUMNS = (
    "id, balance, blocked, status, kyc_status, version, entry_seq, created_at, updated_at"
)

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :id
""")

_LIST_ACCOUNTS_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    ORDER BY created_at
""")

_INSERT_ACCOUNT_SQL = text(f"""
    INSERT INTO accounts
        (id, balance, blocked, status, kyc_status, version, entry_seq,
         created_at, updated_at)
    VALUES
        (:id, :balance, :blocked, :status, :kyc_status, :version, :entry_seq,
         :created_at, :updated_at)
    RETURNING {_ACCOUNT_COLUMNS}
""")

_UPDATE_ACCOUNT_SQL = text(f"""
    UPDATE accounts
    SET balance    = :balance,
        blocked    = :blocked,
        status     = :status,
        kyc_status = :kyc_status,
        entry_seq  = :entry_seq,
        version    = version + 1,
        updated_at = NOW()
    WHERE id = :id AND version = :expected_version
    RETURNING {_ACCOUNT_COLUMNS}
""")

# ---------------------------------------------------------------------------
# SQL: ledger_entries
# ---------------------------------------------------------------------------

_ENTRY_COLUMNS = (
    "id, account_id, seq, kind, amount, hold_delta, balance_after, blocked_after, "
    "correlation_id, description, created_at"
)

_INSERT_ENTRY_SQL = text("""
    INSERT INTO ledger_entries
        (id, account_id, seq, kind, amount, hold_delta, balance_after,
         blocked_after, correlation_id, description, created_at)
    VALUES
        (:id, :account_id, :seq, :kind, :amount, :hold_delta, :balance_after,
         :blocked_after, :correlation_id, :description, :created_at)
""")

_FIND_ENTRY_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM ledger_entries
    WHERE account_id = :account_id
      AND correlation_id = :correlation_id
      AND kind = :kind
""")

_LIST_ENTRIES_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM ledger_entries
    WHERE account_id = :account_id
      AND (CAST(:before_seq AS BIGINT) IS NULL OR seq < :before_seq)
      AND (CAST(:kind AS VARCHAR) IS NULL OR kind = :kind)
    ORDER BY seq DESC
    LIMIT :limit
""")

_ALL_ENTRIES_SQL = text(f"""
    SELECT {_ENTRY_COLUMNS}
    FROM ledger_entries
    WHERE account_id = :account_id
    ORDER BY seq
""")

# ---------------------------------------------------------------------------
# SQL: ledger_records
# ---------------------------------------------------------------------------

_UPSERT_RECORD_SQL = text("""
    INSERT INTO ledger_records (record_type, record_id, account_id, payload)
    VALUES (:record_type, :record_id, :account_id, CAST(:payload AS JSONB))
    ON CONFLICT (record_type, record_id)
    DO UPDATE SET payload = EXCLUDED.payload, updated_at = NOW()
""")

_DELETE_RECORD_SQL = text("""
    DELETE FROM ledger_records
    WHERE record_type = :record_type AND record_id = :record_id
""")

_LIST_RECORDS_SQL = text("""
    SELECT record_type, record_id, account_id, payload
    FROM ledger_records
    WHERE record_type = :record_type
    ORDER BY created_at, record_id
""")


def _row_to_account(row: object) -> Account:
    return Account(
        id=row.id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        blocked=row.blocked,  # type: ignore[attr-defined]
        status=AccountStatus(row.status),  # type: ignore[attr-defined]
        kyc_status=KycStatus(row.kyc_status),  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        entry_seq=row.entry_seq,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_entry(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        account_id=row.account_id,  # type: ignore[attr-defined]
        seq=row.seq,  # type: ignore[attr-defined]
        kind=row.kind,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        hold_delta=row.hold_delta,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        blocked_after=row.blocked_after,  # type: ignore[attr-defined]
        correlation_id=row.correlation_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_record(row: object) -> StoredRecord:
    # asyncpg hands JSONB back as text
    return StoredRecord(
        record_type=row.record_type,  # type: ignore[attr-defined]
        record_id=row.record_id,  # type: ignore[attr-defined]
        account_id=row.account_id,  # type: ignore[attr-defined]
        payload=json.loads(row.payload),  # type: ignore[attr-defined]
    )


def _account_params(account: Account) -> dict[str, object]:
    return {
        "id": account.id,
        "balance": account.balance,
        "blocked": account.blocked,
        "status": account.status.value,
        "kyc_status": account.kyc_status.value,
        "version": account.version,
        "entry_seq": account.entry_seq,
        "created_at": account.created_at,
        "updated_at": account.updated_at,
    }


def _entry_params(entry: LedgerEntry) -> dict[str, object]:
    return {
        "id": entry.id,
        "account_id": entry.account_id,
        "seq": entry.seq,
        "kind": entry.kind,
        "amount": entry.amount,
        "hold_delta": entry.hold_delta,
        "balance_after": entry.balance_after,
        "blocked_after": entry.blocked_after,
        "correlation_id": entry.correlation_id,
        "description": entry.description,
        "created_at": entry.created_at,
    }


def _record_params(record: StoredRecord) -> dict[str, object]:
    return {
        "record_type": record.record_type,
        "record_id": record.record_id,
        "account_id": record.account_id,
        "payload": json.dumps(record.payload),
    }


class SqlLedgerRepository:
    """Concrete repository over PostgreSQL via SQLAlchemy async + asyncpg."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_account(self, account_id: str) -> Account | None:
        async with self._session_factory() as db:
            row = (await db.execute(_GET_ACCOUNT_SQL, {"id": account_id})).fetchone()
        return _row_to_account(row) if row else None

    async def insert_account(self, account: Account) -> Account:
        try:
            async with self._session_factory() as db, db.begin():
                result = await db.execute(_INSERT_ACCOUNT_SQL, _account_params(account))
                row = result.fetchone()
        except IntegrityError as e:
            raise AccountExistsError(account.id) from e
        return _row_to_account(row)

    async def list_accounts(self) -> list[Account]:
        async with self._session_factory() as db:
            rows = (await db.execute(_LIST_ACCOUNTS_SQL)).fetchall()
        return [_row_to_account(r) for r in rows]

    async def find_entry(
        self, account_id: str, correlation_id: str, kind: str
    ) -> LedgerEntry | None:
        async with self._session_factory() as db:
            row = (
                await db.execute(
                    _FIND_ENTRY_SQL,
                    {"account_id": account_id, "correlation_id": correlation_id, "kind": kind},
                )
            ).fetchone()
        return _row_to_entry(row) if row else None

    async def commit(
        self,
        account: Account,
        expected_version: int,
        entries: list[LedgerEntry],
        records: Sequence[StoredRecord] = (),
    ) -> Account:
        async with self._session_factory() as db, db.begin():
            params = _account_params(account)
            params["expected_version"] = expected_version
            row = (await db.execute(_UPDATE_ACCOUNT_SQL, params)).fetchone()
            if row is None:
                # Raising inside begin() rolls the transaction back.
                raise ConcurrentUpdateError(account.id)
            for entry in entries:
                await db.execute(_INSERT_ENTRY_SQL, _entry_params(entry))
            for record in records:
                await db.execute(_UPSERT_RECORD_SQL, _record_params(record))
        return _row_to_account(row)

    async def list_entries(
        self,
        account_id: str,
        before_seq: int | None,
        limit: int,
        kind: str | None,
    ) -> list[LedgerEntry]:
        async with self._session_factory() as db:
            rows = (
                await db.execute(
                    _LIST_ENTRIES_SQL,
                    {
                        "account_id": account_id,
                        "before_seq": before_seq,
                        "kind": kind,
                        "limit": limit,
                    },
                )
            ).fetchall()
        return [_row_to_entry(r) for r in rows]

    async def all_entries(self, account_id: str) -> list[LedgerEntry]:
        async with self._session_factory() as db:
            rows = (await db.execute(_ALL_ENTRIES_SQL, {"account_id": account_id})).fetchall()
        return [_row_to_entry(r) for r in rows]

    async def save_record(self, record: StoredRecord) -> None:
        async with self._session_factory() as db, db.begin():
            await db.execute(_UPSERT_RECORD_SQL, _record_params(record))

    async def delete_record(self, record_type: str, record_id: str) -> None:
        async with self._session_factory() as db, db.begin():
            await db.execute(
                _DELETE_RECORD_SQL, {"record_type": record_type, "record_id": record_id}
            )

    async def list_records(self, record_type: str) -> list[StoredRecord]:
        async with self._session_factory() as db:
            rows = (
                await db.execute(_LIST_RECORDS_SQL, {"record_type": record_type})
            ).fetchall()
        return [_row_to_record(r) for r in rows]
