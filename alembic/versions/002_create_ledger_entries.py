"""002: create ledger_entries table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_entries (
            id              VARCHAR(64)     PRIMARY KEY,
            account_id      VARCHAR(64)     NOT NULL REFERENCES accounts (id),
            seq             BIGINT          NOT NULL,
            kind            VARCHAR(30)     NOT NULL,
            amount          NUMERIC(18, 2)  NOT NULL,
            hold_delta      NUMERIC(18, 2)  NOT NULL DEFAULT 0,
            balance_after   NUMERIC(18, 2)  NOT NULL,
            blocked_after   NUMERIC(18, 2)  NOT NULL,
            correlation_id  VARCHAR(64)     NOT NULL,
            description     VARCHAR(500),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_ledger_account_seq        UNIQUE (account_id, seq),
            CONSTRAINT uq_ledger_idempotency_key    UNIQUE (account_id, correlation_id, kind),
            CONSTRAINT ck_ledger_kind CHECK (
                kind IN (
                    'DEPOSIT', 'WITHDRAWAL', 'FEE', 'ADJUSTMENT',
                    'WITHDRAWAL_BLOCK', 'WITHDRAWAL_RELEASE',
                    'IPO_BLOCK', 'IPO_RELEASE',
                    'TRADE_BLOCK', 'TRADE_RELEASE',
                    'IPO_DEBIT', 'TRADE_DEBIT', 'TRADE_CREDIT'
                )
            ),
            CONSTRAINT ck_ledger_balance_after_gte_0 CHECK (balance_after >= 0),
            CONSTRAINT ck_ledger_blocked_after_range CHECK (
                blocked_after >= 0 AND blocked_after <= balance_after
            ),
            CONSTRAINT ck_ledger_single_delta CHECK (amount = 0 OR hold_delta = 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_ledger_account_kind ON ledger_entries (account_id, kind, seq DESC);"
    )
    op.execute("COMMENT ON TABLE ledger_entries IS 'Append-only ledger; never updated or deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
