"""001: create accounts table and the updated_at trigger function

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE accounts (
            id          VARCHAR(64)     PRIMARY KEY,
            balance     NUMERIC(18, 2)  NOT NULL DEFAULT 0,
            blocked     NUMERIC(18, 2)  NOT NULL DEFAULT 0,
            status      VARCHAR(16)     NOT NULL DEFAULT 'PENDING',
            kyc_status  VARCHAR(16)     NOT NULL DEFAULT 'NOT_SUBMITTED',
            version     BIGINT          NOT NULL DEFAULT 0,
            entry_seq   BIGINT          NOT NULL DEFAULT 0,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_accounts_balance_gte_0    CHECK (balance >= 0),
            CONSTRAINT ck_accounts_blocked_gte_0    CHECK (blocked >= 0),
            CONSTRAINT ck_accounts_blocked_lte_bal  CHECK (blocked <= balance),
            CONSTRAINT ck_accounts_status CHECK (status IN ('PENDING', 'ACTIVE', 'DISABLED')),
            CONSTRAINT ck_accounts_kyc_status CHECK (
                kyc_status IN ('NOT_SUBMITTED', 'PENDING', 'APPROVED', 'REJECTED')
            )
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_accounts_updated_at
            BEFORE UPDATE ON accounts
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE accounts IS 'Cash accounts; balance includes blocked funds';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
