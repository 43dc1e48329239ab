"""003: create ledger_records table

Revision ID: 003
Revises: 002
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_records (
            record_type     VARCHAR(30)     NOT NULL,
            record_id       VARCHAR(160)    NOT NULL,
            account_id      VARCHAR(64)     REFERENCES accounts (id),
            payload         JSONB           NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (record_type, record_id)
        );
    """)
    op.execute(
        "CREATE INDEX idx_ledger_records_account ON ledger_records (account_id, record_type);"
    )
    op.execute(
        "COMMENT ON TABLE ledger_records IS "
        "'Requests, IPO applications, timed trades, positions and admin config; "
        "account rows are written with the ledger commit';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_records CASCADE;")
