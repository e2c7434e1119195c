"""006: create transactions table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id              BIGSERIAL       PRIMARY KEY,
            user_id         BIGINT          NOT NULL REFERENCES users (id),
            amount          NUMERIC(12, 2)  NOT NULL,
            type            VARCHAR(20)     NOT NULL,
            method          VARCHAR(10),
            status          VARCHAR(10)     NOT NULL,
            reference_id    VARCHAR(64),
            details         TEXT,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_type CHECK (
                type IN ('deposit', 'withdraw', 'tournament_entry', 'tournament_win')
            ),
            CONSTRAINT ck_transactions_method CHECK (
                method IS NULL OR method IN ('bkash', 'nagad', 'wallet')
            ),
            CONSTRAINT ck_transactions_status CHECK (
                status IN ('pending', 'completed', 'rejected', 'failed')
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_transactions_user_created ON transactions (user_id, created_at DESC);"
    )
    op.execute("CREATE INDEX idx_transactions_status ON transactions (status, type);")
    op.execute("""
        CREATE TRIGGER trg_transactions_updated_at
            BEFORE UPDATE ON transactions
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute(
        "COMMENT ON TABLE transactions IS "
        "'Audit trail; signed amount (debits negative), status updated in place';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
