"""004: create tournaments table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE tournaments (
            id              BIGSERIAL       PRIMARY KEY,
            title           VARCHAR(200)    NOT NULL,
            description     TEXT,
            entry_fee       NUMERIC(12, 2)  NOT NULL,
            prize_pool      NUMERIC(12, 2)  NOT NULL,
            max_slots       INTEGER         NOT NULL,
            filled_slots    INTEGER         NOT NULL DEFAULT 0,
            start_time      TIMESTAMPTZ     NOT NULL,
            end_time        TIMESTAMPTZ,
            mode            VARCHAR(10)     NOT NULL,
            status          VARCHAR(10)     NOT NULL DEFAULT 'upcoming',
            image_path      VARCHAR(255),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_tournaments_entry_fee_gte_0  CHECK (entry_fee >= 0),
            CONSTRAINT ck_tournaments_prize_pool_gte_0 CHECK (prize_pool >= 0),
            CONSTRAINT ck_tournaments_max_slots_gt_0   CHECK (max_slots > 0),
            CONSTRAINT ck_tournaments_filled_slots     CHECK (filled_slots >= 0 AND filled_slots <= max_slots),
            CONSTRAINT ck_tournaments_mode   CHECK (mode IN ('solo', 'duo', 'squad')),
            CONSTRAINT ck_tournaments_status CHECK (status IN ('upcoming', 'ongoing', 'completed'))
        );
    """)
    op.execute("CREATE INDEX idx_tournaments_status_start ON tournaments (status, start_time);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS tournaments CASCADE;")
