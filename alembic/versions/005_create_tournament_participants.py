"""005: create tournament_participants table

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE tournament_participants (
            id              BIGSERIAL   PRIMARY KEY,
            tournament_id   BIGINT      NOT NULL REFERENCES tournaments (id),
            user_id         BIGINT      NOT NULL REFERENCES users (id),
            registered_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            position        INTEGER,
            is_paid         BOOLEAN     NOT NULL DEFAULT FALSE,
            CONSTRAINT uq_participants_tournament_user UNIQUE (tournament_id, user_id)
        );
    """)
    op.execute("CREATE INDEX idx_participants_user ON tournament_participants (user_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS tournament_participants CASCADE;")
