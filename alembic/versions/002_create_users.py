"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE users (
            id              BIGSERIAL       PRIMARY KEY,
            username        VARCHAR(64)     NOT NULL,
            phone           VARCHAR(11)     NOT NULL,
            password_hash   VARCHAR(255)    NOT NULL,
            player_id       VARCHAR(64),
            email           VARCHAR(255),
            is_admin        BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_username    UNIQUE (username),
            CONSTRAINT uq_users_phone       UNIQUE (phone),
            CONSTRAINT ck_users_username_len CHECK (LENGTH(username) >= 3),
            CONSTRAINT ck_users_phone_digits CHECK (phone ~ '^[0-9]{11}$')
        );
    """)
    op.execute("COMMENT ON TABLE users IS 'Players and admins; one wallet each';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
