"""007: seed sample tournaments

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        INSERT INTO tournaments (
            title, description, entry_fee, prize_pool, max_slots,
            start_time, end_time, mode, status
        ) VALUES
            ('Weekend Solo Showdown',
             'Every player for themselves. Top 3 share the prize pool.',
             50.00, 2000.00, 48,
             NOW() + INTERVAL '2 days', NOW() + INTERVAL '2 days 3 hours',
             'solo', 'upcoming'),
            ('Duo Clash Night',
             'Teams of two, best of three rounds.',
             100.00, 5000.00, 24,
             NOW() + INTERVAL '5 days', NOW() + INTERVAL '5 days 4 hours',
             'duo', 'upcoming'),
            ('Squad Championship',
             'Four-player squads, single elimination.',
             200.00, 15000.00, 16,
             NOW() + INTERVAL '9 days', NOW() + INTERVAL '9 days 6 hours',
             'squad', 'upcoming');
    """)


def downgrade() -> None:
    op.execute("""
        DELETE FROM tournaments
        WHERE title IN ('Weekend Solo Showdown', 'Duo Clash Night', 'Squad Championship')
          AND filled_slots = 0;
    """)
