"""TournamentRepository — concrete implementation of TournamentRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Slot accounting is never read-modify-write: the increment is a single guarded
UPDATE that refuses to move filled_slots past max_slots.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.enums import TournamentMode, TournamentStatus
from src.tw_common.errors import InternalError
from src.tw_tournament.domain.models import NewTournament, Participant, Tournament

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_T_COLUMNS = """id, title, description, entry_fee, prize_pool,
              max_slots, filled_slots, start_time, end_time,
              mode, status, image_path, created_at"""

_P_COLUMNS = "id, tournament_id, user_id, registered_at, position, is_paid"

_GET_TOURNAMENT_SQL = text(f"""
    SELECT {_T_COLUMNS}
    FROM tournaments
    WHERE id = :tournament_id
""")

# Serializes joins per tournament until the caller's transaction ends
_GET_TOURNAMENT_FOR_UPDATE_SQL = text(f"""
    SELECT {_T_COLUMNS}
    FROM tournaments
    WHERE id = :tournament_id
    FOR UPDATE
""")

_LIST_TOURNAMENTS_SQL = text(f"""
    SELECT {_T_COLUMNS}
    FROM tournaments
    WHERE
        (CAST(:mode AS TEXT) IS NULL OR mode = CAST(:mode AS TEXT))
        AND (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
        AND (CAST(:min_fee AS NUMERIC) IS NULL OR entry_fee >= CAST(:min_fee AS NUMERIC))
        AND (CAST(:max_fee AS NUMERIC) IS NULL OR entry_fee <= CAST(:max_fee AS NUMERIC))
    ORDER BY start_time ASC, id ASC
    LIMIT :limit OFFSET :offset
""")

_UPCOMING_SQL = text(f"""
    SELECT {_T_COLUMNS}
    FROM tournaments
    WHERE status = 'upcoming' AND start_time >= :now
    ORDER BY start_time ASC, id ASC
    LIMIT 1
""")

_INSERT_TOURNAMENT_SQL = text(f"""
    INSERT INTO tournaments
        (title, description, entry_fee, prize_pool, max_slots, filled_slots,
         start_time, end_time, mode, status, image_path)
    VALUES
        (:title, :description, :entry_fee, :prize_pool, :max_slots, 0,
         :start_time, :end_time, :mode, :status, :image_path)
    RETURNING {_T_COLUMNS}
""")

_LIST_PARTICIPANTS_SQL = text(f"""
    SELECT {_P_COLUMNS}
    FROM tournament_participants
    WHERE tournament_id = :tournament_id
    ORDER BY registered_at ASC, id ASC
""")

_IS_REGISTERED_SQL = text("""
    SELECT 1
    FROM tournament_participants
    WHERE tournament_id = :tournament_id AND user_id = :user_id
""")

# UNIQUE(tournament_id, user_id) backs up the in-transaction check
_INSERT_PARTICIPANT_SQL = text(f"""
    INSERT INTO tournament_participants (tournament_id, user_id, is_paid)
    VALUES (:tournament_id, :user_id, :is_paid)
    ON CONFLICT (tournament_id, user_id) DO NOTHING
    RETURNING {_P_COLUMNS}
""")

_INCREMENT_SLOTS_SQL = text(f"""
    UPDATE tournaments
    SET filled_slots = filled_slots + 1
    WHERE id = :tournament_id AND filled_slots < max_slots
    RETURNING {_T_COLUMNS}
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------

def _row_to_tournament(row: object) -> Tournament:
    return Tournament(
        id=row.id,  # type: ignore[attr-defined]
        title=row.title,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        entry_fee=Decimal(row.entry_fee),  # type: ignore[attr-defined]
        prize_pool=Decimal(row.prize_pool),  # type: ignore[attr-defined]
        max_slots=row.max_slots,  # type: ignore[attr-defined]
        filled_slots=row.filled_slots,  # type: ignore[attr-defined]
        start_time=row.start_time,  # type: ignore[attr-defined]
        end_time=row.end_time,  # type: ignore[attr-defined]
        mode=TournamentMode(row.mode),  # type: ignore[attr-defined]
        status=TournamentStatus(row.status),  # type: ignore[attr-defined]
        image_path=row.image_path,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_participant(row: object) -> Participant:
    return Participant(
        id=row.id,  # type: ignore[attr-defined]
        tournament_id=row.tournament_id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        registered_at=row.registered_at,  # type: ignore[attr-defined]
        position=row.position,  # type: ignore[attr-defined]
        is_paid=row.is_paid,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class TournamentRepository:
    async def get_tournament(
        self, db: AsyncSession, tournament_id: int, for_update: bool = False
    ) -> Tournament | None:
        sql = _GET_TOURNAMENT_FOR_UPDATE_SQL if for_update else _GET_TOURNAMENT_SQL
        result = await db.execute(sql, {"tournament_id": tournament_id})
        row = result.fetchone()
        return _row_to_tournament(row) if row else None

    async def list_tournaments(
        self,
        db: AsyncSession,
        mode: TournamentMode | None,
        status: TournamentStatus | None,
        min_fee: Decimal | None,
        max_fee: Decimal | None,
        limit: int,
        offset: int,
    ) -> list[Tournament]:
        result = await db.execute(
            _LIST_TOURNAMENTS_SQL,
            {
                "mode": mode.value if mode is not None else None,
                "status": status.value if status is not None else None,
                "min_fee": min_fee,
                "max_fee": max_fee,
                "limit": limit,
                "offset": offset,
            },
        )
        return [_row_to_tournament(row) for row in result.fetchall()]

    async def get_upcoming(self, db: AsyncSession, now: datetime) -> Tournament | None:
        result = await db.execute(_UPCOMING_SQL, {"now": now})
        row = result.fetchone()
        return _row_to_tournament(row) if row else None

    async def create_tournament(self, db: AsyncSession, data: NewTournament) -> Tournament:
        result = await db.execute(
            _INSERT_TOURNAMENT_SQL,
            {
                "title": data.title,
                "description": data.description,
                "entry_fee": data.entry_fee,
                "prize_pool": data.prize_pool,
                "max_slots": data.max_slots,
                "start_time": data.start_time,
                "end_time": data.end_time,
                "mode": data.mode.value,
                "status": data.status.value,
                "image_path": data.image_path,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Tournament insert returned no rows — this should never happen")
        return _row_to_tournament(row)

    async def list_participants(
        self, db: AsyncSession, tournament_id: int
    ) -> list[Participant]:
        result = await db.execute(_LIST_PARTICIPANTS_SQL, {"tournament_id": tournament_id})
        return [_row_to_participant(row) for row in result.fetchall()]

    async def is_registered(
        self, db: AsyncSession, tournament_id: int, user_id: int
    ) -> bool:
        result = await db.execute(
            _IS_REGISTERED_SQL, {"tournament_id": tournament_id, "user_id": user_id}
        )
        return result.fetchone() is not None

    async def insert_participant(
        self, db: AsyncSession, tournament_id: int, user_id: int, is_paid: bool
    ) -> Participant | None:
        """None when the (tournament, user) pair already exists."""
        result = await db.execute(
            _INSERT_PARTICIPANT_SQL,
            {"tournament_id": tournament_id, "user_id": user_id, "is_paid": is_paid},
        )
        row = result.fetchone()
        return _row_to_participant(row) if row else None

    async def increment_filled_slots(
        self, db: AsyncSession, tournament_id: int
    ) -> Tournament | None:
        """Take one slot. None when the tournament is already full (or missing)."""
        result = await db.execute(_INCREMENT_SLOTS_SQL, {"tournament_id": tournament_id})
        row = result.fetchone()
        return _row_to_tournament(row) if row else None
