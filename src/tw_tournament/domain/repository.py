"""Repository Protocol — dependency inversion for testability."""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.enums import TournamentMode, TournamentStatus
from src.tw_tournament.domain.models import NewTournament, Participant, Tournament


class TournamentRepositoryProtocol(Protocol):
    async def get_tournament(
        self, db: AsyncSession, tournament_id: int, for_update: bool = False
    ) -> Tournament | None: ...

    async def list_tournaments(
        self,
        db: AsyncSession,
        mode: TournamentMode | None,
        status: TournamentStatus | None,
        min_fee: Decimal | None,
        max_fee: Decimal | None,
        limit: int,
        offset: int,
    ) -> list[Tournament]: ...

    async def get_upcoming(self, db: AsyncSession, now: datetime) -> Tournament | None: ...

    async def create_tournament(self, db: AsyncSession, data: NewTournament) -> Tournament: ...

    async def list_participants(
        self, db: AsyncSession, tournament_id: int
    ) -> list[Participant]: ...

    async def is_registered(
        self, db: AsyncSession, tournament_id: int, user_id: int
    ) -> bool: ...

    async def insert_participant(
        self, db: AsyncSession, tournament_id: int, user_id: int, is_paid: bool
    ) -> Participant | None: ...

    async def increment_filled_slots(
        self, db: AsyncSession, tournament_id: int
    ) -> Tournament | None: ...
