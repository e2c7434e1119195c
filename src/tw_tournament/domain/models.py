"""Domain models for tw_tournament — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.tw_common.enums import TournamentMode, TournamentStatus


@dataclass
class Tournament:
    id: int
    title: str
    entry_fee: Decimal
    prize_pool: Decimal
    max_slots: int
    filled_slots: int
    start_time: datetime
    mode: TournamentMode
    status: TournamentStatus
    description: str | None = None
    end_time: datetime | None = None
    image_path: str | None = None
    created_at: datetime | None = None

    @property
    def is_full(self) -> bool:
        return self.filled_slots >= self.max_slots

    @property
    def open_slots(self) -> int:
        return max(self.max_slots - self.filled_slots, 0)


@dataclass
class Participant:
    id: int
    tournament_id: int
    user_id: int
    is_paid: bool
    registered_at: datetime | None = None
    position: int | None = None


@dataclass
class NewTournament:
    """Admin input for creating a tournament; filled_slots always starts at 0."""

    title: str
    entry_fee: Decimal
    prize_pool: Decimal
    max_slots: int
    start_time: datetime
    mode: TournamentMode
    status: TournamentStatus = TournamentStatus.UPCOMING
    description: str | None = None
    end_time: datetime | None = None
    image_path: str | None = None
