"""Pydantic schemas for tw_tournament API."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from src.tw_common.enums import TournamentMode, TournamentStatus
from src.tw_common.money import money_to_display
from src.tw_tournament.domain.models import NewTournament, Participant, Tournament
from src.tw_wallet.application.schemas import TransactionItem

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateTournamentRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    entry_fee: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    prize_pool: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    max_slots: int = Field(..., gt=0)
    start_time: datetime
    end_time: datetime | None = None
    mode: TournamentMode
    status: TournamentStatus = TournamentStatus.UPCOMING
    image_path: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def _end_after_start(self) -> "CreateTournamentRequest":
        if self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    def to_domain(self) -> NewTournament:
        return NewTournament(
            title=self.title,
            description=self.description,
            entry_fee=self.entry_fee,
            prize_pool=self.prize_pool,
            max_slots=self.max_slots,
            start_time=self.start_time,
            end_time=self.end_time,
            mode=self.mode,
            status=self.status,
            image_path=self.image_path,
        )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TournamentResponse(BaseModel):
    id: int
    title: str
    description: str | None
    entry_fee: Decimal
    entry_fee_display: str
    prize_pool: Decimal
    prize_pool_display: str
    max_slots: int
    filled_slots: int
    start_time: datetime
    end_time: datetime | None
    mode: str
    status: str
    image_path: str | None

    @classmethod
    def from_domain(cls, t: Tournament) -> "TournamentResponse":
        return cls(
            id=t.id,
            title=t.title,
            description=t.description,
            entry_fee=t.entry_fee,
            entry_fee_display=money_to_display(t.entry_fee),
            prize_pool=t.prize_pool,
            prize_pool_display=money_to_display(t.prize_pool),
            max_slots=t.max_slots,
            filled_slots=t.filled_slots,
            start_time=t.start_time,
            end_time=t.end_time,
            mode=t.mode.value,
            status=t.status.value,
            image_path=t.image_path,
        )


class TournamentListResponse(BaseModel):
    items: list[TournamentResponse]
    limit: int
    offset: int


class ParticipantResponse(BaseModel):
    id: int
    tournament_id: int
    user_id: int
    registered_at: datetime | None
    position: int | None
    is_paid: bool

    @classmethod
    def from_domain(cls, p: Participant) -> "ParticipantResponse":
        return cls(
            id=p.id,
            tournament_id=p.tournament_id,
            user_id=p.user_id,
            registered_at=p.registered_at,
            position=p.position,
            is_paid=p.is_paid,
        )


class JoinTournamentResponse(BaseModel):
    participant: ParticipantResponse
    transaction: TransactionItem
    filled_slots: int
    max_slots: int
    balance: Decimal
    balance_display: str
