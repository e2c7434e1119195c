"""TournamentApplicationService — browsing, admin creation and the join workflow.

joinTournament runs as ONE database transaction:

  1. lock the tournament row (SELECT ... FOR UPDATE)  -> TournamentNotFound
  2. filled_slots < max_slots                         -> TournamentFull
  3. no participant row for (tournament, user)        -> AlreadyRegistered
  4. guarded debit of the entry fee                   -> InsufficientBalance
  5. completed tournament_entry transaction (-fee)
  6. participant row (is_paid)
  7. guarded filled_slots + 1

Any failure rolls back every row change. The slot-update broadcast happens
only after the commit succeeded.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.datetime_utils import utc_now
from src.tw_common.enums import (
    PaymentMethod,
    TournamentMode,
    TournamentStatus,
    TransactionStatus,
    TransactionType,
)
from src.tw_common.errors import (
    AlreadyRegisteredError,
    NoUpcomingTournamentError,
    TournamentFullError,
    TournamentNotFoundError,
)
from src.tw_common.id_generator import generate_reference_id
from src.tw_common.money import money_to_display
from src.tw_realtime.domain.events import tournament_update
from src.tw_realtime.domain.hub import Notifier
from src.tw_tournament.application.schemas import (
    CreateTournamentRequest,
    JoinTournamentResponse,
    ParticipantResponse,
    TournamentListResponse,
    TournamentResponse,
)
from src.tw_tournament.domain.repository import TournamentRepositoryProtocol
from src.tw_tournament.infrastructure.persistence import TournamentRepository
from src.tw_wallet.application.schemas import TransactionItem
from src.tw_wallet.domain.repository import WalletRepositoryProtocol
from src.tw_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


class TournamentApplicationService:
    def __init__(
        self,
        repo: TournamentRepositoryProtocol | None = None,
        wallet_repo: WalletRepositoryProtocol | None = None,
    ) -> None:
        self._repo: TournamentRepositoryProtocol = repo or TournamentRepository()
        self._wallet_repo: WalletRepositoryProtocol = wallet_repo or WalletRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_tournaments(
        self,
        db: AsyncSession,
        mode: TournamentMode | None,
        status: TournamentStatus | None,
        min_fee: Decimal | None,
        max_fee: Decimal | None,
        limit: int,
        offset: int,
    ) -> TournamentListResponse:
        tournaments = await self._repo.list_tournaments(
            db, mode, status, min_fee, max_fee, limit, offset
        )
        return TournamentListResponse(
            items=[TournamentResponse.from_domain(t) for t in tournaments],
            limit=limit,
            offset=offset,
        )

    async def get_tournament(self, db: AsyncSession, tournament_id: int) -> TournamentResponse:
        tournament = await self._repo.get_tournament(db, tournament_id)
        if tournament is None:
            raise TournamentNotFoundError(tournament_id)
        return TournamentResponse.from_domain(tournament)

    async def get_upcoming(self, db: AsyncSession) -> TournamentResponse:
        """Next 'upcoming' tournament whose start time has not passed yet."""
        tournament = await self._repo.get_upcoming(db, utc_now())
        if tournament is None:
            raise NoUpcomingTournamentError()
        return TournamentResponse.from_domain(tournament)

    async def list_participants(
        self, db: AsyncSession, tournament_id: int
    ) -> list[ParticipantResponse]:
        if await self._repo.get_tournament(db, tournament_id) is None:
            raise TournamentNotFoundError(tournament_id)
        participants = await self._repo.list_participants(db, tournament_id)
        return [ParticipantResponse.from_domain(p) for p in participants]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_tournament(
        self, db: AsyncSession, request: CreateTournamentRequest
    ) -> TournamentResponse:
        try:
            tournament = await self._repo.create_tournament(db, request.to_domain())
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Tournament %s created: %s", tournament.id, tournament.title)
        return TournamentResponse.from_domain(tournament)

    async def join_tournament(
        self,
        db: AsyncSession,
        user_id: int,
        tournament_id: int,
        notifier: Notifier,
    ) -> JoinTournamentResponse:
        try:
            tournament = await self._repo.get_tournament(db, tournament_id, for_update=True)
            if tournament is None:
                raise TournamentNotFoundError(tournament_id)
            if tournament.is_full:
                raise TournamentFullError(tournament_id)
            if await self._repo.is_registered(db, tournament_id, user_id):
                raise AlreadyRegisteredError(tournament_id)

            fee = tournament.entry_fee
            wallet = await self._wallet_repo.debit(db, user_id, fee)
            tx = await self._wallet_repo.create_transaction(
                db,
                user_id,
                -fee,
                TransactionType.TOURNAMENT_ENTRY,
                PaymentMethod.WALLET,
                TransactionStatus.COMPLETED,
                generate_reference_id("TRN"),
                f"Joined tournament: {tournament.title} (ID: {tournament.id})",
            )
            participant = await self._repo.insert_participant(
                db, tournament_id, user_id, is_paid=True
            )
            if participant is None:
                raise AlreadyRegisteredError(tournament_id)
            updated = await self._repo.increment_filled_slots(db, tournament_id)
            if updated is None:
                raise TournamentFullError(tournament_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            "User %s joined tournament %s (%d/%d), fee=%s",
            user_id, tournament_id, updated.filled_slots, updated.max_slots, fee,
        )
        await notifier.broadcast_to_tournament(
            tournament_id,
            tournament_update(tournament_id, updated.filled_slots, updated.max_slots),
        )
        return JoinTournamentResponse(
            participant=ParticipantResponse.from_domain(participant),
            transaction=TransactionItem.from_domain(tx),
            filled_slots=updated.filled_slots,
            max_slots=updated.max_slots,
            balance=wallet.balance,
            balance_display=money_to_display(wallet.balance),
        )
