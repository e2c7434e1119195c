"""Admin application service — moderation of pending money movements.

approve: pending DEPOSIT -> completed, balance credited.
reject:  pending DEPOSIT -> rejected (no balance effect),
         pending WITHDRAW -> rejected, reserved funds refunded.

The transaction row is locked (SELECT ... FOR UPDATE) before any check, so a
concurrent worker settlement either finishes first (admin then sees a
non-pending row) or waits and then finds nothing to flip.

A deposit still sitting in the settlement queue belongs to the timed worker
and cannot be approved by hand; once the worker gave up on it the row is no
longer queued and admin approval is the way to finish it.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_admin.application.schemas import InvariantReport, ModerationResponse
from src.tw_common.enums import TransactionStatus, TransactionType
from src.tw_common.errors import InvalidStateError, TransactionNotFoundError
from src.tw_realtime.domain.events import transaction_update
from src.tw_realtime.domain.hub import Notifier
from src.tw_settlement.domain.service import SettlementResult, SettlementService
from src.tw_settlement.infrastructure.queue import SettlementQueue
from src.tw_wallet.application.schemas import TransactionItem
from src.tw_wallet.domain.invariants import verify_wallet_invariants
from src.tw_wallet.domain.models import Transaction
from src.tw_wallet.domain.repository import WalletRepositoryProtocol
from src.tw_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)

_MODERATED_TYPES = (TransactionType.DEPOSIT, TransactionType.WITHDRAW)


class AdminService:
    def __init__(
        self,
        repo: WalletRepositoryProtocol | None = None,
        settlement: SettlementService | None = None,
    ) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()
        self._settlement = settlement or SettlementService(self._repo)

    async def list_pending(
        self,
        db: AsyncSession,
        tx_type: TransactionType | None,
        limit: int,
        offset: int,
    ) -> list[TransactionItem]:
        txs = await self._repo.list_by_status(
            db, TransactionStatus.PENDING, tx_type, limit, offset
        )
        return [TransactionItem.from_domain(tx) for tx in txs]

    async def approve_deposit(
        self,
        db: AsyncSession,
        transaction_id: int,
        queue: SettlementQueue,
        notifier: Notifier,
    ) -> ModerationResponse:
        try:
            tx = await self._lock_pending(db, transaction_id)
            if tx.type is not TransactionType.DEPOSIT:
                raise InvalidStateError(f"only deposits can be approved, got {tx.type.value}")
            if await queue.is_scheduled(tx.id):
                raise InvalidStateError(
                    f"transaction {tx.id} is scheduled for automatic settlement"
                )
            result = await self._settlement.complete(db, tx.id)
            if result is None:
                raise InvalidStateError(f"transaction {tx.id} is no longer pending")
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Admin approved deposit %s for user %s", tx.id, tx.user_id)
        await self._notify(result, "Your deposit has been approved", notifier)
        return ModerationResponse.from_result(result)

    async def reject_transaction(
        self,
        db: AsyncSession,
        transaction_id: int,
        notifier: Notifier,
    ) -> ModerationResponse:
        try:
            tx = await self._lock_pending(db, transaction_id)
            if tx.type not in _MODERATED_TYPES:
                raise InvalidStateError(f"{tx.type.value} transactions cannot be rejected")
            result = await self._settlement.reject(db, tx.id)
            if result is None:
                raise InvalidStateError(f"transaction {tx.id} is no longer pending")
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Admin rejected %s %s for user %s", tx.type.value, tx.id, tx.user_id)
        if tx.type is TransactionType.DEPOSIT:
            message = "Your deposit has been rejected"
        else:
            message = "Your withdrawal has been rejected and the funds returned"
        await self._notify(result, message, notifier)
        return ModerationResponse.from_result(result)

    async def verify_invariants(self, db: AsyncSession) -> InvariantReport:
        violations = await verify_wallet_invariants(db, self._repo)
        return InvariantReport(ok=not violations, violations=violations)

    async def _lock_pending(self, db: AsyncSession, transaction_id: int) -> Transaction:
        tx = await self._repo.get_transaction(db, transaction_id, for_update=True)
        if tx is None:
            raise TransactionNotFoundError(transaction_id)
        if not tx.is_pending:
            raise InvalidStateError(
                f"transaction {transaction_id} is {tx.status.value}, expected pending"
            )
        return tx

    @staticmethod
    async def _notify(result: SettlementResult, message: str, notifier: Notifier) -> None:
        await notifier.notify_user(
            result.transaction.user_id,
            transaction_update(
                result.transaction, new_balance=result.wallet.balance, message=message
            ),
        )
