"""Settlement — the step that finalizes a pending deposit/withdrawal.

Both operations run inside the CALLER's DB transaction and are idempotent:
the status flip is a conditional UPDATE (status must still be 'pending'), so
a second call for the same transaction id changes nothing and returns None.

Balance effect by type:
  complete deposit   -> +amount credited now
  complete withdraw  -> none (debited when the withdrawal was requested)
  reject deposit     -> none
  reject withdraw    -> reserved funds refunded
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.enums import TransactionStatus, TransactionType
from src.tw_common.errors import InvalidStateError, WalletNotFoundError
from src.tw_wallet.domain.models import Transaction, Wallet
from src.tw_wallet.domain.repository import WalletRepositoryProtocol
from src.tw_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)


@dataclass
class SettlementResult:
    transaction: Transaction
    wallet: Wallet


class SettlementService:
    def __init__(self, repo: WalletRepositoryProtocol | None = None) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()

    async def complete(
        self, db: AsyncSession, transaction_id: int
    ) -> SettlementResult | None:
        tx = await self._repo.transition_status(
            db, transaction_id, TransactionStatus.PENDING, TransactionStatus.COMPLETED
        )
        if tx is None:
            logger.info("Settlement skipped: transaction %s is no longer pending", transaction_id)
            return None

        if tx.type is TransactionType.DEPOSIT:
            wallet = await self._repo.apply_delta(db, tx.user_id, tx.amount)
        elif tx.type is TransactionType.WITHDRAW:
            wallet = await self._require_wallet(db, tx.user_id)
        else:
            raise InvalidStateError(f"{tx.type.value} transaction {tx.id} cannot be settled")

        logger.info(
            "Settled %s transaction %s: user=%s amount=%s balance=%s",
            tx.type.value, tx.id, tx.user_id, tx.amount, wallet.balance,
        )
        return SettlementResult(transaction=tx, wallet=wallet)

    async def reject(
        self, db: AsyncSession, transaction_id: int
    ) -> SettlementResult | None:
        tx = await self._repo.transition_status(
            db, transaction_id, TransactionStatus.PENDING, TransactionStatus.REJECTED
        )
        if tx is None:
            return None

        if tx.type is TransactionType.DEPOSIT:
            wallet = await self._require_wallet(db, tx.user_id)
        elif tx.type is TransactionType.WITHDRAW:
            # amount is stored negative; refund the reserved funds
            wallet = await self._repo.apply_delta(db, tx.user_id, -tx.amount)
        else:
            raise InvalidStateError(f"{tx.type.value} transaction {tx.id} cannot be rejected")

        logger.info(
            "Rejected %s transaction %s: user=%s amount=%s",
            tx.type.value, tx.id, tx.user_id, tx.amount,
        )
        return SettlementResult(transaction=tx, wallet=wallet)

    async def _require_wallet(self, db: AsyncSession, user_id: int) -> Wallet:
        wallet = await self._repo.get_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError(user_id)
        return wallet
