"""WalletApplicationService — wallet reads, deposit and withdrawal initiation.

Mutating operations commit or roll back as one unit; the settlement schedule
is written to the queue only AFTER the commit, so the worker can never claim
a transaction id whose row is not yet visible.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.enums import (
    PaymentMethod,
    SettlementTrigger,
    TransactionStatus,
    TransactionType,
)
from src.tw_common.errors import (
    InvalidAmountError,
    InvalidPaymentMethodError,
    WalletNotFoundError,
)
from src.tw_common.id_generator import generate_reference_id
from src.tw_common.money import money_to_display, to_money
from src.tw_settlement.domain.policy import settle_delay_seconds, settlement_trigger
from src.tw_settlement.infrastructure.queue import SettlementQueue
from src.tw_wallet.application.schemas import (
    PaymentInitiatedResponse,
    TransactionItem,
    TransactionListResponse,
    WalletResponse,
)
from src.tw_wallet.domain.models import Transaction, Wallet
from src.tw_wallet.domain.repository import WalletRepositoryProtocol
from src.tw_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)

_MOBILE_METHODS = (PaymentMethod.BKASH, PaymentMethod.NAGAD)


def _validate_payment(amount: Decimal, method: PaymentMethod) -> Decimal:
    money = to_money(amount)
    if money <= 0:
        raise InvalidAmountError(money)
    if method not in _MOBILE_METHODS:
        raise InvalidPaymentMethodError(method.value)
    return money


class WalletApplicationService:
    def __init__(self, repo: WalletRepositoryProtocol | None = None) -> None:
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()

    async def get_wallet(self, db: AsyncSession, user_id: int) -> WalletResponse:
        wallet = await self._repo.get_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError(user_id)
        return WalletResponse.from_domain(wallet)

    async def list_transactions(
        self, db: AsyncSession, user_id: int, limit: int, offset: int
    ) -> TransactionListResponse:
        txs = await self._repo.list_transactions(db, user_id, limit, offset)
        return TransactionListResponse(
            items=[TransactionItem.from_domain(tx) for tx in txs],
            limit=limit,
            offset=offset,
        )

    async def initiate_deposit(
        self,
        db: AsyncSession,
        user_id: int,
        amount: Decimal,
        method: PaymentMethod,
        phone: str,
        queue: SettlementQueue,
    ) -> PaymentInitiatedResponse:
        """Record a pending deposit. The balance is untouched until settlement."""
        money = _validate_payment(amount, method)
        try:
            wallet = await self._repo.get_wallet(db, user_id)
            if wallet is None:
                raise WalletNotFoundError(user_id)
            tx = await self._repo.create_transaction(
                db,
                user_id,
                money,
                TransactionType.DEPOSIT,
                method,
                TransactionStatus.PENDING,
                generate_reference_id("DEP"),
                f"Deposit via {method.value} from {phone}",
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        trigger = settlement_trigger(tx.type, tx.method)
        if trigger is SettlementTrigger.AUTO:
            await self._schedule(queue, tx)
        return self._initiated(tx, trigger, wallet)

    async def initiate_withdraw(
        self,
        db: AsyncSession,
        user_id: int,
        amount: Decimal,
        method: PaymentMethod,
        phone: str,
        queue: SettlementQueue,
    ) -> PaymentInitiatedResponse:
        """Debit immediately (reserves the funds) and record a pending withdrawal."""
        money = _validate_payment(amount, method)
        try:
            wallet = await self._repo.debit(db, user_id, money)
            tx = await self._repo.create_transaction(
                db,
                user_id,
                -money,
                TransactionType.WITHDRAW,
                method,
                TransactionStatus.PENDING,
                generate_reference_id("WDR"),
                f"Withdraw via {method.value} to {phone}",
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        trigger = settlement_trigger(tx.type, tx.method)
        await self._schedule(queue, tx)
        return self._initiated(tx, trigger, wallet)

    async def _schedule(self, queue: SettlementQueue, tx: Transaction) -> None:
        try:
            await queue.schedule(tx.id, settle_delay_seconds(tx.type))
        except Exception:
            # Row is committed as pending; SettlementWorker.recover() re-enqueues it
            logger.exception("Could not enqueue settlement for transaction %s", tx.id)

    @staticmethod
    def _initiated(
        tx: Transaction, trigger: SettlementTrigger, wallet: Wallet
    ) -> PaymentInitiatedResponse:
        return PaymentInitiatedResponse(
            transaction=TransactionItem.from_domain(tx),
            settlement=trigger.value,
            balance=wallet.balance,
            balance_display=money_to_display(wallet.balance),
        )
