"""SettlementWorker — background task that settles due transactions.

Started and stopped by the FastAPI lifespan. Each poll claims due ids from the
SettlementQueue and settles every one in its own DB session and transaction,
so one failure never affects another and the originating HTTP request (long
gone) is not involved.

A failed settlement is logged and NOT re-queued: the row stays 'pending' and
becomes eligible for manual admin resolution.
"""

import asyncio
import contextlib
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from config.settings import settings
from src.tw_common.enums import SettlementTrigger, TransactionStatus
from src.tw_realtime.domain.events import transaction_update
from src.tw_realtime.domain.hub import Notifier
from src.tw_settlement.domain.policy import settlement_trigger
from src.tw_settlement.domain.service import SettlementService
from src.tw_settlement.infrastructure.queue import SettlementQueue
from src.tw_wallet.domain.repository import WalletRepositoryProtocol
from src.tw_wallet.infrastructure.persistence import WalletRepository

logger = logging.getLogger(__name__)

_RECOVERY_PAGE_SIZE = 500


class SettlementWorker:
    def __init__(
        self,
        queue: SettlementQueue,
        session_factory: async_sessionmaker[AsyncSession],
        notifier: Notifier,
        service: SettlementService | None = None,
        repo: WalletRepositoryProtocol | None = None,
        poll_interval: float | None = None,
    ) -> None:
        self._queue = queue
        self._session_factory = session_factory
        self._notifier = notifier
        self._repo: WalletRepositoryProtocol = repo or WalletRepository()
        self._service = service or SettlementService(self._repo)
        self._poll_interval = (
            settings.SETTLEMENT_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
        )
        self._task: asyncio.Task[None] | None = None

    async def recover(self) -> int:
        """Re-enqueue every pending transaction owned by the timed path.

        Run at startup. ZADD NX keeps any schedule that survived in Redis.
        """
        recovered = 0
        offset = 0
        async with self._session_factory() as db:
            while True:
                page = await self._repo.list_by_status(
                    db, TransactionStatus.PENDING, None, _RECOVERY_PAGE_SIZE, offset
                )
                for tx in page:
                    if settlement_trigger(tx.type, tx.method) is SettlementTrigger.AUTO:
                        if await self._queue.schedule(tx.id, 0):
                            recovered += 1
                if len(page) < _RECOVERY_PAGE_SIZE:
                    break
                offset += _RECOVERY_PAGE_SIZE
        if recovered:
            logger.info("Recovered %d pending settlement(s) into the queue", recovered)
        return recovered

    async def run_once(self) -> int:
        """Settle everything currently due. Returns the number of ids claimed."""
        claimed = await self._queue.claim_due()
        for transaction_id in claimed:
            await self.settle(transaction_id)
        return len(claimed)

    async def settle(self, transaction_id: int) -> bool:
        """Settle one transaction and notify its owner. True if this call settled it."""
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    result = await self._service.complete(db, transaction_id)
        except Exception:
            logger.exception(
                "Settlement failed for transaction %s; left pending for admin resolution",
                transaction_id,
            )
            return False

        if result is None:
            return False

        await self._notifier.notify_user(
            result.transaction.user_id,
            transaction_update(result.transaction, new_balance=result.wallet.balance),
        )
        return True

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(), name="settlement-worker")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        logger.info("Settlement worker started (poll=%.1fs)", self._poll_interval)
        while True:
            try:
                await self.run_once()
            except Exception:
                # Redis hiccup: keep polling, the queue is durable
                logger.exception("Settlement poll failed")
            await asyncio.sleep(self._poll_interval)
