"""Unit tests for SettlementWorker with fake sessions and a mock queue."""

import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.tw_common.enums import PaymentMethod, TransactionStatus, TransactionType
from src.tw_settlement.application.worker import SettlementWorker
from src.tw_settlement.domain.service import SettlementResult
from src.tw_wallet.domain.models import Transaction, Wallet


class _FakeSession:
    def __init__(self) -> None:
        self.began = 0

    @asynccontextmanager
    async def begin(self):
        self.began += 1
        yield self


def _session_factory() -> MagicMock:
    session = _FakeSession()

    @asynccontextmanager
    async def _open():
        yield session

    factory = MagicMock(side_effect=lambda: _open())
    factory.session = session
    return factory


def _tx(
    tx_id: int,
    tx_type: TransactionType = TransactionType.DEPOSIT,
    method: PaymentMethod = PaymentMethod.BKASH,
    status: TransactionStatus = TransactionStatus.PENDING,
    amount: str = "100.00",
) -> Transaction:
    return Transaction(
        id=tx_id, user_id=1, amount=Decimal(amount), type=tx_type, method=method, status=status
    )


def _worker(service=None, repo=None, queue=None, notifier=None) -> SettlementWorker:
    return SettlementWorker(
        queue=queue or AsyncMock(),
        session_factory=_session_factory(),
        notifier=notifier or AsyncMock(),
        service=service or AsyncMock(),
        repo=repo or AsyncMock(),
        poll_interval=0.01,
    )


class TestSettle:
    async def test_success_notifies_owner_with_new_balance(self) -> None:
        service = AsyncMock()
        completed = _tx(7, status=TransactionStatus.COMPLETED)
        service.complete.return_value = SettlementResult(
            transaction=completed, wallet=Wallet(id=1, user_id=1, balance=Decimal("600.00"))
        )
        notifier = AsyncMock()
        worker = _worker(service=service, notifier=notifier)

        assert await worker.settle(7) is True

        user_id, event = notifier.notify_user.call_args[0]
        assert user_id == 1
        assert event["type"] == "transaction_update"
        assert event["status"] == "completed"
        assert event["walletUpdate"]["newBalance"] == "600.00"

    async def test_already_settled_does_not_notify(self) -> None:
        service = AsyncMock()
        service.complete.return_value = None
        notifier = AsyncMock()
        worker = _worker(service=service, notifier=notifier)

        assert await worker.settle(7) is False
        notifier.notify_user.assert_not_called()

    async def test_failure_is_logged_and_swallowed(self, caplog) -> None:
        service = AsyncMock()
        service.complete.side_effect = RuntimeError("db gone")
        notifier = AsyncMock()
        worker = _worker(service=service, notifier=notifier)

        assert await worker.settle(7) is False
        notifier.notify_user.assert_not_called()
        assert "left pending" in caplog.text


class TestRunOnce:
    async def test_settles_every_claimed_id(self) -> None:
        queue = AsyncMock()
        queue.claim_due.return_value = [1, 2]
        service = AsyncMock()
        service.complete.return_value = None
        worker = _worker(service=service, queue=queue)

        assert await worker.run_once() == 2
        assert [c.args[1] for c in service.complete.call_args_list] == [1, 2]

    async def test_one_failure_does_not_stop_the_batch(self) -> None:
        queue = AsyncMock()
        queue.claim_due.return_value = [1, 2]
        service = AsyncMock()
        service.complete.side_effect = [RuntimeError("boom"), None]
        worker = _worker(service=service, queue=queue)

        await worker.run_once()
        assert service.complete.await_count == 2


class TestRecover:
    async def test_requeues_only_auto_pending(self) -> None:
        repo = AsyncMock()
        repo.list_by_status.return_value = [
            _tx(1, TransactionType.DEPOSIT, PaymentMethod.BKASH),
            _tx(2, TransactionType.DEPOSIT, PaymentMethod.NAGAD),
            _tx(3, TransactionType.WITHDRAW, PaymentMethod.NAGAD, amount="-50.00"),
        ]
        queue = AsyncMock()
        queue.schedule.return_value = True
        worker = _worker(repo=repo, queue=queue)

        recovered = await worker.recover()

        assert recovered == 2
        assert [c.args for c in queue.schedule.call_args_list] == [(1, 0), (3, 0)]


class TestLifecycle:
    async def test_start_and_stop(self) -> None:
        queue = AsyncMock()
        queue.claim_due.return_value = []
        worker = _worker(queue=queue)

        worker.start()
        assert worker.running
        await asyncio.sleep(0.05)
        await worker.stop()

        assert not worker.running
        assert queue.claim_due.await_count >= 1

    async def test_poll_error_keeps_running(self) -> None:
        queue = AsyncMock()
        queue.claim_due.side_effect = ConnectionError("redis")
        worker = _worker(queue=queue)

        worker.start()
        await asyncio.sleep(0.05)
        assert worker.running
        await worker.stop()
