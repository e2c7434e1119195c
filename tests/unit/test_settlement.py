"""Unit tests for settlement policy, SettlementService and SettlementQueue."""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.tw_common.enums import (
    PaymentMethod,
    SettlementTrigger,
    TransactionStatus,
    TransactionType,
)
from src.tw_common.errors import InvalidStateError
from src.tw_settlement.domain.policy import settle_delay_seconds, settlement_trigger
from src.tw_settlement.domain.service import SettlementService
from src.tw_settlement.infrastructure.queue import DUE_KEY, SettlementQueue
from src.tw_wallet.domain.models import Transaction, Wallet


def _tx(
    tx_type: TransactionType,
    amount: str,
    status: TransactionStatus = TransactionStatus.COMPLETED,
) -> Transaction:
    return Transaction(
        id=100,
        user_id=1,
        amount=Decimal(amount),
        type=tx_type,
        method=PaymentMethod.BKASH,
        status=status,
    )


def _wallet(balance: str) -> Wallet:
    return Wallet(id=10, user_id=1, balance=Decimal(balance))


class TestPolicy:
    def test_auto_deposit_method(self) -> None:
        assert settlement_trigger(
            TransactionType.DEPOSIT, PaymentMethod.BKASH, ["bkash"]
        ) is SettlementTrigger.AUTO

    def test_other_deposit_method_needs_admin(self) -> None:
        assert settlement_trigger(
            TransactionType.DEPOSIT, PaymentMethod.NAGAD, ["bkash"]
        ) is SettlementTrigger.ADMIN

    def test_withdraw_is_always_auto(self) -> None:
        assert settlement_trigger(
            TransactionType.WITHDRAW, PaymentMethod.NAGAD, []
        ) is SettlementTrigger.AUTO

    @pytest.mark.parametrize(
        "tx_type", [TransactionType.TOURNAMENT_ENTRY, TransactionType.TOURNAMENT_WIN]
    )
    def test_tournament_types_never_settle(self, tx_type) -> None:
        with pytest.raises(InvalidStateError):
            settlement_trigger(tx_type, PaymentMethod.WALLET, ["bkash"])
        with pytest.raises(InvalidStateError):
            settle_delay_seconds(tx_type)

    def test_delays_come_from_settings(self) -> None:
        with patch("src.tw_settlement.domain.policy.settings") as s:
            s.DEPOSIT_SETTLE_DELAY_SECONDS = 3
            s.WITHDRAW_SETTLE_DELAY_SECONDS = 5
            assert settle_delay_seconds(TransactionType.DEPOSIT) == 3
            assert settle_delay_seconds(TransactionType.WITHDRAW) == 5


class TestComplete:
    async def test_deposit_credits_amount(self) -> None:
        repo = AsyncMock()
        repo.transition_status.return_value = _tx(TransactionType.DEPOSIT, "1000.00")
        repo.apply_delta.return_value = _wallet("1000.00")

        result = await SettlementService(repo).complete(MagicMock(), 100)

        repo.transition_status.assert_awaited_once()
        assert repo.transition_status.call_args[0][2:] == (
            TransactionStatus.PENDING, TransactionStatus.COMPLETED,
        )
        assert repo.apply_delta.call_args[0][1:] == (1, Decimal("1000.00"))
        assert result is not None
        assert result.wallet.balance == Decimal("1000.00")

    async def test_second_settlement_is_a_noop(self) -> None:
        repo = AsyncMock()
        repo.transition_status.return_value = None

        result = await SettlementService(repo).complete(MagicMock(), 100)

        assert result is None
        repo.apply_delta.assert_not_called()

    async def test_withdraw_has_no_further_delta(self) -> None:
        repo = AsyncMock()
        repo.transition_status.return_value = _tx(TransactionType.WITHDRAW, "-200.00")
        repo.get_wallet.return_value = _wallet("300.00")

        result = await SettlementService(repo).complete(MagicMock(), 100)

        repo.apply_delta.assert_not_called()
        assert result.wallet.balance == Decimal("300.00")

    async def test_tournament_entry_cannot_settle(self) -> None:
        repo = AsyncMock()
        repo.transition_status.return_value = _tx(TransactionType.TOURNAMENT_ENTRY, "-50.00")
        with pytest.raises(InvalidStateError):
            await SettlementService(repo).complete(MagicMock(), 100)


class TestReject:
    async def test_deposit_reject_leaves_balance(self) -> None:
        repo = AsyncMock()
        repo.transition_status.return_value = _tx(
            TransactionType.DEPOSIT, "500.00", TransactionStatus.REJECTED
        )
        repo.get_wallet.return_value = _wallet("0.00")

        result = await SettlementService(repo).reject(MagicMock(), 100)

        repo.apply_delta.assert_not_called()
        assert result.transaction.status is TransactionStatus.REJECTED

    async def test_withdraw_reject_refunds(self) -> None:
        repo = AsyncMock()
        repo.transition_status.return_value = _tx(
            TransactionType.WITHDRAW, "-200.00", TransactionStatus.REJECTED
        )
        repo.apply_delta.return_value = _wallet("500.00")

        await SettlementService(repo).reject(MagicMock(), 100)

        assert repo.apply_delta.call_args[0][1:] == (1, Decimal("200.00"))


class TestSettlementQueue:
    NOW = datetime(2026, 1, 1, tzinfo=UTC)

    async def test_schedule_uses_nx_and_due_time(self) -> None:
        redis = AsyncMock()
        redis.zadd.return_value = 1
        added = await SettlementQueue(redis).schedule(42, 3, now=self.NOW)
        assert added is True
        redis.zadd.assert_awaited_once_with(
            DUE_KEY, {"42": self.NOW.timestamp() + 3}, nx=True
        )

    async def test_schedule_existing_returns_false(self) -> None:
        redis = AsyncMock()
        redis.zadd.return_value = 0
        assert await SettlementQueue(redis).schedule(42, 3) is False

    async def test_claim_only_items_this_caller_removed(self) -> None:
        redis = AsyncMock()
        redis.zrangebyscore.return_value = ["1", "2", "3"]
        redis.zrem.side_effect = [1, 0, 1]  # "2" was claimed by someone else
        claimed = await SettlementQueue(redis).claim_due(now=self.NOW)
        assert claimed == [1, 3]

    async def test_is_scheduled(self) -> None:
        redis = AsyncMock()
        redis.zscore.return_value = None
        assert await SettlementQueue(redis).is_scheduled(5) is False
        redis.zscore.return_value = 1767225600.0
        assert await SettlementQueue(redis).is_scheduled(5) is True
