"""Unit tests for WalletRepository using MagicMock AsyncSession."""

from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.tw_common.enums import (
    PaymentMethod,
    TransactionStatus,
    TransactionType,
)
from src.tw_common.errors import InsufficientBalanceError, WalletNotFoundError
from src.tw_wallet.infrastructure.persistence import WalletRepository


def _wallet_row(balance: str = "500.00", user_id: int = 1) -> MagicMock:
    row = MagicMock()
    row.id = 10
    row.user_id = user_id
    row.balance = Decimal(balance)
    row.updated_at = datetime.now(UTC)
    return row


def _tx_row(**kwargs) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", 100)
    row.user_id = kwargs.get("user_id", 1)
    row.amount = Decimal(kwargs.get("amount", "250.00"))
    row.type = kwargs.get("type", "deposit")
    row.method = kwargs.get("method", "bkash")
    row.status = kwargs.get("status", "pending")
    row.reference_id = kwargs.get("reference_id", "DEP-1")
    row.details = kwargs.get("details")
    row.created_at = datetime.now(UTC)
    row.updated_at = datetime.now(UTC)
    return row


def _result(row=None, rows=None) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    result.fetchall.return_value = rows or []
    return result


@pytest.fixture
def db() -> MagicMock:
    return MagicMock()


class TestApplyDelta:
    async def test_returns_updated_wallet(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_wallet_row("750.00")))
        wallet = await WalletRepository().apply_delta(db, 1, Decimal("250.00"))
        assert wallet.balance == Decimal("750.00")
        params = db.execute.call_args[0][1]
        assert params == {"user_id": 1, "amount": Decimal("250.00")}

    async def test_single_atomic_statement(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_wallet_row()))
        await WalletRepository().apply_delta(db, 1, Decimal("-10.00"))
        assert db.execute.await_count == 1
        sql = str(db.execute.call_args[0][0])
        assert "balance = balance + :amount" in sql
        assert "RETURNING" in sql

    async def test_missing_wallet(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(None))
        with pytest.raises(WalletNotFoundError):
            await WalletRepository().apply_delta(db, 99, Decimal("1.00"))


class TestDebit:
    async def test_success(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_wallet_row("300.00")))
        wallet = await WalletRepository().debit(db, 1, Decimal("200.00"))
        assert wallet.balance == Decimal("300.00")
        assert "balance >= :amount" in str(db.execute.call_args[0][0])

    async def test_insufficient_balance(self, db) -> None:
        db.execute = AsyncMock(side_effect=[_result(None), _result(_wallet_row("50.00"))])
        with pytest.raises(InsufficientBalanceError) as exc:
            await WalletRepository().debit(db, 1, Decimal("200.00"))
        assert "50.00" in exc.value.message

    async def test_missing_wallet(self, db) -> None:
        db.execute = AsyncMock(side_effect=[_result(None), _result(None)])
        with pytest.raises(WalletNotFoundError):
            await WalletRepository().debit(db, 1, Decimal("1.00"))


class TestTransactions:
    async def test_create_passes_enum_values(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_tx_row()))
        tx = await WalletRepository().create_transaction(
            db, 1, Decimal("250.00"), TransactionType.DEPOSIT, PaymentMethod.BKASH,
            TransactionStatus.PENDING, "DEP-1", "Deposit via bkash from 01700000000",
        )
        params = db.execute.call_args[0][1]
        assert params["type"] == "deposit"
        assert params["method"] == "bkash"
        assert params["status"] == "pending"
        assert tx.type is TransactionType.DEPOSIT
        assert tx.is_pending

    async def test_create_with_null_method(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_tx_row(method=None, type="tournament_win",
                                                            status="completed")))
        tx = await WalletRepository().create_transaction(
            db, 1, Decimal("100.00"), TransactionType.TOURNAMENT_WIN, None,
            TransactionStatus.COMPLETED, None, None,
        )
        assert db.execute.call_args[0][1]["method"] is None
        assert tx.method is None

    async def test_transition_returns_none_when_not_in_from_status(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(None))
        tx = await WalletRepository().transition_status(
            db, 100, TransactionStatus.PENDING, TransactionStatus.COMPLETED
        )
        assert tx is None
        params = db.execute.call_args[0][1]
        assert params["from_status"] == "pending"
        assert params["to_status"] == "completed"

    async def test_get_for_update_uses_lock(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(_tx_row()))
        await WalletRepository().get_transaction(db, 100, for_update=True)
        assert "FOR UPDATE" in str(db.execute.call_args[0][0])

    async def test_list_by_status_without_type(self, db) -> None:
        db.execute = AsyncMock(return_value=_result(rows=[_tx_row(id=1), _tx_row(id=2)]))
        txs = await WalletRepository().list_by_status(
            db, TransactionStatus.PENDING, None, 50, 0
        )
        assert [t.id for t in txs] == [1, 2]
        assert db.execute.call_args[0][1]["type"] is None


class TestLedgerMismatch:
    async def test_maps_rows(self, db) -> None:
        row = MagicMock()
        row.user_id = 3
        row.balance = Decimal("100.00")
        row.ledger_total = Decimal("80.00")
        db.execute = AsyncMock(return_value=_result(rows=[row]))
        mismatches = await WalletRepository().find_ledger_mismatches(db)
        assert len(mismatches) == 1
        assert mismatches[0].ledger_total == Decimal("80.00")
