"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.enums import (
    PaymentMethod,
    TransactionStatus,
    TransactionType,
)
from src.tw_wallet.domain.models import LedgerMismatch, Transaction, Wallet


class WalletRepositoryProtocol(Protocol):
    async def get_wallet(self, db: AsyncSession, user_id: int) -> Wallet | None: ...

    async def create_wallet(self, db: AsyncSession, user_id: int) -> Wallet: ...

    async def apply_delta(
        self, db: AsyncSession, user_id: int, amount: Decimal
    ) -> Wallet: ...

    async def debit(
        self, db: AsyncSession, user_id: int, amount: Decimal
    ) -> Wallet: ...

    async def create_transaction(
        self,
        db: AsyncSession,
        user_id: int,
        amount: Decimal,
        tx_type: TransactionType,
        method: PaymentMethod | None,
        status: TransactionStatus,
        reference_id: str | None,
        details: str | None,
    ) -> Transaction: ...

    async def get_transaction(
        self, db: AsyncSession, transaction_id: int, for_update: bool = False
    ) -> Transaction | None: ...

    async def transition_status(
        self,
        db: AsyncSession,
        transaction_id: int,
        from_status: TransactionStatus,
        to_status: TransactionStatus,
    ) -> Transaction | None: ...

    async def list_transactions(
        self, db: AsyncSession, user_id: int, limit: int, offset: int
    ) -> list[Transaction]: ...

    async def list_by_status(
        self,
        db: AsyncSession,
        status: TransactionStatus,
        tx_type: TransactionType | None,
        limit: int,
        offset: int,
    ) -> list[Transaction]: ...

    async def find_ledger_mismatches(self, db: AsyncSession) -> list[LedgerMismatch]: ...
