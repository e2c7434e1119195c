"""Domain models for tw_wallet — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.tw_common.enums import PaymentMethod, TransactionStatus, TransactionType


@dataclass
class Wallet:
    id: int
    user_id: int
    balance: Decimal          # cache of the completed ledger, 2 dp
    updated_at: datetime | None = None


@dataclass
class Transaction:
    """Audit row. Status changes update this row in place; amount never changes."""

    id: int
    user_id: int
    amount: Decimal                      # signed: debits negative, credits positive
    type: TransactionType
    method: PaymentMethod | None
    status: TransactionStatus
    reference_id: str | None = None
    details: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is TransactionStatus.PENDING


@dataclass
class LedgerMismatch:
    """A wallet whose cached balance disagrees with its transaction trail."""

    user_id: int
    balance: Decimal
    ledger_total: Decimal
