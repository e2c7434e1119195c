"""Pydantic schemas for tw_wallet API."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from src.tw_common.money import money_to_display
from src.tw_wallet.domain.models import Transaction, Wallet

PHONE_PATTERN = r"^\d{11}$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DepositRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    method: Literal["bkash", "nagad"]
    phone: str = Field(..., pattern=PHONE_PATTERN, description="Sender's 11-digit wallet number")


class WithdrawRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    method: Literal["bkash", "nagad"]
    phone: str = Field(..., pattern=PHONE_PATTERN, description="Receiver's 11-digit wallet number")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class WalletResponse(BaseModel):
    id: int
    user_id: int
    balance: Decimal
    balance_display: str

    @classmethod
    def from_domain(cls, wallet: Wallet) -> "WalletResponse":
        return cls(
            id=wallet.id,
            user_id=wallet.user_id,
            balance=wallet.balance,
            balance_display=money_to_display(wallet.balance),
        )


class TransactionItem(BaseModel):
    id: int
    user_id: int
    amount: Decimal
    amount_display: str
    type: str
    method: str | None
    status: str
    reference_id: str | None
    details: str | None
    created_at: str  # ISO8601 string
    updated_at: str

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionItem":
        return cls(
            id=tx.id,
            user_id=tx.user_id,
            amount=tx.amount,
            amount_display=money_to_display(tx.amount),
            type=tx.type.value,
            method=tx.method.value if tx.method is not None else None,
            status=tx.status.value,
            reference_id=tx.reference_id,
            details=tx.details,
            created_at=tx.created_at.isoformat() if tx.created_at else "",
            updated_at=tx.updated_at.isoformat() if tx.updated_at else "",
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionItem]
    limit: int
    offset: int


class PaymentInitiatedResponse(BaseModel):
    """Returned with HTTP 202: the transaction is pending until settlement."""

    transaction: TransactionItem
    settlement: str  # SettlementTrigger value: who will finalize it
    balance: Decimal
    balance_display: str
