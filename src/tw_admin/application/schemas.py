"""Pydantic schemas for tw_admin API responses."""

from decimal import Decimal

from pydantic import BaseModel

from src.tw_common.money import money_to_display
from src.tw_settlement.domain.service import SettlementResult
from src.tw_wallet.application.schemas import TransactionItem


class ModerationResponse(BaseModel):
    """Outcome of an approve/reject: the transaction and the owner's balance."""

    transaction: TransactionItem
    user_balance: Decimal
    user_balance_display: str

    @classmethod
    def from_result(cls, result: SettlementResult) -> "ModerationResponse":
        return cls(
            transaction=TransactionItem.from_domain(result.transaction),
            user_balance=result.wallet.balance,
            user_balance_display=money_to_display(result.wallet.balance),
        )


class InvariantReport(BaseModel):
    ok: bool
    violations: list[str]
