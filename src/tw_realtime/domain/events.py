"""Outbound live-channel event payloads (JSON-shaped dicts)."""

from decimal import Decimal
from typing import Any

from src.tw_wallet.domain.models import Transaction


def tournament_update(tournament_id: int, filled_slots: int, max_slots: int) -> dict[str, Any]:
    return {
        "type": "tournament_update",
        "tournamentId": tournament_id,
        "data": {"filledSlots": filled_slots, "maxSlots": max_slots},
    }


def transaction_update(
    tx: Transaction,
    new_balance: Decimal | None = None,
    message: str | None = None,
) -> dict[str, Any]:
    event: dict[str, Any] = {
        "type": "transaction_update",
        "transactionId": tx.id,
        "transactionType": tx.type.value,
        "status": tx.status.value,
        "amount": str(tx.amount),
    }
    if message is not None:
        event["message"] = message
    if new_balance is not None:
        event["walletUpdate"] = {"amount": str(tx.amount), "newBalance": str(new_balance)}
    return event
