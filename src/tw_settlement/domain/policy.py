"""Who settles a pending transaction.

Exactly one trigger owns each pending row so the timed worker and the admin
approval path never race on the same transaction id:

  deposit  + method in DEPOSIT_AUTO_SETTLE_METHODS -> AUTO (timed worker)
  deposit  + any other method                      -> ADMIN (manual approval)
  withdraw                                         -> AUTO (funds already reserved)

Tournament entries and wins are created completed and never settle.
"""

from config.settings import settings
from src.tw_common.enums import PaymentMethod, SettlementTrigger, TransactionType
from src.tw_common.errors import InvalidStateError


def settlement_trigger(
    tx_type: TransactionType,
    method: PaymentMethod | None,
    auto_methods: list[str] | None = None,
) -> SettlementTrigger:
    auto = settings.DEPOSIT_AUTO_SETTLE_METHODS if auto_methods is None else auto_methods
    if tx_type is TransactionType.DEPOSIT:
        if method is not None and method.value in auto:
            return SettlementTrigger.AUTO
        return SettlementTrigger.ADMIN
    if tx_type is TransactionType.WITHDRAW:
        return SettlementTrigger.AUTO
    raise InvalidStateError(f"{tx_type.value} transactions are never settled")


def settle_delay_seconds(tx_type: TransactionType) -> int:
    if tx_type is TransactionType.DEPOSIT:
        return settings.DEPOSIT_SETTLE_DELAY_SECONDS
    if tx_type is TransactionType.WITHDRAW:
        return settings.WITHDRAW_SETTLE_DELAY_SECONDS
    raise InvalidStateError(f"{tx_type.value} transactions are never settled")
