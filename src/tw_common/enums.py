"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class TournamentMode(str, Enum):
    SOLO = "solo"
    DUO = "duo"
    SQUAD = "squad"


class TournamentStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TOURNAMENT_ENTRY = "tournament_entry"
    TOURNAMENT_WIN = "tournament_win"


class PaymentMethod(str, Enum):
    BKASH = "bkash"
    NAGAD = "nagad"
    WALLET = "wallet"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    REJECTED = "rejected"
    FAILED = "failed"


class SettlementTrigger(str, Enum):
    """Which path owns the final status flip of a pending transaction."""
    AUTO = "auto"      # timed settlement worker
    ADMIN = "admin"    # manual admin approval
