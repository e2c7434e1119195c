"""WalletRepository — concrete implementation of WalletRepositoryProtocol.

Every balance mutation is a single atomic PostgreSQL UPDATE ... RETURNING that
applies a delta (balance = balance + :amount); the balance is never read,
recomputed in Python, and written back. A guarded UPDATE returning 0 rows
means a business constraint was violated (missing wallet / insufficient funds).

Transaction ownership: The CALLER (application service or worker) is
responsible for committing or rolling back.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.enums import (
    PaymentMethod,
    TransactionStatus,
    TransactionType,
)
from src.tw_common.errors import InsufficientBalanceError, InternalError, WalletNotFoundError
from src.tw_wallet.domain.models import LedgerMismatch, Transaction, Wallet

# ---------------------------------------------------------------------------
# SQL: wallets
# ---------------------------------------------------------------------------

_GET_WALLET_SQL = text("""
    SELECT id, user_id, balance, updated_at
    FROM wallets
    WHERE user_id = :user_id
""")

_CREATE_WALLET_SQL = text("""
    INSERT INTO wallets (user_id, balance)
    VALUES (:user_id, 0)
    RETURNING id, user_id, balance, updated_at
""")

_APPLY_DELTA_SQL = text("""
    UPDATE wallets
    SET balance = balance + :amount,
        updated_at = NOW()
    WHERE user_id = :user_id
    RETURNING id, user_id, balance, updated_at
""")

_DEBIT_SQL = text("""
    UPDATE wallets
    SET balance = balance - :amount,
        updated_at = NOW()
    WHERE user_id = :user_id AND balance >= :amount
    RETURNING id, user_id, balance, updated_at
""")

# ---------------------------------------------------------------------------
# SQL: transactions
# ---------------------------------------------------------------------------

_TX_COLUMNS = """id, user_id, amount, type, method, status,
              reference_id, details, created_at, updated_at"""

_INSERT_TX_SQL = text(f"""
    INSERT INTO transactions
        (user_id, amount, type, method, status, reference_id, details)
    VALUES
        (:user_id, :amount, :type, :method, :status, :reference_id, :details)
    RETURNING {_TX_COLUMNS}
""")

_GET_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE id = :transaction_id
""")

_GET_TX_FOR_UPDATE_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE id = :transaction_id
    FOR UPDATE
""")

# Double-settlement guard: only the caller that flips the row out of
# from_status gets a row back.
_TRANSITION_TX_SQL = text(f"""
    UPDATE transactions
    SET status = :to_status,
        updated_at = NOW()
    WHERE id = :transaction_id AND status = :from_status
    RETURNING {_TX_COLUMNS}
""")

_LIST_USER_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE user_id = :user_id
    ORDER BY created_at DESC, id DESC
    LIMIT :limit OFFSET :offset
""")

_LIST_BY_STATUS_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE status = :status
      AND (CAST(:type AS TEXT) IS NULL OR type = CAST(:type AS TEXT))
    ORDER BY created_at DESC, id DESC
    LIMIT :limit OFFSET :offset
""")

# Pending withdrawals count toward the ledger: their funds left the wallet
# at request time.
_LEDGER_MISMATCH_SQL = text("""
    SELECT w.user_id, w.balance,
           COALESCE(SUM(t.amount) FILTER (
               WHERE t.status = 'completed'
                  OR (t.status = 'pending' AND t.type = 'withdraw')
           ), 0) AS ledger_total
    FROM wallets w
    LEFT JOIN transactions t ON t.user_id = w.user_id
    GROUP BY w.user_id, w.balance
    HAVING w.balance <> COALESCE(SUM(t.amount) FILTER (
               WHERE t.status = 'completed'
                  OR (t.status = 'pending' AND t.type = 'withdraw')
           ), 0)
    ORDER BY w.user_id
""")


def _row_to_wallet(row: object) -> Wallet:
    return Wallet(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        balance=Decimal(row.balance),  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_transaction(row: object) -> Transaction:
    method = row.method  # type: ignore[attr-defined]
    return Transaction(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        amount=Decimal(row.amount),  # type: ignore[attr-defined]
        type=TransactionType(row.type),  # type: ignore[attr-defined]
        method=PaymentMethod(method) if method is not None else None,
        status=TransactionStatus(row.status),  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        details=row.details,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class WalletRepository:
    """Concrete repository — all balance mutations atomic at the SQL level."""

    async def get_wallet(self, db: AsyncSession, user_id: int) -> Wallet | None:
        result = await db.execute(_GET_WALLET_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def create_wallet(self, db: AsyncSession, user_id: int) -> Wallet:
        result = await db.execute(_CREATE_WALLET_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            raise InternalError("Wallet insert returned no rows — this should never happen")
        return _row_to_wallet(row)

    async def apply_delta(
        self, db: AsyncSession, user_id: int, amount: Decimal
    ) -> Wallet:
        """Add a signed amount to the balance in one UPDATE and return the new wallet."""
        result = await db.execute(_APPLY_DELTA_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            raise WalletNotFoundError(user_id)
        return _row_to_wallet(row)

    async def debit(self, db: AsyncSession, user_id: int, amount: Decimal) -> Wallet:
        """Subtract a positive amount only if the balance covers it."""
        result = await db.execute(_DEBIT_SQL, {"user_id": user_id, "amount": amount})
        row = result.fetchone()
        if row is None:
            wallet = await self.get_wallet(db, user_id)
            if wallet is None:
                raise WalletNotFoundError(user_id)
            raise InsufficientBalanceError(amount, wallet.balance)
        return _row_to_wallet(row)

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
    ) -> Transaction:
        result = await db.execute(
            _INSERT_TX_SQL,
            {
                "user_id": user_id,
                "amount": amount,
                "type": tx_type.value,
                "method": method.value if method is not None else None,
                "status": status.value,
                "reference_id": reference_id,
                "details": details,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows — this should never happen")
        return _row_to_transaction(row)

    async def get_transaction(
        self, db: AsyncSession, transaction_id: int, for_update: bool = False
    ) -> Transaction | None:
        sql = _GET_TX_FOR_UPDATE_SQL if for_update else _GET_TX_SQL
        result = await db.execute(sql, {"transaction_id": transaction_id})
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def transition_status(
        self,
        db: AsyncSession,
        transaction_id: int,
        from_status: TransactionStatus,
        to_status: TransactionStatus,
    ) -> Transaction | None:
        """Flip status only if the row is still in from_status. None = lost the race."""
        result = await db.execute(
            _TRANSITION_TX_SQL,
            {
                "transaction_id": transaction_id,
                "from_status": from_status.value,
                "to_status": to_status.value,
            },
        )
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def list_transactions(
        self, db: AsyncSession, user_id: int, limit: int, offset: int
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_USER_TX_SQL,
            {"user_id": user_id, "limit": limit, "offset": offset},
        )
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def list_by_status(
        self,
        db: AsyncSession,
        status: TransactionStatus,
        tx_type: TransactionType | None,
        limit: int,
        offset: int,
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_BY_STATUS_SQL,
            {
                "status": status.value,
                "type": tx_type.value if tx_type is not None else None,
                "limit": limit,
                "offset": offset,
            },
        )
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def find_ledger_mismatches(self, db: AsyncSession) -> list[LedgerMismatch]:
        result = await db.execute(_LEDGER_MISMATCH_SQL)
        return [
            LedgerMismatch(
                user_id=row.user_id,
                balance=Decimal(row.balance),
                ledger_total=Decimal(row.ledger_total),
            )
            for row in result.fetchall()
        ]
