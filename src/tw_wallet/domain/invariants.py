"""Ledger invariant: wallet.balance == completed transactions + pending withdrawals."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_wallet.domain.repository import WalletRepositoryProtocol

logger = logging.getLogger(__name__)


async def verify_wallet_invariants(
    db: AsyncSession, repo: WalletRepositoryProtocol
) -> list[str]:
    """Returns one violation string per wallet whose balance disagrees with its ledger."""
    violations: list[str] = []
    for mismatch in await repo.find_ledger_mismatches(db):
        msg = (
            f"Wallet ledger mismatch: user={mismatch.user_id} "
            f"balance={mismatch.balance} != ledger_total={mismatch.ledger_total}"
        )
        violations.append(msg)
        logger.error(msg)
    return violations
