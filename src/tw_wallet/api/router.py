"""tw_wallet REST API — all endpoints require JWT authentication.

GET  /wallet                — current balance
POST /wallet/deposit        — start a mobile-payment deposit (202, pending)
POST /wallet/withdraw       — start a withdrawal, funds reserved now (202, pending)
GET  /wallet/transactions   — own transaction history, newest first
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.app_state import get_settlement_queue
from src.tw_common.database import get_db_session
from src.tw_common.enums import PaymentMethod
from src.tw_common.response import ApiResponse, respond
from src.tw_gateway.auth.dependencies import get_current_user
from src.tw_gateway.user.db_models import UserModel
from src.tw_settlement.infrastructure.queue import SettlementQueue
from src.tw_wallet.application.schemas import DepositRequest, WithdrawRequest
from src.tw_wallet.application.service import WalletApplicationService

router = APIRouter(prefix="/wallet", tags=["wallet"])

_service = WalletApplicationService()


@router.get("")
async def get_wallet(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_wallet(db, current_user.id)
    return respond(request, data)


@router.post("/deposit", status_code=status.HTTP_202_ACCEPTED)
async def deposit(
    body: DepositRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    queue: Annotated[SettlementQueue, Depends(get_settlement_queue)],
    request: Request,
) -> ApiResponse:
    data = await _service.initiate_deposit(
        db, current_user.id, body.amount, PaymentMethod(body.method), body.phone, queue
    )
    return respond(request, data, "Deposit initiated")


@router.post("/withdraw", status_code=status.HTTP_202_ACCEPTED)
async def withdraw(
    body: WithdrawRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    queue: Annotated[SettlementQueue, Depends(get_settlement_queue)],
    request: Request,
) -> ApiResponse:
    data = await _service.initiate_withdraw(
        db, current_user.id, body.amount, PaymentMethod(body.method), body.phone, queue
    )
    return respond(request, data, "Withdrawal initiated")


@router.get("/transactions")
async def list_transactions(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    data = await _service.list_transactions(db, current_user.id, limit, offset)
    return respond(request, data)
