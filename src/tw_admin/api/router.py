"""Admin REST API — every endpoint requires an admin JWT.

GET  /admin/transactions/pending           — pending deposits (or ?type=withdraw)
POST /admin/transactions/{id}/approve      — finalize a pending deposit
POST /admin/transactions/{id}/reject       — reject a pending deposit/withdrawal
POST /admin/tournaments                    — create a tournament
GET  /admin/invariants                     — wallet ledger consistency report
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_admin.application.service import AdminService
from src.tw_common.app_state import get_hub, get_settlement_queue
from src.tw_common.database import get_db_session
from src.tw_common.enums import TransactionType
from src.tw_common.response import ApiResponse, respond
from src.tw_gateway.auth.dependencies import require_admin
from src.tw_gateway.user.db_models import UserModel
from src.tw_realtime.domain.hub import NotificationHub
from src.tw_settlement.infrastructure.queue import SettlementQueue
from src.tw_tournament.application.schemas import CreateTournamentRequest
from src.tw_tournament.application.service import TournamentApplicationService

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()
_tournaments = TournamentApplicationService()


@router.get("/transactions/pending")
async def list_pending_transactions(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tx_type: TransactionType = Query(TransactionType.DEPOSIT, alias="type"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    data = await _service.list_pending(db, tx_type, limit, offset)
    return respond(request, data)


@router.post("/transactions/{transaction_id}/approve")
async def approve_deposit(
    transaction_id: int,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    queue: Annotated[SettlementQueue, Depends(get_settlement_queue)],
    hub: Annotated[NotificationHub, Depends(get_hub)],
) -> ApiResponse:
    data = await _service.approve_deposit(db, transaction_id, queue, hub)
    return respond(request, data, "Deposit approved")


@router.post("/transactions/{transaction_id}/reject")
async def reject_transaction(
    transaction_id: int,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    hub: Annotated[NotificationHub, Depends(get_hub)],
) -> ApiResponse:
    data = await _service.reject_transaction(db, transaction_id, hub)
    return respond(request, data, "Transaction rejected")


@router.post("/tournaments", status_code=status.HTTP_201_CREATED)
async def create_tournament(
    body: CreateTournamentRequest,
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _tournaments.create_tournament(db, body)
    return respond(request, data, "Tournament created")


@router.get("/invariants")
async def verify_invariants(
    request: Request,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.verify_invariants(db)
    return respond(request, data)
