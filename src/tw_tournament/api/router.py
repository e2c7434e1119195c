"""tw_tournament REST endpoints.

GET  /tournaments                        — list with filters (public)
GET  /tournaments/upcoming               — next tournament to start (public)
GET  /tournaments/{id}                   — detail (public)
GET  /tournaments/{id}/participants      — registered players (public)
POST /tournaments/{id}/join              — pay the entry fee and take a slot (JWT)
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.app_state import get_hub
from src.tw_common.database import get_db_session
from src.tw_common.enums import TournamentMode, TournamentStatus
from src.tw_common.response import ApiResponse, respond
from src.tw_gateway.auth.dependencies import get_current_user
from src.tw_gateway.user.db_models import UserModel
from src.tw_realtime.domain.hub import NotificationHub
from src.tw_tournament.application.service import TournamentApplicationService

router = APIRouter(prefix="/tournaments", tags=["tournaments"])

_service = TournamentApplicationService()


@router.get("")
async def list_tournaments(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    mode: TournamentMode | None = Query(None),
    status_: TournamentStatus | None = Query(None, alias="status"),
    min_fee: Decimal | None = Query(None, alias="minFee", ge=0),
    max_fee: Decimal | None = Query(None, alias="maxFee", ge=0),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    data = await _service.list_tournaments(db, mode, status_, min_fee, max_fee, limit, offset)
    return respond(request, data)


# Declared before /{tournament_id} so "upcoming" is not parsed as an id
@router.get("/upcoming")
async def get_upcoming_tournament(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.get_upcoming(db)
    return respond(request, data)


@router.get("/{tournament_id}")
async def get_tournament(
    tournament_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.get_tournament(db, tournament_id)
    return respond(request, data)


@router.get("/{tournament_id}/participants")
async def list_participants(
    tournament_id: int,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.list_participants(db, tournament_id)
    return respond(request, data)


@router.post("/{tournament_id}/join", status_code=status.HTTP_201_CREATED)
async def join_tournament(
    tournament_id: int,
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    hub: Annotated[NotificationHub, Depends(get_hub)],
) -> ApiResponse:
    data = await _service.join_tournament(db, current_user.id, tournament_id, hub)
    return respond(request, data, "Successfully joined tournament")
