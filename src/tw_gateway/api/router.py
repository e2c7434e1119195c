"""Auth API router: register, login, refresh, me.

All endpoints return ApiResponse[T]. request_id is read from
request.state (injected by RequestLogMiddleware).

Logout is client-side: tokens are stateless and simply discarded.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tw_common.database import get_db_session
from src.tw_common.response import ApiResponse, respond
from src.tw_gateway.auth.dependencies import get_current_user
from src.tw_gateway.user.db_models import UserModel
from src.tw_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    UserProfile,
)
from src.tw_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="User registration",
)
async def register(
    request: Request,
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    async with db.begin():
        user, wallet = await _service.register(
            body.username,
            body.password,
            body.phone,
            db,
            player_id=body.player_id,
            email=body.email,
        )

    data = UserProfile.build(user, wallet.id, wallet.balance)
    return respond(request, data, "User registered successfully")


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="User login",
)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    user, wallet, access_token, refresh_token = await _service.login(
        body.username, body.password, db
    )

    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        token_type="Bearer",
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        user=UserProfile.build(user, wallet.id, wallet.balance),
    )
    return respond(request, data, "Login successful")


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Refresh access token",
)
async def refresh_token(
    request: Request,
    body: RefreshRequest,
) -> ApiResponse:
    new_access_token = await _service.refresh(body.refresh_token)

    data = RefreshResponse(
        access_token=new_access_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    return respond(request, data, "Token refreshed")


@router.get(
    "/me",
    response_model=ApiResponse,
    summary="Current user with wallet",
)
async def me(
    request: Request,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    wallet = await _service.get_wallet(current_user.id, db)
    data = UserProfile.build(current_user, wallet.id, wallet.balance)
    return respond(request, data)
