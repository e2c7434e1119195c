"""Pydantic request/response schemas for tw_gateway.

All responses are wrapped in ApiResponse at the router layer.
"""

from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field

from src.tw_common.money import money_to_display

PHONE_PATTERN = r"^\d{11}$"


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[a-zA-Z0-9_]+$")
    password: str = Field(..., min_length=6, max_length=128)
    phone: str = Field(..., pattern=PHONE_PATTERN, description="11-digit mobile number")
    player_id: str | None = Field(None, max_length=64, description="In-game player identifier")
    email: EmailStr | None = None


class LoginRequest(BaseModel):
    username: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class WalletSummary(BaseModel):
    id: int
    balance: Decimal
    balance_display: str


class UserProfile(BaseModel):
    """User with embedded wallet — returned by register, login and /me."""

    user_id: int
    username: str
    phone: str
    player_id: str | None
    is_admin: bool
    wallet: WalletSummary

    @classmethod
    def build(cls, user: object, wallet_id: int, balance: Decimal) -> "UserProfile":
        return cls(
            user_id=user.id,  # type: ignore[attr-defined]
            username=user.username,  # type: ignore[attr-defined]
            phone=user.phone,  # type: ignore[attr-defined]
            player_id=user.player_id,  # type: ignore[attr-defined]
            is_admin=user.is_admin,  # type: ignore[attr-defined]
            wallet=WalletSummary(
                id=wallet_id,
                balance=balance,
                balance_display=money_to_display(balance),
            ),
        )


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = 1800  # 30 minutes in seconds
    user: UserProfile


class RefreshResponse(BaseModel):
    access_token: str
    expires_in: int = 1800
