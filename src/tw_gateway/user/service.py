"""User domain service: register, login, refresh, profile.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer) via `async with db.begin()`.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.errors import (
    InvalidCredentialsError,
    PhoneExistsError,
    UsernameExistsError,
    WalletNotFoundError,
)
from src.tw_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.tw_gateway.auth.password import hash_password, verify_password
from src.tw_gateway.user.db_models import UserModel
from src.tw_wallet.domain.models import Wallet
from src.tw_wallet.domain.repository import WalletRepositoryProtocol
from src.tw_wallet.infrastructure.persistence import WalletRepository


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    def __init__(self, wallet_repo: WalletRepositoryProtocol | None = None) -> None:
        self._wallet_repo: WalletRepositoryProtocol = wallet_repo or WalletRepository()

    async def register(
        self,
        username: str,
        password: str,
        phone: str,
        db: AsyncSession,
        player_id: str | None = None,
        email: str | None = None,
    ) -> tuple[UserModel, Wallet]:
        """Register a new user and create their empty wallet.

        Both rows are written in the caller's transaction, so a user never
        exists without a wallet.
        """
        # DB UNIQUE constraints are the final guard
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        if result.scalar_one_or_none() is not None:
            raise UsernameExistsError()

        result = await db.execute(select(UserModel).where(UserModel.phone == phone))
        if result.scalar_one_or_none() is not None:
            raise PhoneExistsError()

        user = UserModel(
            username=username,
            phone=phone,
            password_hash=hash_password(password),
            player_id=player_id,
            email=email,
            is_admin=False,
        )
        db.add(user)
        try:
            await db.flush()  # Get user.id without committing
        except IntegrityError as exc:
            # a concurrent registration won the race past the checks above
            constraint = str(exc.orig)
            if "uq_users_username" in constraint:
                raise UsernameExistsError() from exc
            if "uq_users_phone" in constraint:
                raise PhoneExistsError() from exc
            raise

        wallet = await self._wallet_repo.create_wallet(db, user.id)
        return user, wallet

    async def login(
        self,
        username: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, Wallet, str, str]:
        """Authenticate and return (user, wallet, access_token, refresh_token).

        "User not found" and "wrong password" raise the same error so the
        endpoint cannot be used to enumerate usernames.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.username == username)
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        wallet = await self.get_wallet(user.id, db)
        return (
            user,
            wallet,
            create_access_token(user.id),
            create_refresh_token(user.id),
        )

    async def refresh(self, refresh_token: str) -> str:
        """Validate a refresh token and return a new access token.

        The refresh token itself is not rotated.
        """
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(int(payload["sub"]))

    async def get_wallet(self, user_id: int, db: AsyncSession) -> Wallet:
        wallet = await self._wallet_repo.get_wallet(db, user_id)
        if wallet is None:
            raise WalletNotFoundError(user_id)
        return wallet
