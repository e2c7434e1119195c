"""FastAPI dependencies: get_current_user, require_admin.

Usage in any protected router:
    from src.tw_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: UserModel = Depends(get_current_user)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.tw_common.database import get_db_session
from src.tw_common.errors import ForbiddenError, InvalidCredentialsError, UserNotFoundError
from src.tw_gateway.auth.jwt_handler import user_id_from_token
from src.tw_gateway.user.db_models import UserModel

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Extract and validate the JWT Bearer token, return the UserModel.

    Raises HTTP 401 if the token is missing, invalid or expired, and
    UserNotFoundError (404) if the token is valid but its user row is gone.
    """
    try:
        user_id = user_id_from_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFoundError(user_id)
    return user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """Raises HTTP 403 (ForbiddenError) unless the caller carries the admin flag."""
    if not current_user.is_admin:
        raise ForbiddenError()
    return current_user
