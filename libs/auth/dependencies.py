import uuid
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import AuthUser
from libs.auth.security import InvalidTokenError, decode_access_token
from libs.db.session import get_async_db
from services.accounts_service.models import User

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _token_subject(token: str) -> uuid.UUID:
    try:
        payload = decode_access_token(token)
        return uuid.UUID(str(payload["id"]))
    except (InvalidTokenError, KeyError, ValueError):
        raise _unauthorized("Invalid token")


async def get_current_user(
    request: Request,
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: AsyncSession = Depends(get_async_db),
) -> AuthUser:
    """
    Verify the bearer token and load the account it names.

    Role and active flag come from the stored user, so a deactivated or
    demoted account loses access even while its token is still unexpired.
    """
    if token is None or not token.credentials:
        raise _unauthorized("No token provided")

    user_id = _token_subject(token.credentials)
    user = (
        await db.execute(select(User).where(User.id == user_id))
    ).scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not user.is_active:
        raise _unauthorized("Invalid token")

    request.state.user_id = str(user.id)
    return AuthUser(
        id=str(user.id),
        email=user.email,
        username=user.username,
        role=getattr(user.role, "value", user.role),
    )


async def require_admin(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
) -> AuthUser:
    """
    Ensure the caller holds the ``admin`` role.
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


def ensure_self_or_admin(current_user: AuthUser, user_id: str) -> None:
    """Raise 403 unless the caller is ``user_id`` or an admin."""
    if current_user.is_admin or current_user.user_id == user_id:
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Not allowed to access this user",
    )
