"""Users router: signup, login, current user and account management."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from libs.auth.dependencies import ensure_self_or_admin, get_current_user
from libs.auth.models import AuthUser
from libs.common.identifiers import parse_id
from libs.common.rate_limit import auth_limit
from libs.common.responses import ApiResponse, PaginatedResponse, PaginationMeta
from libs.db.session import get_async_db
from pydantic import BaseModel, ValidationError
from services.accounts_service.schemas import (
    LoginRequest,
    LoginResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from services.accounts_service.services import account_ops
from services.catalog_service.services.query import PageWindow
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/users", tags=["users"])

USER_ID = "user ID"


def _validate(model: type[BaseModel], payload: Any):
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())


def _user_response(user) -> UserResponse:
    return UserResponse.model_validate(user)


@router.get("")
async def get_users(
    action: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """``?action=me`` returns the caller; otherwise admins get the active user list."""
    if action == "me":
        user = await account_ops.get_user_or_404(db, parse_id(current_user.user_id, USER_ID))
        return ApiResponse[UserResponse](data=_user_response(user))

    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )

    window = PageWindow.from_params(page, limit)
    users, total = await account_ops.list_active_users(
        db, offset=window.offset, limit=window.limit
    )
    return PaginatedResponse[UserResponse](
        data=[_user_response(u) for u in users],
        pagination=PaginationMeta.build(
            page=window.page, limit=window.limit, count=len(users), total_records=total
        ),
    )


@router.post("")
@auth_limit
async def signup_or_login(
    request: Request,
    payload: dict = Body(...),
    action: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_async_db),
):
    """Create an account, or log in with ``?action=login``."""
    if action == "login":
        credentials = _validate(LoginRequest, payload)
        user, token = await account_ops.authenticate(
            db, credentials.email, credentials.password
        )
        return LoginResponse(
            message="Login successful",
            data=_user_response(user),
            token=token,
        )

    data = _validate(UserCreate, payload)
    user = await account_ops.register_user(db, data)
    body = ApiResponse[UserResponse](
        message="User created successfully",
        data=_user_response(user),
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=body.model_dump(mode="json", by_alias=True),
    )


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
    user_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get a user by ID (self or admin)."""
    parsed = parse_id(user_id, USER_ID)
    ensure_self_or_admin(current_user, str(parsed))
    user = await account_ops.get_user_or_404(db, parsed)
    return ApiResponse[UserResponse](data=_user_response(user))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: str,
    payload: UserUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Update username, email or profile; role and isActive are admin-only."""
    parsed = parse_id(user_id, USER_ID)
    ensure_self_or_admin(current_user, str(parsed))
    user = await account_ops.get_user_or_404(db, parsed)
    user = await account_ops.update_user(
        db, user, payload, privileged=current_user.is_admin
    )
    return ApiResponse[UserResponse](
        message="User updated successfully",
        data=_user_response(user),
    )


@router.delete("/{user_id}", response_model=ApiResponse[UserResponse])
async def deactivate_user(
    user_id: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Deactivate an account (soft delete)."""
    parsed = parse_id(user_id, USER_ID)
    ensure_self_or_admin(current_user, str(parsed))
    user = await account_ops.get_user_or_404(db, parsed)
    user = await account_ops.deactivate_user(db, user)
    return ApiResponse[UserResponse](
        message="User deactivated successfully",
        data=_user_response(user),
    )
