"""Account operations: registration, login, profile updates, deactivation."""

import uuid
from functools import lru_cache
from typing import Optional

from fastapi import HTTPException, status
from libs.auth.security import create_access_token, hash_password, verify_password
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.accounts_service.models import User, UserRole
from services.accounts_service.schemas import UserCreate, UserProfile, UserUpdate
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


@lru_cache
def _dummy_hash() -> str:
    # Compared against when the email is unknown so both failures cost the same
    return hash_password(uuid.uuid4().hex)


def _duplicate(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def _commit_unique(db: AsyncSession) -> None:
    """Commit, turning a unique index violation into a 400."""
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise _duplicate("Duplicate field error")


async def _collision(
    db: AsyncSession,
    *,
    username: Optional[str],
    email: Optional[str],
    exclude_id: Optional[uuid.UUID] = None,
) -> Optional[str]:
    """Return the message for the colliding field (email checked first), if any."""
    for column, value, message in (
        (User.email, email, "Email already exists"),
        (User.username, username, "Username already exists"),
    ):
        if not value:
            continue
        query = select(User.id).where(column == value)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if (await db.execute(query.limit(1))).first() is not None:
            return message
    return None


async def get_user_or_404(db: AsyncSession, user_id: uuid.UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


async def register_user(db: AsyncSession, data: UserCreate) -> User:
    """Create an account. The existence check is advisory; the unique indexes decide."""
    collision = await _collision(db, username=data.username, email=data.email)
    if collision:
        raise _duplicate(collision)

    profile = data.profile or UserProfile()
    user = User(
        username=data.username,
        email=data.email,
        password_hash=hash_password(data.password),
        profile=profile.model_dump(),
    )
    db.add(user)
    await _commit_unique(db)
    await db.refresh(user)

    logger.info("Registered user %s (%s)", user.id, user.username)
    return user


def issue_token(user: User) -> str:
    return create_access_token(
        {
            "id": str(user.id),
            "email": user.email,
            "username": user.username,
            "role": UserRole(user.role).value,
        }
    )


async def authenticate(
    db: AsyncSession, email: Optional[str], password: Optional[str]
) -> tuple[User, str]:
    """Verify credentials and return ``(user, token)``."""
    if not email or not password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    result = await db.execute(
        select(User).where(User.email == email.lower(), User.is_active.is_(True))
    )
    user = result.scalar_one_or_none()

    password_ok = verify_password(
        password, user.password_hash if user else _dummy_hash()
    )
    if user is None or not password_ok:
        logger.warning("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        )

    user.last_login = utc_now()
    await db.commit()
    await db.refresh(user)

    logger.info("User %s logged in", user.id)
    return user, issue_token(user)


async def list_active_users(
    db: AsyncSession, *, offset: int, limit: int
) -> tuple[list[User], int]:
    base = select(User).where(User.is_active.is_(True))
    total = (
        await db.execute(select(func.count()).select_from(base.subquery()))
    ).scalar() or 0
    result = await db.execute(
        base.order_by(User.created_at.desc(), User.id.asc()).offset(offset).limit(limit)
    )
    return list(result.scalars().all()), total


async def update_user(
    db: AsyncSession, user: User, data: UserUpdate, *, privileged: bool
) -> User:
    """Apply a profile update. Only ``privileged`` callers may change role or isActive."""
    changes = data.model_dump(exclude_unset=True)

    if not privileged and ("role" in changes or "is_active" in changes):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )

    collision = await _collision(
        db,
        username=changes.get("username"),
        email=changes.get("email"),
        exclude_id=user.id,
    )
    if collision:
        raise _duplicate(collision)

    if changes.get("username"):
        user.username = data.username
    if changes.get("email"):
        user.email = data.email
    if data.profile is not None:
        user.profile = data.profile.model_dump()
    if data.role is not None:
        user.role = data.role
    if data.is_active is not None:
        user.is_active = data.is_active

    await _commit_unique(db)
    await db.refresh(user)

    logger.info("Updated user %s", user.id)
    return user


async def deactivate_user(db: AsyncSession, user: User) -> User:
    """Soft delete: login is refused from now on."""
    user.is_active = False
    await db.commit()
    await db.refresh(user)

    logger.info("Deactivated user %s", user.id)
    return user
