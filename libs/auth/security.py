"""Password hashing and bearer token issue/verify."""

from typing import Any, Optional

import bcrypt
from jose import JWTError, jwt

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_in, utc_now


class InvalidTokenError(Exception):
    """Raised when a token is malformed, tampered with or expired."""


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with a fresh random salt."""
    rounds = rounds or get_settings().BCRYPT_ROUNDS
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(claims: dict[str, Any], expires_days: Optional[int] = None) -> str:
    """Sign ``claims`` into a JWT that expires after ``expires_days``."""
    settings = get_settings()
    days = expires_days if expires_days is not None else settings.JWT_EXPIRE_DAYS
    payload = dict(claims)
    payload["iat"] = int(utc_now().timestamp())
    payload["exp"] = int(utc_in(days=days).timestamp())
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc
