"""Pydantic schemas for the accounts service."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.responses import ApiResponse, CamelModel
from pydantic import ConfigDict, EmailStr, Field, field_validator
from services.accounts_service.models import UserRole


class _Input(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)


# ============================================================================
# PROFILE
# ============================================================================


class Address(_Input):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = "USA"


class Preferences(_Input):
    newsletter: bool = False
    notifications: bool = True


class UserProfile(_Input):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = Field(None, max_length=500)
    address: Address = Field(default_factory=Address)
    preferences: Preferences = Field(default_factory=Preferences)


# ============================================================================
# REQUESTS
# ============================================================================


class UserCreate(_Input):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    profile: Optional[UserProfile] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.lower()


class LoginRequest(_Input):
    email: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(_Input):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None
    profile: Optional[UserProfile] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v):
        return v.lower() if v else v


# ============================================================================
# RESPONSES
# ============================================================================


class UserResponse(CamelModel):
    """Public user representation. Never carries the password hash."""

    id: uuid.UUID
    username: str
    email: str
    role: UserRole
    profile: UserProfile
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class LoginResponse(ApiResponse[UserResponse]):
    token: str
