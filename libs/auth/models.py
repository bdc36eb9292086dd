from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthUser(BaseModel):
    """
    Identity of the caller, loaded from the account a verified token names.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="id")
    email: Optional[EmailStr] = None
    username: Optional[str] = None
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
