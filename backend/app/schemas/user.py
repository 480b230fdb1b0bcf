from pydantic import Field, field_validator
from typing import Optional

from app.models.user import UserRole
from app.schemas.base import CamelModel


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    role: UserRole = UserRole.STUDENT

    @field_validator("username")
    @classmethod
    def username_has_no_spaces(cls, v: str) -> str:
        if any(ch.isspace() for ch in v):
            raise ValueError("Username must not contain whitespace")
        return v


class UserUpdate(CamelModel):
    """Admin PATCH payload; only the keys sent are changed"""
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    password: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[UserRole] = None


class UserRecord(CamelModel):
    """Stored user, including the password digest. Never returned to clients."""
    id: int
    username: str
    password: str
    name: str
    role: UserRole


class UserResponse(CamelModel):
    id: int
    username: str
    name: str
    role: UserRole
