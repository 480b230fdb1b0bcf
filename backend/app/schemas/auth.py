from pydantic import Field

from app.schemas.base import CamelModel
from app.schemas.user import UserCreate


class UserRegister(UserCreate):
    """Self-service sign-up; allowed roles come from SELF_REGISTRATION_ROLES"""


class UserLogin(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class MessageResponse(CamelModel):
    message: str
