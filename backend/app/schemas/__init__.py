# Pydantic schemas
from app.schemas.base import CamelModel, Timestamp
from app.schemas.user import (
    UserCreate,
    UserUpdate,
    UserRecord,
    UserResponse,
)
from app.schemas.auth import UserRegister, UserLogin, MessageResponse
from app.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
)
from app.schemas.assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    AssignmentResponse,
)
from app.schemas.material import (
    MaterialCreate,
    MaterialUpdate,
    MaterialResponse,
)
from app.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
)

__all__ = [
    # Base
    "CamelModel",
    "Timestamp",
    # User
    "UserCreate",
    "UserUpdate",
    "UserRecord",
    "UserResponse",
    # Auth
    "UserRegister",
    "UserLogin",
    "MessageResponse",
    # Announcement
    "AnnouncementCreate",
    "AnnouncementUpdate",
    "AnnouncementResponse",
    # Assignment
    "AssignmentCreate",
    "AssignmentUpdate",
    "AssignmentResponse",
    # Material
    "MaterialCreate",
    "MaterialUpdate",
    "MaterialResponse",
    # Event
    "EventCreate",
    "EventUpdate",
    "EventResponse",
]
