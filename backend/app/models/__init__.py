# Re-export all models for convenient imports
from app.models.user import User, UserRole
from app.models.announcement import Announcement
from app.models.assignment import Assignment, AssignmentStatus
from app.models.material import Material
from app.models.event import Event
from app.models.session import Session

__all__ = [
    # User
    "User",
    "UserRole",
    # Content
    "Announcement",
    "Assignment",
    "AssignmentStatus",
    "Material",
    "Event",
    # Session
    "Session",
]
