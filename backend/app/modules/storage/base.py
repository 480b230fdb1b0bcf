"""
Persistence interface shared by every storage backend.

Routes talk to ``Storage`` only; the concrete backend is picked once at
startup (see ``build_storage``) and never swapped while the process runs.
All methods return pydantic records, never ORM objects, so callers behave
the same against either backend.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app.core.exceptions import ValidationError
from app.models.user import UserRole
from app.schemas.announcement import AnnouncementCreate, AnnouncementResponse
from app.schemas.assignment import AssignmentCreate, AssignmentResponse
from app.schemas.event import EventCreate, EventResponse, check_event_window
from app.schemas.material import MaterialCreate, MaterialResponse
from app.schemas.user import UserCreate, UserRecord

# Demo accounts created on first run. Ids match BOOTSTRAP_ACCOUNT_IDS in
# app.core.security; the plaintext passwords only work for those ids.
BOOTSTRAP_ACCOUNTS: List[Dict[str, Any]] = [
    {"id": 1, "username": "admin", "password": "password", "name": "Admin User", "role": UserRole.ADMIN},
    {"id": 2, "username": "teacher", "password": "password", "name": "Alex Johnson", "role": UserRole.TEACHER},
    {"id": 3, "username": "student", "password": "password", "name": "Emma Davis", "role": UserRole.STUDENT},
]


def ensure_event_window(values: Dict[str, Any]) -> None:
    """Re-check end >= start after a partial event update is merged"""
    try:
        check_event_window(values.get("start_date"), values.get("end_date"))
    except ValueError as e:
        raise ValidationError("Invalid data", errors=[{"field": "endDate", "message": str(e)}]) from e


class Storage(ABC):
    """CRUD over users, announcements, assignments, materials and events"""

    name: str = "abstract"

    async def startup(self) -> None:
        """Prepare the backend (create tables, open pools...)"""

    async def shutdown(self) -> None:
        """Release backend resources"""

    @abstractmethod
    async def seed_bootstrap_accounts(self) -> int:
        """Create the demo accounts if no user exists yet; returns how many were created"""

    # ==================== Users ====================

    @abstractmethod
    async def get_user(self, user_id: int) -> Optional[UserRecord]: ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[UserRecord]: ...

    @abstractmethod
    async def create_user(self, data: UserCreate) -> UserRecord:
        """``data.password`` must already be hashed. Raises UsernameTakenError."""

    @abstractmethod
    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[UserRecord]:
        """Raises UsernameTakenError when renaming onto an existing username"""

    @abstractmethod
    async def delete_user(self, user_id: int) -> bool: ...

    @abstractmethod
    async def list_users(self) -> List[UserRecord]: ...

    # ==================== Announcements ====================

    @abstractmethod
    async def get_announcement(self, announcement_id: int) -> Optional[AnnouncementResponse]: ...

    @abstractmethod
    async def create_announcement(self, data: AnnouncementCreate, author_id: int) -> AnnouncementResponse: ...

    @abstractmethod
    async def update_announcement(self, announcement_id: int, changes: Dict[str, Any]) -> Optional[AnnouncementResponse]: ...

    @abstractmethod
    async def delete_announcement(self, announcement_id: int) -> bool: ...

    @abstractmethod
    async def list_announcements(self) -> List[AnnouncementResponse]: ...

    # ==================== Assignments ====================

    @abstractmethod
    async def get_assignment(self, assignment_id: int) -> Optional[AssignmentResponse]: ...

    @abstractmethod
    async def create_assignment(self, data: AssignmentCreate, teacher_id: int) -> AssignmentResponse: ...

    @abstractmethod
    async def update_assignment(self, assignment_id: int, changes: Dict[str, Any]) -> Optional[AssignmentResponse]: ...

    @abstractmethod
    async def delete_assignment(self, assignment_id: int) -> bool: ...

    @abstractmethod
    async def list_assignments(self) -> List[AssignmentResponse]: ...

    @abstractmethod
    async def list_assignments_by_teacher(self, teacher_id: int) -> List[AssignmentResponse]: ...

    # ==================== Materials ====================

    @abstractmethod
    async def get_material(self, material_id: int) -> Optional[MaterialResponse]: ...

    @abstractmethod
    async def create_material(self, data: MaterialCreate, teacher_id: int) -> MaterialResponse: ...

    @abstractmethod
    async def update_material(self, material_id: int, changes: Dict[str, Any]) -> Optional[MaterialResponse]: ...

    @abstractmethod
    async def delete_material(self, material_id: int) -> bool: ...

    @abstractmethod
    async def list_materials(self) -> List[MaterialResponse]: ...

    @abstractmethod
    async def list_materials_by_teacher(self, teacher_id: int) -> List[MaterialResponse]: ...

    # ==================== Events ====================

    @abstractmethod
    async def get_event(self, event_id: int) -> Optional[EventResponse]: ...

    @abstractmethod
    async def create_event(self, data: EventCreate, created_by: int) -> EventResponse: ...

    @abstractmethod
    async def update_event(self, event_id: int, changes: Dict[str, Any]) -> Optional[EventResponse]:
        """Raises ValidationError if the merged row would end before it starts"""

    @abstractmethod
    async def delete_event(self, event_id: int) -> bool: ...

    @abstractmethod
    async def list_events(self) -> List[EventResponse]: ...
