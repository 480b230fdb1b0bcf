"""
In-memory storage backend.

Used for tests and throwaway demos. Data lives in plain dicts for the life
of the process; each mutation runs without awaiting, so it is atomic under
the single event loop.
"""
from datetime import datetime
from itertools import count
from typing import Any, Dict, List, Optional, TypeVar

from pydantic import BaseModel

from app.core.exceptions import UsernameTakenError
from app.core.logging_config import logger
from app.modules.storage.base import BOOTSTRAP_ACCOUNTS, Storage, ensure_event_window
from app.schemas.announcement import AnnouncementCreate, AnnouncementResponse
from app.schemas.assignment import AssignmentCreate, AssignmentResponse
from app.schemas.event import EventCreate, EventResponse
from app.schemas.material import MaterialCreate, MaterialResponse
from app.schemas.user import UserCreate, UserRecord

RecordT = TypeVar("RecordT", bound=BaseModel)


class _Table:
    """id -> record map with its own id sequence"""

    def __init__(self):
        self.rows: Dict[int, BaseModel] = {}
        self._ids = count(1)

    def next_id(self) -> int:
        return next(self._ids)

    def reseed(self, start: int) -> None:
        self._ids = count(start)

    def get(self, row_id: int) -> Optional[Any]:
        row = self.rows.get(row_id)
        return row.model_copy() if row is not None else None

    def all(self) -> List[Any]:
        return [row.model_copy() for _, row in sorted(self.rows.items())]

    def put(self, row: RecordT) -> RecordT:
        self.rows[row.id] = row
        return row.model_copy()

    def patch(self, row_id: int, changes: Dict[str, Any]) -> Optional[Any]:
        row = self.rows.get(row_id)
        if row is None:
            return None
        return self.put(row.model_copy(update=changes))

    def delete(self, row_id: int) -> bool:
        return self.rows.pop(row_id, None) is not None


class MemStorage(Storage):
    """Dict-backed Storage; seeds the bootstrap accounts unless told not to"""

    name = "memory"

    def __init__(self, seed: bool = True):
        self.users = _Table()
        self.announcements = _Table()
        self.assignments = _Table()
        self.materials = _Table()
        self.events = _Table()
        if seed:
            self._seed()

    def _seed(self) -> int:
        if self.users.rows:
            return 0
        for account in BOOTSTRAP_ACCOUNTS:
            self.users.put(UserRecord(**account))
        self.users.reseed(max(a["id"] for a in BOOTSTRAP_ACCOUNTS) + 1)
        return len(BOOTSTRAP_ACCOUNTS)

    async def seed_bootstrap_accounts(self) -> int:
        created = self._seed()
        if created:
            logger.info(f"[Storage] Seeded {created} bootstrap accounts (memory)")
        return created

    # ==================== Users ====================

    def _username_owner(self, username: str) -> Optional[int]:
        for row in self.users.rows.values():
            if row.username == username:
                return row.id
        return None

    async def get_user(self, user_id: int) -> Optional[UserRecord]:
        return self.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        owner = self._username_owner(username)
        return self.users.get(owner) if owner is not None else None

    async def create_user(self, data: UserCreate) -> UserRecord:
        if self._username_owner(data.username) is not None:
            raise UsernameTakenError(data.username)
        return self.users.put(UserRecord(id=self.users.next_id(), **data.model_dump()))

    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[UserRecord]:
        if user_id not in self.users.rows:
            return None
        username = changes.get("username")
        if username is not None:
            owner = self._username_owner(username)
            if owner is not None and owner != user_id:
                raise UsernameTakenError(username)
        return self.users.patch(user_id, changes)

    async def delete_user(self, user_id: int) -> bool:
        return self.users.delete(user_id)

    async def list_users(self) -> List[UserRecord]:
        return self.users.all()

    # ==================== Announcements ====================

    async def get_announcement(self, announcement_id: int) -> Optional[AnnouncementResponse]:
        return self.announcements.get(announcement_id)

    async def create_announcement(self, data: AnnouncementCreate, author_id: int) -> AnnouncementResponse:
        return self.announcements.put(AnnouncementResponse(
            id=self.announcements.next_id(),
            created_at=datetime.utcnow(),
            author_id=author_id,
            **data.model_dump(),
        ))

    async def update_announcement(self, announcement_id: int, changes: Dict[str, Any]) -> Optional[AnnouncementResponse]:
        return self.announcements.patch(announcement_id, changes)

    async def delete_announcement(self, announcement_id: int) -> bool:
        return self.announcements.delete(announcement_id)

    async def list_announcements(self) -> List[AnnouncementResponse]:
        return self.announcements.all()

    # ==================== Assignments ====================

    async def get_assignment(self, assignment_id: int) -> Optional[AssignmentResponse]:
        return self.assignments.get(assignment_id)

    async def create_assignment(self, data: AssignmentCreate, teacher_id: int) -> AssignmentResponse:
        return self.assignments.put(AssignmentResponse(
            id=self.assignments.next_id(),
            created_at=datetime.utcnow(),
            teacher_id=teacher_id,
            **data.model_dump(),
        ))

    async def update_assignment(self, assignment_id: int, changes: Dict[str, Any]) -> Optional[AssignmentResponse]:
        return self.assignments.patch(assignment_id, changes)

    async def delete_assignment(self, assignment_id: int) -> bool:
        return self.assignments.delete(assignment_id)

    async def list_assignments(self) -> List[AssignmentResponse]:
        return self.assignments.all()

    async def list_assignments_by_teacher(self, teacher_id: int) -> List[AssignmentResponse]:
        return [a for a in self.assignments.all() if a.teacher_id == teacher_id]

    # ==================== Materials ====================

    async def get_material(self, material_id: int) -> Optional[MaterialResponse]:
        return self.materials.get(material_id)

    async def create_material(self, data: MaterialCreate, teacher_id: int) -> MaterialResponse:
        return self.materials.put(MaterialResponse(
            id=self.materials.next_id(),
            uploaded_at=datetime.utcnow(),
            teacher_id=teacher_id,
            **data.model_dump(),
        ))

    async def update_material(self, material_id: int, changes: Dict[str, Any]) -> Optional[MaterialResponse]:
        return self.materials.patch(material_id, changes)

    async def delete_material(self, material_id: int) -> bool:
        return self.materials.delete(material_id)

    async def list_materials(self) -> List[MaterialResponse]:
        return self.materials.all()

    async def list_materials_by_teacher(self, teacher_id: int) -> List[MaterialResponse]:
        return [m for m in self.materials.all() if m.teacher_id == teacher_id]

    # ==================== Events ====================

    async def get_event(self, event_id: int) -> Optional[EventResponse]:
        return self.events.get(event_id)

    async def create_event(self, data: EventCreate, created_by: int) -> EventResponse:
        return self.events.put(EventResponse(
            id=self.events.next_id(),
            created_by=created_by,
            **data.model_dump(),
        ))

    async def update_event(self, event_id: int, changes: Dict[str, Any]) -> Optional[EventResponse]:
        current = self.events.get(event_id)
        if current is None:
            return None
        ensure_event_window({**current.model_dump(), **changes})
        return self.events.patch(event_id, changes)

    async def delete_event(self, event_id: int) -> bool:
        return self.events.delete(event_id)

    async def list_events(self) -> List[EventResponse]:
        return self.events.all()
