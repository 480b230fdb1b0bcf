"""
Relational storage backend (PostgreSQL in production, SQLite for local runs).

Each call opens its own AsyncSession from the factory and commits before
returning, so a route never holds a transaction across awaits of its own.
"""
import enum
from datetime import datetime
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.database import Base, build_session_factory, get_engine, init_db
from app.core.exceptions import UsernameTakenError
from app.core.logging_config import logger
from app.models import Announcement, Assignment, Event, Material, User
from app.modules.storage.base import BOOTSTRAP_ACCOUNTS, Storage, ensure_event_window
from app.schemas.announcement import AnnouncementCreate, AnnouncementResponse
from app.schemas.assignment import AssignmentCreate, AssignmentResponse
from app.schemas.event import EventCreate, EventResponse
from app.schemas.material import MaterialCreate, MaterialResponse
from app.schemas.user import UserCreate, UserRecord

RecordT = TypeVar("RecordT", bound=BaseModel)


def _plain(values: Dict[str, Any]) -> Dict[str, Any]:
    """Enum members -> their stored values"""
    return {k: (v.value if isinstance(v, enum.Enum) else v) for k, v in values.items()}


class DatabaseStorage(Storage):
    """Storage over SQLAlchemy async sessions"""

    name = "database"

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        engine: Optional[AsyncEngine] = None,
    ):
        self.engine = engine or get_engine()
        self.session_factory = session_factory or build_session_factory(self.engine)

    async def startup(self) -> None:
        await init_db(self.engine)
        logger.info(f"[Storage] Database ready ({self.engine.url.get_backend_name()})")

    async def shutdown(self) -> None:
        await self.engine.dispose()

    async def seed_bootstrap_accounts(self) -> int:
        async with self.session_factory() as db:
            existing = await db.scalar(select(func.count()).select_from(User))
            if existing:
                return 0

            for account in BOOTSTRAP_ACCOUNTS:
                db.add(User(**_plain(account)))
            await db.flush()

            # explicit ids leave the serial behind on PostgreSQL
            if self.engine.dialect.name == "postgresql":
                await db.execute(text(
                    "SELECT setval(pg_get_serial_sequence('users', 'id'), "
                    "(SELECT MAX(id) FROM users))"
                ))
            await db.commit()

        logger.info(f"[Storage] Seeded {len(BOOTSTRAP_ACCOUNTS)} bootstrap accounts")
        return len(BOOTSTRAP_ACCOUNTS)

    # ==================== Generic helpers ====================

    async def _get(self, model: Type[Base], schema: Type[RecordT], row_id: int) -> Optional[RecordT]:
        async with self.session_factory() as db:
            row = await db.get(model, row_id)
            return schema.model_validate(row) if row is not None else None

    async def _list(self, model: Type[Base], schema: Type[RecordT], *criteria) -> List[RecordT]:
        async with self.session_factory() as db:
            result = await db.execute(select(model).where(*criteria).order_by(model.id))
            return [schema.model_validate(row) for row in result.scalars().all()]

    async def _create(self, model: Type[Base], schema: Type[RecordT], values: Dict[str, Any]) -> RecordT:
        async with self.session_factory() as db:
            row = model(**_plain(values))
            db.add(row)
            await db.commit()
            await db.refresh(row)
            return schema.model_validate(row)

    async def _update(
        self, model: Type[Base], schema: Type[RecordT], row_id: int, changes: Dict[str, Any]
    ) -> Optional[RecordT]:
        async with self.session_factory() as db:
            row = await db.get(model, row_id)
            if row is None:
                return None
            for key, value in _plain(changes).items():
                setattr(row, key, value)
            await db.commit()
            await db.refresh(row)
            return schema.model_validate(row)

    async def _delete(self, model: Type[Base], row_id: int) -> bool:
        async with self.session_factory() as db:
            row = await db.get(model, row_id)
            if row is None:
                return False
            await db.delete(row)
            await db.commit()
            return True

    # ==================== Users ====================

    async def get_user(self, user_id: int) -> Optional[UserRecord]:
        return await self._get(User, UserRecord, user_id)

    async def get_user_by_username(self, username: str) -> Optional[UserRecord]:
        async with self.session_factory() as db:
            result = await db.execute(select(User).where(User.username == username))
            user = result.scalar_one_or_none()
            return UserRecord.model_validate(user) if user else None

    async def create_user(self, data: UserCreate) -> UserRecord:
        try:
            return await self._create(User, UserRecord, data.model_dump())
        except IntegrityError as e:
            raise UsernameTakenError(data.username) from e

    async def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[UserRecord]:
        try:
            return await self._update(User, UserRecord, user_id, changes)
        except IntegrityError as e:
            raise UsernameTakenError(changes.get("username", "")) from e

    async def delete_user(self, user_id: int) -> bool:
        return await self._delete(User, user_id)

    async def list_users(self) -> List[UserRecord]:
        return await self._list(User, UserRecord)

    # ==================== Announcements ====================

    async def get_announcement(self, announcement_id: int) -> Optional[AnnouncementResponse]:
        return await self._get(Announcement, AnnouncementResponse, announcement_id)

    async def create_announcement(self, data: AnnouncementCreate, author_id: int) -> AnnouncementResponse:
        return await self._create(Announcement, AnnouncementResponse, {
            **data.model_dump(),
            "author_id": author_id,
            "created_at": datetime.utcnow(),
        })

    async def update_announcement(self, announcement_id: int, changes: Dict[str, Any]) -> Optional[AnnouncementResponse]:
        return await self._update(Announcement, AnnouncementResponse, announcement_id, changes)

    async def delete_announcement(self, announcement_id: int) -> bool:
        return await self._delete(Announcement, announcement_id)

    async def list_announcements(self) -> List[AnnouncementResponse]:
        return await self._list(Announcement, AnnouncementResponse)

    # ==================== Assignments ====================

    async def get_assignment(self, assignment_id: int) -> Optional[AssignmentResponse]:
        return await self._get(Assignment, AssignmentResponse, assignment_id)

    async def create_assignment(self, data: AssignmentCreate, teacher_id: int) -> AssignmentResponse:
        return await self._create(Assignment, AssignmentResponse, {
            **data.model_dump(),
            "teacher_id": teacher_id,
            "created_at": datetime.utcnow(),
        })

    async def update_assignment(self, assignment_id: int, changes: Dict[str, Any]) -> Optional[AssignmentResponse]:
        return await self._update(Assignment, AssignmentResponse, assignment_id, changes)

    async def delete_assignment(self, assignment_id: int) -> bool:
        return await self._delete(Assignment, assignment_id)

    async def list_assignments(self) -> List[AssignmentResponse]:
        return await self._list(Assignment, AssignmentResponse)

    async def list_assignments_by_teacher(self, teacher_id: int) -> List[AssignmentResponse]:
        return await self._list(Assignment, AssignmentResponse, Assignment.teacher_id == teacher_id)

    # ==================== Materials ====================

    async def get_material(self, material_id: int) -> Optional[MaterialResponse]:
        return await self._get(Material, MaterialResponse, material_id)

    async def create_material(self, data: MaterialCreate, teacher_id: int) -> MaterialResponse:
        return await self._create(Material, MaterialResponse, {
            **data.model_dump(),
            "teacher_id": teacher_id,
            "uploaded_at": datetime.utcnow(),
        })

    async def update_material(self, material_id: int, changes: Dict[str, Any]) -> Optional[MaterialResponse]:
        return await self._update(Material, MaterialResponse, material_id, changes)

    async def delete_material(self, material_id: int) -> bool:
        return await self._delete(Material, material_id)

    async def list_materials(self) -> List[MaterialResponse]:
        return await self._list(Material, MaterialResponse)

    async def list_materials_by_teacher(self, teacher_id: int) -> List[MaterialResponse]:
        return await self._list(Material, MaterialResponse, Material.teacher_id == teacher_id)

    # ==================== Events ====================

    async def get_event(self, event_id: int) -> Optional[EventResponse]:
        return await self._get(Event, EventResponse, event_id)

    async def create_event(self, data: EventCreate, created_by: int) -> EventResponse:
        return await self._create(Event, EventResponse, {**data.model_dump(), "created_by": created_by})

    async def update_event(self, event_id: int, changes: Dict[str, Any]) -> Optional[EventResponse]:
        async with self.session_factory() as db:
            row = await db.get(Event, event_id)
            if row is None:
                return None
            ensure_event_window({
                "start_date": changes.get("start_date", row.start_date),
                "end_date": changes.get("end_date", row.end_date),
            })
            for key, value in changes.items():
                setattr(row, key, value)
            await db.commit()
            await db.refresh(row)
            return EventResponse.model_validate(row)

    async def delete_event(self, event_id: int) -> bool:
        return await self._delete(Event, event_id)

    async def list_events(self) -> List[EventResponse]:
        return await self._list(Event, EventResponse)
