"""
Server-side login sessions.

The cookie only carries a signed opaque id; the user it belongs to lives
here. Two backends:

- MemorySessionStore: dict in process memory, pruned by a background task.
  Sessions are lost on restart.
- DatabaseSessionStore: rows in the ``sessions`` table, survive restarts.

Sessions have a fixed lifetime from login (SESSION_MAX_AGE_SECONDS); they
are not extended on use.
"""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.core.config import Settings, settings as default_settings
from app.core.database import build_session_factory, get_engine, init_db
from app.core.logging_config import logger
from app.core.security import generate_session_id
from app.models.session import Session


class SessionStore(ABC):
    """sid -> user id with expiry"""

    name: str = "abstract"

    def __init__(self, max_age_seconds: int, prune_interval_seconds: int):
        self.max_age_seconds = max_age_seconds
        self.prune_interval_seconds = prune_interval_seconds
        self._prune_task: Optional[asyncio.Task] = None

    async def startup(self) -> None:
        """Prepare the backend (create tables...)"""

    def _expiry(self) -> datetime:
        return datetime.utcnow() + timedelta(seconds=self.max_age_seconds)

    @abstractmethod
    async def create(self, user_id: int) -> str:
        """Open a session for ``user_id`` and return its id"""

    @abstractmethod
    async def get(self, sid: str) -> Optional[int]:
        """User id for a live session, None if unknown or expired"""

    @abstractmethod
    async def destroy(self, sid: str) -> None: ...

    @abstractmethod
    async def prune(self) -> int:
        """Drop expired sessions; returns how many were removed"""

    async def start_pruning(self) -> None:
        """Start background prune task"""
        async def prune_loop():
            while True:
                await asyncio.sleep(self.prune_interval_seconds)
                try:
                    removed = await self.prune()
                    if removed:
                        logger.info(f"[Sessions] Pruned {removed} expired sessions")
                except Exception as e:
                    # next cycle retries
                    logger.error(f"[Sessions] Prune task error: {e}")

        self._prune_task = asyncio.create_task(prune_loop())
        logger.info(f"[Sessions] Started {self.name} session prune task")

    def stop_pruning(self) -> None:
        """Stop background prune task"""
        if self._prune_task:
            self._prune_task.cancel()
            self._prune_task = None


@dataclass
class _MemoryEntry:
    user_id: int
    expires_at: datetime


class MemorySessionStore(SessionStore):

    name = "memory"

    def __init__(self, max_age_seconds: int = 86400, prune_interval_seconds: int = 3600):
        super().__init__(max_age_seconds, prune_interval_seconds)
        self._sessions: Dict[str, _MemoryEntry] = {}

    async def create(self, user_id: int) -> str:
        sid = generate_session_id()
        self._sessions[sid] = _MemoryEntry(user_id=user_id, expires_at=self._expiry())
        return sid

    async def get(self, sid: str) -> Optional[int]:
        entry = self._sessions.get(sid)
        if entry is None:
            return None
        if datetime.utcnow() >= entry.expires_at:
            self._sessions.pop(sid, None)
            return None
        return entry.user_id

    async def destroy(self, sid: str) -> None:
        self._sessions.pop(sid, None)

    async def prune(self) -> int:
        now = datetime.utcnow()
        expired = [sid for sid, entry in self._sessions.items() if now >= entry.expires_at]
        for sid in expired:
            self._sessions.pop(sid, None)
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


class DatabaseSessionStore(SessionStore):

    name = "database"

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        engine: Optional[AsyncEngine] = None,
        max_age_seconds: int = 86400,
        prune_interval_seconds: int = 3600,
    ):
        super().__init__(max_age_seconds, prune_interval_seconds)
        self.engine = engine or get_engine()
        self.session_factory = session_factory or build_session_factory(self.engine)

    async def startup(self) -> None:
        await init_db(self.engine)

    async def create(self, user_id: int) -> str:
        sid = generate_session_id()
        async with self.session_factory() as db:
            db.add(Session(sid=sid, user_id=user_id, expires_at=self._expiry()))
            await db.commit()
        return sid

    async def get(self, sid: str) -> Optional[int]:
        async with self.session_factory() as db:
            result = await db.execute(select(Session).where(Session.sid == sid))
            row = result.scalar_one_or_none()
            if row is None:
                return None
            if row.is_expired():
                await db.delete(row)
                await db.commit()
                return None
            return row.user_id

    async def destroy(self, sid: str) -> None:
        async with self.session_factory() as db:
            await db.execute(delete(Session).where(Session.sid == sid))
            await db.commit()

    async def prune(self) -> int:
        async with self.session_factory() as db:
            result = await db.execute(delete(Session).where(Session.expires_at <= datetime.utcnow()))
            await db.commit()
            return result.rowcount or 0


def build_session_store(config: Settings = default_settings) -> SessionStore:
    """Pick the backend named by SESSION_BACKEND"""
    if config.SESSION_BACKEND == "memory":
        store: SessionStore = MemorySessionStore(
            max_age_seconds=config.SESSION_MAX_AGE_SECONDS,
            prune_interval_seconds=config.SESSION_PRUNE_INTERVAL_SECONDS,
        )
    else:
        store = DatabaseSessionStore(
            max_age_seconds=config.SESSION_MAX_AGE_SECONDS,
            prune_interval_seconds=config.SESSION_PRUNE_INTERVAL_SECONDS,
        )
    logger.info(f"[Sessions] Using {store.name} session store")
    return store
