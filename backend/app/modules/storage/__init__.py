"""
Storage Module - persistence for users and noticeboard content

Two interchangeable backends behind one interface:
- DatabaseStorage: SQLAlchemy (PostgreSQL / SQLite)
- MemStorage: in-process dicts, seeded with the demo accounts
"""

from app.core.config import Settings
from app.core.logging_config import logger

from .base import BOOTSTRAP_ACCOUNTS, Storage, ensure_event_window
from .database import DatabaseStorage
from .memory import MemStorage


def build_storage(settings: Settings) -> Storage:
    """Pick the backend named by STORAGE_BACKEND"""
    if settings.STORAGE_BACKEND == "memory":
        storage: Storage = MemStorage(seed=False)
    else:
        storage = DatabaseStorage()
    logger.info(f"[Storage] Using {storage.name} backend")
    return storage


__all__ = [
    "Storage",
    "DatabaseStorage",
    "MemStorage",
    "build_storage",
    "ensure_event_window",
    "BOOTSTRAP_ACCOUNTS",
]
