from pydantic import Field
from typing import Optional

from app.schemas.base import CamelModel, Timestamp


class AnnouncementCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    important: bool = False
    category: Optional[str] = None
    audience: Optional[str] = None


class AnnouncementUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    important: Optional[bool] = None
    category: Optional[str] = None
    audience: Optional[str] = None


class AnnouncementResponse(CamelModel):
    id: int
    title: str
    content: str
    created_at: Timestamp
    author_id: int
    important: bool = False
    category: Optional[str] = None
    audience: Optional[str] = None
