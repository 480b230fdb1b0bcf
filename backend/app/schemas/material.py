from pydantic import Field
from typing import Optional

from app.schemas.base import CamelModel, Timestamp


class MaterialCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    file_url: str = Field(..., min_length=1)
    class_id: Optional[str] = None
    category: Optional[str] = None


class MaterialUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    file_url: Optional[str] = Field(None, min_length=1)
    class_id: Optional[str] = None
    category: Optional[str] = None


class MaterialResponse(CamelModel):
    id: int
    title: str
    description: str
    file_url: Optional[str] = None
    uploaded_at: Timestamp
    teacher_id: int
    class_id: Optional[str] = None
    category: Optional[str] = None
