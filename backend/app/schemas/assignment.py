from pydantic import Field
from typing import Optional

from app.models.assignment import AssignmentStatus
from app.schemas.base import CamelModel, Timestamp


class AssignmentCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    due_date: Timestamp
    class_id: Optional[str] = None
    status: AssignmentStatus = AssignmentStatus.ACTIVE


class AssignmentUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    due_date: Optional[Timestamp] = None
    class_id: Optional[str] = None
    status: Optional[AssignmentStatus] = None


class AssignmentResponse(CamelModel):
    id: int
    title: str
    description: str
    due_date: Timestamp
    created_at: Timestamp
    teacher_id: int
    class_id: Optional[str] = None
    status: AssignmentStatus = AssignmentStatus.ACTIVE
