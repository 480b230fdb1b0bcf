from pydantic import Field, ValidationInfo, field_validator
from datetime import datetime
from typing import Optional

from app.schemas.base import CamelModel, Timestamp


def check_event_window(start_date: Optional[datetime], end_date: Optional[datetime]) -> None:
    """Raise ValueError unless end_date is at or after start_date"""
    if start_date is not None and end_date is not None and end_date < start_date:
        raise ValueError("End date must be on or after the start date")


class EventCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    start_date: Timestamp
    end_date: Timestamp
    location: Optional[str] = None
    important: bool = False
    category: Optional[str] = None

    @field_validator("end_date")
    @classmethod
    def end_not_before_start(cls, v: datetime, info: ValidationInfo) -> datetime:
        check_event_window(info.data.get("start_date"), v)
        return v


class EventUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    start_date: Optional[Timestamp] = None
    end_date: Optional[Timestamp] = None
    location: Optional[str] = None
    important: Optional[bool] = None
    category: Optional[str] = None

    @field_validator("end_date")
    @classmethod
    def end_not_before_start(cls, v: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        check_event_window(info.data.get("start_date"), v)
        return v


class EventResponse(CamelModel):
    id: int
    title: str
    description: str
    start_date: Timestamp
    end_date: Timestamp
    location: Optional[str] = None
    created_by: int
    important: bool = False
    category: Optional[str] = None
