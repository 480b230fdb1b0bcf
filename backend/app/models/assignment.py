from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime
import enum

from app.core.database import Base


class AssignmentStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class Assignment(Base):
    """Homework/coursework set by a teacher"""
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    due_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    teacher_id = Column(Integer, nullable=False, index=True)
    class_id = Column(String(100), nullable=True)
    status = Column(String(20), default=AssignmentStatus.ACTIVE.value, nullable=False)

    def __repr__(self):
        return f"<Assignment {self.id} {self.title!r}>"
