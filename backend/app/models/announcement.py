from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime
from datetime import datetime

from app.core.database import Base


class Announcement(Base):
    """Noticeboard announcement"""
    __tablename__ = "announcements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    author_id = Column(Integer, nullable=False, index=True)
    important = Column(Boolean, default=False, nullable=False)
    category = Column(String(100), nullable=True)
    audience = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<Announcement {self.id} {self.title!r}>"
