from sqlalchemy import Column, Integer, String, Text, DateTime
from datetime import datetime

from app.core.database import Base


class Material(Base):
    """Study material; file_url points at an upload or an external resource"""
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    file_url = Column(Text, nullable=True)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    teacher_id = Column(Integer, nullable=False, index=True)
    class_id = Column(String(100), nullable=True)
    category = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<Material {self.id} {self.title!r}>"
