from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, CheckConstraint

from app.core.database import Base


class Event(Base):
    """Calendar event"""
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_events_end_after_start"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    location = Column(String(255), nullable=True)
    created_by = Column(Integer, nullable=False, index=True)
    important = Column(Boolean, default=False, nullable=False)
    category = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<Event {self.id} {self.title!r}>"
