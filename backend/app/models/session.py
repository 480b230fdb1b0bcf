from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from datetime import datetime

from app.core.database import Base


class Session(Base):
    """Server-side login session, keyed by the id carried in the cookie"""
    __tablename__ = "sessions"

    sid = Column(String(128), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def is_expired(self, now: datetime = None) -> bool:
        """Check if session is expired"""
        return (now or datetime.utcnow()) >= self.expires_at

    def __repr__(self):
        return f"<Session user={self.user_id}>"
