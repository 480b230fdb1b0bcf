from sqlalchemy import Column, Integer, String, Text, Enum as SQLEnum
import enum

from app.core.database import Base


class UserRole(str, enum.Enum):
    """User roles"""
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password = Column(Text, nullable=False)  # digest.salt, see app.core.security
    name = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(UserRole, values_callable=lambda roles: [r.value for r in roles], name="userrole"),
        default=UserRole.STUDENT,
        nullable=False,
    )

    def __repr__(self):
        return f"<User {self.username} ({self.role})>"
