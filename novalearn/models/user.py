"""Account and instructor application model definitions."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from novalearn.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_session_id() -> str:
    return uuid.uuid4().hex


class Role(str, enum.Enum):
    STUDENT = 'student'
    INSTRUCTOR = 'instructor'
    ADMIN = 'admin'


class ApplicationStatus(str, enum.Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class User(Base):
    """Represents an account of any role."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.STUDENT.value)  # student/instructor/admin
    session_id = Column(String, nullable=False, default=new_session_id)
    reset_token_hash = Column(String)
    reset_token_expires_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=utcnow)

    application = relationship(
        "InstructorApplication",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )


class InstructorApplication(Base):
    """A user's request to teach, and the outcome of its review."""
    __tablename__ = "instructor_applications"
    __table_args__ = (UniqueConstraint("user_id", name="uq_instructor_applications_user"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String, nullable=False, default=ApplicationStatus.PENDING.value)
    biography = Column(Text)
    expertise = Column(JSON, nullable=False, default=list)
    documents = Column(JSON, nullable=False, default=list)
    submitted_at = Column(DateTime(timezone=True), default=utcnow)
    reviewed_at = Column(DateTime(timezone=True))
    review_notes = Column(Text)

    user = relationship("User", back_populates="application")
