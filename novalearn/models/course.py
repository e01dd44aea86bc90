"""Course model definitions."""

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from novalearn.database import Base
from novalearn.models.user import utcnow


class Course(Base):
    """A course owned by the instructor who created it."""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    duration = Column(Integer, nullable=False, default=0)  # minutes
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    materials = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    lessons = relationship(
        "Lesson",
        back_populates="course",
        order_by="Lesson.position",
        cascade="all, delete-orphan",
    )
    reviews = relationship(
        "Review",
        back_populates="course",
        order_by="Review.created_at",
        cascade="all, delete-orphan",
    )


class Lesson(Base):
    """One unit of a course. ``lesson_id`` stays stable across edits."""
    __tablename__ = "lessons"
    __table_args__ = (UniqueConstraint("course_id", "lesson_id", name="uq_lessons_course_lesson"),)

    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_id = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    title = Column(String, nullable=False)
    content = Column(Text)

    course = relationship("Course", back_populates="lessons")


class Review(Base):
    __tablename__ = "course_reviews"
    __table_args__ = (CheckConstraint("rating BETWEEN 1 AND 5", name="ck_course_reviews_rating"),)

    id = Column(Integer, primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    course = relationship("Course", back_populates="reviews")
