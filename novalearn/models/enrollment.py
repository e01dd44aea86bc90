"""Enrollment and lesson progress model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from novalearn.database import Base
from novalearn.models.user import utcnow


class Enrollment(Base):
    """Links a student to a course. One row per (student, course) pair."""
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),)

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class LessonCompletion(Base):
    """A completed lesson. Inserted once; duplicates hit the unique constraint."""
    __tablename__ = "lesson_completions"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", "lesson_id", name="uq_lesson_completions_student_lesson"),
    )

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    lesson_id = Column(String, nullable=False)
    completed_at = Column(DateTime(timezone=True), default=utcnow)
