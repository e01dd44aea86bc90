"""Quiz, question and attempt model definitions."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, event
from sqlalchemy.orm import relationship

from novalearn.core.errors import InvalidState
from novalearn.database import Base
from novalearn.models.user import utcnow


class Quiz(Base):
    """Quiz definition. Submissions live in ``quiz_attempts``."""
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    instructor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    duration = Column(Integer)  # minutes
    passing_score = Column(Float)  # percentage, 0-100
    created_at = Column(DateTime(timezone=True), default=utcnow)

    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.position",
        cascade="all, delete-orphan",
    )


class Question(Base):
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False, default=list)
    correct_answers = Column(JSON, nullable=False, default=list)
    points = Column(Integer, nullable=False, default=1)

    quiz = relationship("Quiz", back_populates="questions")


class QuizAttempt(Base):
    """One graded submission. Never updated after insert."""
    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    answers = Column(JSON, nullable=False, default=list)
    results = Column(JSON, nullable=False, default=list)
    earned_points = Column(Integer, nullable=False)
    total_points = Column(Integer, nullable=False)
    score = Column(Float, nullable=False)  # 0-100
    passed = Column(Boolean, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)


@event.listens_for(QuizAttempt, "before_update")
def _refuse_attempt_update(mapper, connection, target) -> None:
    raise InvalidState('Quiz attempts are immutable; submit a new attempt instead.')
