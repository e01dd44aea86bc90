import logging
from collections.abc import Sequence

from sqlalchemy.orm import Session

from novalearn.core import config
from novalearn.core.errors import NotFound
from novalearn.models.quiz import Quiz, QuizAttempt
from novalearn.schemas.quizzes import SubmittedAnswer
from novalearn.services.scoring import grade

logger = logging.getLogger(__name__)


def submit(db: Session, student_id: int, quiz_id: int, answers: Sequence[SubmittedAnswer]) -> QuizAttempt:
    """Grade a submission and store it as a new attempt.

    Resubmitting creates another attempt; earlier attempts are never touched.
    """
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
    if quiz is None:
        raise NotFound('Quiz not found.')

    result = grade(quiz, answers)

    attempt = QuizAttempt(
        quiz_id=quiz.id,
        student_id=student_id,
        answers=[answer.model_dump() for answer in answers],
        results=[item.model_dump() for item in result.results],
        earned_points=result.earned_points,
        total_points=result.total_points,
        score=result.score,
        passed=result.passed,
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)

    logger.info(
        'Student %s attempt %s on quiz %s scored %.1f (passed=%s)',
        student_id,
        attempt.id,
        quiz.id,
        attempt.score,
        attempt.passed,
    )
    return attempt


def list_attempts(
    db: Session,
    student_id: int,
    quiz_id: int | None = None,
    limit: int | None = None,
) -> list[QuizAttempt]:
    query = db.query(QuizAttempt).filter(QuizAttempt.student_id == student_id)
    if quiz_id is not None:
        query = query.filter(QuizAttempt.quiz_id == quiz_id)
    return (
        query.order_by(QuizAttempt.created_at.desc(), QuizAttempt.id.desc())
        .limit(limit or config.RECENT_ATTEMPTS_LIMIT)
        .all()
    )


def get_attempt(db: Session, student_id: int, attempt_id: int) -> QuizAttempt:
    attempt = db.query(QuizAttempt).filter(
        QuizAttempt.id == attempt_id,
        QuizAttempt.student_id == student_id,
    ).first()
    if attempt is None:
        raise NotFound('Attempt not found.')
    return attempt
