import logging

from sqlalchemy.orm import Session

from novalearn.core.errors import Forbidden, NotFound
from novalearn.models.quiz import Question, Quiz, QuizAttempt
from novalearn.schemas.quizzes import QuestionPayload, QuizCreateRequest, QuizUpdateRequest
from novalearn.services.courses import get_owned_course
from novalearn.services.pagination import page_window

logger = logging.getLogger(__name__)


def _build_questions(payloads: list[QuestionPayload]) -> list[Question]:
    return [
        Question(
            position=position,
            text=payload.text,
            options=list(payload.options),
            correct_answers=list(payload.correct_answers),
            points=payload.points,
        )
        for position, payload in enumerate(payloads)
    ]


def create_quiz(db: Session, instructor_id: int, payload: QuizCreateRequest) -> Quiz:
    course = get_owned_course(db, payload.course_id, instructor_id)

    quiz = Quiz(
        title=payload.title,
        description=payload.description,
        course_id=course.id,
        instructor_id=instructor_id,
        duration=payload.duration,
        passing_score=payload.passing_score,
        questions=_build_questions(payload.questions),
    )
    db.add(quiz)
    db.commit()
    db.refresh(quiz)
    logger.info('Instructor %s created quiz %s for course %s', instructor_id, quiz.id, course.id)
    return quiz


def get_quiz(db: Session, quiz_id: int) -> Quiz:
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
    if quiz is None:
        raise NotFound('Quiz not found.')
    return quiz


def list_course_quizzes(db: Session, course_id: int) -> list[Quiz]:
    return db.query(Quiz).filter(Quiz.course_id == course_id).order_by(Quiz.id.asc()).all()


def list_instructor_quizzes(
    db: Session,
    instructor_id: int,
    page: int | None = None,
    limit: int | None = None,
) -> list[Quiz]:
    page, limit, offset = page_window(page, limit)
    return (
        db.query(Quiz)
        .filter(Quiz.instructor_id == instructor_id)
        .order_by(Quiz.created_at.desc(), Quiz.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )


def get_owned_quiz(db: Session, quiz_id: int, instructor_id: int) -> Quiz:
    quiz = (
        db.query(Quiz)
        .filter(Quiz.id == quiz_id, Quiz.instructor_id == instructor_id)
        .with_for_update()
        .first()
    )
    if quiz is not None:
        return quiz

    exists = db.query(Quiz.id).filter(Quiz.id == quiz_id).first() is not None
    db.rollback()
    if exists:
        raise Forbidden('You do not own this quiz.')
    raise NotFound('Quiz not found.')


def update_owned_quiz(db: Session, quiz_id: int, instructor_id: int, payload: QuizUpdateRequest) -> Quiz:
    """Edit a quiz in place. Replacing questions gives them new ids; past attempts keep their own copy."""
    quiz = get_owned_quiz(db, quiz_id, instructor_id)

    if payload.title is not None:
        quiz.title = payload.title
    if payload.description is not None:
        quiz.description = payload.description
    if payload.duration is not None:
        quiz.duration = payload.duration
    if 'passing_score' in payload.model_fields_set:
        quiz.passing_score = payload.passing_score
    if payload.questions is not None:
        quiz.questions = _build_questions(payload.questions)

    db.commit()
    db.refresh(quiz)
    return quiz


def _remove_quiz(db: Session, quiz: Quiz) -> None:
    db.query(QuizAttempt).filter(QuizAttempt.quiz_id == quiz.id).delete(synchronize_session=False)
    db.delete(quiz)


def delete_owned_quiz(db: Session, quiz_id: int, instructor_id: int) -> None:
    quiz = get_owned_quiz(db, quiz_id, instructor_id)
    _remove_quiz(db, quiz)
    db.commit()
    logger.info('Instructor %s deleted quiz %s', instructor_id, quiz_id)


def hard_delete_quiz(db: Session, quiz_id: int) -> None:
    quiz = get_quiz(db, quiz_id)
    _remove_quiz(db, quiz)
    db.commit()
    logger.info('Quiz %s removed by an admin', quiz_id)
