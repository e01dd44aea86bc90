import logging
import uuid

from sqlalchemy.orm import Session

from novalearn.core.errors import CourseNotFound, Forbidden
from novalearn.models.course import Course, Lesson, Review
from novalearn.models.enrollment import Enrollment, LessonCompletion
from novalearn.models.quiz import Question, Quiz, QuizAttempt
from novalearn.schemas.courses import CourseCreateRequest, CourseUpdateRequest, LessonPayload, ReviewRequest
from novalearn.services.pagination import page_window

logger = logging.getLogger(__name__)


def new_lesson_id() -> str:
    return uuid.uuid4().hex[:12]


def _build_lessons(payloads: list[LessonPayload]) -> list[Lesson]:
    return [
        Lesson(
            lesson_id=payload.lesson_id or new_lesson_id(),
            position=position,
            title=payload.title,
            content=payload.content,
        )
        for position, payload in enumerate(payloads)
    ]


def _sync_lessons(course: Course, payloads: list[LessonPayload]) -> None:
    # Lessons are matched on lesson_id so completions recorded against them stay valid.
    existing = {lesson.lesson_id: lesson for lesson in course.lessons}
    synced: list[Lesson] = []

    for position, payload in enumerate(payloads):
        lesson = existing.get(payload.lesson_id) if payload.lesson_id else None
        if lesson is None:
            lesson = Lesson(lesson_id=payload.lesson_id or new_lesson_id())
        lesson.position = position
        lesson.title = payload.title
        lesson.content = payload.content
        synced.append(lesson)

    course.lessons = synced


def create_course(db: Session, instructor_id: int, payload: CourseCreateRequest) -> Course:
    course = Course(
        title=payload.title,
        description=payload.description,
        duration=payload.duration,
        instructor_id=instructor_id,
        materials=list(payload.materials),
        lessons=_build_lessons(payload.lessons),
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    logger.info('Instructor %s created course %s', instructor_id, course.id)
    return course


def get_course(db: Session, course_id: int) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if course is None:
        raise CourseNotFound()
    return course


def list_public_courses(
    db: Session,
    search: str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> tuple[list[Course], int, int, int]:
    page, limit, offset = page_window(page, limit)
    query = db.query(Course)
    if search and search.strip():
        query = query.filter(Course.title.ilike(f'%{search.strip()}%'))

    total = query.count()
    items = query.order_by(Course.created_at.desc(), Course.id.desc()).offset(offset).limit(limit).all()
    return items, total, page, limit


def list_instructor_courses(
    db: Session,
    instructor_id: int,
    page: int | None = None,
    limit: int | None = None,
) -> tuple[list[Course], int, int, int]:
    page, limit, offset = page_window(page, limit)
    query = db.query(Course).filter(Course.instructor_id == instructor_id)
    total = query.count()
    items = query.order_by(Course.created_at.desc(), Course.id.desc()).offset(offset).limit(limit).all()
    return items, total, page, limit


def get_owned_course(db: Session, course_id: int, instructor_id: int) -> Course:
    """Fetch a course for mutation, filtered by owner in the same query."""
    course = (
        db.query(Course)
        .filter(Course.id == course_id, Course.instructor_id == instructor_id)
        .with_for_update()
        .first()
    )
    if course is not None:
        return course

    exists = db.query(Course.id).filter(Course.id == course_id).first() is not None
    db.rollback()
    if exists:
        raise Forbidden('You do not own this course.')
    raise CourseNotFound()


def update_owned_course(db: Session, course_id: int, instructor_id: int, payload: CourseUpdateRequest) -> Course:
    course = get_owned_course(db, course_id, instructor_id)

    if payload.title is not None:
        course.title = payload.title
    if payload.description is not None:
        course.description = payload.description
    if payload.duration is not None:
        course.duration = payload.duration
    if payload.materials is not None:
        course.materials = list(payload.materials)
    if payload.lessons is not None:
        _sync_lessons(course, payload.lessons)

    db.commit()
    db.refresh(course)
    return course


def _remove_course(db: Session, course: Course) -> None:
    quiz_ids = [row[0] for row in db.query(Quiz.id).filter(Quiz.course_id == course.id).all()]
    if quiz_ids:
        db.query(QuizAttempt).filter(QuizAttempt.quiz_id.in_(quiz_ids)).delete(synchronize_session=False)
        db.query(Question).filter(Question.quiz_id.in_(quiz_ids)).delete(synchronize_session=False)
        db.query(Quiz).filter(Quiz.id.in_(quiz_ids)).delete(synchronize_session=False)
    for model in (LessonCompletion, Enrollment):
        db.query(model).filter(model.course_id == course.id).delete(synchronize_session=False)
    db.delete(course)


def delete_owned_course(db: Session, course_id: int, instructor_id: int) -> None:
    course = get_owned_course(db, course_id, instructor_id)
    _remove_course(db, course)
    db.commit()
    logger.info('Instructor %s deleted course %s', instructor_id, course_id)


def add_review(db: Session, student_id: int, course_id: int, payload: ReviewRequest) -> Course:
    course = get_course(db, course_id)
    course.reviews.append(Review(student_id=student_id, rating=payload.rating, comment=payload.comment))
    db.commit()
    db.refresh(course)
    return course


def hard_delete_course(db: Session, course_id: int) -> None:
    course = get_course(db, course_id)
    _remove_course(db, course)
    db.commit()
    logger.info('Course %s removed by an admin', course_id)
