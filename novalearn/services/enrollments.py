"""Enrollment and lesson progress.

Duplicate enrollments and duplicate lesson completions are rejected by the
database's unique constraints, not by a read before the write, so two racing
requests can never both succeed.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from novalearn.core.errors import AlreadyCompleted, AlreadyEnrolled, CourseNotFound, InvalidLesson, NotEnrolled
from novalearn.models.course import Course, Lesson
from novalearn.models.enrollment import Enrollment, LessonCompletion
from novalearn.services.pagination import page_window

logger = logging.getLogger(__name__)


def _ensure_course_exists(db: Session, course_id: int) -> None:
    if db.query(Course.id).filter(Course.id == course_id).first() is None:
        raise CourseNotFound()


def _is_enrolled(db: Session, student_id: int, course_id: int) -> bool:
    return db.query(Enrollment.id).filter(
        Enrollment.student_id == student_id,
        Enrollment.course_id == course_id,
    ).first() is not None


def enroll(db: Session, student_id: int, course_id: int) -> Enrollment:
    _ensure_course_exists(db, course_id)

    enrollment = Enrollment(student_id=student_id, course_id=course_id)
    db.add(enrollment)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyEnrolled() from exc

    db.refresh(enrollment)
    logger.info('Student %s enrolled in course %s', student_id, course_id)
    return enrollment


def unenroll(db: Session, student_id: int, course_id: int) -> None:
    deleted = db.query(Enrollment).filter(
        Enrollment.student_id == student_id,
        Enrollment.course_id == course_id,
    ).delete(synchronize_session=False)

    if not deleted:
        db.rollback()
        raise NotEnrolled()

    db.query(LessonCompletion).filter(
        LessonCompletion.student_id == student_id,
        LessonCompletion.course_id == course_id,
    ).delete(synchronize_session=False)
    db.commit()
    logger.info('Student %s unenrolled from course %s', student_id, course_id)


def completed_lessons(db: Session, student_id: int, course_id: int) -> list[str]:
    rows = (
        db.query(LessonCompletion.lesson_id)
        .filter(
            LessonCompletion.student_id == student_id,
            LessonCompletion.course_id == course_id,
        )
        .order_by(LessonCompletion.completed_at.asc(), LessonCompletion.id.asc())
        .all()
    )
    return [row[0] for row in rows]


def mark_lesson_completed(db: Session, student_id: int, course_id: int, lesson_id: str) -> list[str]:
    _ensure_course_exists(db, course_id)

    lesson = db.query(Lesson.id).filter(
        Lesson.course_id == course_id,
        Lesson.lesson_id == lesson_id,
    ).first()
    if lesson is None:
        raise InvalidLesson()

    if not _is_enrolled(db, student_id, course_id):
        raise NotEnrolled()

    db.add(LessonCompletion(student_id=student_id, course_id=course_id, lesson_id=lesson_id))
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyCompleted() from exc

    return completed_lessons(db, student_id, course_id)


def get_progress(db: Session, student_id: int, course_id: int) -> dict:
    _ensure_course_exists(db, course_id)
    if not _is_enrolled(db, student_id, course_id):
        raise NotEnrolled()

    completed = completed_lessons(db, student_id, course_id)
    total = db.query(Lesson).filter(Lesson.course_id == course_id).count()
    # Completions for lessons since removed from the course no longer count.
    current_ids = {
        row[0] for row in db.query(Lesson.lesson_id).filter(Lesson.course_id == course_id).all()
    }
    counted = [lesson_id for lesson_id in completed if lesson_id in current_ids]

    return {
        'course_id': course_id,
        'completed_lessons': completed,
        'total_lessons': total,
        'percent_complete': (len(counted) / total * 100) if total else 0.0,
    }


def list_enrollments(
    db: Session,
    student_id: int,
    page: int | None = None,
    limit: int | None = None,
) -> tuple[list[Enrollment], int, int, int]:
    page, limit, offset = page_window(page, limit)
    query = db.query(Enrollment).filter(Enrollment.student_id == student_id)
    total = query.count()
    items = query.order_by(Enrollment.created_at.desc(), Enrollment.id.desc()).offset(offset).limit(limit).all()
    return items, total, page, limit


def participant_ids(db: Session, course_id: int) -> list[int]:
    rows = (
        db.query(Enrollment.student_id)
        .filter(Enrollment.course_id == course_id)
        .order_by(Enrollment.student_id.asc())
        .all()
    )
    return [row[0] for row in rows]
