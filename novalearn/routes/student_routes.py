from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from novalearn.auth.dependencies import require_student
from novalearn.auth.gate import Identity
from novalearn.database import get_db
from novalearn.schemas.courses import (
    CourseResponse,
    EnrollmentPage,
    EnrollmentResponse,
    ProgressResponse,
    ReviewRequest,
)
from novalearn.schemas.quizzes import AttemptResponse, SubmissionRequest
from novalearn.services import courses, enrollments, quiz_attempts

router = APIRouter(tags=['student'])


@router.post('/courses/{course_id}/enroll', response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED)
def enroll_in_course(
    course_id: int,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    return enrollments.enroll(db, identity.user_id, course_id)


@router.delete('/courses/{course_id}/enroll', status_code=status.HTTP_204_NO_CONTENT)
def unenroll_from_course(
    course_id: int,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    enrollments.unenroll(db, identity.user_id, course_id)


@router.get('/enrollments', response_model=EnrollmentPage)
def list_my_enrollments(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    items, total, page, limit = enrollments.list_enrollments(db, identity.user_id, page, limit)
    return EnrollmentPage(page=page, limit=limit, total=total, items=items)


@router.post('/courses/{course_id}/lessons/{lesson_id}/complete', response_model=ProgressResponse)
def complete_lesson(
    course_id: int,
    lesson_id: str,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    enrollments.mark_lesson_completed(db, identity.user_id, course_id, lesson_id)
    return enrollments.get_progress(db, identity.user_id, course_id)


@router.get('/courses/{course_id}/progress', response_model=ProgressResponse)
def get_course_progress(
    course_id: int,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    return enrollments.get_progress(db, identity.user_id, course_id)


@router.post('/courses/{course_id}/reviews', response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def review_course(
    course_id: int,
    data: ReviewRequest,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    return courses.add_review(db, identity.user_id, course_id, data)


@router.post('/quizzes/{quiz_id}/attempts', response_model=AttemptResponse, status_code=status.HTTP_201_CREATED)
def submit_quiz(
    quiz_id: int,
    data: SubmissionRequest,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    return quiz_attempts.submit(db, identity.user_id, quiz_id, data.answers)


@router.get('/attempts', response_model=list[AttemptResponse])
def list_my_attempts(
    quiz_id: int | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1, le=100),
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    return quiz_attempts.list_attempts(db, identity.user_id, quiz_id=quiz_id, limit=limit)


@router.get('/attempts/{attempt_id}', response_model=AttemptResponse)
def get_my_attempt(
    attempt_id: int,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    return quiz_attempts.get_attempt(db, identity.user_id, attempt_id)
