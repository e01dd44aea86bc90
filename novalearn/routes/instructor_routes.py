"""Instructor endpoints.

``/apply`` is open to any signed-in caller and ``/status`` to instructors in
any approval state; everything that touches courses or quizzes requires an
approved application.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from novalearn.auth.dependencies import get_current_identity, require_approved_instructor, require_instructor
from novalearn.auth.gate import Identity
from novalearn.database import get_db
from novalearn.schemas.accounts import ApplicationPayload, ApplicationResponse, ApplicationStatusResponse
from novalearn.schemas.courses import CourseCreateRequest, CoursePage, CourseResponse, CourseUpdateRequest
from novalearn.schemas.quizzes import InstructorQuizResponse, QuizCreateRequest, QuizUpdateRequest
from novalearn.services import applications, courses, enrollments, quizzes

router = APIRouter(tags=['instructor'])


@router.post('/apply', response_model=ApplicationResponse, status_code=status.HTTP_202_ACCEPTED)
def apply_to_teach(
    data: ApplicationPayload,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return applications.apply(db, identity.user_id, data)


@router.get('/status', response_model=ApplicationStatusResponse)
def get_application_status(
    identity: Identity = Depends(require_instructor),
    db: Session = Depends(get_db),
):
    application = applications.get_status(db, identity.user_id)
    return ApplicationStatusResponse(
        status=application.status,
        reviewed_at=application.reviewed_at,
        notes=application.review_notes,
    )


@router.get('/courses', response_model=CoursePage)
def list_my_courses(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    identity: Identity = Depends(require_approved_instructor),
    db: Session = Depends(get_db),
):
    items, total, page, limit = courses.list_instructor_courses(db, identity.user_id, page, limit)
    return CoursePage(page=page, limit=limit, total=total, items=items)


@router.post('/courses', response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
def create_course(
    data: CourseCreateRequest,
    identity: Identity = Depends(require_approved_instructor),
    db: Session = Depends(get_db),
):
    return courses.create_course(db, identity.user_id, data)


@router.patch('/courses/{course_id}', response_model=CourseResponse)
def update_course(
    course_id: int,
    data: CourseUpdateRequest,
    identity: Identity = Depends(require_approved_instructor),
    db: Session = Depends(get_db),
):
    return courses.update_owned_course(db, course_id, identity.user_id, data)


@router.delete('/courses/{course_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: int,
    identity: Identity = Depends(require_approved_instructor),
    db: Session = Depends(get_db),
):
    courses.delete_owned_course(db, course_id, identity.user_id)


@router.get('/quizzes', response_model=list[InstructorQuizResponse])
def list_my_quizzes(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    identity: Identity = Depends(require_approved_instructor),
    db: Session = Depends(get_db),
):
    return quizzes.list_instructor_quizzes(db, identity.user_id, page, limit)


@router.post('/quizzes', response_model=InstructorQuizResponse, status_code=status.HTTP_201_CREATED)
def create_quiz(
    data: QuizCreateRequest,
    identity: Identity = Depends(require_approved_instructor),
    db: Session = Depends(get_db),
):
    return quizzes.create_quiz(db, identity.user_id, data)


@router.patch('/quizzes/{quiz_id}', response_model=InstructorQuizResponse)
def update_quiz(
    quiz_id: int,
    data: QuizUpdateRequest,
    identity: Identity = Depends(require_approved_instructor),
    db: Session = Depends(get_db),
):
    return quizzes.update_owned_quiz(db, quiz_id, identity.user_id, data)


@router.delete('/quizzes/{quiz_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_quiz(
    quiz_id: int,
    identity: Identity = Depends(require_approved_instructor),
    db: Session = Depends(get_db),
):
    quizzes.delete_owned_quiz(db, quiz_id, identity.user_id)


@router.get('/courses/{course_id}/participants', response_model=list[int])
def list_course_participants(
    course_id: int,
    identity: Identity = Depends(require_approved_instructor),
    db: Session = Depends(get_db),
):
    courses.get_owned_course(db, course_id, identity.user_id)
    return enrollments.participant_ids(db, course_id)
