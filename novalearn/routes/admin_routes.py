from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from novalearn.auth.dependencies import require_admin
from novalearn.auth.gate import Identity
from novalearn.database import get_db
from novalearn.models.user import ApplicationStatus, Role
from novalearn.schemas.accounts import (
    Account,
    ApplicationPage,
    ApplicationResponse,
    ReviewRequest,
    RevokeRequest,
    UserPage,
    account_view,
)
from novalearn.schemas.courses import CoursePage
from novalearn.services import applications, courses, quizzes, users
from novalearn.services.documents import DocumentStore, get_document_store
from novalearn.services.notifications import NotificationDispatcher, get_dispatcher

router = APIRouter(tags=['admin'])


@router.get('/users', response_model=UserPage)
def list_users(
    role: Role | None = Query(default=None),
    search: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    items, total, page, limit = users.list_users(db, role=role, search=search, page=page, limit=limit)
    return UserPage(page=page, limit=limit, total=total, items=[account_view(user) for user in items])


@router.get('/users/{user_id}', response_model=Account)
def get_user(
    user_id: int,
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return account_view(users.get_user(db, user_id))


@router.delete('/users/{user_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    users.delete_user(db, user_id)


@router.post('/users/{user_id}/promote-admin', response_model=Account)
def promote_to_admin(
    user_id: int,
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return account_view(applications.promote_to_admin(db, user_id))


@router.get('/applications', response_model=ApplicationPage)
def list_applications(
    application_status: ApplicationStatus | None = Query(default=None, alias='status'),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    items, total, page, limit = applications.list_applications(db, application_status, page, limit)
    return ApplicationPage(page=page, limit=limit, total=total, items=items)


@router.post('/applications/{application_id}/review', response_model=ApplicationResponse)
def review_application(
    application_id: int,
    data: ReviewRequest,
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    document_store: DocumentStore = Depends(get_document_store),
):
    return applications.review(
        db,
        application_id,
        data.decision,
        notes=data.notes,
        dispatcher=dispatcher,
        document_store=document_store,
    )


@router.post('/instructors/{instructor_id}/revoke', response_model=ApplicationResponse)
def revoke_instructor(
    instructor_id: int,
    data: RevokeRequest,
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    document_store: DocumentStore = Depends(get_document_store),
):
    return applications.revoke(
        db,
        instructor_id,
        notes=data.notes,
        dispatcher=dispatcher,
        document_store=document_store,
    )


@router.delete('/quizzes/{quiz_id}', status_code=status.HTTP_204_NO_CONTENT)
def hard_delete_quiz(
    quiz_id: int,
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    quizzes.hard_delete_quiz(db, quiz_id)


@router.get('/courses', response_model=CoursePage)
def list_courses(
    search: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    items, total, page, limit = courses.list_public_courses(db, search=search, page=page, limit=limit)
    return CoursePage(page=page, limit=limit, total=total, items=items)


@router.delete('/courses/{course_id}', status_code=status.HTTP_204_NO_CONTENT)
def hard_delete_course(
    course_id: int,
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    courses.hard_delete_course(db, course_id)
