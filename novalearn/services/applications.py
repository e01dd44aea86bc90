"""Instructor application lifecycle.

    student --apply--> pending --review(approve)--> approved --revoke--> rejected
                          \\--review(reject)--> rejected --apply--> pending

Applying moves the account's role to instructor straight away; access to
instructor-only operations is then decided by the application status, not by
the role. A rejected or revoked instructor keeps the instructor role and may
resubmit. Rejection (and revocation) clears the submitted documents; the
status record and review notes remain.
"""

import enum
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from novalearn.core.errors import Conflict, InvalidDecision, InvalidState, NotFound, NotStudent
from novalearn.models.user import ApplicationStatus, InstructorApplication, Role, User, utcnow
from novalearn.schemas.accounts import ApplicationPayload
from novalearn.services.documents import DocumentStore, discard_documents
from novalearn.services.notifications import NotificationDispatcher
from novalearn.services.pagination import page_window

logger = logging.getLogger(__name__)


class ReviewDecision(str, enum.Enum):
    APPROVE = 'approve'
    REJECT = 'reject'


def parse_decision(value: ReviewDecision | str) -> ReviewDecision:
    if isinstance(value, ReviewDecision):
        return value
    try:
        return ReviewDecision(value)
    except ValueError as exc:
        raise InvalidDecision() from exc


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound('User not found.')
    return user


def current_status(db: Session, user_id: int) -> ApplicationStatus | None:
    row = (
        db.query(InstructorApplication.status)
        .filter(InstructorApplication.user_id == user_id)
        .first()
    )
    if row is None:
        return None
    return ApplicationStatus(row[0])


def apply(db: Session, student_id: int, payload: ApplicationPayload) -> InstructorApplication:
    user = _get_user(db, student_id)
    application = user.application

    resubmission = (
        user.role == Role.INSTRUCTOR.value
        and application is not None
        and application.status == ApplicationStatus.REJECTED.value
    )
    if user.role != Role.STUDENT.value and not resubmission:
        raise NotStudent()

    if application is None:
        application = InstructorApplication(user_id=user.id)
        db.add(application)

    user.role = Role.INSTRUCTOR.value
    application.status = ApplicationStatus.PENDING.value
    application.biography = payload.biography
    application.expertise = list(payload.expertise)
    application.documents = list(payload.documents)
    application.submitted_at = utcnow()
    application.reviewed_at = None
    application.review_notes = None

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict('An instructor application for this user already exists.') from exc
    db.refresh(application)
    logger.info('User %s submitted an instructor application (resubmission=%s)', user.id, resubmission)
    return application


def get_status(db: Session, user_id: int) -> InstructorApplication:
    application = (
        db.query(InstructorApplication)
        .filter(InstructorApplication.user_id == user_id)
        .first()
    )
    if application is None:
        raise NotFound('No instructor application found.')
    return application


def list_applications(
    db: Session,
    status: ApplicationStatus | str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> tuple[list[InstructorApplication], int, int, int]:
    page, limit, offset = page_window(page, limit)
    query = db.query(InstructorApplication)
    if status is not None:
        query = query.filter(InstructorApplication.status == ApplicationStatus(status).value)

    total = query.count()
    items = (
        query.order_by(InstructorApplication.submitted_at.asc(), InstructorApplication.id.asc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return items, total, page, limit


def _close_application(application: InstructorApplication, notes: str | None) -> list[str]:
    released = list(application.documents or [])
    application.status = ApplicationStatus.REJECTED.value
    application.documents = []
    application.reviewed_at = utcnow()
    application.review_notes = notes
    return released


def _after_decision(
    application: InstructorApplication,
    message: str,
    released_documents: list[str],
    dispatcher: NotificationDispatcher | None,
    document_store: DocumentStore | None,
) -> None:
    if released_documents and document_store is not None:
        discard_documents(document_store, released_documents)
    if dispatcher is not None:
        dispatcher.dispatch(application.user_id, message)


def review(
    db: Session,
    application_id: int,
    decision: ReviewDecision | str,
    notes: str | None = None,
    dispatcher: NotificationDispatcher | None = None,
    document_store: DocumentStore | None = None,
) -> InstructorApplication:
    decision = parse_decision(decision)

    application = (
        db.query(InstructorApplication)
        .filter(InstructorApplication.id == application_id)
        .with_for_update()
        .first()
    )
    if application is None:
        raise NotFound('Application not found.')
    if application.status != ApplicationStatus.PENDING.value:
        current = application.status
        db.rollback()
        raise InvalidState(f'Application is already {current}.')

    released: list[str] = []
    if decision == ReviewDecision.APPROVE:
        application.status = ApplicationStatus.APPROVED.value
        application.reviewed_at = utcnow()
        application.review_notes = notes
        message = 'Your instructor application has been approved.'
    else:
        released = _close_application(application, notes)
        message = 'Your instructor application has been rejected.'

    db.commit()
    db.refresh(application)
    logger.info('Application %s reviewed: %s', application.id, application.status)

    _after_decision(application, message, released, dispatcher, document_store)
    return application


def revoke(
    db: Session,
    instructor_id: int,
    notes: str | None = None,
    dispatcher: NotificationDispatcher | None = None,
    document_store: DocumentStore | None = None,
) -> InstructorApplication:
    application = (
        db.query(InstructorApplication)
        .filter(InstructorApplication.user_id == instructor_id)
        .with_for_update()
        .first()
    )
    if application is None:
        raise NotFound('Instructor not found.')
    if application.status != ApplicationStatus.APPROVED.value:
        db.rollback()
        raise InvalidState('Only approved instructors can be revoked.')

    released = _close_application(application, notes)

    db.commit()
    db.refresh(application)
    logger.info('Instructor privileges revoked for user %s', instructor_id)

    _after_decision(
        application,
        'Your instructor privileges have been revoked.',
        released,
        dispatcher,
        document_store,
    )
    return application


def promote_to_admin(db: Session, user_id: int) -> User:
    user = _get_user(db, user_id)
    if user.role == Role.ADMIN.value:
        return user

    user.role = Role.ADMIN.value
    db.commit()
    db.refresh(user)
    logger.info('User %s promoted to admin', user.id)
    return user
