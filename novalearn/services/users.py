import logging
import secrets
from datetime import timedelta, timezone

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from novalearn.auth import jwt_handler
from novalearn.auth.passwords import hash_password, verify_password
from novalearn.core import config
from novalearn.core.errors import Conflict, InvalidResetToken, NotFound, Unauthenticated
from novalearn.models.course import Course, Review
from novalearn.models.enrollment import Enrollment, LessonCompletion
from novalearn.models.quiz import Quiz, QuizAttempt
from novalearn.models.user import Role, User, new_session_id, utcnow
from novalearn.schemas.accounts import ProfileUpdateRequest, RegisterRequest
from novalearn.services.notifications import NotificationDispatcher
from novalearn.services.pagination import page_window

logger = logging.getLogger(__name__)


def register(db: Session, payload: RegisterRequest) -> User:
    """Create a student account. Every new account starts as a student."""
    user = User(
        name=payload.name,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        role=Role.STUDENT.value,
        session_id=new_session_id(),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict('Email is already registered.') from exc

    db.refresh(user)
    logger.info('Registered user %s', user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None or not verify_password(password, user.hashed_password):
        raise Unauthenticated('Invalid email or password.')
    return user


def issue_token(user: User) -> str:
    return jwt_handler.create_access_token(subject=str(user.id), session_id=user.session_id)


def logout(db: Session, user_id: int) -> None:
    """End every outstanding token for the user by rotating the session id."""
    user = get_user(db, user_id)
    user.session_id = new_session_id()
    db.commit()


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise NotFound('User not found.')
    return user


def list_users(
    db: Session,
    role: Role | str | None = None,
    search: str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> tuple[list[User], int, int, int]:
    page, limit, offset = page_window(page, limit)
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == Role(role).value)
    if search and search.strip():
        pattern = f'%{search.strip()}%'
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))

    total = query.count()
    items = query.order_by(User.id.asc()).offset(offset).limit(limit).all()
    return items, total, page, limit


def update_profile(db: Session, user_id: int, payload: ProfileUpdateRequest) -> User:
    user = get_user(db, user_id)

    if payload.name is not None:
        user.name = payload.name
    if payload.email is not None:
        user.email = payload.email

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict('Email is already registered.') from exc

    db.refresh(user)
    return user


def _owns_content(db: Session, user_id: int) -> bool:
    return (
        db.query(Course.id).filter(Course.instructor_id == user_id).first() is not None
        or db.query(Quiz.id).filter(Quiz.instructor_id == user_id).first() is not None
    )


def delete_user(db: Session, user_id: int) -> None:
    """Delete an account with its enrollments, progress, reviews and attempts.

    Instructors who still own courses or quizzes are refused; their content
    has to be deleted first.
    """
    user = get_user(db, user_id)
    if _owns_content(db, user_id):
        raise Conflict('User still owns courses or quizzes.')

    for model in (Review, LessonCompletion, Enrollment, QuizAttempt):
        db.query(model).filter(model.student_id == user_id).delete(synchronize_session=False)
    db.delete(user)

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict('User still owns courses or quizzes.') from exc
    logger.info('Deleted user %s', user_id)


def request_password_reset(
    db: Session,
    email: str,
    dispatcher: NotificationDispatcher | None = None,
) -> str | None:
    """Issue a one-time reset token and send the reset link to the account.

    Unknown addresses are ignored; the caller never learns whether an email exists.
    Returns the raw token, or ``None`` when no account matched.
    """
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None:
        return None

    secret = secrets.token_hex(32)
    user.reset_token_hash = hash_password(secret)
    user.reset_token_expires_at = utcnow() + timedelta(minutes=config.RESET_TOKEN_EXPIRES_MINUTES)
    db.commit()

    token = f'{user.id}.{secret}'
    if dispatcher is not None:
        dispatcher.dispatch(user.id, f'Reset your password: {config.APP_URL}/reset-password?token={token}')
    logger.info('Password reset requested for user %s', user.id)
    return token


def reset_password(db: Session, token: str, new_password: str) -> User:
    user_id, _, secret = token.partition('.')
    if not user_id.isdigit() or not secret:
        raise InvalidResetToken()

    user = db.query(User).filter(User.id == int(user_id)).with_for_update().first()
    if user is None or not user.reset_token_hash or user.reset_token_expires_at is None:
        raise InvalidResetToken()

    expires_at = user.reset_token_expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at <= utcnow() or not verify_password(secret, user.reset_token_hash):
        db.rollback()
        raise InvalidResetToken()

    user.hashed_password = hash_password(new_password)
    user.reset_token_hash = None
    user.reset_token_expires_at = None
    user.session_id = new_session_id()
    db.commit()
    db.refresh(user)
    logger.info('Password reset completed for user %s', user.id)
    return user
