import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from novalearn.auth import jwt_handler
from novalearn.auth.gate import Identity, authorize
from novalearn.core.errors import Unauthenticated
from novalearn.database import get_db
from novalearn.models.user import Role, User
from novalearn.services import applications

security = HTTPBearer(auto_error=False)


def resolve_token(token: str, db: Session) -> Identity:
    try:
        payload = jwt_handler.decode_access_token(token)
    except jwt.PyJWTError as exc:
        raise Unauthenticated("Invalid token") from exc

    subject = payload.get("sub")
    if not subject or not str(subject).isdigit():
        raise Unauthenticated("Invalid token subject")

    user = db.query(User).filter(User.id == int(subject)).first()
    if user is None:
        raise Unauthenticated("User not found")
    if payload.get("sid") != user.session_id:
        raise Unauthenticated("Session has ended")
    return Identity(user_id=user.id, email=user.email, role=Role(user.role))


def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> Identity | None:
    if credentials is None:
        return None
    return resolve_token(credentials.credentials, db)


def get_current_identity(identity: Identity | None = Depends(get_optional_identity)) -> Identity:
    if identity is None:
        raise Unauthenticated()
    return identity


def require_role(required_role: Role, require_approved: bool = False):
    """Build a dependency that admits only ``required_role`` callers.

    With ``require_approved`` the instructor's application status is read on
    every request before the decision is made.
    """

    def dependency(
        identity: Identity | None = Depends(get_optional_identity),
        db: Session = Depends(get_db),
    ) -> Identity:
        application_status = None
        if require_approved and identity is not None and identity.role == Role.INSTRUCTOR:
            application_status = applications.current_status(db, identity.user_id)

        authorize(
            identity,
            required_role,
            require_approved=require_approved,
            application_status=application_status,
        ).enforce()
        return identity

    return dependency


require_student = require_role(Role.STUDENT)
require_instructor = require_role(Role.INSTRUCTOR)
require_approved_instructor = require_role(Role.INSTRUCTOR, require_approved=True)
require_admin = require_role(Role.ADMIN)
