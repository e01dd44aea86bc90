"""Authorization decisions.

``authorize`` is a pure function: it never touches the database. Callers that
need ``require_approved`` look the application status up themselves, on every
request, and pass it in; approval can change between two calls so it must not
be cached.

Role matching is exact. Admin-only and instructor-only operations are disjoint
sets, so an admin does not inherit instructor or student capabilities.
"""

import enum

from pydantic import BaseModel

from novalearn.core.errors import NotApproved, Unauthenticated, WrongRole
from novalearn.models.user import ApplicationStatus, Role


class Identity(BaseModel):
    """The caller, as resolved from their access token."""
    user_id: int
    email: str
    role: Role


class DenyReason(str, enum.Enum):
    UNAUTHENTICATED = 'Unauthenticated'
    WRONG_ROLE = 'WrongRole'
    NOT_APPROVED = 'NotApproved'


class Decision(BaseModel):
    allowed: bool
    reason: DenyReason | None = None

    def enforce(self) -> None:
        if self.allowed:
            return
        if self.reason == DenyReason.UNAUTHENTICATED:
            raise Unauthenticated()
        if self.reason == DenyReason.NOT_APPROVED:
            raise NotApproved()
        raise WrongRole()


ALLOW = Decision(allowed=True)


def deny(reason: DenyReason) -> Decision:
    return Decision(allowed=False, reason=reason)


def authorize(
    identity: Identity | None,
    required_role: Role,
    require_approved: bool = False,
    application_status: ApplicationStatus | str | None = None,
) -> Decision:
    if identity is None:
        return deny(DenyReason.UNAUTHENTICATED)

    if identity.role != required_role:
        return deny(DenyReason.WRONG_ROLE)

    if require_approved and identity.role == Role.INSTRUCTOR:
        if application_status is None or ApplicationStatus(application_status) != ApplicationStatus.APPROVED:
            return deny(DenyReason.NOT_APPROVED)

    return ALLOW
