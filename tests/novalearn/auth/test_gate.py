import pytest

from novalearn.auth.gate import DenyReason, Identity, authorize
from novalearn.core.errors import NotApproved, Unauthenticated, WrongRole
from novalearn.models.user import ApplicationStatus, Role


def identity(role: Role) -> Identity:
    return Identity(user_id=1, email='someone@example.edu', role=role)


def test_missing_identity_is_unauthenticated() -> None:
    decision = authorize(None, Role.STUDENT)

    assert decision.allowed is False
    assert decision.reason == DenyReason.UNAUTHENTICATED
    with pytest.raises(Unauthenticated):
        decision.enforce()


@pytest.mark.parametrize(
    ('caller', 'required'),
    [
        (Role.STUDENT, Role.INSTRUCTOR),
        (Role.INSTRUCTOR, Role.STUDENT),
        (Role.ADMIN, Role.INSTRUCTOR),
        (Role.ADMIN, Role.STUDENT),
        (Role.INSTRUCTOR, Role.ADMIN),
    ],
)
def test_roles_must_match_exactly(caller, required) -> None:
    decision = authorize(identity(caller), required)

    assert decision.reason == DenyReason.WRONG_ROLE
    with pytest.raises(WrongRole):
        decision.enforce()


@pytest.mark.parametrize('status', [None, ApplicationStatus.PENDING, ApplicationStatus.REJECTED, 'pending'])
def test_unapproved_instructor_is_denied(status) -> None:
    decision = authorize(identity(Role.INSTRUCTOR), Role.INSTRUCTOR, require_approved=True, application_status=status)

    assert decision.reason == DenyReason.NOT_APPROVED
    with pytest.raises(NotApproved):
        decision.enforce()


def test_approved_instructor_is_allowed() -> None:
    decision = authorize(
        identity(Role.INSTRUCTOR),
        Role.INSTRUCTOR,
        require_approved=True,
        application_status=ApplicationStatus.APPROVED,
    )

    assert decision.allowed is True
    decision.enforce()


def test_approval_is_ignored_when_not_required() -> None:
    decision = authorize(identity(Role.INSTRUCTOR), Role.INSTRUCTOR, application_status=ApplicationStatus.PENDING)

    assert decision.allowed is True


def test_role_check_precedes_approval_check() -> None:
    decision = authorize(identity(Role.STUDENT), Role.INSTRUCTOR, require_approved=True)

    assert decision.reason == DenyReason.WRONG_ROLE
