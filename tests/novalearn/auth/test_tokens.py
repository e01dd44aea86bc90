import jwt
import pytest

from novalearn.auth import jwt_handler
from novalearn.auth.dependencies import resolve_token
from novalearn.core import config
from novalearn.core.errors import Unauthenticated
from novalearn.models.user import Role
from novalearn.services import users


def test_token_round_trip_carries_subject_and_session() -> None:
    token = jwt_handler.create_access_token(subject='42', session_id='abc')

    payload = jwt_handler.decode_access_token(token)

    assert payload['sub'] == '42'
    assert payload['sid'] == 'abc'


def test_expired_token_is_rejected() -> None:
    token = jwt_handler.create_access_token(subject='42', session_id='abc', expires_minutes=-1)

    with pytest.raises(jwt.ExpiredSignatureError):
        jwt_handler.decode_access_token(token)


def test_resolve_token_returns_identity(db, make_user) -> None:
    user = make_user(Role.INSTRUCTOR)

    identity = resolve_token(users.issue_token(user), db)

    assert identity.user_id == user.id
    assert identity.email == user.email
    assert identity.role == Role.INSTRUCTOR


def test_resolve_token_rejects_garbage(db) -> None:
    with pytest.raises(Unauthenticated):
        resolve_token('not-a-token', db)


def test_resolve_token_rejects_foreign_signature(db, make_user) -> None:
    user = make_user()
    token = jwt.encode({'sub': str(user.id), 'sid': user.session_id}, 'another-secret', algorithm=config.JWT_ALGORITHM)

    with pytest.raises(Unauthenticated):
        resolve_token(token, db)


def test_resolve_token_rejects_deleted_user(db, make_user) -> None:
    user = make_user()
    token = users.issue_token(user)
    users.delete_user(db, user.id)

    with pytest.raises(Unauthenticated):
        resolve_token(token, db)


def test_logout_ends_outstanding_tokens(db, make_user) -> None:
    user = make_user()
    token = users.issue_token(user)

    users.logout(db, user.id)

    with pytest.raises(Unauthenticated):
        resolve_token(token, db)
    assert resolve_token(users.issue_token(users.get_user(db, user.id)), db).user_id == user.id
