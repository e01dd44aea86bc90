from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from novalearn.auth.dependencies import get_current_identity
from novalearn.auth.gate import Identity
from novalearn.database import get_db
from novalearn.schemas.accounts import (
    Account,
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
    account_view,
)
from novalearn.services import users
from novalearn.services.notifications import NotificationDispatcher, get_dispatcher

router = APIRouter(tags=['auth'])


@router.post('/register', response_model=Account, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    user = users.register(db, data)
    return account_view(user)


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    user = users.authenticate(db, data.email, data.password)
    return TokenResponse(access_token=users.issue_token(user))


@router.post('/logout', status_code=status.HTTP_204_NO_CONTENT)
def logout(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    users.logout(db, identity.user_id)


@router.get('/me', response_model=Account)
def me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return account_view(users.get_user(db, identity.user_id))


@router.patch('/me', response_model=Account)
def update_me(
    data: ProfileUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return account_view(users.update_profile(db, identity.user_id, data))


@router.delete('/me', status_code=status.HTTP_204_NO_CONTENT)
def delete_me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    users.delete_user(db, identity.user_id)


@router.post('/password-reset/request', status_code=status.HTTP_202_ACCEPTED)
def request_password_reset(
    data: PasswordResetRequest,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    users.request_password_reset(db, data.email, dispatcher=dispatcher)
    return {'detail': 'If the email is registered, a reset link has been sent.'}


@router.post('/password-reset/confirm', status_code=status.HTTP_204_NO_CONTENT)
def confirm_password_reset(data: PasswordResetConfirm, db: Session = Depends(get_db)):
    users.reset_password(db, data.token, data.new_password)
