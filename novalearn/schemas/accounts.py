from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from novalearn.models.user import ApplicationStatus, User

MAX_BIOGRAPHY_LENGTH = 2000
MAX_REVIEW_NOTES_LENGTH = 1000
MIN_PASSWORD_LENGTH = 8


def _normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not normalized or '@' not in normalized:
        raise ValueError('A valid email address is required.')
    return normalized


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
        return value


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = 'bearer'


class ProfileUpdateRequest(BaseModel):
    name: str | None = None
    email: str | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _normalize_email(value)


class PasswordResetRequest(BaseModel):
    email: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _normalize_email(value)


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
        return value


class ApplicationPayload(BaseModel):
    biography: str | None = None
    expertise: list[str] = Field(default_factory=list)
    documents: list[str] = Field(default_factory=list)

    @field_validator('biography')
    @classmethod
    def validate_biography(cls, value: str | None) -> str | None:
        if value is not None and len(value) > MAX_BIOGRAPHY_LENGTH:
            raise ValueError(f'Biography must be {MAX_BIOGRAPHY_LENGTH} characters or fewer.')
        return value

    @field_validator('expertise', mode='before')
    @classmethod
    def split_expertise(cls, value):
        # The legacy apply form posts expertise as one comma-separated string.
        if isinstance(value, str):
            return [item.strip() for item in value.split(',') if item.strip()]
        return value


class ReviewRequest(BaseModel):
    decision: str
    notes: str | None = None

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if not normalized:
            return None
        if len(normalized) > MAX_REVIEW_NOTES_LENGTH:
            raise ValueError(f'Notes must be {MAX_REVIEW_NOTES_LENGTH} characters or fewer.')
        return normalized


class RevokeRequest(BaseModel):
    notes: str | None = None


class ApplicationResponse(BaseModel):
    id: int
    user_id: int
    status: ApplicationStatus
    biography: str | None = None
    expertise: list[str]
    documents: list[str]
    submitted_at: datetime | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None

    class Config:
        from_attributes = True


class ApplicationStatusResponse(BaseModel):
    status: ApplicationStatus
    reviewed_at: datetime | None = None
    notes: str | None = None


class ApplicationPage(BaseModel):
    page: int
    limit: int
    total: int
    items: list[ApplicationResponse]


class _AccountBase(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class StudentAccount(_AccountBase):
    role: Literal['student'] = 'student'


class InstructorAccount(_AccountBase):
    role: Literal['instructor'] = 'instructor'
    application: ApplicationResponse | None = None


class AdminAccount(_AccountBase):
    role: Literal['admin'] = 'admin'


Account = Annotated[Union[StudentAccount, InstructorAccount, AdminAccount], Field(discriminator='role')]

_account_adapter = TypeAdapter(Account)


def account_view(user: User) -> StudentAccount | InstructorAccount | AdminAccount:
    data = {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'created_at': user.created_at,
        'role': user.role,
    }
    if user.role == 'instructor' and user.application is not None:
        data['application'] = ApplicationResponse.model_validate(user.application)
    return _account_adapter.validate_python(data)


class UserPage(BaseModel):
    page: int
    limit: int
    total: int
    items: list[Account]
