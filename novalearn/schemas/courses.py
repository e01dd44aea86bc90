from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

MAX_REVIEW_COMMENT_LENGTH = 1000


def _require_text(value: str, label: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError(f'{label} is required.')
    return normalized


class LessonPayload(BaseModel):
    lesson_id: str | None = None
    title: str
    content: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _require_text(value, 'Lesson title')


def _reject_duplicate_lesson_ids(lessons: list[LessonPayload] | None) -> None:
    if not lessons:
        return
    given = [lesson.lesson_id for lesson in lessons if lesson.lesson_id]
    if len(given) != len(set(given)):
        raise ValueError('Lesson ids must be unique within a course.')


class CourseCreateRequest(BaseModel):
    title: str
    description: str | None = None
    duration: int = Field(default=0, ge=0)
    materials: list[str] = Field(default_factory=list)
    lessons: list[LessonPayload] = Field(default_factory=list)

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _require_text(value, 'Course title')

    @model_validator(mode='after')
    def validate_lessons(self):
        _reject_duplicate_lesson_ids(self.lessons)
        return self


class CourseUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    duration: int | None = Field(default=None, ge=0)
    materials: list[str] | None = None
    lessons: list[LessonPayload] | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _require_text(value, 'Course title')

    @model_validator(mode='after')
    def validate_lessons(self):
        _reject_duplicate_lesson_ids(self.lessons)
        return self


class LessonResponse(BaseModel):
    lesson_id: str
    title: str
    content: str | None = None

    class Config:
        from_attributes = True


class ReviewRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    comment: str | None = None

    @field_validator('comment')
    @classmethod
    def validate_comment(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        if len(normalized) > MAX_REVIEW_COMMENT_LENGTH:
            raise ValueError(f'Comment must be {MAX_REVIEW_COMMENT_LENGTH} characters or fewer.')
        return normalized or None


class ReviewResponse(BaseModel):
    student_id: int
    rating: int
    comment: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class CourseResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    duration: int
    instructor_id: int
    materials: list[str]
    lessons: list[LessonResponse]
    reviews: list[ReviewResponse]
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class CoursePage(BaseModel):
    page: int
    limit: int
    total: int
    items: list[CourseResponse]


class EnrollmentResponse(BaseModel):
    id: int
    student_id: int
    course_id: int
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class EnrollmentPage(BaseModel):
    page: int
    limit: int
    total: int
    items: list[EnrollmentResponse]


class ProgressResponse(BaseModel):
    course_id: int
    completed_lessons: list[str]
    total_lessons: int
    percent_complete: float
