from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator


class QuestionPayload(BaseModel):
    text: str
    options: list[str] = Field(min_length=1)
    correct_answers: list[str] = Field(min_length=1)
    points: int = Field(default=1, ge=0)

    @field_validator('text')
    @classmethod
    def validate_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Question text is required.')
        return normalized

    @field_validator('correct_answers', mode='before')
    @classmethod
    def wrap_single_answer(cls, value):
        if isinstance(value, str):
            return [value]
        return value

    @model_validator(mode='after')
    def validate_answers_are_options(self):
        unknown = [answer for answer in self.correct_answers if answer not in self.options]
        if unknown:
            raise ValueError(f'Correct answers must be among the options: {unknown}')
        self.correct_answers = list(dict.fromkeys(self.correct_answers))
        return self


class QuizCreateRequest(BaseModel):
    course_id: int
    title: str
    description: str | None = None
    duration: int | None = Field(default=None, ge=1)
    passing_score: float | None = Field(default=None, ge=0, le=100)
    questions: list[QuestionPayload] = Field(default_factory=list)

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Quiz title is required.')
        return normalized


class QuizUpdateRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    duration: int | None = Field(default=None, ge=1)
    passing_score: float | None = Field(default=None, ge=0, le=100)
    questions: list[QuestionPayload] | None = None


class QuestionResponse(BaseModel):
    id: int
    text: str
    options: list[str]
    points: int

    class Config:
        from_attributes = True


class QuestionWithAnswersResponse(QuestionResponse):
    correct_answers: list[str]


class QuizResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    course_id: int
    instructor_id: int
    duration: int | None = None
    passing_score: float | None = None
    questions: list[QuestionResponse]
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class InstructorQuizResponse(QuizResponse):
    questions: list[QuestionWithAnswersResponse]


class SubmittedAnswer(BaseModel):
    question_id: int
    answers: list[str] = Field(default_factory=list)

    @field_validator('answers', mode='before')
    @classmethod
    def wrap_single_answer(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value


class SubmissionRequest(BaseModel):
    answers: list[SubmittedAnswer] = Field(default_factory=list)


class QuestionResult(BaseModel):
    question_id: int
    correct: bool
    points_awarded: int
    points_possible: int


class GradeResult(BaseModel):
    score: float
    passed: bool
    earned_points: int
    total_points: int
    results: list[QuestionResult]


class AttemptResponse(BaseModel):
    id: int
    quiz_id: int
    student_id: int
    answers: list[SubmittedAnswer]
    results: list[QuestionResult]
    earned_points: int
    total_points: int
    score: float
    passed: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True
