"""Typed errors raised by the service layer.

Each error carries the HTTP status the API boundary answers with and a stable
``code`` clients can switch on. Services never build HTTP responses
themselves; ``novalearn.main`` maps these at the edge.
"""

from fastapi import status


class NovaLearnError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = 'error'
    default_detail = 'Request could not be processed.'

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFound(NovaLearnError):
    status_code = status.HTTP_404_NOT_FOUND
    code = 'not_found'
    default_detail = 'Resource not found.'


class Unauthenticated(NovaLearnError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = 'unauthenticated'
    default_detail = 'Authentication required.'


class Forbidden(NovaLearnError):
    status_code = status.HTTP_403_FORBIDDEN
    code = 'forbidden'
    default_detail = 'You are not allowed to perform this action.'


class InvalidState(NovaLearnError):
    status_code = status.HTTP_409_CONFLICT
    code = 'invalid_state'
    default_detail = 'Operation is not valid in the current state.'


class ValidationError(NovaLearnError):
    status_code = 422
    code = 'validation_error'
    default_detail = 'Invalid input.'


class Conflict(NovaLearnError):
    status_code = status.HTTP_409_CONFLICT
    code = 'conflict'
    default_detail = 'Resource already exists.'


class CourseNotFound(NotFound):
    code = 'course_not_found'
    default_detail = 'Course not found.'


class NotEnrolled(NotFound):
    code = 'not_enrolled'
    default_detail = 'Student is not enrolled in this course.'


class WrongRole(Forbidden):
    code = 'wrong_role'
    default_detail = 'Your role does not allow this action.'


class NotApproved(Forbidden):
    code = 'not_approved'
    default_detail = 'Instructor not approved yet.'


class NotStudent(InvalidState):
    code = 'not_student'
    default_detail = 'Only students can apply to become instructors.'


class InvalidDecision(ValidationError):
    code = 'invalid_decision'
    default_detail = "Decision must be 'approve' or 'reject'."


class InvalidLesson(ValidationError):
    code = 'invalid_lesson'
    default_detail = 'Lesson is not part of this course.'


class AlreadyEnrolled(Conflict):
    code = 'already_enrolled'
    default_detail = 'Student already enrolled in this course.'


class AlreadyCompleted(Conflict):
    code = 'already_completed'
    default_detail = 'Lesson already marked as completed.'


class InvalidResetToken(ValidationError):
    code = 'invalid_reset_token'
    default_detail = 'Invalid or expired password reset token.'
