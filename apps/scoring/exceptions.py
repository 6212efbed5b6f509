"""Error taxonomy shared by the quiz and gradebook engines.

All errors are REST framework exceptions so that the API views can let them
propagate and DRF turns them into JSON responses with a stable ``code``.
"""
from rest_framework import exceptions, status


class CourseNotFound(exceptions.NotFound):
    default_detail = "Course not found"
    default_code = "course_not_found"


class QuizNotFound(exceptions.NotFound):
    default_detail = "Quiz not found"
    default_code = "quiz_not_found"


class AttemptNotFound(exceptions.NotFound):
    default_detail = "Attempt not found"
    default_code = "attempt_not_found"


class ColumnNotFound(exceptions.NotFound):
    default_detail = "Grade column not found"
    default_code = "column_not_found"


class AttemptRuleViolation(exceptions.APIException):
    """Base class for rejected attempt state transitions."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "The attempt cannot be processed"
    default_code = "attempt_rejected"


class QuizNotPublished(AttemptRuleViolation):
    default_detail = "Quiz is not open for attempts"
    default_code = "quiz_not_published"


class NotAvailableYet(AttemptRuleViolation):
    default_detail = "Quiz is not yet available"
    default_code = "not_available_yet"


class NoLongerAvailable(AttemptRuleViolation):
    default_detail = "Quiz is no longer available"
    default_code = "no_longer_available"


class AttemptLimitExceeded(AttemptRuleViolation):
    default_detail = "Maximum number of attempts reached"
    default_code = "attempt_limit_exceeded"


class AlreadySubmitted(AttemptRuleViolation):
    default_detail = "Quiz already submitted"
    default_code = "already_submitted"


class InvalidTransition(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Status change is not allowed"
    default_code = "invalid_transition"


class DeleteFailed(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Delete failed"
    default_code = "delete_failed"
