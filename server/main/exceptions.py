"""Error kinds raised by the LMS core; each maps onto one HTTP status."""
from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException


class Unauthorized(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = _("Unauthorized")
    default_code = "unauthorized"


class BadRequest(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("Missing required fields")
    default_code = "bad_request"


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("Not found")
    default_code = "not_found"


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = _("Conflict")
    default_code = "conflict"


class AlreadyAttempted(Conflict):
    default_detail = _("Quiz already attempted")
    default_code = "already_attempted"


class DuplicateAttempt(AlreadyAttempted):
    """The attempt insert lost a race against a concurrent submission."""
    default_code = "duplicate_attempt"


class QuizTimeExpired(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Time limit for this quiz has expired")
    default_code = "quiz_time_expired"


class InternalError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = _("Internal server error")
    default_code = "internal_error"
