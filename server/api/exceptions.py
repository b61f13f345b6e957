"""Project-wide DRF exception handler: every error renders as {"error", "code"}."""
import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from main.exceptions import InternalError

logger = logging.getLogger(__name__)


def _error_message(exc):
    detail = exc.detail
    if isinstance(detail, dict):
        detail = detail.get("detail", detail)
    if isinstance(detail, list) and detail:
        detail = detail[0]
    return str(detail)


def _error_code(exc):
    detail = exc.detail
    if isinstance(detail, dict):
        detail = detail.get("detail")
    elif isinstance(detail, list) and detail:
        detail = detail[0]
    return getattr(detail, "code", None) or exc.default_code


def lms_exception_handler(exc, context):
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s", view.__class__.__name__ if view else "unknown view",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        set_rollback()
        internal = InternalError()
        return Response(
            {"error": str(internal.detail), "code": internal.default_code},
            status=internal.status_code,
        )

    if isinstance(exc, exceptions.ValidationError):
        response.data = {"error": "Invalid request", "code": "invalid", "details": response.data}
    else:
        response.data = {"error": _error_message(exc), "code": _error_code(exc)}
    return response
