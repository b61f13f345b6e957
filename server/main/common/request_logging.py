from __future__ import annotations
import logging
import uuid
from django.utils.deprecation import MiddlewareMixin
from django.http import HttpRequest, HttpResponse
from main.common.threadlocals import (
    get_current_user_label,
    get_request_id,
    set_current_request,
)


class RequestIDMiddleware(MiddlewareMixin):
    """Attach a stable request id; helpful for audit trails/log correlation."""
    header = "HTTP_X_REQUEST_ID"
    response_header = "X-Request-ID"

    def process_request(self, request: HttpRequest):
        rid = request.META.get(self.header) or uuid.uuid4().hex
        request.request_id = rid
        set_current_request(request)

    def process_response(self, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        rid = getattr(request, "request_id", None)
        if rid:
            response[self.response_header] = rid
        set_current_request(None)
        return response


class RequestContextFilter(logging.Filter):
    """Add request_id and user to every record so formatters can reference them."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = get_request_id()
        if not hasattr(record, "user"):
            record.user = get_current_user_label()
        return True
