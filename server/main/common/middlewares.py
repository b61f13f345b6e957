# ==============================================
# File: main/common/middlewares.py
# Purpose: Audit trail of every API request
# ==============================================
from __future__ import annotations
import logging
import time

from django.http import HttpRequest, HttpResponse
from django.utils.deprecation import MiddlewareMixin

audit_logger = logging.getLogger('audit')

SKIPPED_PREFIXES = ('/static/', '/media/', '/favicon.ico')


class RequestLoggingMiddleware(MiddlewareMixin):
    """Write one audit line per request; 4xx as warnings, 5xx as errors."""

    def process_request(self, request: HttpRequest) -> None:
        request._request_start_time = time.monotonic()

    def process_response(self, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        self._log_request(request, response)
        return response

    def _log_request(self, request: HttpRequest, response: HttpResponse) -> None:
        if not hasattr(request, '_request_start_time'):
            return
        if request.path.startswith(SKIPPED_PREFIXES):
            return

        duration = time.monotonic() - request._request_start_time
        extra = {
            'method': request.method,
            'path': request.path,
            'status_code': response.status_code,
            'response_time': duration,
            'ip_address': self._get_client_ip(request),
        }
        audit_logger.info(
            "%s %s - %s - %.3fs", request.method, request.path, response.status_code, duration,
            extra=extra,
        )

        if 400 <= response.status_code < 500:
            audit_logger.warning(
                "Client error %s on %s %s", response.status_code, request.method, request.path,
                extra=extra,
            )
        elif response.status_code >= 500:
            audit_logger.error(
                "Server error %s on %s %s", response.status_code, request.method, request.path,
                extra=extra,
            )

    def _get_client_ip(self, request: HttpRequest) -> str:
        """Get the client IP address from the request."""
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR', 'unknown')
