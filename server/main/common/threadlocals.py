# ==============================================
# File: main/common/threadlocals.py
# Purpose: Per-request context for log records outside the view layer
# ==============================================
from __future__ import annotations
import threading

_thread_locals = threading.local()


def set_current_request(request) -> None:
    """Store the current HttpRequest in thread-local storage."""
    _thread_locals.request = request


def get_current_request():
    """Return the current HttpRequest or None."""
    return getattr(_thread_locals, "request", None)


def get_request_id() -> str:
    """Return the id of the request being served, or "-" outside a request."""
    request = get_current_request()
    return getattr(request, "request_id", None) or "-"


def get_current_user_label() -> str:
    """Return "<id>:<roll_number>" for the authenticated user, else "anonymous"."""
    request = get_current_request()
    user = getattr(request, "user", None)
    if user is None or not getattr(user, "is_authenticated", False):
        return "anonymous"
    return f"{user.pk}:{getattr(user, 'roll_number', '')}"
