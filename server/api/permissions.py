# ==============================================
# File: api/permissions.py
# Purpose: Role checks for the DRF views
# ==============================================
from __future__ import annotations
from typing import Iterable
from rest_framework.permissions import BasePermission

from main.exceptions import Unauthorized
from main.models import ADMIN, STUDENT, TEACHER


class HasRole(BasePermission):
    """Allow when the user's `role` is one of `allowed_roles` (view attribute wins).

    Anonymous requests return False so DRF answers 401 with an auth challenge;
    an authenticated user with the wrong role gets Unauthorized (also 401).
    """
    allowed_roles: Iterable[str] = ()

    def has_permission(self, request, view) -> bool:
        user = request.user
        if not user or not user.is_authenticated:
            return False
        allowed = getattr(view, "allowed_roles", None) or tuple(self.allowed_roles)
        if getattr(user, "role", None) in allowed:
            return True
        raise Unauthorized()


class IsAdmin(HasRole):
    allowed_roles = (ADMIN,)


class IsTeacher(HasRole):
    allowed_roles = (TEACHER,)


class IsStudent(HasRole):
    allowed_roles = (STUDENT,)


class IsTeacherOrAdmin(HasRole):
    allowed_roles = (TEACHER, ADMIN)
