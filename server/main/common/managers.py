# ==============================================
# File: main/common/managers.py
# Purpose: Role-scoped querysets shared by the academic models
# ==============================================
from __future__ import annotations
from django.db import models


class UserQuerySet(models.QuerySet):
    """Role filters for the user directory."""

    def students(self) -> "UserQuerySet":
        return self.filter(role="student")

    def teachers(self) -> "UserQuerySet":
        return self.filter(role="teacher")

    def admins(self) -> "UserQuerySet":
        return self.filter(role="admin")

    def in_class(self, school_class) -> "UserQuerySet":
        return self.filter(school_class=school_class)


class SubjectScopedQuerySet(models.QuerySet):
    """QuerySet helpers that scope rows to what a user may see.

    Models that hang off a subject set `subject_lookup` to the dotted path of
    their subject FK (e.g. 'chapter__subject'); Subject itself leaves it empty.
    """
    subject_lookup = ""

    def _lookup(self, suffix: str) -> str:
        return f"{self.subject_lookup}__{suffix}" if self.subject_lookup else suffix

    def for_class(self, school_class_id) -> "SubjectScopedQuerySet":
        return self.filter(**{self._lookup("school_class_id"): school_class_id})

    def taught_by(self, teacher) -> "SubjectScopedQuerySet":
        return self.filter(**{self._lookup("teacher_assignments__teacher"): teacher}).distinct()

    def visible_to(self, user) -> "SubjectScopedQuerySet":
        """Admins see everything, teachers their assigned subjects, students their class."""
        if user is None or not user.is_authenticated:
            return self.none()
        if user.is_admin:
            return self.all()
        if user.is_teacher:
            return self.taught_by(user)
        if user.is_student and user.school_class_id:
            return self.for_class(user.school_class_id)
        return self.none()


class SubjectQuerySet(SubjectScopedQuerySet):
    subject_lookup = ""


class ChapterQuerySet(SubjectScopedQuerySet):
    subject_lookup = "subject"


class ChapterChildQuerySet(SubjectScopedQuerySet):
    """For Content and Quiz, which both belong to a chapter."""
    subject_lookup = "chapter__subject"
