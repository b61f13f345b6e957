from django.conf import settings
from django.db import models
from django.db.models import Max, UniqueConstraint
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from main.common.managers import ChapterQuerySet, SubjectQuerySet

__all__ = ["ClassList", "Subject", "TeacherAssignment", "Chapter"]


class ClassList(models.Model):
    """A class/grade such as "Class 10"; students belong to exactly one."""
    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["name"]
        verbose_name = _("class")
        verbose_name_plural = _("classes")

    def __str__(self):
        return self.name


class Subject(models.Model):
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    school_class = models.ForeignKey(ClassList, on_delete=models.CASCADE, related_name="subjects")

    objects = SubjectQuerySet.as_manager()

    class Meta:
        ordering = ["school_class__name", "name"]
        constraints = [
            UniqueConstraint(fields=["school_class", "name"], name="uniq_subject_name_per_class"),
        ]

    def __str__(self):
        return f"{self.name} ({self.school_class.name})"

    def is_taught_by(self, user) -> bool:
        return self.teacher_assignments.filter(teacher=user).exists()


class TeacherAssignment(models.Model):
    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="teacher_assignments"
    )
    subject = models.ForeignKey(Subject, on_delete=models.CASCADE, related_name="teacher_assignments")
    assigned_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            UniqueConstraint(fields=["teacher", "subject"], name="uniq_teacher_subject"),
        ]

    def __str__(self):
        return f"{self.teacher} -> {self.subject}"


class Chapter(models.Model):
    name = models.CharField(max_length=200)
    subject = models.ForeignKey(Subject, on_delete=models.CASCADE, related_name="chapters")
    order_index = models.PositiveIntegerField(default=1)

    objects = ChapterQuerySet.as_manager()

    class Meta:
        ordering = ["subject", "order_index"]
        constraints = [
            UniqueConstraint(fields=["subject", "order_index"], name="uniq_chapter_order_per_subject"),
        ]

    def __str__(self):
        return f"{self.order_index}. {self.name}"

    @classmethod
    def next_order_index(cls, subject) -> int:
        """Chapters are appended: one past the current highest index, starting at 1."""
        current = cls.objects.filter(subject=subject).aggregate(top=Max("order_index"))["top"]
        return (current or 0) + 1
