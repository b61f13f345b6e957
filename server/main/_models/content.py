import os

from django.conf import settings
from django.core.validators import MaxValueValidator
from django.db import models
from django.db.models import UniqueConstraint
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from model_utils import Choices
from model_utils.models import TimeStampedModel

from main.common.managers import ChapterChildQuerySet

__all__ = ["Content", "ContentView", "material_upload_path"]


def material_upload_path(instance, filename):
    subject_id = instance.chapter.subject_id if instance.chapter_id else "unsorted"
    return os.path.join("materials", str(subject_id), filename)


class Content(TimeStampedModel):
    """A learning material attached to a chapter: an uploaded file or an external link."""

    TYPES = Choices(
        ("pdf", _("PDF")),
        ("ppt", _("Presentation")),
        ("video", _("Video")),
        ("note", _("Note")),
        ("quiz", _("Quiz")),
    )

    chapter = models.ForeignKey("main.Chapter", on_delete=models.CASCADE, related_name="contents")
    title = models.CharField(max_length=200)
    type = models.CharField(max_length=10, choices=TYPES, default=TYPES.pdf)
    file = models.FileField(upload_to=material_upload_path, blank=True)
    file_url = models.URLField(max_length=500, blank=True, default="")
    uploaded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name="uploaded_contents",
    )

    objects = ChapterChildQuerySet.as_manager()

    class Meta:
        ordering = ["-created"]

    def __str__(self):
        return self.title

    @property
    def url(self) -> str:
        if self.file:
            return self.file.url
        return self.file_url


class ContentView(models.Model):
    """Per (content, user) engagement counters. Time is stored in seconds."""

    content = models.ForeignKey(Content, on_delete=models.CASCADE, related_name="views")
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="content_views")
    view_count = models.PositiveIntegerField(default=0)
    total_time_spent = models.PositiveIntegerField(default=0)
    completion_percentage = models.PositiveSmallIntegerField(default=0, validators=[MaxValueValidator(100)])
    last_accessed = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            UniqueConstraint(fields=["content", "user"], name="uniq_content_view_per_user"),
        ]

    def __str__(self):
        return f"{self.user_id} viewed {self.content_id} x{self.view_count}"
