from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import UniqueConstraint
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from model_utils import Choices
from model_utils.models import TimeStampedModel

from main.common.managers import ChapterChildQuerySet
from main.common.utils import percent

__all__ = [
    "OPTIONS_PER_QUESTION",
    "Quiz",
    "Question",
    "QuizStart",
    "StudentAttempt",
]

OPTIONS_PER_QUESTION = 4


class QuizQuerySet(ChapterChildQuerySet):
    def search(self, query: str | None = None):
        if query:
            return self.filter(title__icontains=query)
        return self


class Quiz(TimeStampedModel):
    """Multiple-choice quiz on a chapter (or a subject-wide annual exam)."""

    TYPES = Choices(
        ("chapter", _("Chapter quiz")),
        ("annual", _("Annual exam")),
    )

    chapter = models.ForeignKey("main.Chapter", on_delete=models.CASCADE, related_name="quizzes")
    title = models.CharField(max_length=200)
    type = models.CharField(max_length=10, choices=TYPES, default=TYPES.chapter)
    time_limit = models.PositiveIntegerField(
        default=30, validators=[MinValueValidator(1)], help_text=_("Minutes")
    )
    total_questions = models.PositiveIntegerField(default=0)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name="created_quizzes",
    )

    objects = QuizQuerySet.as_manager()

    class Meta:
        ordering = ["-created"]
        verbose_name_plural = _("quizzes")

    def __str__(self):
        return self.title

    @property
    def subject(self):
        return self.chapter.subject

    def get_max_score(self) -> int:
        return sum(self.questions.values_list("marks", flat=True))


class Question(models.Model):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="questions")
    question_text = models.TextField()
    options = models.JSONField(default=list)
    correct_answer = models.PositiveSmallIntegerField(help_text=_("Zero-based index into options"))
    marks = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    order_index = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order_index", "id"]

    def __str__(self):
        return self.question_text[:60]

    def clean(self):
        if not isinstance(self.options, list) or len(self.options) != OPTIONS_PER_QUESTION:
            raise ValidationError({"options": _("A question needs exactly %d options.") % OPTIONS_PER_QUESTION})
        if self.correct_answer is not None and self.correct_answer >= len(self.options):
            raise ValidationError({"correct_answer": _("Correct answer must index one of the options.")})

    def check_if_correct(self, guess) -> bool:
        return guess is not None and not isinstance(guess, bool) and guess == self.correct_answer


class QuizStart(models.Model):
    """When a student first opened a quiz; the server-side clock for the time limit."""
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="quiz_starts")
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="starts")
    started_at = models.DateTimeField(default=timezone.now)

    class Meta:
        constraints = [
            UniqueConstraint(fields=["student", "quiz"], name="uniq_quiz_start_per_student"),
        ]


class StudentAttemptQuerySet(models.QuerySet):
    def for_quizzes(self, quiz_ids):
        return self.filter(quiz_id__in=quiz_ids)

    def has_attempted(self, student, quiz) -> bool:
        return self.filter(student=student, quiz=quiz).exists()


class StudentAttempt(models.Model):
    """A scored submission. One per (student, quiz), enforced by the database."""
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="quiz_attempts")
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="attempts")
    score = models.PositiveIntegerField(default=0)
    total_marks = models.PositiveIntegerField(default=0)
    answers = models.JSONField(default=dict, blank=True)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(default=timezone.now)

    objects = StudentAttemptQuerySet.as_manager()

    class Meta:
        ordering = ["-completed_at"]
        indexes = [models.Index(fields=["quiz", "student"], name="attempt_quiz_student_idx")]
        constraints = [
            UniqueConstraint(fields=["student", "quiz"], name="uniq_attempt_per_student_quiz"),
        ]

    def __str__(self):
        return f"{self.student_id} on {self.quiz_id}: {self.score}/{self.total_marks}"

    @property
    def percentage(self) -> int:
        return percent(self.score, self.total_marks)
