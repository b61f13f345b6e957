"""
Quiz attempt evaluation.

A student gets exactly one scored attempt per quiz. Submission runs through:

1. caller must be an authenticated student; quizId and answers must be present
2. the quiz must exist and belong to the student's class
3. an existing attempt short-circuits with AlreadyAttempted
4. if the student opened the quiz (QuizStart), the time limit plus a grace
   period is enforced against the server clock
5. every question is scored: marks count only for an exact option match
   (an integer index; "1" is not 1)
6. the attempt row is inserted with the answer map exactly as submitted;
   a unique-constraint violation means a concurrent submission won,
   reported as DuplicateAttempt
7. percentage and pass/fail are derived from the stored score
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Iterable, Mapping

from django.db import IntegrityError, transaction
from django.utils import timezone

from main.common.utils import lms_setting, percent
from main.exceptions import (
    AlreadyAttempted,
    BadRequest,
    DuplicateAttempt,
    NotFound,
    QuizTimeExpired,
    Unauthorized,
)
from main.models import Question, Quiz, QuizStart, StudentAttempt

logger = logging.getLogger(__name__)

PASSED_MESSAGE = "Congratulations! You passed!"
FAILED_MESSAGE = "Keep studying and try again!"


@dataclass(frozen=True)
class AttemptResult:
    score: int
    total_marks: int
    percentage: int
    passed: bool
    message: str
    attempt_id: int | None = None

    def as_dict(self) -> dict:
        return {
            "score": self.score,
            "totalMarks": self.total_marks,
            "percentage": self.percentage,
            "passed": self.passed,
            "message": self.message,
        }


def normalize_answers(answers: Mapping) -> dict[str, int | None]:
    """Key answers by str(question id); JSON objects only carry string keys."""
    return {str(key): value for key, value in answers.items()}


def score_answers(questions: Iterable[Question], answers: Mapping) -> tuple[int, int]:
    """Return (score, total_marks).

    Missing, null, non-integer or out-of-range answers earn nothing; keys that match no
    question are ignored, so 0 <= score <= total_marks always holds.
    """
    lookup = normalize_answers(answers)
    score = 0
    total_marks = 0
    for question in questions:
        total_marks += question.marks
        if question.check_if_correct(lookup.get(str(question.pk))):
            score += question.marks
    return score, total_marks


def classify(score: int, total_marks: int) -> AttemptResult:
    """A zero-mark quiz scores 0% and fails."""
    percentage = percent(score, total_marks)
    passed = percentage >= lms_setting("PASS_PERCENTAGE")
    return AttemptResult(
        score=score,
        total_marks=total_marks,
        percentage=percentage,
        passed=passed,
        message=PASSED_MESSAGE if passed else FAILED_MESSAGE,
    )


def get_quiz_for_student(student, quiz_id) -> Quiz:
    """Quizzes outside the student's class are reported as missing, not forbidden."""
    quiz = (
        Quiz.objects.select_related("chapter__subject")
        .filter(pk=quiz_id)
        .first()
    )
    if quiz is None or quiz.chapter.subject.school_class_id != student.school_class_id:
        raise NotFound("Quiz not found")
    return quiz


def has_attempted(student, quiz) -> bool:
    return StudentAttempt.objects.has_attempted(student, quiz)


def record_quiz_start(student, quiz, now=None) -> QuizStart:
    """Stamp the first time a student opens a quiz; later opens keep the original time."""
    start, created = QuizStart.objects.get_or_create(
        student=student, quiz=quiz, defaults={"started_at": now or timezone.now()},
    )
    if created:
        logger.info("Student %s started quiz %s", student.pk, quiz.pk)
    return start


def check_time_limit(quiz: Quiz, started_at, now) -> None:
    if started_at is None:
        logger.warning(
            "Quiz %s submitted without a recorded start; time limit not enforced", quiz.pk,
        )
        return
    grace = timedelta(seconds=lms_setting("QUIZ_SUBMIT_GRACE_SECONDS"))
    deadline = started_at + timedelta(minutes=quiz.time_limit) + grace
    if now > deadline:
        logger.info("Late submission for quiz %s: deadline %s, now %s", quiz.pk, deadline, now)
        raise QuizTimeExpired()


def submit_attempt(student, quiz_id, answers, now=None) -> AttemptResult:
    if student is None or not getattr(student, "is_authenticated", False) or not student.is_student:
        raise Unauthorized()
    if quiz_id in (None, "") or answers is None:
        raise BadRequest("Missing quiz ID or answers")

    now = now or timezone.now()
    quiz = get_quiz_for_student(student, quiz_id)

    if has_attempted(student, quiz):
        logger.info("Student %s already attempted quiz %s", student.pk, quiz.pk)
        raise AlreadyAttempted()

    start = QuizStart.objects.filter(student=student, quiz=quiz).first()
    started_at = start.started_at if start else None
    check_time_limit(quiz, started_at, now)

    score, total_marks = score_answers(quiz.questions.all(), answers)

    try:
        with transaction.atomic():
            attempt = StudentAttempt.objects.create(
                student=student,
                quiz=quiz,
                score=score,
                total_marks=total_marks,
                answers=dict(answers),
                started_at=started_at,
                completed_at=now,
            )
    except IntegrityError as exc:
        logger.warning("Concurrent submission for quiz %s by student %s", quiz.pk, student.pk)
        raise DuplicateAttempt() from exc

    result = replace(classify(score, total_marks), attempt_id=attempt.pk)
    logger.info(
        "Student %s scored %s/%s (%s%%) on quiz %s",
        student.pk, score, total_marks, result.percentage, quiz.pk,
    )
    return result
