"""
Progress aggregation over content views and quiz attempts.

Everything is recomputed from the database on each call; nothing is cached
between requests. One ProgressAggregator serves every dashboard, and a
scope object decides which subjects and which students it walks:

    StudentScope(student)  -> the student's class subjects, that student only
    SubjectScope(subject)  -> one subject, every student of its class
    TeacherScope(teacher)  -> the teacher's assigned subjects, every student

Percentages are computed on raw counts and rounded half-up only when a
report is rendered. A zero denominator yields 0.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from fractions import Fraction
from functools import wraps

from django.db import DatabaseError
from django.db.models import Sum

from main.common.utils import lms_setting, mean, percent, round_half_up, safe_percentage
from main.exceptions import InternalError
from main.models import Content, ContentView, Quiz, StudentAttempt, Subject, User

logger = logging.getLogger(__name__)


def surfaces_store_errors(func):
    """Report database failures as InternalError; callers never see partial results."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception("Progress aggregation failed in %s", func.__name__)
            raise InternalError() from exc

    return wrapper


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------

class ProgressScope:
    def subjects(self):
        raise NotImplementedError

    def students(self, subject):
        raise NotImplementedError


class StudentScope(ProgressScope):
    def __init__(self, student):
        self.student = student

    def subjects(self):
        if not self.student.school_class_id:
            return Subject.objects.none()
        return Subject.objects.for_class(self.student.school_class_id).order_by("name")

    def students(self, subject):
        return [self.student]


class SubjectScope(ProgressScope):
    def __init__(self, subject):
        self.subject = subject

    def subjects(self):
        return [self.subject]

    def students(self, subject):
        return User.objects.students().filter(
            school_class_id=subject.school_class_id
        ).select_related("school_class").order_by("roll_number")


class TeacherScope(SubjectScope):
    def __init__(self, teacher):
        self.teacher = teacher

    def subjects(self):
        return Subject.objects.taught_by(self.teacher).select_related("school_class").order_by(
            "school_class__name", "name"
        )


# ---------------------------------------------------------------------------
# Report objects
# ---------------------------------------------------------------------------

@dataclass
class SubjectCatalog:
    """Ids of the trackable material under one subject. Quiz-marker content is excluded."""
    subject: Subject
    content_ids: list[int]
    quiz_ids: list[int]

    @classmethod
    def resolve(cls, subject) -> "SubjectCatalog":
        chapter_ids = list(subject.chapters.values_list("id", flat=True))
        content_ids = list(
            Content.objects.filter(chapter_id__in=chapter_ids)
            .exclude(type=Content.TYPES.quiz)
            .values_list("id", flat=True)
        )
        quiz_ids = list(Quiz.objects.filter(chapter_id__in=chapter_ids).values_list("id", flat=True))
        return cls(subject=subject, content_ids=content_ids, quiz_ids=quiz_ids)


@dataclass
class ContentProgress:
    total: int
    views: list[ContentView] = field(default_factory=list)

    @property
    def viewed(self) -> int:
        return len(self.views)

    @property
    def percentage(self) -> int:
        return percent(self.viewed, self.total)

    @property
    def avg_completion(self) -> int:
        return round_half_up(mean(v.completion_percentage for v in self.views))

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "viewed": self.viewed,
            "percentage": self.percentage,
            "avgCompletion": self.avg_completion,
        }


@dataclass
class QuizProgress:
    total: int
    attempts: list[StudentAttempt] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.attempts)

    @property
    def percentage(self) -> int:
        return percent(self.attempted, self.total)

    @property
    def avg_score(self) -> int:
        """Mean of the per-attempt percentages."""
        return round_half_up(mean(safe_percentage(a.score, a.total_marks) for a in self.attempts))

    @property
    def aggregate_score(self) -> int:
        """Total marks earned over total marks available."""
        return percent(
            sum(a.score for a in self.attempts),
            sum(a.total_marks for a in self.attempts),
        )

    def as_dict(self) -> dict:
        return {
            "total": self.total,
            "attempted": self.attempted,
            "percentage": self.percentage,
            "avgScore": self.avg_score,
        }


@dataclass
class StudentProgress:
    student: User
    content: ContentProgress
    quiz: QuizProgress

    @property
    def overall_progress(self) -> int:
        # averages the rounded figures shown in the table
        return round_half_up((self.content.percentage + self.quiz.percentage) / 2)

    def as_row(self) -> dict:
        return {
            "roll_number": self.student.roll_number,
            "full_name": self.student.full_name,
            "class": self.student.class_name or "",
            "total_content": self.content.total,
            "content_viewed": self.content.viewed,
            "content_progress": self.content.percentage,
            "total_quizzes": self.quiz.total,
            "quizzes_attempted": self.quiz.attempted,
            "quiz_progress": self.quiz.percentage,
            "avg_quiz_score": self.quiz.aggregate_score,
            "overall_progress": self.overall_progress,
        }


@dataclass
class SubjectReport:
    catalog: SubjectCatalog
    rows: list[StudentProgress]
    attempts: list[StudentAttempt]
    views: list[ContentView]

    @property
    def subject(self) -> Subject:
        return self.catalog.subject

    def top_performers(self, limit: int) -> list[dict]:
        """Best attempts by score ratio; ties go to the lower student id, then attempt id."""
        def ratio(attempt):
            return Fraction(attempt.score, attempt.total_marks) if attempt.total_marks else Fraction(0)

        ranked = sorted(self.attempts, key=lambda a: (-ratio(a), a.student_id, a.pk))
        return [
            {
                "studentId": attempt.student_id,
                "name": attempt.student.full_name,
                "rollNumber": attempt.student.roll_number,
                "quizId": attempt.quiz_id,
                "score": percent(attempt.score, attempt.total_marks),
            }
            for attempt in ranked[:limit]
        ]

    def metrics(self, top_n: int | None = None) -> dict:
        top_n = lms_setting("TOP_PERFORMERS") if top_n is None else top_n
        total_students = len(self.rows)
        active_students = len({a.student_id for a in self.attempts})
        return {
            "subjectId": self.subject.pk,
            "subject": self.subject.name,
            "className": self.subject.school_class.name,
            "totalStudents": total_students,
            "activeStudents": active_students,
            "engagementRate": percent(active_students, total_students),
            "totalQuizAttempts": len(self.attempts),
            "avgQuizScore": round_half_up(
                mean(safe_percentage(a.score, a.total_marks) for a in self.attempts)
            ),
            "avgContentViews": round_half_up(mean(v.view_count for v in self.views)),
            "avgTimeSpent": round_half_up(mean(v.total_time_spent for v in self.views)) // 60,
            "topPerformers": self.top_performers(top_n),
        }


# ---------------------------------------------------------------------------
# Aggregator
# ---------------------------------------------------------------------------

class ProgressAggregator:
    def __init__(self, scope: ProgressScope):
        self.scope = scope

    def subject_report(self, subject) -> SubjectReport:
        catalog = SubjectCatalog.resolve(subject)
        students = list(self.scope.students(subject))
        student_ids = [s.pk for s in students]

        views = list(
            ContentView.objects.filter(content_id__in=catalog.content_ids, user_id__in=student_ids)
        )
        attempts = list(
            StudentAttempt.objects.filter(quiz_id__in=catalog.quiz_ids, student_id__in=student_ids)
            .select_related("student")
            .order_by("pk")
        )

        views_by_student = defaultdict(list)
        for view in views:
            views_by_student[view.user_id].append(view)
        attempts_by_student = defaultdict(list)
        for attempt in attempts:
            attempts_by_student[attempt.student_id].append(attempt)

        rows = [
            StudentProgress(
                student=student,
                content=ContentProgress(len(catalog.content_ids), views_by_student[student.pk]),
                quiz=QuizProgress(len(catalog.quiz_ids), attempts_by_student[student.pk]),
            )
            for student in students
        ]
        return SubjectReport(catalog=catalog, rows=rows, attempts=attempts, views=views)

    def reports(self) -> list[SubjectReport]:
        return [self.subject_report(subject) for subject in self.scope.subjects()]


@surfaces_store_errors
def student_progress(student) -> list[dict]:
    """Per-subject progress of one student across their class's subjects."""
    progress = []
    for report in ProgressAggregator(StudentScope(student)).reports():
        row = report.rows[0]
        progress.append({
            "subjectId": report.subject.pk,
            "subject": report.subject.name,
            "contentProgress": row.content.as_dict(),
            "quizProgress": row.quiz.as_dict(),
        })
    return progress


@surfaces_store_errors
def class_progress_table(subject) -> list[dict]:
    """One row per student of the subject's class, ordered by roll number."""
    report = ProgressAggregator(SubjectScope(subject)).subject_report(subject)
    return [row.as_row() for row in report.rows]


@surfaces_store_errors
def class_performance(teacher, top_n: int | None = None) -> list[dict]:
    return [report.metrics(top_n) for report in ProgressAggregator(TeacherScope(teacher)).reports()]


@surfaces_store_errors
def dashboard_summary(teacher) -> dict:
    subjects = list(TeacherScope(teacher).subjects())
    subject_ids = [s.pk for s in subjects]
    class_ids = {s.school_class_id for s in subjects}

    totals = StudentAttempt.objects.filter(
        quiz__chapter__subject_id__in=subject_ids
    ).aggregate(score=Sum("score"), marks=Sum("total_marks"))
    score, marks = totals["score"] or 0, totals["marks"] or 0

    return {
        "totalStudents": User.objects.students().filter(school_class_id__in=class_ids).count(),
        "activeClasses": len(class_ids),
        "avgPerformance": f"{percent(score, marks)}%" if marks else "N/A",
        "totalQuizzes": Quiz.objects.filter(chapter__subject_id__in=subject_ids).count(),
        "totalContent": Content.objects.filter(chapter__subject_id__in=subject_ids)
        .exclude(type=Content.TYPES.quiz)
        .count(),
    }
