"""Content engagement tracking and per-quiz statistics."""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from main.common.utils import lms_setting, mean, percent
from main.models import ContentView, StudentAttempt

logger = logging.getLogger(__name__)


def record_content_view(user, content, time_spent: int = 0, completion: int | None = None, now=None) -> ContentView:
    """Upsert the (content, user) counters.

    Each call is one more view; time accumulates and completion only ever
    grows (the stored value is the max seen so far).
    """
    now = now or timezone.now()
    completion = completion or 0
    with transaction.atomic():
        view, created = ContentView.objects.select_for_update().get_or_create(
            content=content,
            user=user,
            defaults={
                "view_count": 1,
                "total_time_spent": time_spent,
                "completion_percentage": completion,
                "last_accessed": now,
            },
        )
        if not created:
            view.view_count = F("view_count") + 1
            view.total_time_spent = F("total_time_spent") + time_spent
            view.completion_percentage = max(view.completion_percentage, completion)
            view.last_accessed = now
            view.save(update_fields=["view_count", "total_time_spent", "completion_percentage", "last_accessed"])
            view.refresh_from_db()
    logger.debug("Content %s viewed by %s (%s views)", content.pk, user.pk, view.view_count)
    return view


def quiz_statistics(quiz) -> dict:
    attempts = list(StudentAttempt.objects.filter(quiz=quiz).values_list("score", "total_marks"))
    pass_mark = lms_setting("PASS_PERCENTAGE")
    passed = sum(1 for score, total in attempts if percent(score, total) >= pass_mark)
    return {
        "quizId": quiz.pk,
        "title": quiz.title,
        "totalAttempts": len(attempts),
        "averageScore": round(float(mean(score for score, _ in attempts)), 2),
        "averagePercentage": percent(
            sum(score for score, _ in attempts), sum(total for _, total in attempts)
        ),
        "passRate": percent(passed, len(attempts)),
    }
