"""CSV rendering of the class progress table."""
from __future__ import annotations

import pandas as pd
from django.utils.text import slugify

PROGRESS_COLUMNS = [
    "roll_number",
    "full_name",
    "class",
    "total_content",
    "content_viewed",
    "content_progress",
    "total_quizzes",
    "quizzes_attempted",
    "quiz_progress",
    "avg_quiz_score",
    "overall_progress",
]


def progress_table_to_csv(rows: list[dict]) -> str:
    """Header row always present, even for an empty class."""
    frame = pd.DataFrame(rows, columns=PROGRESS_COLUMNS)
    return frame.to_csv(index=False)


def progress_csv_filename(subject) -> str:
    return f"student-progress-{slugify(subject.name) or subject.pk}.csv"
