"""Groups a student's attempts per exam for the dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping

from exam_app.constants.exam_constants import UNKNOWN_EXAM_TITLE
from exam_app.core.models import AttemptSummary


@dataclass(slots=True, frozen=True)
class ExamHistory:
    exam_id: str
    title: str
    attempt_count: int
    best_score: int
    last_score: int
    last_attempt_at: datetime


def summarize_attempt_history(
    attempts: Iterable[AttemptSummary],
    exam_titles: Mapping[str, str],
) -> list[ExamHistory]:
    """One entry per exam, most recently attempted first.

    Exams no longer listed (unpublished or removed) keep their attempts under
    a placeholder title.
    """
    by_exam: dict[str, list[AttemptSummary]] = {}
    for attempt in attempts:
        by_exam.setdefault(attempt.exam_id, []).append(attempt)

    history: list[ExamHistory] = []
    for exam_id, exam_attempts in by_exam.items():
        latest = max(exam_attempts, key=lambda attempt: attempt.last_activity)
        history.append(
            ExamHistory(
                exam_id=exam_id,
                title=exam_titles.get(exam_id, UNKNOWN_EXAM_TITLE),
                attempt_count=len(exam_attempts),
                best_score=max(attempt.score for attempt in exam_attempts),
                last_score=latest.score,
                last_attempt_at=latest.last_activity,
            )
        )
    history.sort(key=lambda entry: entry.last_attempt_at, reverse=True)
    return history
