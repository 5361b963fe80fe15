"""Service for reducing persisted attempts into per-exam statistics."""

from __future__ import annotations

from typing import Iterable

from exam_app.constants.exam_constants import QUESTION_STATS_TEXT_LENGTH
from exam_app.core.grading import is_answer_correct
from exam_app.core.models import AttemptRecord, Exam, ExamStatistics, QuestionStats


def median(values: list[float]) -> float:
    """Median of ``values``; 0 for an empty list."""
    if not values:
        return 0.0
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2
    return float(ordered[middle])


def aggregate_exam_statistics(exam: Exam, attempts: Iterable[AttemptRecord]) -> ExamStatistics:
    """Aggregate all attempts of ``exam`` (completed and in progress)."""
    all_attempts = list(attempts)
    completed = [attempt for attempt in all_attempts if attempt.completed]
    question_stats = _initial_question_stats(exam)

    if not completed:
        return ExamStatistics(question_stats=question_stats)

    scores = [float(attempt.score) for attempt in completed]
    durations = [
        (attempt.end_time - attempt.start_time).total_seconds() / 60
        for attempt in completed
        if attempt.start_time is not None and attempt.end_time is not None
    ]

    questions_by_id = {question.id: question for question in exam.questions}
    for attempt in completed:
        for record in attempt.answers:
            stats = question_stats.get(record.question_id)
            if stats is None:
                continue
            if record.time_expired:
                stats.timeout_count += 1
            elif is_answer_correct(questions_by_id[record.question_id], record.answer):
                stats.correct_count += 1
            else:
                stats.incorrect_count += 1

    for stats in question_stats.values():
        answered = stats.correct_count + stats.incorrect_count + stats.timeout_count
        stats.success_rate = stats.correct_count / answered * 100 if answered else 0.0

    return ExamStatistics(
        total_attempts=len(completed),
        average_score=sum(scores) / len(scores),
        highest_score=max(scores),
        lowest_score=min(scores),
        median_score=median(scores),
        completion_rate=len(completed) / len(all_attempts) * 100,
        average_duration=sum(durations) / len(durations) if durations else 0.0,
        question_stats=question_stats,
    )


def _initial_question_stats(exam: Exam) -> dict[str, QuestionStats]:
    stats: dict[str, QuestionStats] = {}
    for number, question in enumerate(exam.questions, start=1):
        text = question.text
        if len(text) > QUESTION_STATS_TEXT_LENGTH:
            text = text[:QUESTION_STATS_TEXT_LENGTH] + "..."
        stats[question.id] = QuestionStats(question_number=number, text=text, type=question.type)
    return stats
