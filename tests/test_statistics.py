from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conftest import make_direct, make_exam, make_mcq
from exam_app.core.grading import score_attempt
from exam_app.core.models import (
    AnswerRecord,
    AttemptRecord,
    Coordinates,
    OptionAnswer,
    QuestionType,
    TextAnswer,
)
from exam_app.core.services.statistics import aggregate_exam_statistics, median

START = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _attempt(attempt_id, answers, score=0, minutes=10, completed=True):
    records = [
        AnswerRecord(question_id=qid, answer=answer, time_expired=expired, timestamp=START)
        for qid, answer, expired in answers
    ]
    return AttemptRecord(
        id=attempt_id,
        exam_id="EX1",
        student_id=f"student-{attempt_id}",
        start_time=START,
        end_time=START + timedelta(minutes=minutes) if completed else None,
        coordinates=Coordinates(0, 0),
        answers=records,
        score=score,
        completed=completed,
    )


@pytest.mark.parametrize(
    ("values", "expected"),
    [([40, 60, 80], 60), ([40, 60, 80, 100], 70), ([80, 40, 60], 60), ([55], 55), ([], 0)],
)
def test_median(values, expected):
    assert median(values) == expected


def test_no_completed_attempts_returns_zeroed_statistics(exam):
    statistics = aggregate_exam_statistics(exam, [_attempt("a", [], completed=False)])
    assert statistics.total_attempts == 0
    assert statistics.average_score == 0
    assert statistics.completion_rate == 0
    assert set(statistics.question_stats) == {"q1", "q2"}
    assert statistics.question_stats["q1"].success_rate == 0


def test_aggregates_scores_durations_and_completion(exam):
    attempts = [
        _attempt("a", [("q1", TextAnswer("42"), False), ("q2", OptionAnswer(1), False)], score=100, minutes=6),
        _attempt("b", [("q1", TextAnswer("40"), False), ("q2", None, True)], score=0, minutes=12),
        _attempt("c", [("q1", TextAnswer("42"), False), ("q2", OptionAnswer(0), False)], score=67, minutes=9),
        _attempt("d", [], completed=False),
    ]

    statistics = aggregate_exam_statistics(exam, attempts)

    assert statistics.total_attempts == 3
    assert statistics.average_score == pytest.approx(167 / 3)
    assert statistics.highest_score == 100
    assert statistics.lowest_score == 0
    assert statistics.median_score == 67
    assert statistics.completion_rate == 75
    assert statistics.average_duration == 9

    q1 = statistics.question_stats["q1"]
    assert (q1.correct_count, q1.incorrect_count, q1.timeout_count) == (2, 1, 0)
    assert q1.success_rate == pytest.approx(200 / 3)
    q2 = statistics.question_stats["q2"]
    assert (q2.correct_count, q2.incorrect_count, q2.timeout_count) == (1, 1, 1)
    assert q2.type is QuestionType.MULTIPLE_CHOICE
    assert q2.question_number == 2


def test_unknown_question_ids_are_ignored(exam):
    attempt = _attempt("a", [("q9", TextAnswer("x"), False), ("q1", TextAnswer("42"), False)], score=67)
    statistics = aggregate_exam_statistics(exam, [attempt])
    assert "q9" not in statistics.question_stats
    assert statistics.question_stats["q1"].correct_count == 1


def test_long_question_text_is_truncated():
    exam = make_exam([make_direct(text="x" * 80)])
    stats = aggregate_exam_statistics(exam, []).question_stats["q1"]
    assert stats.text == "x" * 50 + "..."


def test_per_question_counts_agree_with_attempt_scoring():
    questions = [make_direct("q1", answer="100", tolerance=5), make_mcq("q2")]
    exam = make_exam(questions)
    answers = [("q1", TextAnswer("104"), False), ("q2", OptionAnswer(0), False)]
    attempt = _attempt("a", answers)
    result = score_attempt(questions, attempt.answers)

    statistics = aggregate_exam_statistics(exam, [attempt])

    correct = sum(stats.correct_count for stats in statistics.question_stats.values())
    assert correct == result.correct_answers == 1
