"""Grading rules shared by the attempt scorer and the statistics aggregator.

Architecture note:
    Both call sites grade through ``is_answer_correct`` so a score shown to a
    student at the end of an attempt and the per-question counts a teacher
    sees afterwards can never disagree.
"""

from __future__ import annotations

import math
import re
from typing import Iterable

from exam_app.core.models import (
    Answer,
    AnswerRecord,
    OptionAnswer,
    Question,
    QuestionType,
    ScoreResult,
    TextAnswer,
)

_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def parse_number(text: str) -> float | None:
    """Return ``text`` as a finite float, or None when it is not a plain decimal number."""
    candidate = text.strip()
    if not _NUMBER_PATTERN.match(candidate):
        return None
    value = float(candidate)
    if not math.isfinite(value):
        return None
    return value


def is_within_tolerance(student: float, correct: float, tolerance_percent: float) -> bool:
    """Check ``|(student - correct) / correct| * 100 <= tolerance`` without dividing.

    With ``correct == 0`` this only accepts an exact match.
    """
    return abs(student - correct) * 100 <= tolerance_percent * abs(correct)


def is_answer_correct(question: Question, answer: Answer | None) -> bool:
    """Grade a single answer; malformed input grades as incorrect."""
    if answer is None:
        return False

    if question.type is QuestionType.DIRECT:
        if not isinstance(answer, TextAnswer) or not question.correct_answer:
            return False
        student_value = answer.value.strip().lower()
        correct_value = question.correct_answer.strip().lower()
        student_number = parse_number(student_value)
        correct_number = parse_number(correct_value)
        if student_number is not None and correct_number is not None:
            tolerance = question.tolerance if question.tolerance is not None else 0.0
            return is_within_tolerance(student_number, correct_number, tolerance)
        return student_value == correct_value

    if not isinstance(answer, OptionAnswer):
        return False
    return answer.index in (question.correct_options or [])


def score_attempt(questions: Iterable[Question], answers: Iterable[AnswerRecord]) -> ScoreResult:
    """Compute the score breakdown for one attempt."""
    answers_by_question = {record.question_id: record for record in answers}

    total_score = 0
    max_possible_score = 0
    correct_answers = 0
    incorrect_answers = 0

    for question in questions:
        max_possible_score += question.points
        record = answers_by_question.get(question.id)
        if record is None or record.time_expired:
            incorrect_answers += 1
            continue

        if is_answer_correct(question, record.answer):
            total_score += question.points
            correct_answers += 1
        else:
            incorrect_answers += 1

    return ScoreResult(
        total_score=total_score,
        max_possible_score=max_possible_score,
        correct_answers=correct_answers,
        incorrect_answers=incorrect_answers,
    )


def score_band(percentage: int) -> str:
    """Classify a percentage for display: excellent, good, average or poor."""
    if percentage >= 80:
        return "excellent"
    if percentage >= 60:
        return "good"
    if percentage >= 40:
        return "average"
    return "poor"
