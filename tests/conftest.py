from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from exam_app.core.models import (
    AttemptSubmission,
    Coordinates,
    Exam,
    ExamStatus,
    Question,
    QuestionType,
)
from exam_app.core.services.geolocation import GeolocationError


class FakeTickSource:
    """Tick source driven manually from tests."""

    def __init__(self) -> None:
        self.callback: Callable[[], None] | None = None
        self.start_count = 0
        self.stop_count = 0

    @property
    def active(self) -> bool:
        return self.callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        self.callback = callback
        self.start_count += 1

    def stop(self) -> None:
        self.callback = None
        self.stop_count += 1

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            if self.callback is None:
                return
            self.callback()


class FakeGeolocation:
    """Geolocation provider that holds the callbacks until the test resolves them."""

    def __init__(self) -> None:
        self.requests = 0
        self._on_position = None
        self._on_error = None

    def request_position(self, on_position, on_error) -> None:
        self.requests += 1
        self._on_position = on_position
        self._on_error = on_error

    def succeed(self, coordinates: Coordinates | None = None) -> None:
        self._on_position(coordinates or Coordinates(59.91, 10.75))

    def fail(self, error: GeolocationError) -> None:
        self._on_error(error)


class RecordingSink:
    """Submission sink that records submissions and completes on demand."""

    def __init__(self) -> None:
        self.submissions: list[AttemptSubmission] = []
        self._pending = []

    def submit(self, submission: AttemptSubmission, on_done) -> None:
        self.submissions.append(submission)
        self._pending.append(on_done)

    def complete(self, error: Exception | None = None) -> None:
        self._pending.pop(0)(error)


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)


def make_direct(question_id: str = "q1", answer: str = "42", **kwargs) -> Question:
    kwargs.setdefault("time_limit_seconds", 30)
    return Question(
        id=question_id,
        text=kwargs.pop("text", "What is $6 \\times 7$?"),
        type=QuestionType.DIRECT,
        correct_answer=answer,
        **kwargs,
    )


def make_mcq(question_id: str = "q2", **kwargs) -> Question:
    kwargs.setdefault("time_limit_seconds", 20)
    return Question(
        id=question_id,
        text=kwargs.pop("text", "Which numbers are prime?"),
        type=QuestionType.MULTIPLE_CHOICE,
        options=kwargs.pop("options", ["4", "5", "7"]),
        correct_options=kwargs.pop("correct_options", [1, 2]),
        **kwargs,
    )


def make_exam(questions: list[Question], **kwargs) -> Exam:
    kwargs.setdefault("duration_minutes", 1)
    kwargs.setdefault("status", ExamStatus.PUBLISHED)
    return Exam(
        id=kwargs.pop("id", "EX1"),
        title=kwargs.pop("title", "Arithmetic"),
        target_audience=kwargs.pop("target_audience", "Grade 7"),
        questions=questions,
        **kwargs,
    )


@pytest.fixture
def tick_source() -> FakeTickSource:
    return FakeTickSource()


@pytest.fixture
def geolocation() -> FakeGeolocation:
    return FakeGeolocation()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def exam() -> Exam:
    """Published exam: a 2-point direct question (tolerance 0) and a 1-point multiple-choice one."""
    return make_exam([make_direct(points=2, tolerance=0), make_mcq()])
