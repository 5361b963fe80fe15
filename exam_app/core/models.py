"""Domain models for the exam application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import random
import string
import time

from exam_app.constants.exam_constants import (
    DEFAULT_POINTS,
    DEFAULT_TIME_LIMIT_SECONDS,
    DEFAULT_TOLERANCE_PERCENT,
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    MIN_MCQ_OPTIONS,
    MIN_TIME_LIMIT_SECONDS,
)


class QuestionValidationError(ValueError):
    """Raised when a question's fields do not match its type."""


class QuestionType(str, Enum):
    DIRECT = "direct"
    MULTIPLE_CHOICE = "mcq"


class AttachmentKind(str, Enum):
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"


class ExamStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    COMPLETED = "completed"
    ARCHIVED = "archived"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_exam_id() -> str:
    """Return an id of the form ``EX<millis><6 random chars>``."""
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=6))
    return f"EX{int(time.time() * 1000)}{suffix}"


@dataclass(slots=True, frozen=True)
class Attachment:
    """Media reference shown alongside a question; never graded."""

    kind: AttachmentKind
    filename: str
    url: str


@dataclass(slots=True)
class Question:
    """Timed exam question, either direct-answer or multiple-choice.

    Direct questions carry ``correct_answer`` and ``tolerance``; multiple-choice
    questions carry ``options`` and ``correct_options``. Supplying the fields of
    the other variant is a construction error.
    """

    id: str
    text: str
    type: QuestionType
    points: int = DEFAULT_POINTS
    time_limit_seconds: int = DEFAULT_TIME_LIMIT_SECONDS
    attachment: Attachment | None = None
    correct_answer: str | None = None
    tolerance: float | None = None
    options: list[str] | None = None
    correct_options: list[int] | None = None

    def __post_init__(self) -> None:
        self.type = QuestionType(self.type)
        if not self.text.strip():
            raise QuestionValidationError("Question text must not be empty.")
        if not isinstance(self.points, int) or self.points < 1:
            raise QuestionValidationError("Points must be a positive integer.")
        if not isinstance(self.time_limit_seconds, int) or self.time_limit_seconds < MIN_TIME_LIMIT_SECONDS:
            raise QuestionValidationError(
                f"Time limit must be an integer of at least {MIN_TIME_LIMIT_SECONDS} seconds."
            )
        if self.type is QuestionType.DIRECT:
            self._validate_direct()
        else:
            self._validate_multiple_choice()

    def _validate_direct(self) -> None:
        if self.options is not None or self.correct_options is not None:
            raise QuestionValidationError("Direct questions cannot define options.")
        if self.correct_answer is None or not self.correct_answer.strip():
            raise QuestionValidationError("Direct questions must have a correct answer.")
        if self.tolerance is None:
            self.tolerance = DEFAULT_TOLERANCE_PERCENT
        if not 0 <= self.tolerance <= 100:
            raise QuestionValidationError("Tolerance must be between 0 and 100 percent.")

    def _validate_multiple_choice(self) -> None:
        if self.correct_answer is not None or self.tolerance is not None:
            raise QuestionValidationError("Multiple-choice questions cannot define a direct answer.")
        if self.options is None or len(self.options) < MIN_MCQ_OPTIONS:
            raise QuestionValidationError(
                f"Multiple-choice questions must have at least {MIN_MCQ_OPTIONS} options."
            )
        if any(not option.strip() for option in self.options):
            raise QuestionValidationError("Option text cannot be empty.")
        if not self.correct_options:
            raise QuestionValidationError("Multiple-choice questions must have at least 1 correct option.")
        for index in self.correct_options:
            if not 0 <= index < len(self.options):
                raise QuestionValidationError(f"Invalid correct option index: {index}.")

    @property
    def is_direct(self) -> bool:
        return self.type is QuestionType.DIRECT


@dataclass(slots=True)
class Exam:
    """An exam and its ordered questions."""

    id: str
    title: str
    target_audience: str
    duration_minutes: int
    questions: list[Question] = field(default_factory=list)
    description: str = ""
    status: ExamStatus = ExamStatus.DRAFT
    scheduled_at: datetime | None = None

    def __post_init__(self) -> None:
        self.status = ExamStatus(self.status)
        if not self.title.strip():
            raise ValueError("Exam title must not be empty.")
        if not self.target_audience.strip():
            raise ValueError("Exam target audience must not be empty.")
        if not MIN_DURATION_MINUTES <= self.duration_minutes <= MAX_DURATION_MINUTES:
            raise ValueError(
                f"Exam duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes."
            )
        question_ids = [question.id for question in self.questions]
        if len(set(question_ids)) != len(question_ids):
            raise ValueError("Question ids must be unique within an exam.")

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def total_points(self) -> int:
        return sum(question.points for question in self.questions)

    @property
    def is_published(self) -> bool:
        return self.status is ExamStatus.PUBLISHED


@dataclass(slots=True, frozen=True)
class TextAnswer:
    """Answer to a direct question."""

    value: str


@dataclass(slots=True, frozen=True)
class OptionAnswer:
    """Answer to a multiple-choice question: index of the selected option."""

    index: int


Answer = TextAnswer | OptionAnswer


def answer_from_raw(question: Question, raw: object) -> Answer | None:
    """Convert a raw submitted value into the answer variant for ``question``.

    Direct questions take a string, which is trimmed. Multiple-choice questions
    take an option index or ``None`` when nothing was selected.
    """
    if question.type is QuestionType.DIRECT:
        if raw is None:
            return None
        if not isinstance(raw, str):
            raise ValueError("Direct questions expect a text answer.")
        return TextAnswer(raw.strip())

    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError("Multiple-choice questions expect an option index.")
    if not 0 <= raw < len(question.options or []):
        raise ValueError(f"Option index {raw} is out of range.")
    return OptionAnswer(raw)


def raw_answer_from_input(question: Question, text: str, selected_index: int | None) -> str | int | None:
    """Raw answer as read from the answer widgets.

    Direct questions always yield the trimmed text, so a blank box is recorded
    as an empty answer rather than no answer.
    """
    if question.type is QuestionType.DIRECT:
        return text.strip()
    if selected_index is None or selected_index < 0:
        return None
    return selected_index


def answer_to_raw(answer: Answer | None) -> str | int | None:
    if answer is None:
        return None
    if isinstance(answer, TextAnswer):
        return answer.value
    return answer.index


@dataclass(slots=True, frozen=True)
class AnswerRecord:
    """One entry in an attempt's answer log; appended once per visited question."""

    question_id: str
    answer: Answer | None
    time_expired: bool
    timestamp: datetime

    @classmethod
    def timed_out(cls, question_id: str, timestamp: datetime) -> "AnswerRecord":
        return cls(question_id=question_id, answer=None, time_expired=True, timestamp=timestamp)


@dataclass(slots=True, frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise ValueError("Latitude must be between -90 and 90.")
        if not -180 <= self.longitude <= 180:
            raise ValueError("Longitude must be between -180 and 180.")


@dataclass(slots=True)
class AttemptSession:
    """Client-side state of one student's run through an exam."""

    exam_id: str
    student_id: str | None
    start_time: datetime
    coordinates: Coordinates
    time_remaining: int
    current_question_index: int = 0
    answers: list[AnswerRecord] = field(default_factory=list)
    end_time: datetime | None = None

    @property
    def is_finished(self) -> bool:
        return self.end_time is not None


@dataclass(slots=True, frozen=True)
class ScoreResult:
    total_score: int
    max_possible_score: int
    correct_answers: int
    incorrect_answers: int

    @property
    def percentage(self) -> int:
        if self.max_possible_score == 0:
            return 0
        return round(self.total_score / self.max_possible_score * 100)


@dataclass(slots=True, frozen=True)
class AttemptSubmission:
    """Immutable payload handed to the submission sink once an attempt completes."""

    exam_id: str
    start_time: datetime
    end_time: datetime
    coordinates: Coordinates
    answers: tuple[AnswerRecord, ...]
    score: int


@dataclass(slots=True)
class AttemptRecord:
    """Attempt as persisted by the server."""

    id: str
    exam_id: str
    student_id: str
    start_time: datetime
    coordinates: Coordinates
    answers: list[AnswerRecord] = field(default_factory=list)
    end_time: datetime | None = None
    score: int = 0
    completed: bool = False
    ip_address: str | None = None
    user_agent: str | None = None

    @property
    def duration_minutes(self) -> int | None:
        if self.end_time is None:
            return None
        return round((self.end_time - self.start_time).total_seconds() / 60)

    @property
    def answered_count(self) -> int:
        return sum(1 for record in self.answers if record.answer is not None)

    @property
    def timeout_count(self) -> int:
        return sum(1 for record in self.answers if record.time_expired)


@dataclass(slots=True, frozen=True)
class ExamSummary:
    """Published exam as listed to students, without its questions."""

    id: str
    title: str
    target_audience: str
    duration_minutes: int
    question_count: int
    total_points: int
    description: str = ""


@dataclass(slots=True, frozen=True)
class AttemptSummary:
    """One of the calling student's attempts as reported by the server."""

    id: str
    exam_id: str
    start_time: datetime
    end_time: datetime | None
    score: int
    completed: bool

    @property
    def last_activity(self) -> datetime:
        return self.end_time or self.start_time


@dataclass(slots=True)
class QuestionStats:
    question_number: int
    text: str
    type: QuestionType
    correct_count: int = 0
    incorrect_count: int = 0
    timeout_count: int = 0
    success_rate: float = 0.0


@dataclass(slots=True)
class ExamStatistics:
    total_attempts: int = 0
    average_score: float = 0.0
    highest_score: float = 0.0
    lowest_score: float = 0.0
    median_score: float = 0.0
    completion_rate: float = 0.0
    average_duration: float = 0.0
    question_stats: dict[str, QuestionStats] = field(default_factory=dict)
