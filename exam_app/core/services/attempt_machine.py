"""State machine driving one timed exam attempt.

Architecture note:
    The machine owns its tick source and both countdown handles; nothing else
    holds a reference to them. Every tick advances the exam timer before the
    question timer, so an expiring exam clock cancels the question timer before
    it can fire and the attempt completes exactly once. An answer submission
    cancels the question timer before the answer is converted; a rejected
    answer restores the same timer, remaining time intact. Everything runs on one
    thread (the Qt event loop in the student client), so no locking is needed.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum, auto
import logging
from typing import Callable, Protocol

from exam_app.core.grading import score_attempt
from exam_app.core.models import (
    AnswerRecord,
    AttemptSession,
    AttemptSubmission,
    Coordinates,
    Exam,
    Question,
    ScoreResult,
    answer_from_raw,
    utc_now,
)
from exam_app.core.services.countdown import CountdownTimer, TickSource
from exam_app.core.services.geolocation import GeolocationError, GeolocationProvider

logger = logging.getLogger(__name__)


class AttemptState(Enum):
    INTRO = auto()
    LOCATION_CONSENT = auto()
    AWAITING_ANSWER = auto()
    COMPLETED = auto()


class SubmissionStatus(Enum):
    NOT_SUBMITTED = auto()
    PENDING = auto()
    SUBMITTED = auto()
    FAILED = auto()


class InvalidTransitionError(RuntimeError):
    """Raised when an action is not allowed in the current attempt state."""


class SubmissionSink(Protocol):
    """Persists a finished attempt; reports the outcome through ``on_done``."""

    def submit(
        self,
        submission: AttemptSubmission,
        on_done: Callable[[Exception | None], None],
    ) -> None:
        ...


class AttemptStateMachine:
    """Runs intro, location consent, the timed question loop and completion."""

    def __init__(
        self,
        exam: Exam,
        tick_source: TickSource,
        geolocation: GeolocationProvider,
        submission_sink: SubmissionSink,
        *,
        student_id: str | None = None,
        clock: Callable[[], datetime] = utc_now,
        on_state_changed: Callable[[AttemptState], None] | None = None,
        on_tick: Callable[[int, int | None], None] | None = None,
        on_started: Callable[[AttemptSession], None] | None = None,
        on_completed: Callable[[ScoreResult], None] | None = None,
        on_submission_finished: Callable[[SubmissionStatus], None] | None = None,
    ) -> None:
        self._exam = exam
        self._questions: list[Question] = list(exam.questions)
        self._tick_source = tick_source
        self._geolocation = geolocation
        self._submission_sink = submission_sink
        self._student_id = student_id
        self._clock = clock

        self._on_state_changed = on_state_changed
        self._on_tick = on_tick
        self._on_started = on_started
        self._on_completed = on_completed
        self._on_submission_finished = on_submission_finished

        self._state = AttemptState.INTRO
        self._session: AttemptSession | None = None
        self._exam_timer: CountdownTimer | None = None
        self._question_timer: CountdownTimer | None = None
        self._location_pending = False
        self._consent_error: str | None = None
        self._result: ScoreResult | None = None
        self._submission_status = SubmissionStatus.NOT_SUBMITTED
        self._submission_error: str | None = None

    # --- Read-only views ---

    @property
    def exam(self) -> Exam:
        return self._exam

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def session(self) -> AttemptSession | None:
        return self._session

    @property
    def consent_error(self) -> str | None:
        return self._consent_error

    @property
    def is_location_pending(self) -> bool:
        return self._location_pending

    @property
    def result(self) -> ScoreResult | None:
        return self._result

    @property
    def submission_status(self) -> SubmissionStatus:
        return self._submission_status

    @property
    def submission_error(self) -> str | None:
        return self._submission_error

    @property
    def current_question(self) -> Question | None:
        if self._state is not AttemptState.AWAITING_ANSWER or self._session is None:
            return None
        return self._questions[self._session.current_question_index]

    @property
    def exam_time_remaining(self) -> int | None:
        return self._exam_timer.remaining if self._exam_timer is not None else None

    @property
    def question_time_remaining(self) -> int | None:
        return self._question_timer.remaining if self._question_timer is not None else None

    # --- Transitions ---

    def begin(self) -> None:
        """Leave the intro screen and wait for location consent."""
        self._require_state(AttemptState.INTRO, "begin")
        self._set_state(AttemptState.LOCATION_CONSENT)

    def request_location(self) -> None:
        """Ask the geolocation provider for a fix; may be called again after a failure."""
        self._require_state(AttemptState.LOCATION_CONSENT, "request location")
        if self._location_pending:
            return
        self._location_pending = True
        self._consent_error = None
        self._geolocation.request_position(self._handle_position, self._handle_location_error)

    def submit_answer(self, raw_answer: object) -> None:
        """Record the student's answer for the active question and move on."""
        self._require_state(AttemptState.AWAITING_ANSWER, "submit an answer")
        question = self.current_question
        timer = self._question_timer
        self._cancel_question_timer()
        try:
            answer = answer_from_raw(question, raw_answer)
        except ValueError:
            # Rejected answer: the question keeps its original deadline.
            if timer is not None:
                timer.resume()
                self._question_timer = timer
            raise
        record = AnswerRecord(
            question_id=question.id,
            answer=answer,
            time_expired=False,
            timestamp=self._clock(),
        )
        self._advance(record)

    # --- Geolocation callbacks ---

    def _handle_position(self, coordinates: Coordinates) -> None:
        self._location_pending = False
        if self._state is not AttemptState.LOCATION_CONSENT:
            logger.debug("Ignoring position fix received in state %s", self._state.name)
            return

        total_seconds = self._exam.duration_minutes * 60
        self._session = AttemptSession(
            exam_id=self._exam.id,
            student_id=self._student_id,
            start_time=self._clock(),
            coordinates=coordinates,
            time_remaining=total_seconds,
        )
        logger.info("Attempt started for exam %s", self._exam.id)
        if self._on_started is not None:
            self._on_started(self._session)

        if not self._questions:
            self._complete()
            return

        self._exam_timer = CountdownTimer(total_seconds, self._handle_exam_timeout, self._sync_time_remaining)
        self._tick_source.start(self._handle_tick)
        self._enter_question(0)

    def _handle_location_error(self, error: GeolocationError) -> None:
        self._location_pending = False
        if self._state is not AttemptState.LOCATION_CONSENT:
            return
        logger.warning("Location request failed: %s", error)
        self._consent_error = str(error)
        self._notify_state()

    # --- Timer callbacks ---

    def _handle_tick(self) -> None:
        if self._exam_timer is not None:
            self._exam_timer.tick()
        if self._state is AttemptState.COMPLETED:
            return
        if self._question_timer is not None:
            self._question_timer.tick()
        if self._state is AttemptState.AWAITING_ANSWER and self._on_tick is not None:
            self._on_tick(self.exam_time_remaining or 0, self.question_time_remaining)

    def _sync_time_remaining(self, remaining: int) -> None:
        if self._session is not None:
            self._session.time_remaining = remaining

    def _handle_question_timeout(self) -> None:
        self._question_timer = None
        question = self.current_question
        logger.info("Question %s timed out", question.id)
        self._advance(AnswerRecord.timed_out(question.id, self._clock()))

    def _handle_exam_timeout(self) -> None:
        self._cancel_question_timer()
        question = self.current_question
        logger.info("Exam time expired for exam %s", self._exam.id)
        if question is not None:
            self._session.answers.append(AnswerRecord.timed_out(question.id, self._clock()))
        self._complete()

    # --- Internal steps ---

    def _advance(self, record: AnswerRecord) -> None:
        session = self._session
        session.answers.append(record)
        session.current_question_index += 1
        if session.current_question_index >= len(self._questions):
            self._complete()
        else:
            self._enter_question(session.current_question_index)

    def _enter_question(self, index: int) -> None:
        question = self._questions[index]
        self._question_timer = CountdownTimer(question.time_limit_seconds, self._handle_question_timeout)
        self._set_state(AttemptState.AWAITING_ANSWER)

    def _cancel_question_timer(self) -> None:
        if self._question_timer is not None:
            self._question_timer.cancel()
            self._question_timer = None

    def _complete(self) -> None:
        self._tick_source.stop()
        self._cancel_question_timer()
        if self._exam_timer is not None:
            self._exam_timer.cancel()

        session = self._session
        session.end_time = self._clock()
        self._result = score_attempt(self._questions, session.answers)
        self._set_state(AttemptState.COMPLETED)
        logger.info(
            "Attempt completed for exam %s: %s/%s (%s%%)",
            self._exam.id,
            self._result.total_score,
            self._result.max_possible_score,
            self._result.percentage,
        )
        if self._on_completed is not None:
            self._on_completed(self._result)

        submission = AttemptSubmission(
            exam_id=session.exam_id,
            start_time=session.start_time,
            end_time=session.end_time,
            coordinates=session.coordinates,
            answers=tuple(session.answers),
            score=self._result.percentage,
        )
        self._submission_status = SubmissionStatus.PENDING
        self._submission_sink.submit(submission, self._handle_submission_done)

    def _handle_submission_done(self, error: Exception | None) -> None:
        if error is None:
            self._submission_status = SubmissionStatus.SUBMITTED
            self._submission_error = None
        else:
            logger.warning("Submitting attempt for exam %s failed: %s", self._exam.id, error)
            self._submission_status = SubmissionStatus.FAILED
            self._submission_error = str(error)
        if self._on_submission_finished is not None:
            self._on_submission_finished(self._submission_status)

    def _require_state(self, expected: AttemptState, action: str) -> None:
        if self._state is not expected:
            raise InvalidTransitionError(f"Cannot {action} while in state {self._state.name}.")

    def _set_state(self, state: AttemptState) -> None:
        self._state = state
        self._notify_state()

    def _notify_state(self) -> None:
        if self._on_state_changed is not None:
            self._on_state_changed(self._state)
