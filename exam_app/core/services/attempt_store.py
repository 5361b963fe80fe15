"""Service for persisting exam attempts received from student clients."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from exam_app.core.models import AnswerRecord, AttemptRecord, Coordinates, utc_now


class AttemptNotFoundError(LookupError):
    """Raised when no attempt has the requested id."""


class AttemptStore:
    """Keeps attempts in memory; one in-progress attempt per student and exam."""

    def __init__(self) -> None:
        self._attempts: dict[str, AttemptRecord] = {}

    def start_attempt(
        self,
        exam_id: str,
        student_id: str,
        start_time: datetime,
        coordinates: Coordinates,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> AttemptRecord:
        """Register an in-progress attempt, reusing an existing one for the same student."""
        existing = self.find_in_progress(exam_id, student_id)
        if existing is not None:
            return existing
        attempt = AttemptRecord(
            id=uuid4().hex,
            exam_id=exam_id,
            student_id=student_id,
            start_time=start_time,
            coordinates=coordinates,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._attempts[attempt.id] = attempt
        return attempt

    def record_submission(
        self,
        exam_id: str,
        student_id: str,
        start_time: datetime,
        end_time: datetime | None,
        coordinates: Coordinates,
        answers: list[AnswerRecord],
        score: int,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[AttemptRecord, bool]:
        """Store a submitted attempt.

        Completes the student's in-progress attempt when there is one, otherwise
        creates a new record. Returns the attempt and whether it was created.
        """
        existing = self.find_in_progress(exam_id, student_id)
        if existing is not None:
            existing.end_time = end_time or utc_now()
            existing.answers = list(answers)
            existing.score = score
            existing.completed = True
            return existing, False

        attempt = AttemptRecord(
            id=uuid4().hex,
            exam_id=exam_id,
            student_id=student_id,
            start_time=start_time,
            end_time=end_time,
            coordinates=coordinates,
            answers=list(answers),
            score=score,
            completed=end_time is not None,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        self._attempts[attempt.id] = attempt
        return attempt, True

    def find_in_progress(self, exam_id: str, student_id: str) -> AttemptRecord | None:
        return next(
            (
                attempt
                for attempt in self._attempts.values()
                if attempt.exam_id == exam_id and attempt.student_id == student_id and attempt.end_time is None
            ),
            None,
        )

    def get_attempt(self, attempt_id: str) -> AttemptRecord:
        attempt = self._attempts.get(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(f"Attempt {attempt_id} not found.")
        return attempt

    def get_attempts_for_exam(self, exam_id: str) -> list[AttemptRecord]:
        attempts = [attempt for attempt in self._attempts.values() if attempt.exam_id == exam_id]
        return sorted(attempts, key=lambda a: a.start_time, reverse=True)

    def get_attempts_for_student(self, student_id: str) -> list[AttemptRecord]:
        attempts = [attempt for attempt in self._attempts.values() if attempt.student_id == student_id]
        return sorted(attempts, key=lambda a: a.start_time, reverse=True)

    def remove_attempts_for_exam(self, exam_id: str) -> None:
        for attempt_id in [a.id for a in self._attempts.values() if a.exam_id == exam_id]:
            del self._attempts[attempt_id]
