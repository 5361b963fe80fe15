"""Business logic shared between the teacher console and the API server."""

from __future__ import annotations

from datetime import datetime
import logging
from pathlib import Path
from threading import Lock

from exam_app.core.exam_importer import ExamImportError, load_exam_from_file
from exam_app.core.grading import score_attempt
from exam_app.core.models import (
    AnswerRecord,
    AttemptRecord,
    Coordinates,
    Exam,
    ExamStatistics,
    ExamStatus,
)
from exam_app.core.services.attempt_store import AttemptStore
from exam_app.core.services.exam_repository import ExamNotPublishedError, ExamRepository
from exam_app.core.services.statistics import aggregate_exam_statistics

logger = logging.getLogger(__name__)


class ExamManager:
    """Facade for exam services: Repository, AttemptStore and statistics.

    The teacher UI and the FastAPI worker thread both call into this object, so
    every public method holds the lock.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._repository = ExamRepository()
        self._attempts = AttemptStore()

    # --- Exam Repository Delegation ---

    def add_exam(self, exam: Exam) -> Exam:
        with self._lock:
            return self._repository.add_exam(exam)

    def import_exam(self, file_path: Path) -> Exam:
        exam = load_exam_from_file(file_path)
        with self._lock:
            added = self._repository.add_exam(exam)
        logger.info("Imported exam %s (%d questions) from %s", added.id, added.question_count, file_path)
        return added

    def import_exam_directory(self, directory: Path) -> list[Exam]:
        """Import every ``*.txt`` exam in ``directory``; broken files are logged and skipped."""
        imported: list[Exam] = []
        if not directory.is_dir():
            return imported
        for file_path in sorted(directory.glob("*.txt")):
            try:
                imported.append(self.import_exam(file_path))
            except (OSError, ExamImportError, ValueError) as exc:
                logger.warning("Skipping exam file %s: %s", file_path, exc)
        return imported

    def get_exams(self) -> list[Exam]:
        with self._lock:
            return self._repository.get_exams()

    def get_published_exams(self) -> list[Exam]:
        with self._lock:
            return self._repository.get_exams(ExamStatus.PUBLISHED)

    def get_exam(self, exam_id: str) -> Exam:
        with self._lock:
            return self._repository.get_exam(exam_id)

    def get_published_exam(self, exam_id: str) -> Exam:
        with self._lock:
            return self._repository.get_published_exam(exam_id)

    def set_exam_status(self, exam_id: str, status: ExamStatus) -> Exam:
        with self._lock:
            exam = self._repository.set_status(exam_id, status)
        logger.info("Exam %s is now %s", exam_id, status.value)
        return exam

    def remove_exam(self, exam_id: str) -> None:
        with self._lock:
            self._repository.remove_exam(exam_id)
            self._attempts.remove_attempts_for_exam(exam_id)

    # --- Attempt Delegation ---

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
        with self._lock:
            self._repository.get_published_exam(exam_id)
            return self._attempts.start_attempt(
                exam_id,
                student_id,
                start_time,
                coordinates,
                ip_address=ip_address,
                user_agent=user_agent,
            )

    def submit_attempt(
        self,
        exam_id: str,
        student_id: str,
        start_time: datetime,
        end_time: datetime | None,
        coordinates: Coordinates,
        answers: list[AnswerRecord],
        reported_score: int | None = None,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[AttemptRecord, bool]:
        """Persist a submitted attempt, re-scoring it against the stored exam.

        Returns the stored attempt and whether a new record was created.
        """
        with self._lock:
            exam = self._repository.get_exam(exam_id)
            if not exam.is_published:
                raise ExamNotPublishedError("Cannot submit attempt for an unpublished exam.")
            score = score_attempt(exam.questions, answers).percentage
            if reported_score is not None and reported_score != score:
                logger.warning(
                    "Client reported score %s for exam %s but answers grade to %s",
                    reported_score,
                    exam_id,
                    score,
                )
            return self._attempts.record_submission(
                exam_id,
                student_id,
                start_time,
                end_time,
                coordinates,
                answers,
                score,
                ip_address=ip_address,
                user_agent=user_agent,
            )

    def get_attempt(self, attempt_id: str) -> AttemptRecord:
        with self._lock:
            return self._attempts.get_attempt(attempt_id)

    def get_attempts_for_exam(self, exam_id: str) -> list[AttemptRecord]:
        with self._lock:
            self._repository.get_exam(exam_id)
            return self._attempts.get_attempts_for_exam(exam_id)

    def get_attempts_for_student(self, student_id: str) -> list[AttemptRecord]:
        with self._lock:
            return self._attempts.get_attempts_for_student(student_id)

    # --- Statistics ---

    def get_statistics(self, exam_id: str) -> ExamStatistics:
        with self._lock:
            exam = self._repository.get_exam(exam_id)
            attempts = self._attempts.get_attempts_for_exam(exam_id)
            return aggregate_exam_statistics(exam, attempts)
