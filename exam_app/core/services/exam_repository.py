"""Service for managing the collection of exams and their publication state."""

from __future__ import annotations

from exam_app.core.models import Exam, ExamStatus, generate_exam_id


class ExamNotFoundError(LookupError):
    """Raised when no exam has the requested id."""


class ExamNotPublishedError(RuntimeError):
    """Raised when students try to reach an exam that is not published."""


class ExamRepository:
    """Stores exams keyed by id, preserving insertion order."""

    def __init__(self) -> None:
        self._exams: dict[str, Exam] = {}

    def add_exam(self, exam: Exam) -> Exam:
        """Store ``exam``; an empty id is replaced by a generated one."""
        if not exam.id:
            exam.id = generate_exam_id()
        if exam.id in self._exams:
            raise ValueError(f"An exam with id {exam.id} already exists.")
        self._exams[exam.id] = exam
        return exam

    def remove_exam(self, exam_id: str) -> None:
        self.get_exam(exam_id)
        del self._exams[exam_id]

    def get_exam(self, exam_id: str) -> Exam:
        exam = self._exams.get(exam_id)
        if exam is None:
            raise ExamNotFoundError(f"Exam {exam_id} not found.")
        return exam

    def get_published_exam(self, exam_id: str) -> Exam:
        exam = self.get_exam(exam_id)
        if not exam.is_published:
            raise ExamNotPublishedError(f"Exam {exam_id} is not published.")
        return exam

    def get_exams(self, status: ExamStatus | None = None) -> list[Exam]:
        exams = list(self._exams.values())
        if status is None:
            return exams
        return [exam for exam in exams if exam.status is status]

    def set_status(self, exam_id: str, status: ExamStatus) -> Exam:
        exam = self.get_exam(exam_id)
        if status is ExamStatus.PUBLISHED and not exam.questions:
            raise ValueError("An exam needs at least one question before it can be published.")
        exam.status = status
        return exam
