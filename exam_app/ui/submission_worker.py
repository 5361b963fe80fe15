"""Runs blocking API calls off the GUI thread and reports back through Qt signals."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
import logging
from typing import Callable

from PySide6.QtCore import QObject, Signal

from exam_app.client.api_client import ApiSubmissionSink, ExamApiClient, SubmissionError
from exam_app.core.models import AttemptSession, AttemptSubmission

logger = logging.getLogger(__name__)


class ThreadedSubmissionSink(QObject):
    """Submission sink whose network calls run on a single worker thread.

    Calls reach the server in the order they were made, so an attempt is always
    registered before it is submitted. ``on_done`` runs on the thread that owns
    this object (the GUI thread); the worker only emits a signal.
    """

    submission_finished = Signal(object, object)

    def __init__(self, client: ExamApiClient, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._client = client
        self._sink = ApiSubmissionSink(client)
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="ExamApi")
        self.submission_finished.connect(self._deliver)

    def submit(
        self,
        submission: AttemptSubmission,
        on_done: Callable[[Exception | None], None],
    ) -> None:
        self._executor.submit(self._run, submission, on_done)

    def register_attempt(self, session: AttemptSession) -> None:
        """Tell the server an attempt is in progress; failures are only logged."""
        self._executor.submit(self._register, session)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)

    def _run(self, submission: AttemptSubmission, on_done: Callable[[Exception | None], None]) -> None:
        self._sink.submit(submission, lambda error: self.submission_finished.emit(on_done, error))

    def _register(self, session: AttemptSession) -> None:
        try:
            attempt_id = self._client.start_attempt(session)
        except SubmissionError as exc:
            logger.warning("Could not register attempt for exam %s: %s", session.exam_id, exc)
            return
        logger.info("Registered attempt %s for exam %s", attempt_id, session.exam_id)

    def _deliver(self, on_done: Callable[[Exception | None], None], error: Exception | None) -> None:
        on_done(error)
