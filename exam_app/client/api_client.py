"""HTTP client the student application uses to reach the exam server."""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import requests

from exam_app.constants.network_constants import REQUEST_TIMEOUT_SECONDS, STUDENT_ID_HEADER
from exam_app.core.models import AttemptSession, AttemptSubmission, AttemptSummary, Exam, ExamSummary
from exam_app.core.serialization import (
    attempt_summary_from_dict,
    coordinates_to_dict,
    exam_from_dict,
    exam_summary_from_dict,
    format_timestamp,
    submission_to_dict,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExamLoadError(Exception):
    """Raised when an exam cannot be fetched before an attempt starts."""


class SubmissionError(Exception):
    """Raised when the server does not acknowledge a submitted attempt."""


def _error_detail(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason
    if isinstance(payload, dict) and payload.get("detail"):
        return str(payload["detail"])
    return response.reason


class ExamApiClient:
    """Thin wrapper over a ``requests.Session`` bound to one server and student."""

    def __init__(
        self,
        base_url: str,
        student_id: str,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers[STUDENT_ID_HEADER] = student_id

    @property
    def base_url(self) -> str:
        return self._base_url

    def fetch_exam(self, exam_id: str) -> Exam:
        try:
            response = self._session.get(f"{self._base_url}/exams/{exam_id}", timeout=self._timeout)
        except requests.RequestException as exc:
            raise ExamLoadError(f"Could not reach the exam server: {exc}") from exc
        if not response.ok:
            raise ExamLoadError(_error_detail(response))
        try:
            return exam_from_dict(response.json())
        except (KeyError, ValueError) as exc:
            raise ExamLoadError(f"The server returned an invalid exam: {exc}") from exc

    def list_exams(self) -> list[ExamSummary]:
        """Published exams the student can take."""
        return self._get_list("/exams", exam_summary_from_dict, "list exams")

    def fetch_student_attempts(self) -> list[AttemptSummary]:
        """The calling student's attempts, newest first."""
        return self._get_list("/attempts/student", attempt_summary_from_dict, "load your attempts")

    def start_attempt(self, session: AttemptSession) -> str:
        """Register the in-progress attempt and return its server id."""
        payload = {
            "exam_id": session.exam_id,
            "start_time": format_timestamp(session.start_time),
            "coordinates": coordinates_to_dict(session.coordinates),
        }
        try:
            response = self._session.post(f"{self._base_url}/attempts/start", json=payload, timeout=self._timeout)
        except requests.RequestException as exc:
            raise SubmissionError(f"Could not register the attempt: {exc}") from exc
        if not response.ok:
            raise SubmissionError(_error_detail(response))
        return response.json()["id"]

    def submit_attempt(self, submission: AttemptSubmission) -> dict[str, Any]:
        try:
            response = self._session.post(
                f"{self._base_url}/attempts",
                json=submission_to_dict(submission),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise SubmissionError(f"Could not reach the exam server: {exc}") from exc
        if not response.ok:
            raise SubmissionError(_error_detail(response))
        return response.json()

    def _get_list(self, path: str, convert: Callable[[dict[str, Any]], T], action: str) -> list[T]:
        try:
            response = self._session.get(f"{self._base_url}{path}", timeout=self._timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ExamLoadError(f"Could not {action}: {exc}") from exc
        try:
            return [convert(item) for item in response.json()]
        except (KeyError, TypeError, ValueError) as exc:
            raise ExamLoadError(f"The server returned an invalid response: {exc}") from exc


class ApiSubmissionSink:
    """Submission sink that posts the attempt synchronously and reports the outcome."""

    def __init__(self, client: ExamApiClient) -> None:
        self._client = client

    def submit(
        self,
        submission: AttemptSubmission,
        on_done: Callable[[Exception | None], None],
    ) -> None:
        try:
            acknowledgement = self._client.submit_attempt(submission)
        except SubmissionError as exc:
            on_done(exc)
            return
        logger.info("Attempt acknowledged by server: %s", acknowledgement.get("id"))
        on_done(None)
