"""FastAPI server that exposes exam and attempt endpoints to student clients."""

from __future__ import annotations

from datetime import datetime
from threading import Thread
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException, Request, Response
from pydantic import BaseModel, Field
import uvicorn

from exam_app.constants.about import APP_NAME, APP_VERSION
from exam_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from exam_app.core.exam_manager import ExamManager
from exam_app.core.models import AnswerRecord, Coordinates, Exam
from exam_app.core.serialization import (
    answer_record_from_raw,
    attempt_to_dict,
    exam_to_dict,
    parse_timestamp,
    statistics_to_dict,
)
from exam_app.core.services.attempt_store import AttemptNotFoundError
from exam_app.core.services.exam_repository import ExamNotFoundError, ExamNotPublishedError


class CoordinatesPayload(BaseModel):
    latitude: float
    longitude: float


class AnswerPayload(BaseModel):
    """One answer record; ``answer`` is free text or an option index."""

    question_id: str
    answer: Any = None
    time_expired: bool = False
    timestamp: datetime


class StartAttemptPayload(BaseModel):
    exam_id: str
    start_time: datetime
    coordinates: CoordinatesPayload


class SubmitAttemptPayload(BaseModel):
    """Payload schema for a finished (or abandoned) attempt."""

    exam_id: str
    start_time: datetime
    end_time: datetime | None = None
    coordinates: CoordinatesPayload
    answers: list[AnswerPayload] = Field(default_factory=list)
    score: int | None = None


def _get_exam_manager_dependency(exam_manager: ExamManager):
    def dependency() -> ExamManager:
        return exam_manager

    return dependency


def _to_coordinates(payload: CoordinatesPayload) -> Coordinates:
    try:
        return Coordinates(latitude=payload.latitude, longitude=payload.longitude)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _to_answer_records(exam: Exam, payloads: list[AnswerPayload]) -> list[AnswerRecord]:
    questions = {question.id: question for question in exam.questions}
    records: list[AnswerRecord] = []
    for item in payloads:
        try:
            records.append(
                answer_record_from_raw(
                    questions.get(item.question_id),
                    item.question_id,
                    item.answer,
                    item.time_expired,
                    parse_timestamp(item.timestamp),
                )
            )
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=f"Question {item.question_id}: {exc}") from exc
    return records


def _client_details(request: Request) -> tuple[str | None, str | None]:
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


def create_api_app(exam_manager: ExamManager) -> FastAPI:
    """Create a FastAPI application wired to the provided exam manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    exam_manager_dep = _get_exam_manager_dependency(exam_manager)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/exams")
    def list_exams(manager: ExamManager = Depends(exam_manager_dep)) -> list[dict[str, Any]]:
        return [exam_to_dict(exam, include_questions=False) for exam in manager.get_published_exams()]

    @app.get("/exams/{exam_id}")
    def get_exam(exam_id: str, manager: ExamManager = Depends(exam_manager_dep)) -> dict[str, Any]:
        try:
            exam = manager.get_published_exam(exam_id)
        except ExamNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ExamNotPublishedError as exc:
            raise HTTPException(status_code=403, detail=str(exc)) from exc
        # Grading fields are included; scoring happens on the student's machine.
        return exam_to_dict(exam)

    @app.post("/attempts/start", status_code=201)
    def start_attempt(
        payload: StartAttemptPayload,
        request: Request,
        student_id: str = Header(alias="X-Student-Id"),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> dict[str, Any]:
        ip_address, user_agent = _client_details(request)
        try:
            attempt = manager.start_attempt(
                payload.exam_id,
                student_id,
                parse_timestamp(payload.start_time),
                _to_coordinates(payload.coordinates),
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except ExamNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ExamNotPublishedError as exc:
            raise HTTPException(status_code=403, detail=str(exc)) from exc
        return attempt_to_dict(attempt)

    @app.post("/attempts")
    def submit_attempt(
        payload: SubmitAttemptPayload,
        request: Request,
        response: Response,
        student_id: str = Header(alias="X-Student-Id"),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> dict[str, Any]:
        try:
            exam = manager.get_exam(payload.exam_id)
        except ExamNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        answers = _to_answer_records(exam, payload.answers)
        ip_address, user_agent = _client_details(request)
        try:
            attempt, created = manager.submit_attempt(
                payload.exam_id,
                student_id,
                parse_timestamp(payload.start_time),
                parse_timestamp(payload.end_time),
                _to_coordinates(payload.coordinates),
                answers,
                payload.score,
                ip_address=ip_address,
                user_agent=user_agent,
            )
        except ExamNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except ExamNotPublishedError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        response.status_code = 201 if created else 200
        return attempt_to_dict(attempt)

    # Declared before /attempts/{attempt_id} so "student" is not taken as an id.
    @app.get("/attempts/student")
    def get_student_attempts(
        student_id: str = Header(alias="X-Student-Id"),
        manager: ExamManager = Depends(exam_manager_dep),
    ) -> list[dict[str, Any]]:
        return [attempt_to_dict(attempt) for attempt in manager.get_attempts_for_student(student_id)]

    @app.get("/attempts/{attempt_id}")
    def get_attempt(attempt_id: str, manager: ExamManager = Depends(exam_manager_dep)) -> dict[str, Any]:
        try:
            return attempt_to_dict(manager.get_attempt(attempt_id))
        except AttemptNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/exams/{exam_id}/attempts")
    def get_exam_attempts(exam_id: str, manager: ExamManager = Depends(exam_manager_dep)) -> list[dict[str, Any]]:
        try:
            attempts = manager.get_attempts_for_exam(exam_id)
        except ExamNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return [attempt_to_dict(attempt) for attempt in attempts]

    @app.get("/exams/{exam_id}/statistics")
    def get_exam_statistics(exam_id: str, manager: ExamManager = Depends(exam_manager_dep)) -> dict[str, Any]:
        try:
            statistics = manager.get_statistics(exam_id)
        except ExamNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return statistics_to_dict(statistics)

    return app


def start_api_server(
    exam_manager: ExamManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(exam_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="ExamApiServer", daemon=True)
    thread.start()
    return thread
