from __future__ import annotations

from datetime import datetime, timezone

from fastapi.testclient import TestClient
import pytest

from conftest import make_direct, make_exam
from exam_app.core.exam_manager import ExamManager
from exam_app.core.models import ExamStatus
from exam_app.core.serialization import attempt_summary_from_dict, exam_summary_from_dict
from exam_app.core.services.attempt_history import summarize_attempt_history
from exam_app.server.api_server import create_api_app

STUDENT = {"X-Student-Id": "student-1"}
COORDINATES = {"latitude": 59.91, "longitude": 10.75}


@pytest.fixture
def manager(exam) -> ExamManager:
    exam_manager = ExamManager()
    exam_manager.add_exam(exam)
    exam_manager.add_exam(make_exam([make_direct()], id="DRAFT", status=ExamStatus.DRAFT))
    return exam_manager


@pytest.fixture
def client(manager) -> TestClient:
    return TestClient(create_api_app(manager))


def _submission(**overrides):
    payload = {
        "exam_id": "EX1",
        "start_time": "2025-03-01T09:00:00Z",
        "end_time": "2025-03-01T09:04:00Z",
        "coordinates": COORDINATES,
        "answers": [
            {"question_id": "q1", "answer": "42", "time_expired": False, "timestamp": "2025-03-01T09:01:00Z"},
            {"question_id": "q2", "answer": None, "time_expired": True, "timestamp": "2025-03-01T09:02:00Z"},
        ],
        "score": 67,
    }
    payload.update(overrides)
    return payload


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_lists_published_exams_only(client):
    exams = client.get("/exams").json()
    assert [exam["id"] for exam in exams] == ["EX1"]
    assert "questions" not in exams[0]
    assert exams[0]["question_count"] == 2


def test_get_exam_includes_questions(client):
    response = client.get("/exams/EX1")
    assert response.status_code == 200
    body = response.json()
    assert [question["id"] for question in body["questions"]] == ["q1", "q2"]
    assert body["questions"][1]["options"] == ["4", "5", "7"]


def test_get_exam_errors(client):
    assert client.get("/exams/missing").status_code == 404
    assert client.get("/exams/DRAFT").status_code == 403


def test_start_then_submit_completes_same_attempt(client):
    started = client.post(
        "/attempts/start",
        json={"exam_id": "EX1", "start_time": "2025-03-01T09:00:00Z", "coordinates": COORDINATES},
        headers=STUDENT,
    )
    assert started.status_code == 201
    assert started.json()["completed"] is False

    submitted = client.post("/attempts", json=_submission(), headers=STUDENT)

    assert submitted.status_code == 200
    body = submitted.json()
    assert body["id"] == started.json()["id"]
    assert body["completed"] is True
    assert body["score"] == 67
    assert body["timeout_count"] == 1
    assert body["duration_minutes"] == 4


def test_submit_without_start_creates_attempt(client):
    response = client.post("/attempts", json=_submission(), headers=STUDENT)
    assert response.status_code == 201
    attempt_id = response.json()["id"]

    assert client.get(f"/attempts/{attempt_id}").json()["student_id"] == "student-1"
    assert [a["id"] for a in client.get("/attempts/student", headers=STUDENT).json()] == [attempt_id]
    assert [a["id"] for a in client.get("/exams/EX1/attempts").json()] == [attempt_id]


def test_server_stores_its_own_score(client):
    response = client.post("/attempts", json=_submission(score=100), headers=STUDENT)
    assert response.json()["score"] == 67


def test_submit_errors(client):
    assert client.post("/attempts", json=_submission(exam_id="missing"), headers=STUDENT).status_code == 404
    assert client.post("/attempts", json=_submission(exam_id="DRAFT"), headers=STUDENT).status_code == 400
    assert client.post("/attempts", json=_submission(), headers={}).status_code == 422

    bad_answer = _submission(
        answers=[{"question_id": "q2", "answer": 9, "time_expired": False, "timestamp": "2025-03-01T09:01:00Z"}]
    )
    assert client.post("/attempts", json=bad_answer, headers=STUDENT).status_code == 422

    bad_location = _submission(coordinates={"latitude": 120, "longitude": 0})
    assert client.post("/attempts", json=bad_location, headers=STUDENT).status_code == 422

    missing_field = _submission()
    del missing_field["start_time"]
    assert client.post("/attempts", json=missing_field, headers=STUDENT).status_code == 422


def test_unknown_attempt_is_404(client):
    assert client.get("/attempts/nope").status_code == 404


def test_statistics_endpoint(client):
    client.post("/attempts/start", json=_submission(), headers={"X-Student-Id": "student-2"})
    client.post("/attempts", json=_submission(), headers=STUDENT)

    response = client.get("/exams/EX1/statistics")

    assert response.status_code == 200
    body = response.json()
    assert body["total_attempts"] == 1
    assert body["completion_rate"] == 50
    assert body["question_stats"]["q1"]["correct_count"] == 1
    assert body["question_stats"]["q2"]["timeout_count"] == 1
    assert client.get("/exams/missing/statistics").status_code == 404


def test_student_listings_feed_the_dashboard_history(client):
    client.post("/attempts", json=_submission(), headers=STUDENT)
    client.post("/attempts/start", json=_submission(start_time="2025-03-02T10:00:00Z"), headers=STUDENT)

    exams = [exam_summary_from_dict(item) for item in client.get("/exams").json()]
    attempts = [attempt_summary_from_dict(item) for item in client.get("/attempts/student", headers=STUDENT).json()]
    (entry,) = summarize_attempt_history(attempts, {exam.id: exam.title for exam in exams})

    assert entry.title == "Arithmetic"
    assert entry.attempt_count == 2
    assert entry.best_score == 67
    assert entry.last_score == 0
    assert entry.last_attempt_at == datetime(2025, 3, 2, 10, 0, tzinfo=timezone.utc)
