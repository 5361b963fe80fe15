from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from pathlib import Path

import pytest

from conftest import make_direct, make_exam, make_mcq
from exam_app.core.exam_manager import ExamManager
from exam_app.core.models import AnswerRecord, Coordinates, ExamStatus, OptionAnswer, TextAnswer
from exam_app.core.services.attempt_store import AttemptNotFoundError, AttemptStore
from exam_app.core.services.exam_repository import (
    ExamNotFoundError,
    ExamNotPublishedError,
    ExamRepository,
)

START = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)
HERE = Coordinates(59.91, 10.75)


def _answers():
    return [
        AnswerRecord("q1", TextAnswer("42"), False, START),
        AnswerRecord("q2", OptionAnswer(0), False, START),
    ]


# --- ExamRepository ---


def test_repository_generates_missing_ids_and_rejects_duplicates():
    repository = ExamRepository()
    exam = repository.add_exam(make_exam([make_direct()], id=""))
    assert exam.id.startswith("EX")
    with pytest.raises(ValueError):
        repository.add_exam(make_exam([make_direct()], id=exam.id))


def test_repository_published_lookup():
    repository = ExamRepository()
    repository.add_exam(make_exam([make_direct()], id="draft", status=ExamStatus.DRAFT))
    with pytest.raises(ExamNotPublishedError):
        repository.get_published_exam("draft")
    with pytest.raises(ExamNotFoundError):
        repository.get_published_exam("missing")

    repository.set_status("draft", ExamStatus.PUBLISHED)
    assert repository.get_published_exam("draft").is_published
    assert [exam.id for exam in repository.get_exams(ExamStatus.PUBLISHED)] == ["draft"]


def test_empty_exam_cannot_be_published():
    repository = ExamRepository()
    repository.add_exam(make_exam([], id="empty", status=ExamStatus.DRAFT))
    with pytest.raises(ValueError):
        repository.set_status("empty", ExamStatus.PUBLISHED)


# --- AttemptStore ---


def test_submission_completes_in_progress_attempt():
    store = AttemptStore()
    started = store.start_attempt("EX1", "s1", START, HERE, ip_address="10.0.0.5")
    assert store.start_attempt("EX1", "s1", START, HERE) is started

    end = START + timedelta(minutes=4)
    attempt, created = store.record_submission("EX1", "s1", START, end, HERE, _answers(), 67)

    assert not created
    assert attempt.id == started.id
    assert attempt.completed
    assert attempt.end_time == end
    assert attempt.duration_minutes == 4
    assert attempt.ip_address == "10.0.0.5"
    assert store.find_in_progress("EX1", "s1") is None


def test_submission_without_start_creates_attempt():
    store = AttemptStore()
    attempt, created = store.record_submission("EX1", "s1", START, START, HERE, _answers(), 50)
    assert created
    assert attempt.completed
    assert store.get_attempt(attempt.id) is attempt


def test_attempts_are_listed_newest_first():
    store = AttemptStore()
    older = store.start_attempt("EX1", "s1", START, HERE)
    newer = store.start_attempt("EX2", "s1", START + timedelta(hours=1), HERE)
    assert store.get_attempts_for_student("s1") == [newer, older]
    with pytest.raises(AttemptNotFoundError):
        store.get_attempt("nope")


# --- ExamManager ---


@pytest.fixture
def manager(exam) -> ExamManager:
    exam_manager = ExamManager()
    exam_manager.add_exam(exam)
    return exam_manager


def test_manager_rescores_and_logs_mismatch(manager, caplog):
    with caplog.at_level(logging.WARNING, logger="exam_app.core.exam_manager"):
        attempt, created = manager.submit_attempt(
            "EX1", "s1", START, START + timedelta(minutes=2), HERE, _answers(), reported_score=100
        )

    assert created
    assert attempt.score == 67
    assert "reported score 100" in caplog.text


def test_manager_rejects_unpublished_submission(manager):
    manager.set_exam_status("EX1", ExamStatus.DRAFT)
    with pytest.raises(ExamNotPublishedError):
        manager.submit_attempt("EX1", "s1", START, START, HERE, _answers())
    with pytest.raises(ExamNotPublishedError):
        manager.start_attempt("EX1", "s1", START, HERE)


def test_manager_statistics_include_in_progress_attempts(manager):
    manager.start_attempt("EX1", "s1", START, HERE)
    manager.start_attempt("EX1", "s2", START, HERE)
    manager.submit_attempt("EX1", "s1", START, START + timedelta(minutes=3), HERE, _answers())

    statistics = manager.get_statistics("EX1")

    assert statistics.total_attempts == 1
    assert statistics.completion_rate == 50
    assert statistics.average_score == 67


def test_removing_exam_discards_attempts(manager):
    manager.start_attempt("EX1", "s1", START, HERE)
    manager.remove_exam("EX1")
    assert manager.get_attempts_for_student("s1") == []
    with pytest.raises(ExamNotFoundError):
        manager.get_exam("EX1")


def test_import_directory_skips_broken_files(tmp_path: Path, caplog):
    (tmp_path / "good.txt").write_text(
        "ID: GOOD\nTITLE: Good\nAUDIENCE: Everyone\nDURATION: 5\n\nQ: 1 + 1?\nANSWER: 2\n",
        encoding="utf-8",
    )
    (tmp_path / "bad.txt").write_text("TITLE: Bad\n", encoding="utf-8")

    manager = ExamManager()
    with caplog.at_level(logging.WARNING):
        imported = manager.import_exam_directory(tmp_path)

    assert [exam.id for exam in imported] == ["GOOD"]
    assert "bad.txt" in caplog.text


def test_import_missing_directory_is_empty(tmp_path: Path):
    assert ExamManager().import_exam_directory(tmp_path / "missing") == []


def test_published_exams_only(manager):
    manager.add_exam(make_exam([make_mcq()], id="EX2", status=ExamStatus.DRAFT))
    assert [exam.id for exam in manager.get_published_exams()] == ["EX1"]
    assert len(manager.get_exams()) == 2
