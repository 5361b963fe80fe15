"""Conversion between domain models and JSON-ready dictionaries.

The same shapes are produced by the API server and consumed by the student
client, so both sides go through these helpers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from exam_app.core.models import (
    AnswerRecord,
    Attachment,
    AttachmentKind,
    AttemptRecord,
    AttemptSubmission,
    AttemptSummary,
    Coordinates,
    Exam,
    ExamStatistics,
    ExamStatus,
    ExamSummary,
    Question,
    QuestionType,
    answer_from_raw,
    answer_to_raw,
)


def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def question_to_dict(question: Question) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": question.id,
        "text": question.text,
        "type": question.type.value,
        "points": question.points,
        "time_limit_seconds": question.time_limit_seconds,
        "attachment": None,
    }
    if question.attachment is not None:
        data["attachment"] = {
            "kind": question.attachment.kind.value,
            "filename": question.attachment.filename,
            "url": question.attachment.url,
        }
    if question.is_direct:
        data["correct_answer"] = question.correct_answer
        data["tolerance"] = question.tolerance
    else:
        data["options"] = list(question.options or [])
        data["correct_options"] = list(question.correct_options or [])
    return data


def question_from_dict(data: dict[str, Any]) -> Question:
    attachment_data = data.get("attachment")
    attachment = None
    if attachment_data:
        attachment = Attachment(
            kind=AttachmentKind(attachment_data["kind"]),
            filename=attachment_data["filename"],
            url=attachment_data["url"],
        )
    question_type = QuestionType(data["type"])
    common = dict(
        id=str(data["id"]),
        text=data["text"],
        type=question_type,
        points=data.get("points", 1),
        time_limit_seconds=data.get("time_limit_seconds", 60),
        attachment=attachment,
    )
    if question_type is QuestionType.DIRECT:
        return Question(**common, correct_answer=data.get("correct_answer"), tolerance=data.get("tolerance"))
    return Question(**common, options=data.get("options"), correct_options=data.get("correct_options"))


def exam_to_dict(exam: Exam, *, include_questions: bool = True) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": exam.id,
        "title": exam.title,
        "description": exam.description,
        "target_audience": exam.target_audience,
        "duration_minutes": exam.duration_minutes,
        "status": exam.status.value,
        "scheduled_at": format_timestamp(exam.scheduled_at),
        "question_count": exam.question_count,
        "total_points": exam.total_points,
    }
    if include_questions:
        data["questions"] = [question_to_dict(question) for question in exam.questions]
    return data


def exam_from_dict(data: dict[str, Any]) -> Exam:
    return Exam(
        id=data["id"],
        title=data["title"],
        description=data.get("description") or "",
        target_audience=data["target_audience"],
        duration_minutes=data["duration_minutes"],
        status=ExamStatus(data.get("status", ExamStatus.DRAFT.value)),
        scheduled_at=parse_timestamp(data.get("scheduled_at")),
        questions=[question_from_dict(item) for item in data.get("questions", [])],
    )


def exam_summary_from_dict(data: dict[str, Any]) -> ExamSummary:
    return ExamSummary(
        id=data["id"],
        title=data["title"],
        target_audience=data["target_audience"],
        duration_minutes=data["duration_minutes"],
        question_count=data["question_count"],
        total_points=data["total_points"],
        description=data.get("description") or "",
    )


def coordinates_to_dict(coordinates: Coordinates) -> dict[str, float]:
    return {"latitude": coordinates.latitude, "longitude": coordinates.longitude}


def answer_record_to_dict(record: AnswerRecord) -> dict[str, Any]:
    return {
        "question_id": record.question_id,
        "answer": answer_to_raw(record.answer),
        "time_expired": record.time_expired,
        "timestamp": format_timestamp(record.timestamp),
    }


def answer_record_from_raw(
    question: Question | None,
    question_id: str,
    raw_answer: object,
    time_expired: bool,
    timestamp: datetime,
) -> AnswerRecord:
    """Build a record from wire values, checking the answer against its question.

    Answers for questions the exam does not contain keep no answer value; they
    are ignored by grading anyway.
    """
    answer = None
    if question is not None and not time_expired:
        answer = answer_from_raw(question, raw_answer)
    return AnswerRecord(
        question_id=question_id,
        answer=answer,
        time_expired=time_expired,
        timestamp=timestamp,
    )


def submission_to_dict(submission: AttemptSubmission) -> dict[str, Any]:
    return {
        "exam_id": submission.exam_id,
        "start_time": format_timestamp(submission.start_time),
        "end_time": format_timestamp(submission.end_time),
        "coordinates": coordinates_to_dict(submission.coordinates),
        "answers": [answer_record_to_dict(record) for record in submission.answers],
        "score": submission.score,
    }


def attempt_to_dict(attempt: AttemptRecord) -> dict[str, Any]:
    return {
        "id": attempt.id,
        "exam_id": attempt.exam_id,
        "student_id": attempt.student_id,
        "start_time": format_timestamp(attempt.start_time),
        "end_time": format_timestamp(attempt.end_time),
        "coordinates": coordinates_to_dict(attempt.coordinates),
        "answers": [answer_record_to_dict(record) for record in attempt.answers],
        "score": attempt.score,
        "completed": attempt.completed,
        "duration_minutes": attempt.duration_minutes,
        "answered_count": attempt.answered_count,
        "timeout_count": attempt.timeout_count,
        "ip_address": attempt.ip_address,
        "user_agent": attempt.user_agent,
    }


def attempt_summary_from_dict(data: dict[str, Any]) -> AttemptSummary:
    return AttemptSummary(
        id=data["id"],
        exam_id=data["exam_id"],
        start_time=parse_timestamp(data["start_time"]),
        end_time=parse_timestamp(data.get("end_time")),
        score=data["score"],
        completed=data["completed"],
    )


def statistics_to_dict(statistics: ExamStatistics) -> dict[str, Any]:
    return {
        "total_attempts": statistics.total_attempts,
        "average_score": statistics.average_score,
        "highest_score": statistics.highest_score,
        "lowest_score": statistics.lowest_score,
        "median_score": statistics.median_score,
        "completion_rate": statistics.completion_rate,
        "average_duration": statistics.average_duration,
        "question_stats": {
            question_id: {
                "question_number": stats.question_number,
                "text": stats.text,
                "type": stats.type.value,
                "correct_count": stats.correct_count,
                "incorrect_count": stats.incorrect_count,
                "timeout_count": stats.timeout_count,
                "success_rate": stats.success_rate,
            }
            for question_id, stats in statistics.question_stats.items()
        },
    }
