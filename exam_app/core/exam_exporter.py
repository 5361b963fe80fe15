"""Utilities for exporting exams to the plain-text format used for imports."""

from __future__ import annotations

from pathlib import Path
import string

from exam_app.core.models import Exam, Question


def save_exam_to_file(file_path: Path, exam: Exam) -> None:
    """Persist the exam to disk in the text import format."""

    if not exam.questions:
        raise ValueError("Cannot export an exam without questions.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(serialize_exam(exam), encoding="utf-8")


def serialize_exam(exam: Exam) -> str:
    header = [
        f"ID: {exam.id}",
        f"TITLE: {exam.title}",
        f"AUDIENCE: {exam.target_audience}",
        f"DURATION: {exam.duration_minutes}",
        f"STATUS: {exam.status.value}",
    ]
    if exam.description:
        header.append(f"DESCRIPTION: {' '.join(exam.description.split())}")
    blocks = ["\n".join(header)] + [_serialize_question(question) for question in exam.questions]
    return "\n\n---\n\n".join(blocks) + "\n"


def _serialize_question(question: Question) -> str:
    lines: list[str] = []

    question_lines = question.text.splitlines() or [question.text]
    lines.append(f"Q: {question_lines[0]}")
    lines.extend(question_lines[1:])
    lines.append(f"ID: {question.id}")

    if question.is_direct:
        lines.append(f"ANSWER: {question.correct_answer}")
        lines.append(f"TOLERANCE: {question.tolerance:g}")
    else:
        for letter, option_text in zip(string.ascii_uppercase, question.options or []):
            option_lines = option_text.splitlines() or [option_text]
            lines.append(f"{letter}: {option_lines[0]}")
            lines.extend(option_lines[1:])
        correct_letters = ", ".join(string.ascii_uppercase[index] for index in question.correct_options or [])
        lines.append(f"CORRECT: {correct_letters}")

    lines.append(f"POINTS: {question.points}")
    lines.append(f"TIMELIMIT: {question.time_limit_seconds}")
    if question.attachment is not None:
        attachment = question.attachment
        lines.append(f"ATTACHMENT: {attachment.kind.value} {attachment.filename} {attachment.url}")

    return "\n".join(lines)
