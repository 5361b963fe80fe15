"""Utilities for importing exams from a human-friendly text file.

File format (blocks separated by blank lines or '---'):

    TITLE: Exam title                 (header block, must come first)
    AUDIENCE: Who the exam is for
    DURATION: minutes
    DESCRIPTION: optional free text
    STATUS: draft|published           (optional, default draft)
    ID: stable exam id                (optional, generated when missing)

    Q: Question text (supports markdown + LaTeX). Additional lines until the
       next marker are treated as part of the question.
    ANSWER: expected answer           (direct questions)
    TOLERANCE: percent                (optional, default 10)

    Q: Multiple-choice question
    A: First option
    B: Second option
    C: ...                            (two or more options, lettered A, B, C... in order)
    CORRECT: B, C                     (one or more letters)

Every question block may also carry:

    POINTS: positive integer          (optional, default 1)
    TIMELIMIT: seconds                (optional, default 60, minimum 15)
    ATTACHMENT: image|audio|video <filename> <url>
    ID: stable question id            (optional, defaults to q1, q2, ...)

Example:

    TITLE: Arithmetic warm-up
    AUDIENCE: Grade 7
    DURATION: 10

    Q: What is $6 \\times 7$?
    ANSWER: 42
    TOLERANCE: 0
    POINTS: 2

    Q: Which numbers are prime?
    A: 4
    B: 5
    C: 7
    CORRECT: B, C
"""

from __future__ import annotations

from pathlib import Path
import string

from exam_app.constants.exam_constants import DEFAULT_POINTS, DEFAULT_TIME_LIMIT_SECONDS
from exam_app.core.models import (
    Attachment,
    AttachmentKind,
    Exam,
    ExamStatus,
    Question,
    QuestionType,
    QuestionValidationError,
)


class ExamImportError(Exception):
    """Raised when an exam definition cannot be parsed."""


_OPTION_LETTERS = string.ascii_uppercase
_HEADER_KEYS = ("ID", "TITLE", "AUDIENCE", "DURATION", "DESCRIPTION", "STATUS")
_QUESTION_KEYS = ("ANSWER", "TOLERANCE", "CORRECT", "POINTS", "TIMELIMIT", "ATTACHMENT", "ID")


def load_exam_from_file(file_path: Path) -> Exam:
    text = file_path.read_text(encoding="utf-8")
    return parse_exam_text(text)


def parse_exam_text(text: str) -> Exam:
    blocks = _split_blocks(text)
    if not blocks:
        raise ExamImportError("Exam file is empty.")

    header = _parse_header(blocks[0])
    questions: list[Question] = []
    for number, block in enumerate(blocks[1:], start=1):
        try:
            questions.append(_parse_question_block(block, number))
        except QuestionValidationError as exc:
            raise ExamImportError(f"Question {number}: {exc}") from exc

    if not questions:
        raise ExamImportError("Exam file did not contain any questions.")

    try:
        return Exam(questions=questions, **header)
    except ValueError as exc:
        raise ExamImportError(str(exc)) from exc


def _split_blocks(text: str) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            # Blank line encountered after content - finalize current block
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return [block for block in blocks if block]


def _split_key(line: str, keys: tuple[str, ...]) -> tuple[str, str] | None:
    if ":" not in line:
        return None
    key, value = line.split(":", 1)
    key = key.strip().upper()
    if key not in keys:
        return None
    return key, value.strip()


def _parse_header(block: str) -> dict[str, object]:
    values: dict[str, str] = {}
    for raw_line in block.splitlines():
        line = raw_line.strip()
        parsed = _split_key(line, _HEADER_KEYS)
        if parsed is None:
            raise ExamImportError(f"Expected an exam header line (TITLE, AUDIENCE, DURATION, ...), got '{line}'.")
        key, value = parsed
        values[key] = value

    for required in ("TITLE", "AUDIENCE", "DURATION"):
        if not values.get(required):
            raise ExamImportError(f"Exam header must define {required}.")

    status_text = values.get("STATUS", ExamStatus.DRAFT.value).lower()
    try:
        status = ExamStatus(status_text)
    except ValueError as exc:
        raise ExamImportError(f"Unknown STATUS '{status_text}'.") from exc

    return {
        "id": values.get("ID", ""),
        "title": values["TITLE"],
        "target_audience": values["AUDIENCE"],
        "duration_minutes": _parse_int(values["DURATION"], "DURATION"),
        "description": values.get("DESCRIPTION", ""),
        "status": status,
    }


def _parse_question_block(block: str, number: int) -> Question:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    fields: dict[str, str] = {}
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if line.upper().startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        parsed = _split_key(line, _QUESTION_KEYS)
        if parsed is not None:
            key, value = parsed
            fields[key] = value
            current_section = None
            continue

        if _is_next_option_line(line, len(options)):
            letter = _OPTION_LETTERS[len(options)]
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in options:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise ExamImportError(f"Encountered text outside of a known section: '{line}'.")

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise ExamImportError(f"Question {number}: question text missing (Q: ...)")

    common = dict(
        id=fields.get("ID") or f"q{number}",
        text=question_text,
        points=_parse_int(fields["POINTS"], "POINTS") if "POINTS" in fields else DEFAULT_POINTS,
        time_limit_seconds=(
            _parse_int(fields["TIMELIMIT"], "TIMELIMIT") if "TIMELIMIT" in fields else DEFAULT_TIME_LIMIT_SECONDS
        ),
        attachment=_parse_attachment(fields["ATTACHMENT"]) if "ATTACHMENT" in fields else None,
    )

    if options:
        if "ANSWER" in fields or "TOLERANCE" in fields:
            raise ExamImportError(f"Question {number}: options cannot be combined with ANSWER/TOLERANCE.")
        option_letters = list(options)
        return Question(
            type=QuestionType.MULTIPLE_CHOICE,
            options=[options[letter].strip() for letter in option_letters],
            correct_options=_parse_correct_letters(fields.get("CORRECT"), option_letters, number),
            **common,
        )

    if "CORRECT" in fields:
        raise ExamImportError(f"Question {number}: CORRECT requires lettered options.")
    if not fields.get("ANSWER"):
        raise ExamImportError(f"Question {number}: define either ANSWER or lettered options.")
    return Question(
        type=QuestionType.DIRECT,
        correct_answer=fields["ANSWER"],
        tolerance=_parse_float(fields["TOLERANCE"], "TOLERANCE") if "TOLERANCE" in fields else None,
        **common,
    )


def _is_next_option_line(line: str, option_count: int) -> bool:
    """True when ``line`` starts the next option in A, B, C... order.

    Other ``X:`` lines (e.g. ``f: x -> 2x``) belong to the current section.
    """
    if option_count >= len(_OPTION_LETTERS) or len(line) <= 2 or line[1] != ":":
        return False
    return line[0] == _OPTION_LETTERS[option_count]


def _parse_correct_letters(value: str | None, option_letters: list[str], number: int) -> list[int]:
    if not value:
        raise ExamImportError(f"Question {number}: CORRECT must list at least one option letter.")
    indices: list[int] = []
    for letter in value.replace(",", " ").split():
        letter = letter.upper()
        if letter not in option_letters:
            raise ExamImportError(f"Question {number}: CORRECT refers to unknown option '{letter}'.")
        index = option_letters.index(letter)
        if index not in indices:
            indices.append(index)
    return indices


def _parse_attachment(value: str) -> Attachment:
    parts = value.split()
    if len(parts) != 3:
        raise ExamImportError("ATTACHMENT must be '<image|audio|video> <filename> <url>'.")
    kind_text, filename, url = parts
    try:
        kind = AttachmentKind(kind_text.lower())
    except ValueError as exc:
        raise ExamImportError(f"Unknown attachment type '{kind_text}'.") from exc
    return Attachment(kind=kind, filename=filename, url=url)


def _parse_int(value: str, key: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ExamImportError(f"{key} must be an integer.") from exc


def _parse_float(value: str, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ExamImportError(f"{key} must be a number.") from exc
