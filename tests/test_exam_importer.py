from __future__ import annotations

from pathlib import Path

import pytest

from conftest import make_direct, make_exam, make_mcq
from exam_app.core.exam_exporter import save_exam_to_file, serialize_exam
from exam_app.core.exam_importer import ExamImportError, load_exam_from_file, parse_exam_text
from exam_app.core.models import Attachment, AttachmentKind, ExamStatus, QuestionType

SAMPLE = """\
TITLE: Arithmetic warm-up
AUDIENCE: Grade 7
DURATION: 10
DESCRIPTION: Quick check

Q: What is $6 \\times 7$?
Show your working.
ANSWER: 42
TOLERANCE: 0
POINTS: 2

---

Q: Which numbers are prime?
A: 4
B: 5
C: 7
CORRECT: B, C
TIMELIMIT: 20
ATTACHMENT: image primes.png https://example.org/primes.png
"""


def test_parse_exam_text():
    exam = parse_exam_text(SAMPLE)

    assert exam.title == "Arithmetic warm-up"
    assert exam.target_audience == "Grade 7"
    assert exam.duration_minutes == 10
    assert exam.description == "Quick check"
    assert exam.status is ExamStatus.DRAFT
    assert exam.id == ""

    direct, mcq = exam.questions
    assert direct.id == "q1"
    assert direct.type is QuestionType.DIRECT
    assert direct.text == "What is $6 \\times 7$?\nShow your working."
    assert direct.correct_answer == "42"
    assert direct.tolerance == 0
    assert direct.points == 2
    assert direct.time_limit_seconds == 60

    assert mcq.id == "q2"
    assert mcq.type is QuestionType.MULTIPLE_CHOICE
    assert mcq.options == ["4", "5", "7"]
    assert mcq.correct_options == [1, 2]
    assert mcq.time_limit_seconds == 20
    assert mcq.attachment == Attachment(AttachmentKind.IMAGE, "primes.png", "https://example.org/primes.png")


def test_missing_header_field_is_reported():
    with pytest.raises(ExamImportError, match="AUDIENCE"):
        parse_exam_text("TITLE: x\nDURATION: 5\n\nQ: a?\nANSWER: b\n")


def test_question_errors_name_the_question():
    text = "TITLE: x\nAUDIENCE: y\nDURATION: 5\n\nQ: a?\nANSWER: b\n\nQ: c?\nA: one\nB: two\nCORRECT: D\n"
    with pytest.raises(ExamImportError, match="Question 2"):
        parse_exam_text(text)


def test_short_time_limit_is_rejected():
    text = "TITLE: x\nAUDIENCE: y\nDURATION: 5\n\nQ: a?\nANSWER: b\nTIMELIMIT: 10\n"
    with pytest.raises(ExamImportError, match="Question 1"):
        parse_exam_text(text)


def test_out_of_sequence_letter_continues_previous_option():
    text = "TITLE: x\nAUDIENCE: y\nDURATION: 5\n\nQ: a?\nA: one\nC: three\nB: two\nCORRECT: A\n"
    question = parse_exam_text(text).questions[0]
    assert question.options == ["one\nC: three", "two"]


def test_option_letters_must_start_at_a():
    text = "TITLE: x\nAUDIENCE: y\nDURATION: 5\n\nQ: a?\nB: one\nC: two\nCORRECT: B\n"
    with pytest.raises(ExamImportError, match="CORRECT requires lettered options"):
        parse_exam_text(text)


def test_letter_prefixed_line_stays_in_question_text():
    text = "TITLE: x\nAUDIENCE: y\nDURATION: 5\n\nQ: Consider the map\nf: x -> 2x\nWhat is f(3)?\nANSWER: 6\n"
    question = parse_exam_text(text).questions[0]
    assert question.type is QuestionType.DIRECT
    assert question.text == "Consider the map\nf: x -> 2x\nWhat is f(3)?"
    assert question.correct_answer == "6"


def test_lowercase_letter_line_is_not_an_option():
    text = "TITLE: x\nAUDIENCE: y\nDURATION: 5\n\nQ: Evaluate\na: 3\nfor a squared.\nANSWER: 9\n"
    question = parse_exam_text(text).questions[0]
    assert question.type is QuestionType.DIRECT
    assert question.text == "Evaluate\na: 3\nfor a squared."


def test_exam_without_questions_is_rejected():
    with pytest.raises(ExamImportError):
        parse_exam_text("TITLE: x\nAUDIENCE: y\nDURATION: 5\n")


def test_exported_exam_imports_unchanged(tmp_path: Path):
    exam = make_exam(
        [
            make_direct("intro", answer="3.14", tolerance=1, points=2, text="Give $\\pi$.\nTwo decimals."),
            make_mcq("pick", attachment=Attachment(AttachmentKind.AUDIO, "tone.mp3", "https://example.org/tone.mp3")),
        ],
        id="EX42",
        description="Round trip",
    )
    path = tmp_path / "exam.txt"

    save_exam_to_file(path, exam)
    loaded = load_exam_from_file(path)

    assert loaded == exam


def test_export_requires_questions(tmp_path: Path):
    with pytest.raises(ValueError):
        save_exam_to_file(tmp_path / "empty.txt", make_exam([]))


def test_serialized_exam_lists_correct_letters():
    text = serialize_exam(make_exam([make_mcq()]))
    assert "CORRECT: B, C" in text
    assert "STATUS: published" in text


def test_bundled_sample_exam_loads():
    exam = load_exam_from_file(Path(__file__).resolve().parents[1] / "exams" / "sample_exam.txt")
    assert exam.is_published
    assert exam.question_count == 5
