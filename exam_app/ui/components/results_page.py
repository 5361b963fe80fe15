"""Component summarizing a finished attempt."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QPushButton, QVBoxLayout, QWidget

from exam_app.constants.ui_constants import (
    BACK_TO_DASHBOARD_BUTTON,
    SCORE_BAND_TITLES,
    SUBMISSION_DONE_TEXT,
    SUBMISSION_FAILED_TEXT,
    SUBMISSION_PENDING_TEXT,
)
from exam_app.core.grading import score_band
from exam_app.core.models import AttemptSession, ScoreResult
from exam_app.core.services.attempt_machine import SubmissionStatus
from exam_app.styling.styles import Styles
from exam_app.utils.time_format import format_duration


class ResultsPage(QWidget):
    """Shows the score, its band, answer counts, time taken and save status."""

    def __init__(self, on_back: callable | None = None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.on_back = on_back
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)
        layout.addStretch()

        self.band_label = QLabel("", self)
        self.band_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.band_label)

        self.percentage_label = QLabel("", self)
        self.percentage_label.setAlignment(Qt.AlignCenter)
        self.percentage_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.percentage_label)

        self.details_label = QLabel("", self)
        self.details_label.setAlignment(Qt.AlignCenter)
        self.details_label.setWordWrap(True)
        layout.addWidget(self.details_label)

        self.submission_label = QLabel("", self)
        self.submission_label.setAlignment(Qt.AlignCenter)
        self.submission_label.setWordWrap(True)
        layout.addWidget(self.submission_label)

        self.back_button = QPushButton(BACK_TO_DASHBOARD_BUTTON, self)
        self.back_button.clicked.connect(lambda: self.on_back())
        self.back_button.setVisible(self.on_back is not None)
        layout.addWidget(self.back_button, alignment=Qt.AlignCenter)
        layout.addStretch()

    def show_result(self, result: ScoreResult, session: AttemptSession) -> None:
        percentage = result.percentage
        band = score_band(percentage)
        self.band_label.setText(SCORE_BAND_TITLES[band])
        self.band_label.setStyleSheet(Styles.get_band_label_style(band))
        self.percentage_label.setText(f"{percentage}%")

        answered = sum(1 for record in session.answers if record.answer is not None)
        question_count = result.correct_answers + result.incorrect_answers

        lines = [
            f"You scored {result.total_score} out of {result.max_possible_score} point(s).",
            f"Answered: {answered} of {question_count}    "
            f"Correct: {result.correct_answers}    Incorrect: {result.incorrect_answers}",
        ]
        if session.is_finished:
            elapsed = (session.end_time - session.start_time).total_seconds()
            lines.append(f"Time taken: {format_duration(elapsed)}")
        self.details_label.setText("\n".join(lines))

    def update_submission(self, status: SubmissionStatus, error: str | None = None) -> None:
        if status is SubmissionStatus.PENDING:
            self.submission_label.setStyleSheet("")
            self.submission_label.setText(SUBMISSION_PENDING_TEXT)
        elif status is SubmissionStatus.SUBMITTED:
            self.submission_label.setStyleSheet(Styles.get_message_label_style(error=False))
            self.submission_label.setText(SUBMISSION_DONE_TEXT)
        elif status is SubmissionStatus.FAILED:
            self.submission_label.setStyleSheet(Styles.get_message_label_style(error=True))
            self.submission_label.setText(SUBMISSION_FAILED_TEXT.format(error=error or "unknown error"))
        else:
            self.submission_label.setText("")
