"""Component presenting the active question with its timers and answer input."""

from __future__ import annotations

import string

from PySide6.QtWebEngineWidgets import QWebEngineView
from PySide6.QtWidgets import (
    QButtonGroup,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QProgressBar,
    QPushButton,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.exam_constants import TIME_WARNING_WINDOW_SECONDS
from exam_app.constants.ui_constants import (
    DIRECT_ANSWER_PLACEHOLDER,
    QUESTION_FONT_SIZE,
    SUBMIT_ANSWER_BUTTON,
)
from exam_app.core.models import Question, raw_answer_from_input
from exam_app.styling.styles import Styles
from exam_app.ui.question_renderer import render_question
from exam_app.utils.time_format import format_countdown


class QuestionPage(QWidget):
    """UI component for answering one question at a time."""

    def __init__(self, on_submit: callable, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.on_submit = on_submit
        self._question: Question | None = None
        self._option_buttons: list[QRadioButton] = []
        self._font_size: int = QUESTION_FONT_SIZE

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        # Progress and exam clock
        header_row = QHBoxLayout()
        self.progress_label = QLabel("", self)
        header_row.addWidget(self.progress_label)
        header_row.addStretch()
        self.exam_timer_label = QLabel("", self)
        header_row.addWidget(self.exam_timer_label)
        layout.addLayout(header_row)

        # Question clock
        timer_row = QHBoxLayout()
        self.question_timer_label = QLabel("", self)
        timer_row.addWidget(self.question_timer_label)
        self.question_timer_progress = QProgressBar(self)
        self.question_timer_progress.setTextVisible(False)
        timer_row.addWidget(self.question_timer_progress, stretch=1)
        layout.addLayout(timer_row)

        self.question_view = QWebEngineView(self)
        layout.addWidget(self.question_view, stretch=1)

        self.answer_input = QLineEdit(self)
        self.answer_input.setPlaceholderText(DIRECT_ANSWER_PLACEHOLDER)
        self.answer_input.returnPressed.connect(self._handle_submit)
        layout.addWidget(self.answer_input)

        self.options_container = QWidget(self)
        self.options_layout = QVBoxLayout()
        self.options_layout.setContentsMargins(0, 0, 0, 0)
        self.options_container.setLayout(self.options_layout)
        self.option_group = QButtonGroup(self)
        layout.addWidget(self.options_container)

        self.submit_button = QPushButton(SUBMIT_ANSWER_BUTTON, self)
        self.submit_button.setDefault(True)
        self.submit_button.clicked.connect(self._handle_submit)
        layout.addWidget(self.submit_button)

    def show_question(self, question: Question, number: int, total: int) -> None:
        self._question = question
        self.progress_label.setText(f"Question {number} of {total}  ({question.points} point(s))")
        self.question_view.setHtml(render_question(question, font_size=self._font_size))
        self.question_timer_progress.setRange(0, question.time_limit_seconds)

        self._clear_options()
        if question.is_direct:
            self.answer_input.clear()
            self.answer_input.setVisible(True)
            self.options_container.setVisible(False)
            self.answer_input.setFocus()
        else:
            self.answer_input.setVisible(False)
            self.options_container.setVisible(True)
            for index, option in enumerate(question.options or []):
                letter = string.ascii_uppercase[index]
                button = QRadioButton(f"{letter}. {option}", self.options_container)
                self.option_group.addButton(button, index)
                self.options_layout.addWidget(button)
                self._option_buttons.append(button)

    def update_timers(self, exam_remaining: int, question_remaining: int | None) -> None:
        self.exam_timer_label.setText(f"Exam time left: {format_countdown(exam_remaining)}")
        if question_remaining is None:
            self.question_timer_label.setText("")
            return
        warning = question_remaining <= TIME_WARNING_WINDOW_SECONDS
        self.question_timer_label.setText(f"Question: {format_countdown(question_remaining)}")
        self.question_timer_label.setStyleSheet(Styles.get_timer_label_style(warning))
        self.question_timer_progress.setValue(question_remaining)

    def current_answer(self) -> object:
        if self._question is None:
            return None
        return raw_answer_from_input(
            self._question, self.answer_input.text(), self.option_group.checkedId()
        )

    def _clear_options(self) -> None:
        for button in self._option_buttons:
            self.option_group.removeButton(button)
            self.options_layout.removeWidget(button)
            button.deleteLater()
        self._option_buttons = []

    def _handle_submit(self) -> None:
        if self._question is None:
            return
        self.on_submit(self.current_answer())
