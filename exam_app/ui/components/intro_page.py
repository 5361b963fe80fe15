"""Component introducing the exam before the attempt begins."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QPushButton, QVBoxLayout, QWidget

from exam_app.constants.ui_constants import INTRO_START_BUTTON
from exam_app.core.models import Exam
from exam_app.styling.styles import Styles


class IntroPage(QWidget):
    """Shows the exam title, description and rules with a start button."""

    def __init__(self, on_start: callable, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.on_start = on_start
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)
        layout.addStretch()

        self.title_label = QLabel("", self)
        self.title_label.setAlignment(Qt.AlignCenter)
        self.title_label.setWordWrap(True)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.title_label)

        self.description_label = QLabel("", self)
        self.description_label.setAlignment(Qt.AlignCenter)
        self.description_label.setWordWrap(True)
        layout.addWidget(self.description_label)

        self.details_label = QLabel("", self)
        self.details_label.setAlignment(Qt.AlignCenter)
        self.details_label.setWordWrap(True)
        layout.addWidget(self.details_label)

        self.start_button = QPushButton(INTRO_START_BUTTON, self)
        self.start_button.setDefault(True)
        self.start_button.clicked.connect(lambda: self.on_start())
        layout.addWidget(self.start_button, alignment=Qt.AlignCenter)
        layout.addStretch()

    def show_exam(self, exam: Exam) -> None:
        self.title_label.setText(exam.title)
        self.description_label.setText(exam.description)
        self.description_label.setVisible(bool(exam.description))
        self.details_label.setText(
            f"For: {exam.target_audience}\n"
            f"{exam.question_count} question(s), {exam.total_points} point(s), "
            f"{exam.duration_minutes} minute(s) in total.\n\n"
            "Each question has its own time limit. Unanswered questions count as incorrect "
            "and you cannot go back to a previous question."
        )
        self.start_button.setEnabled(True)
