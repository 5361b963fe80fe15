"""Component for the student's exam dashboard."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QGroupBox,
    QHBoxLayout,
    QHeaderView,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.ui_constants import (
    AVAILABLE_EXAMS_LABEL,
    DASHBOARD_DESCRIPTION,
    DASHBOARD_LOAD_ERROR_TEXT,
    DASHBOARD_TITLE,
    HISTORY_LABEL,
    NO_EXAM_SELECTED_MESSAGE,
    NO_HISTORY_TEXT,
    NO_PUBLISHED_EXAMS_TEXT,
    REFRESH_BUTTON,
    SCORE_BAND_TITLES,
    TAKE_EXAM_BUTTON,
)
from exam_app.core.grading import score_band
from exam_app.core.models import ExamSummary
from exam_app.core.services.attempt_history import ExamHistory
from exam_app.styling.styles import Styles
from exam_app.ui.dialog_helpers import show_warning

_HISTORY_COLUMNS = ("Exam", "Attempts", "Best score", "Last score", "Last attempt")


class DashboardPage(QWidget):
    """Lists published exams to take and the student's past results."""

    def __init__(
        self,
        on_take_exam: callable,
        on_refresh: callable,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.on_take_exam = on_take_exam
        self.on_refresh = on_refresh
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.title_label = QLabel(DASHBOARD_TITLE, self)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.title_label)

        self.description_label = QLabel(DASHBOARD_DESCRIPTION, self)
        self.description_label.setWordWrap(True)
        layout.addWidget(self.description_label)

        self.error_label = QLabel("", self)
        self.error_label.setWordWrap(True)
        self.error_label.setStyleSheet(Styles.get_message_label_style(error=True))
        self.error_label.setVisible(False)
        layout.addWidget(self.error_label)

        exam_group = QGroupBox(AVAILABLE_EXAMS_LABEL, self)
        exam_layout = QVBoxLayout()
        exam_group.setLayout(exam_layout)
        self.exam_list = QListWidget(exam_group)
        self.exam_list.setAlternatingRowColors(True)
        self.exam_list.itemDoubleClicked.connect(lambda _item: self._handle_take_click())
        exam_layout.addWidget(self.exam_list)
        self.empty_exams_label = QLabel(NO_PUBLISHED_EXAMS_TEXT, exam_group)
        self.empty_exams_label.setAlignment(Qt.AlignCenter)
        exam_layout.addWidget(self.empty_exams_label)
        layout.addWidget(exam_group, stretch=1)

        history_group = QGroupBox(HISTORY_LABEL, self)
        history_layout = QVBoxLayout()
        history_group.setLayout(history_layout)
        self.history_table = QTableWidget(0, len(_HISTORY_COLUMNS), history_group)
        self.history_table.setHorizontalHeaderLabels(list(_HISTORY_COLUMNS))
        self.history_table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.history_table.setAlternatingRowColors(True)
        self.history_table.verticalHeader().setVisible(False)
        self.history_table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        history_layout.addWidget(self.history_table)
        self.empty_history_label = QLabel(NO_HISTORY_TEXT, history_group)
        self.empty_history_label.setAlignment(Qt.AlignCenter)
        self.empty_history_label.setWordWrap(True)
        history_layout.addWidget(self.empty_history_label)
        layout.addWidget(history_group, stretch=1)

        button_row = QHBoxLayout()
        self.refresh_button = QPushButton(REFRESH_BUTTON, self)
        self.refresh_button.clicked.connect(lambda: self.on_refresh())
        button_row.addWidget(self.refresh_button)
        button_row.addStretch()
        self.take_button = QPushButton(TAKE_EXAM_BUTTON, self)
        self.take_button.setDefault(True)
        self.take_button.clicked.connect(self._handle_take_click)
        button_row.addWidget(self.take_button)
        layout.addLayout(button_row)

    def _handle_take_click(self) -> None:
        item = self.exam_list.currentItem()
        if item is None:
            show_warning(self, "No exam", NO_EXAM_SELECTED_MESSAGE)
            return
        self.on_take_exam(item.data(Qt.UserRole))

    def show_exams(self, exams: list[ExamSummary]) -> None:
        self.error_label.setVisible(False)
        self.exam_list.clear()
        for exam in exams:
            item = QListWidgetItem(
                f"{exam.title} ({exam.target_audience}) - "
                f"{exam.question_count} question(s), {exam.duration_minutes} min",
                self.exam_list,
            )
            item.setData(Qt.UserRole, exam.id)
            if exam.description:
                item.setToolTip(exam.description)
        self.empty_exams_label.setVisible(not exams)
        self.take_button.setEnabled(bool(exams))

    def show_history(self, history: list[ExamHistory]) -> None:
        self.history_table.setRowCount(len(history))
        for row, entry in enumerate(history):
            best = f"{entry.best_score}% ({SCORE_BAND_TITLES[score_band(entry.best_score)]})"
            values = (
                entry.title,
                str(entry.attempt_count),
                best,
                f"{entry.last_score}%",
                entry.last_attempt_at.astimezone().strftime("%Y-%m-%d %H:%M"),
            )
            for column, value in enumerate(values):
                self.history_table.setItem(row, column, QTableWidgetItem(value))
        self.empty_history_label.setVisible(not history)

    def show_error(self, message: str) -> None:
        self.error_label.setText(DASHBOARD_LOAD_ERROR_TEXT.format(error=message))
        self.error_label.setVisible(True)
