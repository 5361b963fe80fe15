"""Component showing live statistics for the selected exam."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QGroupBox,
    QHeaderView,
    QLabel,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.ui_constants import NO_ATTEMPTS_MESSAGE
from exam_app.core.models import AttemptRecord, Exam, ExamStatistics, QuestionType
from exam_app.core.serialization import format_timestamp
from exam_app.styling.styles import Styles

_QUESTION_COLUMNS = ("#", "Question", "Type", "Correct", "Incorrect", "Timed out", "Success")
_ATTEMPT_COLUMNS = ("Student", "Started", "Score", "Answered", "Timed out", "Minutes", "Status")


class StatisticsPanel(QWidget):
    """Summary figures, per-question table and the attempt list for one exam."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.title_label = QLabel("", self)
        self.title_label.setWordWrap(True)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.title_label)

        self.summary_label = QLabel(NO_ATTEMPTS_MESSAGE, self)
        self.summary_label.setWordWrap(True)
        layout.addWidget(self.summary_label)

        question_group = QGroupBox("Questions", self)
        question_layout = QVBoxLayout()
        question_group.setLayout(question_layout)
        self.question_table = self._build_table(_QUESTION_COLUMNS, question_group)
        self.question_table.horizontalHeader().setSectionResizeMode(1, QHeaderView.Stretch)
        question_layout.addWidget(self.question_table)
        layout.addWidget(question_group, stretch=1)

        attempt_group = QGroupBox("Attempts", self)
        attempt_layout = QVBoxLayout()
        attempt_group.setLayout(attempt_layout)
        self.attempt_table = self._build_table(_ATTEMPT_COLUMNS, attempt_group)
        self.attempt_table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        attempt_layout.addWidget(self.attempt_table)
        layout.addWidget(attempt_group, stretch=1)

    def _build_table(self, columns: tuple[str, ...], parent: QWidget) -> QTableWidget:
        table = QTableWidget(0, len(columns), parent)
        table.setHorizontalHeaderLabels(list(columns))
        table.setEditTriggers(QTableWidget.NoEditTriggers)
        table.setAlternatingRowColors(True)
        table.verticalHeader().setVisible(False)
        return table

    def clear(self) -> None:
        self.title_label.setText("")
        self.summary_label.setText(NO_ATTEMPTS_MESSAGE)
        self.question_table.setRowCount(0)
        self.attempt_table.setRowCount(0)

    def update_statistics(self, exam: Exam, statistics: ExamStatistics, attempts: list[AttemptRecord]) -> None:
        self.title_label.setText(f"{exam.title} ({exam.status.value})")
        if statistics.total_attempts:
            self.summary_label.setText(
                f"Completed attempts: {statistics.total_attempts}    "
                f"Completion rate: {statistics.completion_rate:.0f}%\n"
                f"Average: {statistics.average_score:.1f}%    Median: {statistics.median_score:.1f}%    "
                f"Highest: {statistics.highest_score}%    Lowest: {statistics.lowest_score}%\n"
                f"Average duration: {statistics.average_duration:.1f} min"
            )
        else:
            self.summary_label.setText(NO_ATTEMPTS_MESSAGE)

        self.question_table.setRowCount(len(statistics.question_stats))
        for row, stats in enumerate(statistics.question_stats.values()):
            type_text = "Direct" if stats.type is QuestionType.DIRECT else "Multiple choice"
            values = (
                str(stats.question_number),
                stats.text,
                type_text,
                str(stats.correct_count),
                str(stats.incorrect_count),
                str(stats.timeout_count),
                f"{stats.success_rate:.0f}%",
            )
            self._fill_row(self.question_table, row, values)

        self.attempt_table.setRowCount(len(attempts))
        for row, attempt in enumerate(attempts):
            minutes = attempt.duration_minutes
            values = (
                attempt.student_id,
                (format_timestamp(attempt.start_time) or "")[:19].replace("T", " "),
                f"{attempt.score}%" if attempt.completed else "-",
                str(attempt.answered_count),
                str(attempt.timeout_count),
                "-" if minutes is None else str(minutes),
                "Completed" if attempt.completed else "In progress",
            )
            self._fill_row(self.attempt_table, row, values)

    @staticmethod
    def _fill_row(table: QTableWidget, row: int, values: tuple[str, ...]) -> None:
        for column, value in enumerate(values):
            table.setItem(row, column, QTableWidgetItem(value))
