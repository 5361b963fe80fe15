"""Qt main window for managing exams and following their statistics."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION, HELP_TEXT
from exam_app.constants.ui_constants import (
    BUTTON_EXPORT,
    BUTTON_IMPORT,
    BUTTON_PUBLISH,
    BUTTON_REMOVE,
    BUTTON_UNPUBLISH,
    EXPORT_DIALOG_TITLE,
    EXPORT_FILE_FILTER,
    IMPORT_DIALOG_TITLE,
    IMPORT_FILE_FILTER,
    NO_EXAM_SELECTED_MESSAGE,
    STATISTICS_REFRESH_INTERVAL_MS,
    TEACHER_WINDOW_TITLE,
)
from exam_app.core.exam_exporter import save_exam_to_file
from exam_app.core.exam_importer import ExamImportError
from exam_app.core.exam_manager import ExamManager
from exam_app.core.models import Exam, ExamStatus
from exam_app.core.services.exam_repository import ExamNotFoundError
from exam_app.styling.styles import Styles
from exam_app.ui.components.statistics_panel import StatisticsPanel
from exam_app.ui.dialog_helpers import confirm_remove_exam, show_error, show_info, show_warning


class TeacherMainWindow(QMainWindow):
    """Exam list on the left, live statistics for the selection on the right."""

    def __init__(self, exam_manager: ExamManager, server_url: str) -> None:
        super().__init__()
        self.setWindowTitle(TEACHER_WINDOW_TITLE)

        self.exam_manager = exam_manager
        self.server_url = server_url
        self._last_export_path: Path | None = None

        self._build_ui()
        self._configure_refresh_timer()
        self.setStyleSheet(Styles.get_main_window_style())
        self.refresh_exam_list()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self._build_action_buttons(root_layout)

        self.network_label = QLabel(f"Student clients connect to: {self.server_url}", self)
        self.network_label.setWordWrap(True)
        root_layout.addWidget(self.network_label)

        splitter = QSplitter(Qt.Horizontal, self)
        self.exam_list = QListWidget(splitter)
        self.exam_list.setAlternatingRowColors(True)
        self.exam_list.currentItemChanged.connect(self._handle_selection_changed)
        self.statistics_panel = StatisticsPanel(splitter)
        splitter.addWidget(self.exam_list)
        splitter.addWidget(self.statistics_panel)
        splitter.setStretchFactor(1, 3)
        root_layout.addWidget(splitter, stretch=1)

    def _build_action_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.import_button = QPushButton(BUTTON_IMPORT, self)
        self.import_button.clicked.connect(self._handle_import_exam)
        button_row.addWidget(self.import_button)

        self.export_button = QPushButton(BUTTON_EXPORT, self)
        self.export_button.clicked.connect(self._handle_export_exam)
        button_row.addWidget(self.export_button)

        self.publish_button = QPushButton(BUTTON_PUBLISH, self)
        self.publish_button.clicked.connect(self._handle_toggle_publish)
        button_row.addWidget(self.publish_button)

        self.remove_button = QPushButton(BUTTON_REMOVE, self)
        self.remove_button.clicked.connect(self._handle_remove_exam)
        button_row.addWidget(self.remove_button)

        button_row.addStretch()

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        layout.addLayout(button_row)

    def _configure_refresh_timer(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(STATISTICS_REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self._refresh_statistics)
        self.refresh_timer.start()

    # --- Exam list ---

    def refresh_exam_list(self, select_id: str | None = None) -> None:
        select_id = select_id or self._selected_exam_id()
        self.exam_list.blockSignals(True)
        self.exam_list.clear()
        selected_row = 0
        for row, exam in enumerate(self.exam_manager.get_exams()):
            item = QListWidgetItem(f"{exam.title} [{exam.status.value}] ({exam.id})", self.exam_list)
            item.setData(Qt.UserRole, exam.id)
            if exam.id == select_id:
                selected_row = row
        self.exam_list.blockSignals(False)
        if self.exam_list.count():
            self.exam_list.setCurrentRow(selected_row)
        self._handle_selection_changed()

    def _selected_exam_id(self) -> str | None:
        item = self.exam_list.currentItem()
        return item.data(Qt.UserRole) if item is not None else None

    def _selected_exam(self) -> Exam | None:
        exam_id = self._selected_exam_id()
        if exam_id is None:
            return None
        try:
            return self.exam_manager.get_exam(exam_id)
        except ExamNotFoundError:
            return None

    def _handle_selection_changed(self, *_args) -> None:
        exam = self._selected_exam()
        has_exam = exam is not None
        self.export_button.setEnabled(has_exam)
        self.publish_button.setEnabled(has_exam)
        self.remove_button.setEnabled(has_exam)
        if exam is None:
            self.statistics_panel.clear()
            return
        self.publish_button.setText(BUTTON_UNPUBLISH if exam.is_published else BUTTON_PUBLISH)
        self._refresh_statistics()

    def _refresh_statistics(self) -> None:
        exam = self._selected_exam()
        if exam is None:
            return
        statistics = self.exam_manager.get_statistics(exam.id)
        attempts = self.exam_manager.get_attempts_for_exam(exam.id)
        self.statistics_panel.update_statistics(exam, statistics, attempts)

    # --- Actions ---

    def _handle_import_exam(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            IMPORT_DIALOG_TITLE,
            str(Path.home()),
            IMPORT_FILE_FILTER,
        )
        if not file_path:
            return

        try:
            exam = self.exam_manager.import_exam(Path(file_path))
        except (OSError, ExamImportError) as exc:
            show_error(self, "Import failed", str(exc))
            return
        except ValueError as exc:
            show_error(self, "Exam rejected", str(exc))
            return

        self.refresh_exam_list(select_id=exam.id)
        show_info(
            self,
            "Exam imported",
            f"Imported '{exam.title}' with {exam.question_count} questions. Publish it to make it available.",
        )

    def _handle_export_exam(self) -> None:
        exam = self._selected_exam()
        if exam is None:
            show_warning(self, "No exam", NO_EXAM_SELECTED_MESSAGE)
            return

        default_path = self._last_export_path or (Path.cwd() / f"{exam.id}.txt")
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            EXPORT_DIALOG_TITLE,
            str(default_path),
            EXPORT_FILE_FILTER,
        )
        if not file_path:
            return

        try:
            save_exam_to_file(Path(file_path), exam)
        except (OSError, ValueError) as exc:
            show_error(self, "Export failed", str(exc))
            return

        self._last_export_path = Path(file_path)
        show_info(self, "Exam saved", f"Exam exported to {file_path}.")

    def _handle_toggle_publish(self) -> None:
        exam = self._selected_exam()
        if exam is None:
            show_warning(self, "No exam", NO_EXAM_SELECTED_MESSAGE)
            return
        status = ExamStatus.DRAFT if exam.is_published else ExamStatus.PUBLISHED
        try:
            self.exam_manager.set_exam_status(exam.id, status)
        except ValueError as exc:
            show_error(self, "Cannot change status", str(exc))
            return
        self.refresh_exam_list(select_id=exam.id)

    def _handle_remove_exam(self) -> None:
        exam = self._selected_exam()
        if exam is None:
            show_warning(self, "No exam", NO_EXAM_SELECTED_MESSAGE)
            return
        attempt_count = len(self.exam_manager.get_attempts_for_exam(exam.id))
        if not confirm_remove_exam(self, exam.title, attempt_count):
            return
        self.exam_manager.remove_exam(exam.id)
        self.refresh_exam_list()

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)
