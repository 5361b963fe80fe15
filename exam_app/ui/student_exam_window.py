"""Qt main window that walks a student through the dashboard and timed exam attempts."""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from exam_app.client.api_client import ExamApiClient, ExamLoadError
from exam_app.constants.ui_constants import (
    BACK_TO_DASHBOARD_BUTTON,
    DASHBOARD_TITLE,
    LOAD_ERROR_TITLE,
    RETRY_BUTTON,
    STUDENT_WINDOW_TITLE,
)
from exam_app.core.services.attempt_history import summarize_attempt_history
from exam_app.core.services.attempt_machine import (
    AttemptState,
    AttemptStateMachine,
    SubmissionStatus,
)
from exam_app.core.services.geolocation import GeolocationProvider
from exam_app.styling.styles import Styles
from exam_app.ui.components.consent_page import ConsentPage
from exam_app.ui.components.dashboard_page import DashboardPage
from exam_app.ui.components.intro_page import IntroPage
from exam_app.ui.components.question_page import QuestionPage
from exam_app.ui.components.results_page import ResultsPage
from exam_app.ui.dialog_helpers import show_warning
from exam_app.ui.qt_tick_source import QtTickSource
from exam_app.ui.submission_worker import ThreadedSubmissionSink

logger = logging.getLogger(__name__)


class StudentExamWindow(QMainWindow):
    """Shows the dashboard, then mirrors the attempt state machine page by page.

    When started with an exam id the dashboard is skipped and that exam loads
    straight away; the results page still leads back to the dashboard.
    """

    def __init__(
        self,
        client: ExamApiClient,
        geolocation: GeolocationProvider,
        student_id: str,
        exam_id: str | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(STUDENT_WINDOW_TITLE)

        self.client = client
        self.exam_id = exam_id
        self.student_id = student_id
        self.geolocation = geolocation
        self.tick_source = QtTickSource(self)
        self.submission_sink = ThreadedSubmissionSink(client, self)
        self.machine: AttemptStateMachine | None = None

        self._build_ui()
        self.setStyleSheet(Styles.get_main_window_style())
        if exam_id:
            self._load_exam()
        else:
            self._show_dashboard()

    def _build_ui(self) -> None:
        self.page_stack = QStackedWidget(self)
        self.setCentralWidget(self.page_stack)

        self.dashboard_page = DashboardPage(
            on_take_exam=self._start_exam,
            on_refresh=self._show_dashboard,
            parent=self,
        )
        self.load_page = self._build_load_page()
        self.intro_page = IntroPage(on_start=self._handle_begin, parent=self)
        self.consent_page = ConsentPage(on_allow=self._handle_request_location, parent=self)
        self.question_page = QuestionPage(on_submit=self._handle_submit_answer, parent=self)
        self.results_page = ResultsPage(on_back=self._show_dashboard, parent=self)

        for page in (
            self.dashboard_page,
            self.load_page,
            self.intro_page,
            self.consent_page,
            self.question_page,
            self.results_page,
        ):
            self.page_stack.addWidget(page)

    def _build_load_page(self) -> QWidget:
        page = QWidget(self)
        layout = QVBoxLayout()
        page.setLayout(layout)
        layout.addStretch()

        self.load_title_label = QLabel("Loading exam...", page)
        self.load_title_label.setAlignment(Qt.AlignCenter)
        self.load_title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.load_title_label)

        self.load_error_label = QLabel("", page)
        self.load_error_label.setAlignment(Qt.AlignCenter)
        self.load_error_label.setWordWrap(True)
        layout.addWidget(self.load_error_label)

        button_row = QHBoxLayout()
        button_row.addStretch()
        self.load_back_button = QPushButton(BACK_TO_DASHBOARD_BUTTON, page)
        self.load_back_button.clicked.connect(self._show_dashboard)
        button_row.addWidget(self.load_back_button)
        self.retry_button = QPushButton(RETRY_BUTTON, page)
        self.retry_button.clicked.connect(self._load_exam)
        button_row.addWidget(self.retry_button)
        button_row.addStretch()
        layout.addLayout(button_row)
        self._set_load_buttons_visible(False)
        layout.addStretch()
        return page

    def _set_load_buttons_visible(self, visible: bool) -> None:
        self.retry_button.setVisible(visible)
        self.load_back_button.setVisible(visible)

    # --- Dashboard ---

    def _show_dashboard(self) -> None:
        self.setWindowTitle(f"{STUDENT_WINDOW_TITLE} - {DASHBOARD_TITLE}")
        self.page_stack.setCurrentWidget(self.dashboard_page)
        try:
            exams = self.client.list_exams()
            attempts = self.client.fetch_student_attempts()
        except ExamLoadError as exc:
            logger.warning("Loading the dashboard failed: %s", exc)
            self.dashboard_page.show_error(str(exc))
            return
        self.dashboard_page.show_exams(exams)
        self.dashboard_page.show_history(
            summarize_attempt_history(attempts, {exam.id: exam.title for exam in exams})
        )

    def _start_exam(self, exam_id: str) -> None:
        self.exam_id = exam_id
        self._load_exam()

    # --- Exam loading ---

    def _load_exam(self) -> None:
        self.page_stack.setCurrentWidget(self.load_page)
        self.load_title_label.setText("Loading exam...")
        self.load_error_label.setText("")
        self._set_load_buttons_visible(False)

        try:
            exam = self.client.fetch_exam(self.exam_id)
        except ExamLoadError as exc:
            logger.warning("Loading exam %s failed: %s", self.exam_id, exc)
            self.load_title_label.setText(LOAD_ERROR_TITLE)
            self.load_error_label.setStyleSheet(Styles.get_message_label_style(error=True))
            self.load_error_label.setText(str(exc))
            self._set_load_buttons_visible(True)
            return

        machine = AttemptStateMachine(
            exam,
            self.tick_source,
            self.geolocation,
            self.submission_sink,
            student_id=self.student_id,
            on_state_changed=self._handle_state_changed,
            on_tick=self.question_page.update_timers,
            on_started=self.submission_sink.register_attempt,
            on_submission_finished=lambda status: self._handle_submission_finished(machine, status),
        )
        self.machine = machine
        self.setWindowTitle(f"{STUDENT_WINDOW_TITLE} - {exam.title}")
        self.intro_page.show_exam(exam)
        self.page_stack.setCurrentWidget(self.intro_page)

    # --- User actions ---

    def _handle_begin(self) -> None:
        self.machine.begin()

    def _handle_request_location(self) -> None:
        self.machine.request_location()
        if self.machine.state is AttemptState.LOCATION_CONSENT:
            self.consent_page.update_status(self.machine.is_location_pending, self.machine.consent_error)

    def _handle_submit_answer(self, raw_answer: object) -> None:
        if self.machine is None or self.machine.state is not AttemptState.AWAITING_ANSWER:
            return
        try:
            self.machine.submit_answer(raw_answer)
        except ValueError as exc:
            show_warning(self, "Invalid answer", str(exc))

    # --- State machine callbacks ---

    def _handle_state_changed(self, state: AttemptState) -> None:
        machine = self.machine
        if state is AttemptState.LOCATION_CONSENT:
            self.consent_page.update_status(machine.is_location_pending, machine.consent_error)
            self.page_stack.setCurrentWidget(self.consent_page)
        elif state is AttemptState.AWAITING_ANSWER:
            question = machine.current_question
            self.question_page.show_question(
                question,
                machine.session.current_question_index + 1,
                machine.exam.question_count,
            )
            self.question_page.update_timers(machine.exam_time_remaining or 0, machine.question_time_remaining)
            self.page_stack.setCurrentWidget(self.question_page)
        elif state is AttemptState.COMPLETED:
            self.results_page.show_result(machine.result, machine.session)
            self.results_page.update_submission(SubmissionStatus.PENDING)
            self.page_stack.setCurrentWidget(self.results_page)

    def _handle_submission_finished(self, machine: AttemptStateMachine, status: SubmissionStatus) -> None:
        if machine is not self.machine:
            logger.info("Earlier attempt for exam %s finished saving: %s", machine.exam.id, status.name)
            return
        self.results_page.update_submission(status, machine.submission_error)

    def closeEvent(self, event) -> None:
        self.tick_source.stop()
        self.submission_sink.shutdown()
        super().closeEvent(event)
