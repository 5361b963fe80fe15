"""Component asking the student to share their location."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel, QPushButton, QVBoxLayout, QWidget

from exam_app.constants.ui_constants import (
    CONSENT_ALLOW_BUTTON,
    CONSENT_PENDING_TEXT,
    CONSENT_RETRY_BUTTON,
    CONSENT_TEXT,
    CONSENT_TITLE,
)
from exam_app.styling.styles import Styles


class ConsentPage(QWidget):
    """Location consent step; the attempt only starts once a position is known."""

    def __init__(self, on_allow: callable, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.on_allow = on_allow
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)
        layout.addStretch()

        title_label = QLabel(CONSENT_TITLE, self)
        title_label.setAlignment(Qt.AlignCenter)
        title_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(title_label)

        text_label = QLabel(CONSENT_TEXT, self)
        text_label.setAlignment(Qt.AlignCenter)
        text_label.setWordWrap(True)
        layout.addWidget(text_label)

        self.status_label = QLabel("", self)
        self.status_label.setAlignment(Qt.AlignCenter)
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)

        self.allow_button = QPushButton(CONSENT_ALLOW_BUTTON, self)
        self.allow_button.setDefault(True)
        self.allow_button.clicked.connect(lambda: self.on_allow())
        layout.addWidget(self.allow_button, alignment=Qt.AlignCenter)
        layout.addStretch()

    def update_status(self, pending: bool, error: str | None) -> None:
        if pending:
            self.status_label.setStyleSheet("")
            self.status_label.setText(CONSENT_PENDING_TEXT)
        elif error:
            self.status_label.setStyleSheet(Styles.get_message_label_style(error=True))
            self.status_label.setText(error)
        else:
            self.status_label.setText("")
        self.allow_button.setEnabled(not pending)
        self.allow_button.setText(CONSENT_RETRY_BUTTON if error and not pending else CONSENT_ALLOW_BUTTON)
