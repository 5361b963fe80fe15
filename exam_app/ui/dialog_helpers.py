"""Message boxes shared by the teacher console and the student client."""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget


def _build_message_box(
    parent: QWidget,
    icon: QMessageBox.Icon,
    title: str,
    message: str,
    font_point_size: int | None = None,
) -> QMessageBox:
    box = QMessageBox(parent)
    box.setIcon(icon)
    box.setWindowTitle(title)
    box.setText(message)
    box.setStandardButtons(QMessageBox.Ok)
    if font_point_size:
        font = box.font()
        font.setPointSize(font_point_size)
        box.setFont(font)
        box.setStyleSheet(
            f"QLabel, QPushButton {{ font-size: {font_point_size}pt; }}"
        )
    return box


def confirm_remove_exam(parent: QWidget, exam_title: str, attempt_count: int) -> bool:
    """Ask before removing an exam; recorded attempts are discarded with it.

    Returns:
        True if the teacher confirmed the removal
    """
    message = f"Remove exam '{exam_title}'?"
    if attempt_count:
        message += f"\n\n{attempt_count} recorded attempt(s) will be discarded."
    reply = QMessageBox.question(
        parent,
        "Confirm Remove",
        message,
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget, title: str, message: str) -> None:
    _build_message_box(parent, QMessageBox.Critical, title, message).exec()


def show_info(
    parent: QWidget,
    title: str,
    message: str,
    *,
    font_point_size: int | None = None,
) -> None:
    """Show an information box, optionally with enlarged text for projection."""
    _build_message_box(parent, QMessageBox.Information, title, message, font_point_size).exec()


def show_warning(parent: QWidget, title: str, message: str) -> None:
    _build_message_box(parent, QMessageBox.Warning, title, message).exec()
