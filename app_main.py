"""Application entry point for the ExamQt teacher console and exam server."""

from __future__ import annotations

from pathlib import Path
import socket
import sys

from PySide6.QtWidgets import QApplication

from exam_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT, EXAM_DIRECTORY
from exam_app.core.exam_manager import ExamManager
from exam_app.server.api_server import start_api_server
from exam_app.ui.teacher_main_window import TeacherMainWindow
from exam_app.utils.logging_config import configure_logging


def _determine_server_url(port: int) -> str:
    """Best-effort determination of the local IP student clients should use."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}"


def main() -> None:
    """Initialize logging, load exams, start the API server, and launch the Qt UI."""
    logger = configure_logging()
    logger.info("Starting ExamQt teacher console")

    exam_manager = ExamManager()
    imported = exam_manager.import_exam_directory(Path(EXAM_DIRECTORY))
    logger.info("Loaded %d exam(s) from %s", len(imported), EXAM_DIRECTORY)

    start_api_server(exam_manager=exam_manager, host=DEFAULT_HOST, port=DEFAULT_PORT)
    server_url = _determine_server_url(DEFAULT_PORT)
    logger.info("Exam server available at %s", server_url)

    app = QApplication(sys.argv)
    window = TeacherMainWindow(exam_manager=exam_manager, server_url=server_url)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
