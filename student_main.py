"""Entry point for the ExamQt student client."""

from __future__ import annotations

import argparse
import sys

from PySide6.QtWidgets import QApplication

from exam_app.client.api_client import ExamApiClient
from exam_app.constants.network_constants import DEFAULT_SERVER_URL, DEFAULT_STUDENT_ID, STATIC_LOCATION
from exam_app.core.services.geolocation import GeolocationProvider, StaticGeolocationProvider
from exam_app.ui.geolocation import QtGeolocationProvider
from exam_app.ui.student_exam_window import StudentExamWindow
from exam_app.utils.logging_config import configure_logging


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Take an ExamQt exam.")
    parser.add_argument(
        "exam_id",
        nargs="?",
        default=None,
        help="Published exam to open directly; without it the exam dashboard is shown",
    )
    parser.add_argument("--server", default=DEFAULT_SERVER_URL, help="Exam server URL (default: %(default)s)")
    parser.add_argument(
        "--student-id",
        default=DEFAULT_STUDENT_ID,
        help="Student identifier sent with every request (env: EXAMQT_STUDENT_ID)",
    )
    parser.add_argument(
        "--location",
        default=STATIC_LOCATION,
        help="Fixed 'latitude,longitude' to report instead of the system positioning service",
    )
    args = parser.parse_args(argv)
    if not args.student_id:
        parser.error("a student id is required (--student-id or EXAMQT_STUDENT_ID)")
    return args


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logger = configure_logging()
    logger.info("Starting ExamQt student client for %s", args.exam_id or "the exam dashboard")

    app = QApplication(sys.argv)
    geolocation: GeolocationProvider
    if args.location:
        try:
            geolocation = StaticGeolocationProvider.from_setting(args.location)
        except ValueError as exc:
            sys.exit(str(exc))
    else:
        geolocation = QtGeolocationProvider(app)
        if not geolocation.is_supported:
            logger.warning("No positioning source available; use --location to set coordinates")

    client = ExamApiClient(args.server, args.student_id)
    window = StudentExamWindow(client, geolocation, args.student_id, exam_id=args.exam_id)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
