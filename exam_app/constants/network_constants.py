"""Network configuration for the exam server and student client.

Values may be overridden through environment variables or a local ``.env``
file.
"""

import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_HOST: str = os.getenv("EXAMQT_HOST", "0.0.0.0")
DEFAULT_PORT: int = int(os.getenv("EXAMQT_PORT", "8000"))
DEFAULT_SERVER_URL: str = os.getenv("EXAMQT_SERVER_URL", f"http://127.0.0.1:{DEFAULT_PORT}")
DEFAULT_STUDENT_ID: str = os.getenv("EXAMQT_STUDENT_ID", "")
STATIC_LOCATION: str = os.getenv("EXAMQT_STATIC_LOCATION", "")
EXAM_DIRECTORY: str = os.getenv("EXAMQT_EXAM_DIR", "exams")
REQUEST_TIMEOUT_SECONDS: float = 10.0
STUDENT_ID_HEADER: str = "X-Student-Id"
GEOLOCATION_TIMEOUT_MS: int = 15000
