"""Exam-related constants shared across UI, server and core layers."""

MIN_TIME_LIMIT_SECONDS: int = 15
DEFAULT_TIME_LIMIT_SECONDS: int = 60
DEFAULT_POINTS: int = 1
DEFAULT_TOLERANCE_PERCENT: float = 10.0
MIN_DURATION_MINUTES: int = 1
MAX_DURATION_MINUTES: int = 480
MIN_MCQ_OPTIONS: int = 2
TICK_INTERVAL_MS: int = 1000
QUESTION_STATS_TEXT_LENGTH: int = 50
TIME_WARNING_WINDOW_SECONDS: int = 10
UNKNOWN_EXAM_TITLE: str = "Unknown exam"
