"""Qt UI constants used across widgets."""

TEACHER_WINDOW_TITLE: str = "ExamQt Teacher Console"
STUDENT_WINDOW_TITLE: str = "ExamQt"
STATISTICS_REFRESH_INTERVAL_MS: int = 2000
QUESTION_FONT_SIZE: int = 14

BUTTON_IMPORT: str = "Import Exam"
BUTTON_EXPORT: str = "Save Exam to File"
BUTTON_PUBLISH: str = "Publish"
BUTTON_UNPUBLISH: str = "Unpublish"
BUTTON_REMOVE: str = "Remove Exam"

IMPORT_DIALOG_TITLE: str = "Select exam file"
IMPORT_FILE_FILTER: str = "Exam files (*.txt);;All files (*.*)"
EXPORT_DIALOG_TITLE: str = "Save exam to file"
EXPORT_FILE_FILTER: str = "Exam files (*.txt);;All files (*.*)"

NO_EXAM_SELECTED_MESSAGE: str = "Select an exam in the list first."
NO_ATTEMPTS_MESSAGE: str = "No completed attempts yet."

INTRO_START_BUTTON: str = "Start Exam"
CONSENT_TITLE: str = "Location Required"
CONSENT_TEXT: str = (
    "This exam records where it is taken from. Allow access to your location to begin. "
    "The exam timer starts as soon as your location is confirmed."
)
CONSENT_ALLOW_BUTTON: str = "Allow Location Access"
CONSENT_RETRY_BUTTON: str = "Try Again"
CONSENT_PENDING_TEXT: str = "Requesting your location..."
SUBMIT_ANSWER_BUTTON: str = "Submit Answer"
DIRECT_ANSWER_PLACEHOLDER: str = "Type your answer"
LOAD_ERROR_TITLE: str = "Could not load the exam"
RETRY_BUTTON: str = "Retry"

DASHBOARD_TITLE: str = "My Exams"
DASHBOARD_DESCRIPTION: str = "Pick a published exam to take, or review the exams you have already taken."
AVAILABLE_EXAMS_LABEL: str = "Available exams"
NO_PUBLISHED_EXAMS_TEXT: str = "No exams are published right now."
HISTORY_LABEL: str = "Exam history"
NO_HISTORY_TEXT: str = "You haven't taken any exams yet. Completed exams will appear here."
TAKE_EXAM_BUTTON: str = "Take Exam"
REFRESH_BUTTON: str = "Refresh"
BACK_TO_DASHBOARD_BUTTON: str = "Back to My Exams"
DASHBOARD_LOAD_ERROR_TEXT: str = "Could not load your exams: {error}"

SUBMISSION_PENDING_TEXT: str = "Saving your results..."
SUBMISSION_DONE_TEXT: str = "Your results have been saved."
SUBMISSION_FAILED_TEXT: str = "Your results could not be saved: {error}"

SCORE_BAND_TITLES: dict[str, str] = {
    "excellent": "Excellent!",
    "good": "Good job!",
    "average": "Average",
    "poor": "Needs improvement",
}
