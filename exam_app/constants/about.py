"""Static metadata describing ExamQt."""

APP_NAME = "ExamQt"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "ExamQt is an exam facilitator built with Qt and FastAPI. "
    "Teachers publish timed exams from text files; students take them from the ExamQt student client "
    "and teachers follow the aggregated statistics live."
)

HELP_TEXT = (
    "Exams are authored as .txt files. Start with a header block, then add one block per question, "
    "separated by blank lines or '---':\n\n"
    "TITLE: Arithmetic warm-up\nAUDIENCE: Grade 7\nDURATION: 10\n\n"
    "Q: What is $6 \\times 7$?\nANSWER: 42\nTOLERANCE: 0\nPOINTS: 2\nTIMELIMIT: 30\n\n"
    "Q: Which numbers are prime?\nA: 4\nB: 5\nC: 7\nCORRECT: B, C\nTIMELIMIT: 20\n\n"
    "Direct answers that are numbers are accepted within TOLERANCE percent of the correct value "
    "(default 10). Time limits are at least 15 seconds."
)
