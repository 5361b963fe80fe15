"""Qt UI components for the teacher console and the student client."""

from .dialog_helpers import (
    confirm_remove_exam,
    show_error,
    show_info,
    show_warning,
)
from .question_renderer import render_question
from .student_exam_window import StudentExamWindow
from .teacher_main_window import TeacherMainWindow

__all__ = [
    "StudentExamWindow",
    "TeacherMainWindow",
    "confirm_remove_exam",
    "show_error",
    "show_info",
    "show_warning",
    "render_question",
]
