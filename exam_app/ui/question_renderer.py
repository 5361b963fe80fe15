"""Question rendering utilities for the student exam window."""

from __future__ import annotations

import string

from exam_app.constants.ui_constants import QUESTION_FONT_SIZE
from exam_app.core.markdown_math_renderer import renderer
from exam_app.core.models import Question


def render_question(question: Question, font_size: int = QUESTION_FONT_SIZE) -> str:
    """Render a question (and its options, if any) as a MathJax-enabled HTML page.

    Options are listed with their letters so LaTeX inside them is typeset; the
    student picks the matching lettered radio button below the view.
    """
    markdown_lines = [question.text.strip() or "(No question text)"]
    for letter, option in zip(string.ascii_uppercase, question.options or []):
        markdown_lines.append(f"**{letter}.** {option or '(empty)'}")
    markdown = "\n\n".join(markdown_lines)
    return renderer.render_full_document(markdown, font_size=font_size, attachment=question.attachment)
