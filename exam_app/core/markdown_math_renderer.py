"""Markdown + LaTeX rendering for exam question prompts.

Question text is converted to HTML with markdown-it and typeset by MathJax
inside the student's QWebEngineView. Raw HTML in question text is escaped, so
an imported exam file cannot inject script into the student client. An
attachment is appended below the prompt as an image, audio or video element.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from string import Template

from markdown_it import MarkdownIt

from exam_app.core.models import Attachment, AttachmentKind

_MATHJAX_SCRIPT = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"
_MATHJAX_CONFIG = (
    "window.MathJax = { tex: { inlineMath: [['$','$'], ['\\\\(','\\\\)']], "
    "displayMath: [['$$','$$'], ['\\\\[','\\\\]']] } };"
)

_ATTACHMENT_MARKUP = {
    AttachmentKind.IMAGE: '<img src="{url}" alt="{name}" />',
    AttachmentKind.AUDIO: '<audio controls src="{url}">{name}</audio>',
    AttachmentKind.VIDEO: '<video controls src="{url}">{name}</video>',
}

_DOCUMENT = Template(
    """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8" />
<title>$title</title>
<style>
  body { font-family: 'Segoe UI', system-ui, sans-serif; margin: 0; padding: 1rem; }
  .prompt { font-size: ${font_size}pt; line-height: 1.5; }
  .attachment img, .attachment video { max-width: 100%; }
  .attachment audio { width: 100%; }
</style>
<script>$mathjax_config</script>
<script defer src="$mathjax_script"></script>
</head>
<body><div class="prompt">$body</div></body>
</html>"""
)


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Turns question markdown into HTML documents ready for MathJax."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = MarkdownIt("commonmark", {"html": self.enable_html}).enable(
            ["table", "strikethrough"]
        )

    def render_fragment(self, markdown_text: str) -> str:
        text = markdown_text.strip()
        if not text:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(text)

    def render_attachment(self, attachment: Attachment) -> str:
        element = _ATTACHMENT_MARKUP[attachment.kind].format(
            url=escape(attachment.url, quote=True),
            name=escape(attachment.filename),
        )
        return f'<figure class="attachment">{element}</figure>'

    def render_full_document(
        self,
        markdown_text: str,
        title: str = "ExamQt",
        font_size: int = 14,
        attachment: Attachment | None = None,
    ) -> str:
        """Render the prompt, append the attachment, and wrap it in a MathJax page."""
        body = self.render_fragment(markdown_text)
        if attachment is not None:
            body += self.render_attachment(attachment)
        return _DOCUMENT.substitute(
            title=escape(title),
            font_size=font_size,
            mathjax_config=_MATHJAX_CONFIG,
            mathjax_script=_MATHJAX_SCRIPT,
            body=body,
        )


renderer = MarkdownMathRenderer()
