"""Tick source backed by a Qt timer on the GUI event loop."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QObject, QTimer

from exam_app.constants.exam_constants import TICK_INTERVAL_MS


class QtTickSource(QObject):
    """Calls the registered callback once per second while started."""

    def __init__(self, parent: QObject | None = None, interval_ms: int = TICK_INTERVAL_MS) -> None:
        super().__init__(parent)
        self._callback: Callable[[], None] | None = None
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._handle_timeout)

    def start(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()
        self._callback = None

    def _handle_timeout(self) -> None:
        if self._callback is not None:
            self._callback()
