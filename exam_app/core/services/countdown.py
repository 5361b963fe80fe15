"""Whole-second countdown timers driven by a shared tick source."""

from __future__ import annotations

from typing import Callable, Protocol


class TickSource(Protocol):
    """Clock that calls a callback once per second until stopped."""

    def start(self, callback: Callable[[], None]) -> None:
        ...

    def stop(self) -> None:
        ...


class CountdownTimer:
    """Counts down from ``seconds`` by one per tick and fires ``on_expire`` once at zero.

    A cancelled or expired timer ignores further ticks.
    """

    def __init__(
        self,
        seconds: int,
        on_expire: Callable[[], None],
        on_tick: Callable[[int], None] | None = None,
    ) -> None:
        if seconds <= 0:
            raise ValueError("Countdown must start from a positive number of seconds.")
        self._remaining = seconds
        self._total = seconds
        self._on_expire = on_expire
        self._on_tick = on_tick
        self._running = True

    @property
    def remaining(self) -> int:
        return self._remaining

    @property
    def total(self) -> int:
        return self._total

    def is_running(self) -> bool:
        return self._running

    def cancel(self) -> None:
        self._running = False

    def resume(self) -> None:
        """Undo a cancel; an expired timer stays stopped."""
        if self._remaining > 0:
            self._running = True

    def tick(self) -> None:
        if not self._running:
            return
        self._remaining -= 1
        if self._on_tick is not None:
            self._on_tick(self._remaining)
        if self._remaining <= 0:
            self._remaining = 0
            self._running = False
            self._on_expire()
