"""Human-readable formatting of durations and countdowns."""

from __future__ import annotations


def format_countdown(seconds: int) -> str:
    """Format remaining seconds as ``M:SS`` (or ``H:MM:SS`` past an hour)."""
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def format_duration(seconds: float) -> str:
    """Format an elapsed duration as ``Hh Mm Ss`` or ``Mm Ss``."""
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    return f"{minutes}m {secs}s"
