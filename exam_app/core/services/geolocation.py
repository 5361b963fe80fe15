"""Geolocation collaborator used to gate the start of an attempt."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Protocol

from exam_app.core.models import Coordinates


class GeolocationFailure(Enum):
    DENIED = "denied"
    UNSUPPORTED = "unsupported"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"


_FAILURE_MESSAGES = {
    GeolocationFailure.DENIED: "Location access was denied. You must allow location access to take this exam.",
    GeolocationFailure.UNSUPPORTED: "This device does not support geolocation, which is required for this exam.",
    GeolocationFailure.TIMEOUT: "Your location could not be determined in time.",
    GeolocationFailure.UNAVAILABLE: "Your location is currently unavailable.",
}


class GeolocationError(Exception):
    """Raised or reported when no position could be obtained."""

    def __init__(self, failure: GeolocationFailure, detail: str | None = None) -> None:
        message = _FAILURE_MESSAGES[failure]
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.failure = failure


class GeolocationProvider(Protocol):
    """Yields one position fix asynchronously through the given callbacks."""

    def request_position(
        self,
        on_position: Callable[[Coordinates], None],
        on_error: Callable[[GeolocationError], None],
    ) -> None:
        ...


class StaticGeolocationProvider:
    """Reports a fixed position; used when the host has no positioning backend."""

    def __init__(self, coordinates: Coordinates | None) -> None:
        self._coordinates = coordinates

    @classmethod
    def from_setting(cls, value: str | None) -> "StaticGeolocationProvider":
        """Build from a ``"<latitude>,<longitude>"`` setting; empty means unsupported."""
        if not value:
            return cls(None)
        try:
            latitude_text, longitude_text = value.split(",", 1)
            coordinates = Coordinates(float(latitude_text), float(longitude_text))
        except ValueError as exc:
            raise ValueError(f"Invalid location setting '{value}'; expected 'latitude,longitude'.") from exc
        return cls(coordinates)

    def request_position(
        self,
        on_position: Callable[[Coordinates], None],
        on_error: Callable[[GeolocationError], None],
    ) -> None:
        if self._coordinates is None:
            on_error(GeolocationError(GeolocationFailure.UNSUPPORTED))
            return
        on_position(self._coordinates)
