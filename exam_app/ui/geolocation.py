"""Geolocation provider backed by Qt Positioning."""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject
from PySide6.QtPositioning import QGeoPositionInfo, QGeoPositionInfoSource

from exam_app.constants.network_constants import GEOLOCATION_TIMEOUT_MS
from exam_app.core.models import Coordinates
from exam_app.core.services.geolocation import GeolocationError, GeolocationFailure

logger = logging.getLogger(__name__)

_ERROR_MAP = {
    QGeoPositionInfoSource.Error.AccessError: GeolocationFailure.DENIED,
    QGeoPositionInfoSource.Error.UpdateTimeoutError: GeolocationFailure.TIMEOUT,
    QGeoPositionInfoSource.Error.ClosedError: GeolocationFailure.UNAVAILABLE,
    QGeoPositionInfoSource.Error.UnknownSourceError: GeolocationFailure.UNAVAILABLE,
}


class QtGeolocationProvider(QObject):
    """Requests a single position fix from the platform's default source."""

    def __init__(self, parent: QObject | None = None, timeout_ms: int = GEOLOCATION_TIMEOUT_MS) -> None:
        super().__init__(parent)
        self._timeout_ms = timeout_ms
        self._on_position: Callable[[Coordinates], None] | None = None
        self._on_error: Callable[[GeolocationError], None] | None = None
        self._source = QGeoPositionInfoSource.createDefaultSource(self)
        if self._source is not None:
            self._source.positionUpdated.connect(self._handle_position)
            self._source.errorOccurred.connect(self._handle_error)
        else:
            logger.warning("No Qt positioning source is available on this system")

    @property
    def is_supported(self) -> bool:
        return self._source is not None

    def request_position(
        self,
        on_position: Callable[[Coordinates], None],
        on_error: Callable[[GeolocationError], None],
    ) -> None:
        if self._source is None:
            on_error(GeolocationError(GeolocationFailure.UNSUPPORTED))
            return
        self._on_position = on_position
        self._on_error = on_error
        self._source.requestUpdate(self._timeout_ms)

    def _handle_position(self, info: QGeoPositionInfo) -> None:
        on_position, on_error = self._take_callbacks()
        if on_position is None:
            return
        coordinate = info.coordinate()
        try:
            coordinates = Coordinates(coordinate.latitude(), coordinate.longitude())
        except ValueError as exc:
            on_error(GeolocationError(GeolocationFailure.UNAVAILABLE, str(exc)))
            return
        on_position(coordinates)

    def _handle_error(self, error: QGeoPositionInfoSource.Error) -> None:
        _, on_error = self._take_callbacks()
        if on_error is None:
            return
        failure = _ERROR_MAP.get(error, GeolocationFailure.UNAVAILABLE)
        on_error(GeolocationError(failure))

    def _take_callbacks(
        self,
    ) -> tuple[Callable[[Coordinates], None] | None, Callable[[GeolocationError], None] | None]:
        callbacks = (self._on_position, self._on_error)
        self._on_position = None
        self._on_error = None
        return callbacks
