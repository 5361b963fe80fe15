from __future__ import annotations

import pytest

from exam_app.core.models import Coordinates
from exam_app.core.services.geolocation import (
    GeolocationError,
    GeolocationFailure,
    StaticGeolocationProvider,
)


def test_static_provider_reports_configured_position():
    provider = StaticGeolocationProvider.from_setting("59.91, 10.75")
    positions = []
    provider.request_position(positions.append, pytest.fail)
    assert positions == [Coordinates(59.91, 10.75)]


def test_empty_setting_reports_unsupported():
    provider = StaticGeolocationProvider.from_setting("")
    errors = []
    provider.request_position(pytest.fail, errors.append)
    assert errors[0].failure is GeolocationFailure.UNSUPPORTED


@pytest.mark.parametrize("value", ["59.91", "north,south", "100,0"])
def test_invalid_setting_is_rejected(value):
    with pytest.raises(ValueError):
        StaticGeolocationProvider.from_setting(value)


def test_error_message_includes_detail():
    error = GeolocationError(GeolocationFailure.TIMEOUT, "after 15 s")
    assert "in time" in str(error)
    assert "after 15 s" in str(error)
