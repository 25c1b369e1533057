"""Location and heading feed handling.

Location is acquired once per session: the first batch publishes a fix and
stops the location stream.  Heading runs continuously while authorized and
is filtered by reported accuracy.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from pyqibla._constants import HEADING_ACCURACY_THRESHOLD
from pyqibla._redact import coarsen_coordinate
from pyqibla.exceptions import LocationErrorKind, QiblaLocationError
from pyqibla.models.location import GeoFix, HeadingSample, LocationErrorCode
from pyqibla.models.status import ErrorDetail
from pyqibla.platform import LocationProvider
from pyqibla.state.events import FixPublished, HeadingDiscarded, HeadingPublished, LocationFailed, StateEvent
from pyqibla.state.policy import HeadingVerdict, classify_heading

_logger = logging.getLogger(__name__)

_FAILURE_MAP: dict[LocationErrorCode, tuple[LocationErrorKind, str]] = {
    LocationErrorCode.LOCATION_UNKNOWN: (
        LocationErrorKind.UNKNOWN,
        "Unable to determine location. Please try again.",
    ),
    LocationErrorCode.DENIED: (
        LocationErrorKind.DENIED,
        "Location permission denied. Please enable in Settings.",
    ),
    LocationErrorCode.NETWORK: (
        LocationErrorKind.NETWORK,
        "Network error. Please check your connection.",
    ),
    LocationErrorCode.HEADING_FAILURE: (
        LocationErrorKind.HEADING_FAILURE,
        "Unable to determine heading. Please try calibrating your device.",
    ),
    # Not reachable from this feature, passed through for completeness.
    LocationErrorCode.REGION_MONITORING_DENIED: (LocationErrorKind.OTHER, "Region monitoring denied."),
    LocationErrorCode.REGION_MONITORING_FAILURE: (LocationErrorKind.OTHER, "Region monitoring failure."),
    LocationErrorCode.REGION_MONITORING_SETUP_DELAYED: (LocationErrorKind.OTHER, "Region monitoring setup delayed."),
    LocationErrorCode.REGION_MONITORING_RESPONSE_DELAYED: (
        LocationErrorKind.OTHER,
        "Region monitoring response delayed.",
    ),
    LocationErrorCode.GEOCODE_FOUND_NO_RESULT: (LocationErrorKind.OTHER, "No geocoding result found."),
    LocationErrorCode.GEOCODE_FOUND_PARTIAL_RESULT: (LocationErrorKind.OTHER, "Partial geocoding result."),
    LocationErrorCode.GEOCODE_CANCELED: (LocationErrorKind.OTHER, "Geocoding canceled."),
}


def map_location_failure(code: LocationErrorCode | str, description: str = "") -> QiblaLocationError:
    """Translate a platform failure code into a :class:`QiblaLocationError`."""
    raw_code = code.value if isinstance(code, LocationErrorCode) else str(code)
    parsed = LocationErrorCode(raw_code)
    mapped = _FAILURE_MAP.get(parsed)
    if mapped is None:
        detail = description or raw_code
        return QiblaLocationError(f"Location error: {detail}", kind=LocationErrorKind.OTHER, code=raw_code)
    kind, message = mapped
    return QiblaLocationError(message, kind=kind, code=raw_code)


class SensorStream:
    """Turns raw platform readings into state events."""

    def __init__(
        self,
        provider: LocationProvider,
        publish: Callable[[StateEvent], None],
        *,
        accuracy_threshold: float = HEADING_ACCURACY_THRESHOLD,
    ) -> None:
        self._provider = provider
        self._publish = publish
        self._accuracy_threshold = accuracy_threshold

    def on_location_batch(self, fixes: Sequence[GeoFix]) -> None:
        if not fixes:
            _logger.debug("No location in update")
            return

        fix = fixes[-1]
        _logger.debug(
            "Location updated: %s, %s",
            coarsen_coordinate(fix.latitude),
            coarsen_coordinate(fix.longitude),
        )
        self._publish(FixPublished(fix=fix))
        # One fix per session is enough; stop to save power.
        self._provider.stop_updating_location()

    def on_heading_sample(self, sample: HeadingSample) -> None:
        verdict = classify_heading(sample, self._accuracy_threshold)
        if verdict is HeadingVerdict.DISCARD:
            self._publish(HeadingDiscarded(sample=sample))
            return
        self._publish(HeadingPublished(sample=sample, accurate=verdict is HeadingVerdict.ACCURATE))

    def on_failure(self, code: LocationErrorCode | str, description: str = "") -> None:
        """Publish a platform failure; never raises."""
        error = map_location_failure(code, description)
        _logger.warning("Location error code=%s: %s", error.code, error)
        self._publish(LocationFailed(error=ErrorDetail.from_exception(error)))

    def should_display_heading_calibration(self) -> bool:
        # Let the system show its own calibration UI when it detects interference.
        return True
