"""Data models for location, heading and bearing lookup state."""

from pyqibla.models.location import AuthorizationState, GeoFix, HeadingSample, LocationErrorCode
from pyqibla.models.qibla import BearingResult, QiblaData, QiblaResponse
from pyqibla.models.snapshot import CoordinationPhase, Snapshot
from pyqibla.models.status import ErrorCategory, ErrorDetail, FetchState, FetchStatus

__all__ = [
    "AuthorizationState",
    "BearingResult",
    "CoordinationPhase",
    "ErrorCategory",
    "ErrorDetail",
    "FetchState",
    "FetchStatus",
    "GeoFix",
    "HeadingSample",
    "LocationErrorCode",
    "QiblaData",
    "QiblaResponse",
    "Snapshot",
]
