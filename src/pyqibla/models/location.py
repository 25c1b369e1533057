"""Location, heading and authorization models.

These mirror what a platform location provider delivers:

* :class:`AuthorizationState` - the OS location-permission state.
* :class:`GeoFix` - one location reading (replaced wholesale, never merged).
* :class:`HeadingSample` - one compass reading with its reported uncertainty.
* :class:`LocationErrorCode` - typed platform failure codes.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyqibla._constants import HEADING_ACCURACY_THRESHOLD, normalize_degrees


class AuthorizationState(StrEnum):
    UNDETERMINED = "undetermined"
    RESTRICTED = "restricted"
    DENIED = "denied"
    AUTHORIZED_WHILE_ACTIVE = "authorized_while_active"
    AUTHORIZED_ALWAYS = "authorized_always"

    @property
    def is_authorized(self) -> bool:
        return self in (AuthorizationState.AUTHORIZED_WHILE_ACTIVE, AuthorizationState.AUTHORIZED_ALWAYS)

    @property
    def is_blocked(self) -> bool:
        """Whether the user (or a policy) has refused location access."""
        return self in (AuthorizationState.RESTRICTED, AuthorizationState.DENIED)

    @property
    def label(self) -> str:
        return _AUTHORIZATION_LABELS[self]


_AUTHORIZATION_LABELS: dict[AuthorizationState, str] = {
    AuthorizationState.UNDETERMINED: "Not Determined",
    AuthorizationState.RESTRICTED: "Restricted",
    AuthorizationState.DENIED: "Denied",
    AuthorizationState.AUTHORIZED_WHILE_ACTIVE: "Authorized When In Use",
    AuthorizationState.AUTHORIZED_ALWAYS: "Authorized Always",
}


class LocationErrorCode(StrEnum):
    """Failure codes a platform provider may report.

    Codes the provider sends that have no mapped member resolve to
    ``OTHER`` instead of raising ``ValueError``.
    """

    LOCATION_UNKNOWN = "location_unknown"
    DENIED = "denied"
    NETWORK = "network"
    HEADING_FAILURE = "heading_failure"
    REGION_MONITORING_DENIED = "region_monitoring_denied"
    REGION_MONITORING_FAILURE = "region_monitoring_failure"
    REGION_MONITORING_SETUP_DELAYED = "region_monitoring_setup_delayed"
    REGION_MONITORING_RESPONSE_DELAYED = "region_monitoring_response_delayed"
    GEOCODE_FOUND_NO_RESULT = "geocode_found_no_result"
    GEOCODE_FOUND_PARTIAL_RESULT = "geocode_found_partial_result"
    GEOCODE_CANCELED = "geocode_canceled"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: object) -> LocationErrorCode:
        return cls.OTHER


class GeoFix(BaseModel):
    """A single location reading in decimal degrees.

    Parameters
    ----------
    latitude : float
        Latitude in ``[-90, 90]``.
    longitude : float
        Longitude in ``[-180, 180]``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


class HeadingSample(BaseModel):
    """A compass reading.

    ``accuracy`` is the platform-reported angular uncertainty in degrees.
    A non-positive accuracy means the reading is invalid.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    true_heading: float = Field(allow_inf_nan=False)
    accuracy: float = Field(allow_inf_nan=False)

    @field_validator("true_heading", mode="after")
    @classmethod
    def _wrap_heading(cls, value: float) -> float:
        return normalize_degrees(value)

    @property
    def is_usable(self) -> bool:
        return self.accuracy > 0

    def is_accurate_within(self, threshold: float) -> bool:
        return self.is_usable and self.accuracy <= threshold

    @property
    def is_accurate(self) -> bool:
        return self.is_accurate_within(HEADING_ACCURACY_THRESHOLD)

