"""The coordinated snapshot read by the presentation layer."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pyqibla._constants import normalize_degrees
from pyqibla.models.location import AuthorizationState, GeoFix, HeadingSample
from pyqibla.models.status import ErrorCategory, ErrorDetail, FetchState, FetchStatus


class CoordinationPhase(StrEnum):
    IDLE = "idle"
    AWAITING_PERMISSION = "awaiting_permission"
    AWAITING_FIX = "awaiting_fix"
    FETCHING = "fetching"
    READY = "ready"
    PERMISSION_DENIED = "permission_denied"
    LOCATION_FAILED = "location_failed"
    FETCH_FAILED = "fetch_failed"


class Snapshot(BaseModel):
    """Immutable merged view of permission, sensors and the bearing lookup.

    Parameters
    ----------
    authorization : AuthorizationState
        Last authorization state reported by the platform.
    fix : GeoFix or None
        Most recent location fix.
    heading : HeadingSample or None
        Most recent usable heading sample.
    is_heading_accurate : bool
        Whether the most recent heading sample (usable or not) was accurate.
    fetch_status : FetchStatus
        Bearing lookup lifecycle.
    location_error : ErrorDetail or None
        Last permission or location failure.
    pending_requests : int
        Trigger calls still waiting for their first fix.
    fetch_generation : int
        Sequence number of the most recently started lookup.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    authorization: AuthorizationState = AuthorizationState.UNDETERMINED
    fix: GeoFix | None = None
    heading: HeadingSample | None = None
    is_heading_accurate: bool = False
    fetch_status: FetchStatus = Field(default_factory=FetchStatus)
    location_error: ErrorDetail | None = None
    pending_requests: int = 0
    fetch_generation: int = 0

    @model_validator(mode="after")
    def _check_consistency(self) -> Snapshot:
        if self.fetch_status.state is FetchState.SUCCEEDED and self.fix is None:
            raise ValueError("a bearing cannot exist without a fix")
        if self.pending_requests < 0:
            raise ValueError("pending_requests must not be negative")
        return self

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def qibla_direction(self) -> float | None:
        result = self.fetch_status.result
        return result.degrees if result is not None else None

    @property
    def device_heading(self) -> float:
        """Last published heading; ``0.0`` until a usable sample arrives."""
        return self.heading.true_heading if self.heading is not None else 0.0

    @property
    def dial_rotation(self) -> float:
        """Rotation to apply to a north-up compass card so it tracks the device."""
        return -self.device_heading

    @property
    def relative_bearing(self) -> float | None:
        """Qibla bearing relative to where the device is pointing, in ``[0, 360)``."""
        direction = self.qibla_direction
        if direction is None:
            return None
        return normalize_degrees(direction - self.device_heading)

    @property
    def is_loading(self) -> bool:
        return self.fetch_status.state is FetchState.IN_FLIGHT

    @property
    def needs_calibration(self) -> bool:
        return self.qibla_direction is not None and not self.is_heading_accurate

    @property
    def is_requesting(self) -> bool:
        return self.pending_requests > 0

    @property
    def fetch_error(self) -> ErrorDetail | None:
        return self.fetch_status.error

    @property
    def phase(self) -> CoordinationPhase:
        """Where the acquisition pipeline currently stands.

        Derived from the fields alone; the snapshot carries no hidden state.
        """
        state = self.fetch_status.state
        if state is FetchState.IN_FLIGHT:
            return CoordinationPhase.FETCHING

        permission_failed = self.authorization.is_blocked or (
            self.location_error is not None and self.location_error.category is ErrorCategory.PERMISSION
        )
        if self.is_requesting:
            if permission_failed:
                return CoordinationPhase.PERMISSION_DENIED
            if self.location_error is not None:
                return CoordinationPhase.LOCATION_FAILED
            if self.authorization is AuthorizationState.UNDETERMINED:
                return CoordinationPhase.AWAITING_PERMISSION
            return CoordinationPhase.AWAITING_FIX

        if state is FetchState.SUCCEEDED:
            return CoordinationPhase.READY
        if state is FetchState.FAILED:
            return CoordinationPhase.FETCH_FAILED
        if permission_failed:
            return CoordinationPhase.PERMISSION_DENIED
        if self.location_error is not None:
            return CoordinationPhase.LOCATION_FAILED
        return CoordinationPhase.IDLE
