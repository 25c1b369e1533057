"""Error and fetch-status models stored on the snapshot."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator

from pyqibla.exceptions import QiblaError, QiblaFetchError, QiblaLocationError, QiblaPermissionError
from pyqibla.models.qibla import BearingResult


class ErrorCategory(StrEnum):
    PERMISSION = "permission"
    LOCATION = "location"
    FETCH = "fetch"


class ErrorDetail(BaseModel):
    """A captured failure, ready for display.

    Parameters
    ----------
    category : ErrorCategory
        Which subsystem produced the failure.
    kind : str
        The failure kind within the category (e.g. ``"denied"``,
        ``"server_status"``).
    message : str
        User-facing description.
    status_code : int or None
        HTTP status for ``server_status`` fetch failures.
    code : str or None
        Raw platform code for location failures.
    retriable : bool
        Whether a user action (retry, Settings) can clear it.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    category: ErrorCategory
    kind: str
    message: str
    status_code: int | None = None
    code: str | None = None
    retriable: bool = True

    @classmethod
    def from_exception(cls, exc: QiblaError) -> ErrorDetail:
        """Fold a pyqibla exception into a snapshot-ready error."""
        if isinstance(exc, QiblaPermissionError):
            return cls(
                category=ErrorCategory.PERMISSION,
                kind=exc.kind.value,
                message=str(exc),
                retriable=exc.retriable,
            )
        if isinstance(exc, QiblaLocationError):
            return cls(
                category=ErrorCategory.LOCATION,
                kind=exc.kind.value,
                message=str(exc),
                code=exc.code or None,
            )
        if isinstance(exc, QiblaFetchError):
            return cls(
                category=ErrorCategory.FETCH,
                kind=exc.kind.value,
                message=str(exc),
                status_code=exc.status_code,
            )
        raise TypeError(f"Unsupported error type: {type(exc).__name__}")


class FetchState(StrEnum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FetchStatus(BaseModel):
    """Lifecycle of the bearing lookup: ``idle → in_flight → succeeded | failed``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    state: FetchState = FetchState.IDLE
    result: BearingResult | None = None
    error: ErrorDetail | None = None

    @model_validator(mode="after")
    def _check_payload(self) -> FetchStatus:
        if (self.result is not None) != (self.state is FetchState.SUCCEEDED):
            raise ValueError("result must be set exactly when state is succeeded")
        if (self.error is not None) != (self.state is FetchState.FAILED):
            raise ValueError("error must be set exactly when state is failed")
        return self

    @classmethod
    def idle(cls) -> FetchStatus:
        return cls()

    @classmethod
    def in_flight(cls) -> FetchStatus:
        return cls(state=FetchState.IN_FLIGHT)

    @classmethod
    def succeeded(cls, result: BearingResult) -> FetchStatus:
        return cls(state=FetchState.SUCCEEDED, result=result)

    @classmethod
    def failed(cls, error: ErrorDetail) -> FetchStatus:
        return cls(state=FetchState.FAILED, error=error)
