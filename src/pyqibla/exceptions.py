"""Custom exception hierarchy for pyqibla.

These are raised inside the lookup and sensor paths and caught at the
component boundary, where they are folded into an
:class:`~pyqibla.models.status.ErrorDetail` on the snapshot.  Callers of
:class:`~pyqibla.coordinator.QiblaCoordinator` observe failures through the
snapshot, not through raised exceptions.
"""

from __future__ import annotations

from enum import StrEnum


class PermissionErrorKind(StrEnum):
    RESTRICTED = "restricted"
    DENIED = "denied"


class LocationErrorKind(StrEnum):
    UNKNOWN = "unknown"
    DENIED = "denied"
    NETWORK = "network"
    HEADING_FAILURE = "heading_failure"
    TIMEOUT = "timeout"
    OTHER = "other"


class FetchErrorKind(StrEnum):
    INVALID_URL = "invalid_url"
    TRANSPORT = "transport"
    SERVER_STATUS = "server_status"
    EMPTY_BODY = "empty_body"
    DECODE = "decode"


class QiblaError(Exception):
    """Base exception for all pyqibla errors."""


class QiblaConfigError(QiblaError):
    """Invalid or missing configuration."""


class QiblaPermissionError(QiblaError):
    """Location authorization does not allow sensor access."""

    def __init__(self, message: str, *, kind: PermissionErrorKind) -> None:
        self.kind = kind
        super().__init__(message)

    @property
    def retriable(self) -> bool:
        """Denied can be fixed by the user in Settings; restricted cannot."""
        return self.kind is PermissionErrorKind.DENIED


class QiblaLocationError(QiblaError):
    """Platform location/heading failure."""

    def __init__(self, message: str, *, kind: LocationErrorKind, code: str = "") -> None:
        self.kind = kind
        self.code = code
        super().__init__(message)


class QiblaFetchError(QiblaError):
    """Bearing lookup failure (URL, network, non-2xx, empty or invalid body)."""

    def __init__(
        self,
        message: str,
        *,
        kind: FetchErrorKind,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.kind = kind
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
