"""In-process location provider that scripts platform behaviour.

Useful for tests, demos and desktop hosts without a real location service.
Readings are only delivered while the matching stream is running, just like
a real platform.
"""

from __future__ import annotations

import logging

from pyqibla.models.location import AuthorizationState, GeoFix, HeadingSample, LocationErrorCode
from pyqibla.platform import LocationDelegate

_logger = logging.getLogger(__name__)


class SimulatedLocationProvider:
    """A scriptable :class:`~pyqibla.platform.LocationProvider`.

    Parameters
    ----------
    authorization : AuthorizationState
        Authorization state at "process start".
    """

    def __init__(self, authorization: AuthorizationState = AuthorizationState.UNDETERMINED) -> None:
        self._authorization = authorization
        self._delegate: LocationDelegate | None = None
        self.location_updating = False
        self.heading_updating = False
        self.prompt_requests = 0
        self.settings_opened = 0
        self.location_starts = 0
        self.heading_starts = 0

    # ------------------------------------------------------------------
    # LocationProvider
    # ------------------------------------------------------------------

    @property
    def authorization_state(self) -> AuthorizationState:
        return self._authorization

    def set_delegate(self, delegate: LocationDelegate | None) -> None:
        self._delegate = delegate

    def request_when_in_use_authorization(self) -> None:
        self.prompt_requests += 1

    def start_updating_location(self) -> None:
        self.location_starts += 1
        self.location_updating = True

    def stop_updating_location(self) -> None:
        self.location_updating = False

    def start_updating_heading(self) -> None:
        self.heading_starts += 1
        self.heading_updating = True

    def stop_updating_heading(self) -> None:
        self.heading_updating = False

    def open_settings(self) -> None:
        self.settings_opened += 1

    # ------------------------------------------------------------------
    # Scripting helpers (what the OS would do)
    # ------------------------------------------------------------------

    def set_authorization(self, state: AuthorizationState) -> None:
        """Change authorization and notify the delegate."""
        self._authorization = state
        if self._delegate is not None:
            self._delegate.on_authorization_changed(state)

    def grant(self, state: AuthorizationState = AuthorizationState.AUTHORIZED_WHILE_ACTIVE) -> None:
        self.set_authorization(state)

    def deny(self) -> None:
        self.set_authorization(AuthorizationState.DENIED)

    def deliver_fixes(self, *fixes: GeoFix) -> bool:
        """Deliver a location batch; returns ``False`` if location is not running."""
        if not self.location_updating or self._delegate is None:
            _logger.debug("Location batch dropped: stream stopped")
            return False
        self._delegate.on_location_batch(list(fixes))
        return True

    def deliver_fix(self, latitude: float, longitude: float) -> bool:
        return self.deliver_fixes(GeoFix(latitude=latitude, longitude=longitude))

    def deliver_heading(self, true_heading: float, accuracy: float) -> bool:
        """Deliver a heading sample; returns ``False`` if heading is not running."""
        if not self.heading_updating or self._delegate is None:
            _logger.debug("Heading sample dropped: stream stopped")
            return False
        self._delegate.on_heading_sample(HeadingSample(true_heading=true_heading, accuracy=accuracy))
        return True

    def fail(self, code: LocationErrorCode | str, description: str = "") -> None:
        if self._delegate is not None:
            self._delegate.on_failure(code, description)
