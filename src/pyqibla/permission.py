"""Location authorization gate."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pyqibla.exceptions import PermissionErrorKind, QiblaPermissionError
from pyqibla.models.location import AuthorizationState
from pyqibla.models.status import ErrorDetail
from pyqibla.platform import LocationProvider
from pyqibla.state.events import AuthorizationChanged, PermissionFailed, StateEvent

_logger = logging.getLogger(__name__)

RESTRICTED_MESSAGE = "Location services are restricted on this device."
DENIED_MESSAGE = "Location permission denied. Please enable in Settings."


class PermissionGate:
    """Decides when to prompt for permission and when to run the sensor streams."""

    def __init__(self, provider: LocationProvider, publish: Callable[[StateEvent], None]) -> None:
        self._provider = provider
        self._publish = publish
        _logger.debug("Initial authorization status: %s", provider.authorization_state.label)

    @property
    def authorization_state(self) -> AuthorizationState:
        return self._provider.authorization_state

    def _check_access(self, state: AuthorizationState) -> bool:
        """Return ``True`` if streams may start, ``False`` if a prompt is needed.

        Raises
        ------
        QiblaPermissionError
            If access is restricted or denied.
        """
        if state is AuthorizationState.RESTRICTED:
            raise QiblaPermissionError(RESTRICTED_MESSAGE, kind=PermissionErrorKind.RESTRICTED)
        if state is AuthorizationState.DENIED:
            raise QiblaPermissionError(DENIED_MESSAGE, kind=PermissionErrorKind.DENIED)
        return state.is_authorized

    def request_access(self) -> None:
        """Prompt, report a refusal, or start both streams depending on the current state.

        The prompt outcome arrives later through
        :meth:`on_authorization_changed`, never as a return value.
        """
        state = self._provider.authorization_state
        try:
            authorized = self._check_access(state)
        except QiblaPermissionError as exc:
            _logger.warning("Location access unavailable: %s", exc)
            self._publish(PermissionFailed(error=ErrorDetail.from_exception(exc)))
            return

        if not authorized:
            _logger.debug("Authorization not determined, requesting...")
            self._provider.request_when_in_use_authorization()
            return

        _logger.debug("Location authorized, starting updates")
        self.start_streams()

    def start_streams(self) -> None:
        self._provider.start_updating_location()
        self._provider.start_updating_heading()

    def stop_streams(self) -> None:
        self._provider.stop_updating_location()
        self._provider.stop_updating_heading()

    def on_authorization_changed(self, state: AuthorizationState) -> None:
        _logger.debug("Authorization status changed to: %s", state.label)
        self._publish(AuthorizationChanged(state=state))
        if state.is_authorized:
            self.start_streams()
        else:
            # Location stops on its own after the first fix.
            self._provider.stop_updating_heading()
