"""Platform seam: what the core asks of the OS, and what the OS pushes back.

A platform adapter implements :class:`LocationProvider` and delivers its
readings by invoking the four callback slots of a :class:`LocationDelegate`.
Core logic never polls the provider for readings.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from pyqibla.models.location import AuthorizationState, GeoFix, HeadingSample, LocationErrorCode


class LocationDelegate(Protocol):
    """Push interface the platform adapter invokes.

    Callbacks may arrive on any thread.
    """

    def on_location_batch(self, fixes: Sequence[GeoFix]) -> None: ...

    def on_heading_sample(self, sample: HeadingSample) -> None: ...

    def on_authorization_changed(self, state: AuthorizationState) -> None: ...

    def on_failure(self, code: LocationErrorCode | str, description: str = "") -> None: ...

    def should_display_heading_calibration(self) -> bool: ...


class LocationProvider(Protocol):
    """Structural interface to the platform's location and compass services.

    ``stop_*`` methods must be idempotent.
    """

    @property
    def authorization_state(self) -> AuthorizationState: ...

    def set_delegate(self, delegate: LocationDelegate | None) -> None: ...

    def request_when_in_use_authorization(self) -> None: ...

    def start_updating_location(self) -> None: ...

    def stop_updating_location(self) -> None: ...

    def start_updating_heading(self) -> None: ...

    def stop_updating_heading(self) -> None: ...

    def open_settings(self) -> None: ...
