"""High-level async coordinator: permission, sensors and bearing lookup."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any

import aiohttp

from pyqibla._redact import coarsen_coordinate
from pyqibla._transport import HttpTransport, Transport
from pyqibla.config import QiblaConfig
from pyqibla.exceptions import LocationErrorKind, QiblaError, QiblaLocationError
from pyqibla.fetcher import DirectionFetcher
from pyqibla.models.location import AuthorizationState, GeoFix, HeadingSample, LocationErrorCode
from pyqibla.models.snapshot import Snapshot
from pyqibla.models.status import ErrorDetail
from pyqibla.permission import PermissionGate
from pyqibla.platform import LocationProvider
from pyqibla.sensors import SensorStream
from pyqibla.state.events import FixPublished, LocationFailed, RequestSettled, RequestStarted
from pyqibla.state.store import SnapshotListener, SnapshotStore
from pyqibla.state.subscriptions import OneShotSubscription

_logger = logging.getLogger(__name__)

FIX_TIMEOUT_MESSAGE = "Timed out waiting for a location fix. Please try again."

FixRequest = OneShotSubscription[FixPublished]


class QiblaCoordinator:
    """Sequences permission, location, heading and the bearing lookup.

    All snapshot mutation happens on the event loop that entered the
    context.  Platform callbacks may arrive from any thread; they are
    redispatched onto that loop before touching state.

    Usage::

        async with QiblaCoordinator(provider) as coordinator:
            coordinator.subscribe(render)
            coordinator.request_location_and_fetch_qibla()
    """

    def __init__(
        self,
        provider: LocationProvider,
        config: QiblaConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        on_snapshot: SnapshotListener | None = None,
    ) -> None:
        self._provider = provider
        self._config = config or QiblaConfig()
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._store = SnapshotStore(authorization=provider.authorization_state)
        self._gate = PermissionGate(provider, self._store.apply)
        self._sensors = SensorStream(
            provider,
            self._store.apply,
            accuracy_threshold=self._config.accuracy_threshold,
        )
        self._fetcher: DirectionFetcher | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._fix_requests: dict[FixRequest, asyncio.TimerHandle | None] = {}
        if on_snapshot is not None:
            self._store.subscribe(on_snapshot)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> QiblaCoordinator:
        self._loop = asyncio.get_running_loop()
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        self._fetcher = DirectionFetcher(self._transport, self._store.apply, loop=self._loop)
        self._provider.set_delegate(self)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Stop sensors, drop pending requests and in-flight lookups."""
        self._provider.set_delegate(None)
        self._gate.stop_streams()
        for request in list(self._fix_requests):
            request.cancel()
            self._settle(request)
        if self._fetcher is not None:
            await self._fetcher.aclose()
            self._fetcher = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None
        self._loop = None

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def config(self) -> QiblaConfig:
        return self._config

    @property
    def snapshot(self) -> Snapshot:
        return self._store.snapshot

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call *listener* with every new snapshot; returns an unsubscribe callable."""
        return self._store.subscribe(listener)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def request_location_and_fetch_qibla(self) -> FixRequest:
        """Request access and fetch the bearing for the next location fix.

        Used on launch and for user retry.  Each call waits for exactly one
        fix produced after the call and issues exactly one lookup for it.
        Earlier pending calls and in-flight lookups are left running.

        Returns
        -------
        OneShotSubscription
            Await ``.wait()`` for the fix that triggered the lookup.
        """
        self._require_loop()
        request = self._store.once(FixPublished, callback=self._on_first_fix)
        self._fix_requests[request] = None
        self._store.apply(RequestStarted())

        self._gate.request_access()
        if self._provider.authorization_state.is_authorized and not request.done:
            self._arm_fix_timeout(request)
        return request

    def open_settings(self) -> None:
        """Ask the platform to show its settings screen (after a denial)."""
        self._provider.open_settings()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None or self._fetcher is None:
            raise QiblaError("Coordinator not started. Use 'async with QiblaCoordinator(...) as coordinator:'")
        return self._loop

    def _on_first_fix(self, event: FixPublished) -> None:
        request = self._fired_request(event)
        if request is None:
            return
        fetcher = self._fetcher
        if fetcher is not None:
            _logger.debug(
                "Fix acquired for pending request: %s, %s",
                coarsen_coordinate(event.fix.latitude),
                coarsen_coordinate(event.fix.longitude),
            )
            # Start the lookup before settling so the phase goes straight to fetching.
            fetcher.fetch(event.fix.latitude, event.fix.longitude)
        self._settle(request)

    def _fired_request(self, event: FixPublished) -> FixRequest | None:
        for request in self._fix_requests:
            if request.result is event:
                return request
        return None

    def _settle(self, request: FixRequest) -> None:
        if request not in self._fix_requests:
            return
        handle = self._fix_requests.pop(request)
        if handle is not None:
            handle.cancel()
        self._store.apply(RequestSettled())

    def _arm_fix_timeout(self, request: FixRequest) -> None:
        timeout = self._config.fix_timeout
        loop = self._loop
        if timeout <= 0 or loop is None or self._fix_requests.get(request) is not None:
            return
        self._fix_requests[request] = loop.call_later(timeout, self._on_fix_timeout, request)

    def _disarm_fix_timeouts(self) -> None:
        for request, handle in self._fix_requests.items():
            if handle is not None:
                handle.cancel()
                self._fix_requests[request] = None

    def _on_fix_timeout(self, request: FixRequest) -> None:
        if request not in self._fix_requests:
            return
        self._fix_requests[request] = None
        if not request.cancel():
            return
        self._settle(request)
        _logger.warning("No location fix within %.1fs", self._config.fix_timeout)
        error = QiblaLocationError(FIX_TIMEOUT_MESSAGE, kind=LocationErrorKind.TIMEOUT)
        self._store.apply(LocationFailed(error=ErrorDetail.from_exception(error)))

    def _dispatch(self, fn: Callable[..., None], *args: Any) -> None:
        """Run *fn* on the owning loop, inline when already there."""
        loop = self._loop
        if loop is None:
            _logger.debug("Dropping %s: coordinator not running", getattr(fn, "__name__", fn))
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            fn(*args)
        else:
            loop.call_soon_threadsafe(fn, *args)

    # ------------------------------------------------------------------
    # LocationDelegate callback slots
    # ------------------------------------------------------------------

    def on_location_batch(self, fixes: Sequence[GeoFix]) -> None:
        self._dispatch(self._sensors.on_location_batch, list(fixes))

    def on_heading_sample(self, sample: HeadingSample) -> None:
        self._dispatch(self._sensors.on_heading_sample, sample)

    def on_authorization_changed(self, state: AuthorizationState) -> None:
        self._dispatch(self._handle_authorization_changed, state)

    def on_failure(self, code: LocationErrorCode | str, description: str = "") -> None:
        self._dispatch(self._sensors.on_failure, code, description)

    def should_display_heading_calibration(self) -> bool:
        return self._sensors.should_display_heading_calibration()

    def _handle_authorization_changed(self, state: AuthorizationState) -> None:
        self._gate.on_authorization_changed(state)
        if state.is_authorized:
            for request in list(self._fix_requests):
                if not request.done:
                    self._arm_fix_timeout(request)
        else:
            # Waiting on the user, not on the sensor.
            self._disarm_fix_timeouts()
