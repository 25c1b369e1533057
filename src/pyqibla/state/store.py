"""Deterministic in-memory snapshot store.

This is the only component allowed to change the snapshot.  Given the same
sequence of :class:`~pyqibla.state.events.StateEvent` objects it produces
the same snapshots.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

from pyqibla.models.location import AuthorizationState
from pyqibla.models.snapshot import Snapshot
from pyqibla.models.status import ErrorCategory, FetchStatus
from pyqibla.state.events import (
    AuthorizationChanged,
    FetchCompleted,
    FetchStarted,
    FixPublished,
    HeadingDiscarded,
    HeadingPublished,
    LocationFailed,
    PermissionFailed,
    RequestSettled,
    RequestStarted,
    StateEvent,
)
from pyqibla.state.policy import should_accept_completion
from pyqibla.state.subscriptions import E, OneShotSubscription

_logger = logging.getLogger(__name__)

SnapshotListener = Callable[[Snapshot, StateEvent], None]


def reduce_snapshot(snapshot: Snapshot, event: StateEvent) -> Snapshot:
    """Return the snapshot that results from applying *event*."""
    if isinstance(event, AuthorizationChanged):
        update: dict[str, object] = {"authorization": event.state}
        error = snapshot.location_error
        if event.state.is_authorized and error is not None and error.category is ErrorCategory.PERMISSION:
            update["location_error"] = None
        return snapshot.model_copy(update=update)

    if isinstance(event, (PermissionFailed, LocationFailed)):
        return snapshot.model_copy(update={"location_error": event.error})

    if isinstance(event, FixPublished):
        return snapshot.model_copy(update={"fix": event.fix})

    if isinstance(event, HeadingPublished):
        return snapshot.model_copy(update={"heading": event.sample, "is_heading_accurate": event.accurate})

    if isinstance(event, HeadingDiscarded):
        return snapshot.model_copy(update={"is_heading_accurate": False})

    if isinstance(event, RequestStarted):
        return snapshot.model_copy(
            update={"pending_requests": snapshot.pending_requests + 1, "location_error": None},
        )

    if isinstance(event, RequestSettled):
        return snapshot.model_copy(update={"pending_requests": max(0, snapshot.pending_requests - 1)})

    if isinstance(event, FetchStarted):
        return snapshot.model_copy(
            update={"fetch_generation": event.generation, "fetch_status": FetchStatus.in_flight()},
        )

    if isinstance(event, FetchCompleted):
        if not should_accept_completion(
            current_generation=snapshot.fetch_generation,
            completed_generation=event.generation,
        ):
            return snapshot
        return snapshot.model_copy(update={"fetch_status": event.status})

    raise TypeError(f"Unsupported state event: {type(event).__name__}")


class SnapshotStore:
    """Holds the current :class:`Snapshot` and notifies observers of changes.

    Events applied while observers are being notified are queued and
    applied afterwards, so every observer sees snapshots in order.
    """

    def __init__(self, *, authorization: AuthorizationState = AuthorizationState.UNDETERMINED) -> None:
        self._snapshot = Snapshot(authorization=authorization)
        self._listeners: list[SnapshotListener] = []
        self._one_shots: list[OneShotSubscription[StateEvent]] = []
        self._queue: deque[StateEvent] = deque()
        self._dispatching = False

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def once(
        self,
        event_type: type[E],
        *,
        predicate: Callable[[E], bool] | None = None,
        callback: Callable[[E], None] | None = None,
    ) -> OneShotSubscription[E]:
        """Subscribe to the first future event of *event_type*."""
        subscription: OneShotSubscription[E] = OneShotSubscription(
            event_type,
            predicate=predicate,
            callback=callback,
            on_remove=self._remove_one_shot,
        )
        self._one_shots.append(subscription)  # type: ignore[arg-type]
        return subscription

    def _remove_one_shot(self, subscription: OneShotSubscription[E]) -> None:
        if subscription in self._one_shots:
            self._one_shots.remove(subscription)  # type: ignore[arg-type]

    def apply(self, event: StateEvent) -> None:
        """Apply *event* and notify observers."""
        self._queue.append(event)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._queue:
                self._dispatch(self._queue.popleft())
        finally:
            self._dispatching = False

    def _dispatch(self, event: StateEvent) -> None:
        previous = self._snapshot
        self._snapshot = reduce_snapshot(previous, event)
        _logger.debug("Applied %s phase=%s", type(event).__name__, self._snapshot.phase.value)

        for subscription in list(self._one_shots):
            try:
                subscription.offer(event)
            except Exception:
                _logger.exception("One-shot subscriber failed for %s", type(event).__name__)

        if self._snapshot == previous:
            return
        for listener in list(self._listeners):
            try:
                listener(self._snapshot, event)
            except Exception:
                _logger.exception("Snapshot listener failed for %s", type(event).__name__)
