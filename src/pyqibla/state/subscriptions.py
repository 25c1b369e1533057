"""One-shot event subscriptions.

A :class:`OneShotSubscription` waits for the first event of a given type
(optionally matching a predicate), fires its callback exactly once, and
removes itself from the store before the callback runs.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Callable
from typing import Generic, TypeVar

from pyqibla.state.events import StateEvent

E = TypeVar("E", bound=StateEvent)


class SubscriptionState(enum.Enum):
    PENDING = "pending"
    FIRED = "fired"
    CANCELLED = "cancelled"


class OneShotSubscription(Generic[E]):
    def __init__(
        self,
        event_type: type[E],
        *,
        predicate: Callable[[E], bool] | None = None,
        callback: Callable[[E], None] | None = None,
        on_remove: Callable[[OneShotSubscription[E]], None] | None = None,
    ) -> None:
        self._event_type = event_type
        self._predicate = predicate
        self._callback = callback
        self._on_remove = on_remove
        self._state = SubscriptionState.PENDING
        self._result: E | None = None
        self._waiters: list[asyncio.Future[E]] = []

    def __repr__(self) -> str:
        return f"<OneShotSubscription {self._event_type.__name__} {self._state.value}>"

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def done(self) -> bool:
        return self._state is not SubscriptionState.PENDING

    @property
    def result(self) -> E | None:
        return self._result

    def offer(self, event: StateEvent) -> bool:
        """Deliver *event*; returns ``True`` if it fired the subscription."""
        if self.done or not isinstance(event, self._event_type):
            return False
        if self._predicate is not None and not self._predicate(event):
            return False

        self._state = SubscriptionState.FIRED
        self._result = event
        self._detach()
        for waiter in self._waiters:
            if not waiter.done():
                waiter.set_result(event)
        self._waiters.clear()

        if self._callback is not None:
            self._callback(event)
        return True

    def cancel(self) -> bool:
        if self.done:
            return False
        self._state = SubscriptionState.CANCELLED
        self._detach()
        for waiter in self._waiters:
            waiter.cancel()
        self._waiters.clear()
        return True

    async def wait(self) -> E:
        """Wait for the event that fires this subscription.

        Raises :class:`asyncio.CancelledError` if the subscription is
        cancelled before it fires.
        """
        if self._state is SubscriptionState.FIRED:
            assert self._result is not None  # noqa: S101
            return self._result
        if self._state is SubscriptionState.CANCELLED:
            raise asyncio.CancelledError
        waiter: asyncio.Future[E] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        return await waiter

    def _detach(self) -> None:
        on_remove = self._on_remove
        self._on_remove = None
        if on_remove is not None:
            on_remove(self)
