"""Bearing lookup lifecycle."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pyqibla._api.qibla import fetch_qibla_direction
from pyqibla._redact import coarsen_coordinate
from pyqibla._transport import Transport
from pyqibla.exceptions import FetchErrorKind, QiblaFetchError
from pyqibla.models.qibla import BearingResult
from pyqibla.models.status import ErrorDetail, FetchStatus
from pyqibla.state.events import FetchCompleted, FetchStarted, StateEvent

_logger = logging.getLogger(__name__)


class DirectionFetcher:
    """Issues bearing lookups and reports their outcome as state events.

    Lookups run as tasks on the owning event loop, so every event is
    published from that loop.  A newer lookup does not cancel an older one;
    the store keeps only the newest lookup's outcome.
    """

    def __init__(
        self,
        transport: Transport,
        publish: Callable[[StateEvent], None],
        *,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self._transport = transport
        self._publish = publish
        self._loop = loop
        self._generation = 0
        self._tasks: dict[int, asyncio.Task[FetchStatus]] = {}

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def fetch(self, latitude: float, longitude: float) -> asyncio.Task[FetchStatus]:
        """Publish ``in_flight`` and start a lookup for one coordinate pair."""
        self._generation += 1
        generation = self._generation
        _logger.debug(
            "Fetching Qibla direction generation=%d for %s, %s",
            generation,
            coarsen_coordinate(latitude),
            coarsen_coordinate(longitude),
        )
        self._publish(FetchStarted(generation=generation))

        task = self._loop.create_task(self._run(generation, latitude, longitude))
        self._tasks[generation] = task
        task.add_done_callback(lambda _task: self._tasks.pop(generation, None))
        return task

    async def _run(self, generation: int, latitude: float, longitude: float) -> FetchStatus:
        try:
            response = await fetch_qibla_direction(self._transport, latitude, longitude)
        except QiblaFetchError as exc:
            _logger.warning("Qibla lookup failed kind=%s: %s", exc.kind.value, exc)
            status = FetchStatus.failed(ErrorDetail.from_exception(exc))
        except Exception as exc:
            _logger.exception("Qibla lookup failed unexpectedly")
            wrapped = QiblaFetchError(str(exc) or type(exc).__name__, kind=FetchErrorKind.TRANSPORT)
            status = FetchStatus.failed(ErrorDetail.from_exception(wrapped))
        else:
            status = FetchStatus.succeeded(BearingResult.from_response(response))

        self._publish(FetchCompleted(generation=generation, status=status))
        return status

    async def aclose(self) -> None:
        """Cancel lookups still in flight.

        If the newest lookup is among them, its generation is settled back
        to ``idle`` so the snapshot does not stay ``in_flight``.
        """
        tasks = list(self._tasks.values())
        if not tasks:
            return
        newest_pending = self._generation in self._tasks
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if newest_pending:
            _logger.debug("Qibla lookup generation=%d cancelled", self._generation)
            self._publish(FetchCompleted(generation=self._generation, status=FetchStatus.idle()))
