from __future__ import annotations

import asyncio

import pytest

from pyqibla.exceptions import FetchErrorKind, QiblaFetchError
from pyqibla.fetcher import DirectionFetcher
from pyqibla.models.location import GeoFix
from pyqibla.models.status import FetchState
from pyqibla.state.events import FixPublished
from pyqibla.state.store import SnapshotStore


def _body(direction: float) -> str:
    return f'{{"code":200,"status":"OK","data":{{"latitude":24.46,"longitude":54.37,"direction":{direction}}}}}'


class _GatedTransport:
    """Each call blocks until its gate is released."""

    def __init__(self, *bodies: str) -> None:
        self._bodies = list(bodies)
        self.endpoints: list[str] = []
        self.gates: list[asyncio.Event] = []

    async def get_text(self, endpoint: str) -> str:
        index = len(self.endpoints)
        self.endpoints.append(endpoint)
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return self._bodies[index]


class _FailingTransport:
    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def get_text(self, _endpoint: str) -> str:
        raise self._exc


def _store_with_fix() -> SnapshotStore:
    store = SnapshotStore()
    store.apply(FixPublished(fix=GeoFix(latitude=24.46, longitude=54.37)))
    return store


@pytest.mark.asyncio
async def test_fetch_lifecycle_in_flight_then_succeeded() -> None:
    store = _store_with_fix()
    transport = _GatedTransport(_body(255.98))
    fetcher = DirectionFetcher(transport, store.apply, loop=asyncio.get_running_loop())

    task = fetcher.fetch(24.46, 54.37)
    assert store.snapshot.fetch_status.state is FetchState.IN_FLIGHT
    assert fetcher.in_flight == 1

    await asyncio.sleep(0)
    transport.gates[0].set()
    status = await task

    assert status.state is FetchState.SUCCEEDED
    assert store.snapshot.qibla_direction == 255.98
    assert transport.endpoints == ["/v1/qibla/24.46/54.37"]
    assert fetcher.in_flight == 0


@pytest.mark.asyncio
async def test_server_error_becomes_failed_status() -> None:
    store = _store_with_fix()
    exc = QiblaFetchError("Server error: HTTP 500", kind=FetchErrorKind.SERVER_STATUS, status_code=500)
    fetcher = DirectionFetcher(_FailingTransport(exc), store.apply, loop=asyncio.get_running_loop())

    await fetcher.fetch(24.46, 54.37)

    status = store.snapshot.fetch_status
    assert status.state is FetchState.FAILED
    assert status.result is None
    assert status.error is not None
    assert status.error.kind == "server_status"
    assert status.error.status_code == 500


@pytest.mark.asyncio
async def test_unexpected_exception_is_captured() -> None:
    store = _store_with_fix()
    fetcher = DirectionFetcher(_FailingTransport(RuntimeError("socket exploded")), store.apply, loop=asyncio.get_running_loop())

    status = await fetcher.fetch(24.46, 54.37)

    assert status.state is FetchState.FAILED
    assert status.error is not None
    assert status.error.kind == "transport"
    assert status.error.message == "socket exploded"


@pytest.mark.asyncio
async def test_retry_clears_previous_error() -> None:
    store = _store_with_fix()
    exc = QiblaFetchError("boom", kind=FetchErrorKind.TRANSPORT)
    fetcher = DirectionFetcher(_FailingTransport(exc), store.apply, loop=asyncio.get_running_loop())
    await fetcher.fetch(24.46, 54.37)
    assert store.snapshot.fetch_error is not None

    fetcher.fetch(24.46, 54.37)

    assert store.snapshot.fetch_status.state is FetchState.IN_FLIGHT
    assert store.snapshot.fetch_error is None
    await fetcher.aclose()


@pytest.mark.asyncio
async def test_older_overlapping_fetch_cannot_overwrite_newer() -> None:
    store = _store_with_fix()
    transport = _GatedTransport(_body(10.0), _body(20.0))
    fetcher = DirectionFetcher(transport, store.apply, loop=asyncio.get_running_loop())

    first = fetcher.fetch(24.46, 54.37)
    second = fetcher.fetch(24.46, 54.37)
    await asyncio.sleep(0)
    assert len(transport.gates) == 2

    transport.gates[1].set()
    await second
    assert store.snapshot.qibla_direction == 20.0

    transport.gates[0].set()
    first_status = await first
    assert first_status.state is FetchState.SUCCEEDED
    assert store.snapshot.qibla_direction == 20.0
    assert store.snapshot.fetch_generation == 2


@pytest.mark.asyncio
async def test_aclose_cancels_in_flight() -> None:
    store = _store_with_fix()
    transport = _GatedTransport(_body(1.0))
    fetcher = DirectionFetcher(transport, store.apply, loop=asyncio.get_running_loop())

    task = fetcher.fetch(24.46, 54.37)
    await asyncio.sleep(0)
    await fetcher.aclose()

    assert task.cancelled()
    assert fetcher.in_flight == 0
    assert store.snapshot.fetch_status.state is FetchState.IDLE


@pytest.mark.asyncio
async def test_aclose_settles_lookup_cancelled_before_it_started() -> None:
    store = _store_with_fix()
    fetcher = DirectionFetcher(_GatedTransport(_body(1.0)), store.apply, loop=asyncio.get_running_loop())

    fetcher.fetch(24.46, 54.37)
    await fetcher.aclose()

    assert store.snapshot.fetch_status.state is FetchState.IDLE


@pytest.mark.asyncio
async def test_aclose_keeps_newer_result_when_only_older_lookup_pending() -> None:
    store = _store_with_fix()
    transport = _GatedTransport(_body(10.0), _body(20.0))
    fetcher = DirectionFetcher(transport, store.apply, loop=asyncio.get_running_loop())

    fetcher.fetch(24.46, 54.37)
    second = fetcher.fetch(24.46, 54.37)
    await asyncio.sleep(0)
    transport.gates[1].set()
    await second

    await fetcher.aclose()

    assert store.snapshot.fetch_status.state is FetchState.SUCCEEDED
    assert store.snapshot.qibla_direction == 20.0
