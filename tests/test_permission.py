from __future__ import annotations

from pyqibla.models.location import AuthorizationState
from pyqibla.models.status import ErrorCategory
from pyqibla.permission import DENIED_MESSAGE, RESTRICTED_MESSAGE, PermissionGate
from pyqibla.simulator import SimulatedLocationProvider
from pyqibla.state.store import SnapshotStore


def _gate(state: AuthorizationState) -> tuple[PermissionGate, SimulatedLocationProvider, SnapshotStore]:
    provider = SimulatedLocationProvider(state)
    store = SnapshotStore(authorization=state)
    return PermissionGate(provider, store.apply), provider, store


def test_undetermined_prompts_without_starting_streams() -> None:
    gate, provider, store = _gate(AuthorizationState.UNDETERMINED)

    gate.request_access()

    assert provider.prompt_requests == 1
    assert not provider.location_updating
    assert not provider.heading_updating
    assert store.snapshot.location_error is None


def test_restricted_reports_non_retriable_error() -> None:
    gate, provider, store = _gate(AuthorizationState.RESTRICTED)

    gate.request_access()

    error = store.snapshot.location_error
    assert error is not None
    assert error.category is ErrorCategory.PERMISSION
    assert error.kind == "restricted"
    assert error.message == RESTRICTED_MESSAGE
    assert error.retriable is False
    assert provider.prompt_requests == 0


def test_denied_reports_retriable_error() -> None:
    gate, provider, store = _gate(AuthorizationState.DENIED)

    gate.request_access()

    error = store.snapshot.location_error
    assert error is not None
    assert error.kind == "denied"
    assert error.message == DENIED_MESSAGE
    assert error.retriable is True
    assert not provider.location_updating


def test_authorized_starts_both_streams() -> None:
    gate, provider, _store = _gate(AuthorizationState.AUTHORIZED_ALWAYS)

    gate.request_access()

    assert provider.location_updating
    assert provider.heading_updating


def test_grant_callback_starts_streams_and_records_state() -> None:
    gate, provider, store = _gate(AuthorizationState.UNDETERMINED)

    gate.on_authorization_changed(AuthorizationState.AUTHORIZED_WHILE_ACTIVE)

    assert store.snapshot.authorization is AuthorizationState.AUTHORIZED_WHILE_ACTIVE
    assert provider.location_updating
    assert provider.heading_updating


def test_revocation_stops_heading_only() -> None:
    gate, provider, store = _gate(AuthorizationState.AUTHORIZED_WHILE_ACTIVE)
    gate.request_access()

    gate.on_authorization_changed(AuthorizationState.DENIED)

    assert store.snapshot.authorization is AuthorizationState.DENIED
    assert provider.heading_updating is False
    # Location is left to the fix-acquired rule.
    assert provider.location_updating is True
