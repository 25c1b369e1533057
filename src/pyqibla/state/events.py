"""Typed state events.

Every component (permission gate, sensor stream, fetcher, coordinator)
reports what happened by emitting one of these events.  Only the state
store is allowed to fold them into the snapshot.
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from pyqibla.models.location import AuthorizationState, GeoFix, HeadingSample
from pyqibla.models.status import ErrorDetail, FetchStatus


class StateEvent(BaseModel):
    """Base for all events applied to the store."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class AuthorizationChanged(StateEvent):
    state: AuthorizationState


class PermissionFailed(StateEvent):
    error: ErrorDetail


class FixPublished(StateEvent):
    fix: GeoFix


class HeadingPublished(StateEvent):
    sample: HeadingSample
    accurate: bool


class HeadingDiscarded(StateEvent):
    """An unusable sample arrived; only the accuracy flag changes."""

    sample: HeadingSample


class LocationFailed(StateEvent):
    error: ErrorDetail


class RequestStarted(StateEvent):
    """A trigger call registered a one-shot wait for the next fix."""


class RequestSettled(StateEvent):
    """A pending trigger got its fix, timed out, or was cancelled."""


class FetchStarted(StateEvent):
    generation: int


class FetchCompleted(StateEvent):
    generation: int
    status: FetchStatus
