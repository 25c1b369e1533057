"""Bearing lookup response models.

The service answers ``GET /v1/qibla/{latitude}/{longitude}`` with::

    {"code": 200, "status": "OK",
     "data": {"latitude": 21.42, "longitude": 39.82, "direction": 292.5}}

Anything that does not fit this shape is a decode failure.  Unknown extra
keys are ignored.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class QiblaData(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    latitude: float
    longitude: float
    direction: float


class QiblaResponse(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True, extra="ignore")

    code: int
    status: str
    data: QiblaData


class BearingResult(BaseModel):
    """The Qibla bearing for one fix, in degrees clockwise from true north."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    degrees: float

    @classmethod
    def from_response(cls, response: QiblaResponse) -> BearingResult:
        return cls(degrees=response.data.direction)
