"""Helpers for safe debug logging.

Response bodies and fixes carry the user's position.  This module coarsens
coordinates and truncates long text before anything is emitted to DEBUG logs.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

_COORDINATE_KEYS: frozenset[str] = frozenset({"latitude", "longitude", "lat", "lng", "lon"})

#: Two decimals is roughly 1 km, enough to debug and not enough to locate.
_COORDINATE_DECIMALS = 2

_NUMERIC_SEGMENT = re.compile(r"^-?\d+(?:\.\d+)?$")


def coarsen_coordinate(value: float) -> float:
    return round(float(value), _COORDINATE_DECIMALS)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in _COORDINATE_KEYS and isinstance(v, (int, float)) and not isinstance(v, bool):
                redacted[key] = coarsen_coordinate(v)
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)


def redact_endpoint(endpoint: str) -> str:
    """Coarsen numeric path segments, e.g. ``/v1/qibla/24.466667/54.366669``."""
    segments = endpoint.split("/")
    return "/".join(
        str(coarsen_coordinate(float(segment))) if _NUMERIC_SEGMENT.match(segment) else segment
        for segment in segments
    )


def redact_body(text: str, *, max_string: int = 512) -> Any:
    """Redact a raw response body, parsing it as JSON when possible."""
    try:
        payload = json.loads(text)
    except ValueError:
        return redact_for_log(text, max_string=max_string)
    return redact_for_log(payload, max_string=max_string)
