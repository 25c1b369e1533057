"""Qibla bearing lookup endpoint.

Endpoint:
  - GET /v1/qibla/{latitude}/{longitude}
"""

from __future__ import annotations

import json
import logging
import math

from pydantic import ValidationError

from pyqibla._constants import QIBLA_ENDPOINT
from pyqibla._redact import redact_endpoint, redact_for_log
from pyqibla._transport import Transport
from pyqibla.exceptions import FetchErrorKind, QiblaFetchError
from pyqibla.models.qibla import QiblaResponse

_logger = logging.getLogger(__name__)


def build_qibla_endpoint(latitude: float, longitude: float) -> str:
    """Build the lookup path for a coordinate pair.

    Raises
    ------
    QiblaFetchError
        With kind ``invalid_url`` if a coordinate is not a finite number.
    """
    try:
        lat = float(latitude)
        lon = float(longitude)
    except (TypeError, ValueError) as exc:
        raise QiblaFetchError("Invalid URL", kind=FetchErrorKind.INVALID_URL) from exc
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise QiblaFetchError("Invalid URL", kind=FetchErrorKind.INVALID_URL)
    return QIBLA_ENDPOINT.format(latitude=repr(lat), longitude=repr(lon))


def _extract_error_payload(text: str) -> dict[str, object] | None:
    """Best-effort parse of an unexpected body, for diagnostics only."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return None
    return payload if isinstance(payload, dict) else None


def parse_qibla_response(text: str, *, endpoint: str = "") -> QiblaResponse:
    """Decode a lookup response body.

    Raises
    ------
    QiblaFetchError
        ``empty_body`` for a blank body, ``decode`` for anything that does
        not match the expected shape.
    """
    if not text or not text.strip():
        raise QiblaFetchError("No data received", kind=FetchErrorKind.EMPTY_BODY, endpoint=endpoint)

    try:
        return QiblaResponse.model_validate_json(text)
    except ValidationError as exc:
        payload = _extract_error_payload(text)
        if payload is not None:
            _logger.debug("Error response from %s: %s", redact_endpoint(endpoint), redact_for_log(payload))
        first = exc.errors()[0] if exc.errors() else {}
        reason = first.get("msg", "invalid payload")
        location = ".".join(str(part) for part in first.get("loc", ()))
        detail = f"{location}: {reason}" if location else reason
        raise QiblaFetchError(
            f"Failed to decode response: {detail}",
            kind=FetchErrorKind.DECODE,
            endpoint=endpoint,
        ) from exc


async def fetch_qibla_direction(transport: Transport, latitude: float, longitude: float) -> QiblaResponse:
    """Look up the Qibla bearing for one coordinate pair.

    Parameters
    ----------
    transport : Transport
        HTTP transport.
    latitude : float
        Latitude in degrees.
    longitude : float
        Longitude in degrees.

    Returns
    -------
    QiblaResponse
        The decoded response.

    Raises
    ------
    QiblaFetchError
        On any URL, network, status or decode failure.
    """
    endpoint = build_qibla_endpoint(latitude, longitude)
    text = await transport.get_text(endpoint)
    response = parse_qibla_response(text, endpoint=endpoint)
    _logger.debug("Qibla direction: %s°", response.data.direction)
    return response
