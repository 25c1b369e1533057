"""HTTP transport for the bearing lookup service."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp

from pyqibla._constants import USER_AGENT
from pyqibla._redact import redact_body, redact_endpoint
from pyqibla.config import QiblaConfig
from pyqibla.exceptions import FetchErrorKind, QiblaFetchError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (:class:`HttpTransport`) concrete.
    """

    async def get_text(self, endpoint: str) -> str:
        ...


class HttpTransport:
    """aiohttp transport that maps network and status failures to :class:`QiblaFetchError`."""

    def __init__(self, config: QiblaConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_text(self, endpoint: str) -> str:
        """GET *endpoint* and return the body text of a 2xx response."""
        url = f"{self._config.base_url}{endpoint}"
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        log_endpoint = redact_endpoint(endpoint)
        _logger.debug("GET %s%s", self._config.base_url, log_endpoint)

        try:
            async with self._http.get(url, headers=headers, timeout=self._timeout) as resp:
                _logger.debug("HTTP status %s from %s", resp.status, log_endpoint)
                # Status decides the outcome before the body is even read.
                if not 200 <= resp.status < 300:
                    raise QiblaFetchError(
                        f"Server error: HTTP {resp.status}",
                        kind=FetchErrorKind.SERVER_STATUS,
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
                body = await resp.read()
                charset = resp.charset or "utf-8"
        except QiblaFetchError:
            raise
        except asyncio.TimeoutError as exc:
            raise QiblaFetchError(
                "The request timed out.",
                kind=FetchErrorKind.TRANSPORT,
                endpoint=endpoint,
            ) from exc
        except aiohttp.InvalidURL as exc:
            raise QiblaFetchError("Invalid URL", kind=FetchErrorKind.INVALID_URL, endpoint=endpoint) from exc
        except aiohttp.ClientError as exc:
            raise QiblaFetchError(
                str(exc) or type(exc).__name__,
                kind=FetchErrorKind.TRANSPORT,
                endpoint=endpoint,
            ) from exc

        try:
            text = body.decode(charset)
        except (UnicodeDecodeError, LookupError) as exc:
            raise QiblaFetchError(
                f"Failed to decode response: {exc}",
                kind=FetchErrorKind.DECODE,
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("Raw response from %s: %s", log_endpoint, redact_body(text))
        return text
