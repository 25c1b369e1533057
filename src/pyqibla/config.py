"""Client configuration for pyqibla."""

from __future__ import annotations

import dataclasses
import math
import os
from typing import Any

from pyqibla._constants import BASE_URL, DEFAULT_FIX_TIMEOUT, DEFAULT_REQUEST_TIMEOUT, HEADING_ACCURACY_THRESHOLD
from pyqibla.exceptions import QiblaConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env_key: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise QiblaConfigError(f"{env_key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class QiblaConfig:
    """Coordinator configuration.

    Parameters
    ----------
    base_url : str
        Bearing lookup service base URL. Defaults to the AlAdhan API.
    accuracy_threshold : float
        Largest heading uncertainty (degrees) still reported as accurate.
    request_timeout : float
        Total timeout in seconds for one bearing lookup.
    fix_timeout : float
        Seconds to wait for the first location fix after a trigger.  Set to
        ``0`` to wait indefinitely.
    api_trace_enabled : bool
        Log raw response bodies at DEBUG level.
    """

    base_url: str = BASE_URL
    accuracy_threshold: float = HEADING_ACCURACY_THRESHOLD
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    fix_timeout: float = DEFAULT_FIX_TIMEOUT
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        # Frozen, so normalize through object.__setattr__.
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))
        if not self.base_url.startswith(("http://", "https://")):
            raise QiblaConfigError(f"base_url must be an http(s) URL, got {self.base_url!r}")
        if not math.isfinite(self.accuracy_threshold) or self.accuracy_threshold <= 0:
            raise QiblaConfigError("accuracy_threshold must be a positive number")
        if not math.isfinite(self.request_timeout) or self.request_timeout <= 0:
            raise QiblaConfigError("request_timeout must be a positive number")
        if not math.isfinite(self.fix_timeout) or self.fix_timeout < 0:
            raise QiblaConfigError("fix_timeout must be a non-negative number")

    @classmethod
    def from_env(cls, **overrides: Any) -> QiblaConfig:
        """Create configuration from ``QIBLA_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        base_url = env.get("QIBLA_BASE_URL")
        if base_url is not None:
            config_kwargs["base_url"] = base_url

        _ENV_FLOAT_MAP = {
            "QIBLA_ACCURACY_THRESHOLD": "accuracy_threshold",
            "QIBLA_REQUEST_TIMEOUT": "request_timeout",
            "QIBLA_FIX_TIMEOUT": "fix_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(env.get("QIBLA_API_TRACE_ENABLED"), False)

        config_kwargs.update(overrides)
        return cls(**config_kwargs)
