from __future__ import annotations

import math

import pytest

from pyqibla.config import QiblaConfig
from pyqibla.exceptions import QiblaConfigError


def test_defaults() -> None:
    config = QiblaConfig()
    assert config.base_url == "https://api.aladhan.com"
    assert config.accuracy_threshold == 15.0
    assert config.fix_timeout == 30.0
    assert config.api_trace_enabled is False


def test_from_env_reads_qibla_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QIBLA_BASE_URL", "http://localhost:8080/")
    monkeypatch.setenv("QIBLA_ACCURACY_THRESHOLD", "10")
    monkeypatch.setenv("QIBLA_FIX_TIMEOUT", "0")
    monkeypatch.setenv("QIBLA_API_TRACE_ENABLED", "yes")

    config = QiblaConfig.from_env()

    assert config.base_url == "http://localhost:8080"
    assert config.accuracy_threshold == 10.0
    assert config.fix_timeout == 0.0
    assert config.api_trace_enabled is True


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QIBLA_REQUEST_TIMEOUT", "99")
    config = QiblaConfig.from_env(request_timeout=5.0)
    assert config.request_timeout == 5.0


def test_non_numeric_env_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QIBLA_REQUEST_TIMEOUT", "soon")
    with pytest.raises(QiblaConfigError):
        QiblaConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base_url": "ftp://example.com"},
        {"accuracy_threshold": 0.0},
        {"request_timeout": 0.0},
        {"fix_timeout": -1.0},
    ],
)
def test_invalid_values_rejected(kwargs: dict[str, object]) -> None:
    with pytest.raises(QiblaConfigError):
        QiblaConfig(**kwargs)  # type: ignore[arg-type]


@pytest.mark.parametrize("field", ["request_timeout", "fix_timeout", "accuracy_threshold"])
@pytest.mark.parametrize("value", [math.nan, math.inf])
def test_non_finite_numbers_rejected(field: str, value: float) -> None:
    with pytest.raises(QiblaConfigError):
        QiblaConfig(**{field: value})


def test_nan_fix_timeout_from_env_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("QIBLA_FIX_TIMEOUT", "nan")
    with pytest.raises(QiblaConfigError):
        QiblaConfig.from_env()


def test_explicit_base_url_trailing_slash_stripped() -> None:
    config = QiblaConfig(base_url="https://api.aladhan.com/")
    assert config.base_url == "https://api.aladhan.com"
