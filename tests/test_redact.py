from __future__ import annotations

from pyqibla._redact import coarsen_coordinate, redact_body, redact_endpoint, redact_for_log


def test_redact_for_log_coarsens_coordinates() -> None:
    payload = {
        "code": 200,
        "status": "OK",
        "data": {"latitude": 24.466667, "longitude": 54.366669, "direction": 255.98},
    }

    redacted = redact_for_log(payload)
    assert redacted["data"]["latitude"] == 24.47
    assert redacted["data"]["longitude"] == 54.37
    assert redacted["data"]["direction"] == 255.98
    assert redacted["code"] == 200


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_coarsen_coordinate() -> None:
    assert coarsen_coordinate(21.4212) == 21.42


def test_redact_endpoint_coarsens_numeric_segments() -> None:
    assert redact_endpoint("/v1/qibla/24.466667/-54.366669") == "/v1/qibla/24.47/-54.37"


def test_redact_body_parses_json() -> None:
    redacted = redact_body('{"data":{"latitude":24.466667}}')
    assert redacted == {"data": {"latitude": 24.47}}
    assert redact_body("not json") == "not json"
