"""Internal constants shared across the library."""

BASE_URL = "https://api.aladhan.com"
USER_AGENT = "pyqibla/1 (+aiohttp)"
QIBLA_ENDPOINT = "/v1/qibla/{latitude}/{longitude}"

# ------------------------------------------------------------------
# Heading accuracy (degrees, lower is better)
# ------------------------------------------------------------------

#: Samples at or below this uncertainty count as accurate.
HEADING_ACCURACY_THRESHOLD: float = 15.0

#: Default seconds to wait for the first location fix after a trigger.
DEFAULT_FIX_TIMEOUT: float = 30.0

#: Default total timeout for the bearing lookup request.
DEFAULT_REQUEST_TIMEOUT: float = 30.0


def normalize_degrees(value: float) -> float:
    """Wrap an angle in degrees into ``[0, 360)``."""
    wrapped = float(value) % 360.0
    # -0.0 % 360 and tiny negatives can round up to exactly 360.0
    if wrapped >= 360.0:
        return 0.0
    return wrapped
