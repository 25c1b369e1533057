"""pyqibla - Async Qibla compass coordination: permission, sensors and bearing lookup."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyqibla")
except PackageNotFoundError:
    __version__ = "0+local"
from pyqibla.config import QiblaConfig
from pyqibla.coordinator import QiblaCoordinator
from pyqibla.exceptions import (
    FetchErrorKind,
    LocationErrorKind,
    PermissionErrorKind,
    QiblaConfigError,
    QiblaError,
    QiblaFetchError,
    QiblaLocationError,
    QiblaPermissionError,
)
from pyqibla.models import (
    AuthorizationState,
    BearingResult,
    CoordinationPhase,
    ErrorCategory,
    ErrorDetail,
    FetchState,
    FetchStatus,
    GeoFix,
    HeadingSample,
    LocationErrorCode,
    QiblaData,
    QiblaResponse,
    Snapshot,
)
from pyqibla.platform import LocationDelegate, LocationProvider
from pyqibla.simulator import SimulatedLocationProvider

__all__ = [
    "__version__",
    "AuthorizationState",
    "BearingResult",
    "CoordinationPhase",
    "ErrorCategory",
    "ErrorDetail",
    "FetchErrorKind",
    "FetchState",
    "FetchStatus",
    "GeoFix",
    "HeadingSample",
    "LocationDelegate",
    "LocationErrorCode",
    "LocationErrorKind",
    "LocationProvider",
    "PermissionErrorKind",
    "QiblaConfig",
    "QiblaConfigError",
    "QiblaCoordinator",
    "QiblaData",
    "QiblaError",
    "QiblaFetchError",
    "QiblaLocationError",
    "QiblaPermissionError",
    "QiblaResponse",
    "SimulatedLocationProvider",
    "Snapshot",
]
