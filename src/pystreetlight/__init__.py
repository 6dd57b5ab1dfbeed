"""pystreetlight - Async streetlight status aggregation from crowd-sourced reports."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pystreetlight")
except PackageNotFoundError:
    __version__ = "0+local"
from pystreetlight.client import StreetlightClient
from pystreetlight.config import GeolocationOptions, StreetlightConfig
from pystreetlight.exceptions import (
    BatchFetchError,
    ReportValidationError,
    SensorUnavailableError,
    StreetlightConfigError,
    StreetlightError,
    StreetlightTransportError,
)
from pystreetlight.models import (
    ActionEvent,
    FixEvent,
    HeadingView,
    LatLng,
    LightStatus,
    MarkerView,
    OfficialLight,
    Report,
    StatusTier,
)
from pystreetlight.session import MapSession
from pystreetlight.state.classify import classify, classify_all
from pystreetlight.state.reconcile import reconcile

__all__ = [
    "__version__",
    "ActionEvent",
    "BatchFetchError",
    "FixEvent",
    "GeolocationOptions",
    "HeadingView",
    "LatLng",
    "LightStatus",
    "MapSession",
    "MarkerView",
    "OfficialLight",
    "Report",
    "ReportValidationError",
    "SensorUnavailableError",
    "StatusTier",
    "StreetlightClient",
    "StreetlightConfig",
    "StreetlightConfigError",
    "StreetlightError",
    "StreetlightTransportError",
    "classify",
    "classify_all",
    "reconcile",
]
