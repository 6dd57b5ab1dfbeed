"""Typed data models for pystreetlight."""

from pystreetlight.models.events import ActionEvent, FixEvent, Report
from pystreetlight.models.light import LatLng, OfficialLight
from pystreetlight.models.status import TIER_COLORS, HeadingView, LightStatus, MarkerView, StatusTier

__all__ = [
    "ActionEvent",
    "FixEvent",
    "HeadingView",
    "LatLng",
    "LightStatus",
    "MarkerView",
    "OfficialLight",
    "Report",
    "StatusTier",
    "TIER_COLORS",
]
