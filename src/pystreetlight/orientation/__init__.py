"""Heading and camera-follow control for the map view."""

from pystreetlight.orientation.controller import CameraSurface, OrientationController, SensorSource, Subscription
from pystreetlight.orientation.heading import OrientationSample, PositionFix, normalize_heading, wrap_degrees
from pystreetlight.orientation.permission import (
    DirectGrantGate,
    ExplicitRequestGate,
    MotionPermissionGate,
    select_permission_gate,
)

__all__ = [
    "CameraSurface",
    "DirectGrantGate",
    "ExplicitRequestGate",
    "MotionPermissionGate",
    "OrientationController",
    "OrientationSample",
    "PositionFix",
    "SensorSource",
    "Subscription",
    "normalize_heading",
    "select_permission_gate",
    "wrap_degrees",
]
