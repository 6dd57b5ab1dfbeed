"""Heading controller: sensor auto-follow vs. manual camera control.

States
------
AUTO-FOLLOW (initial, ``follow_enabled=True``)
    Heading samples update ``heading_deg`` and rotate the camera; position
    updates pan the camera.
MANUAL (``follow_enabled=False``)
    Heading samples still update ``heading_deg`` for display only; the
    camera is left alone.

A user drag on the camera switches AUTO-FOLLOW to MANUAL.  Only an explicit
toggle returns to AUTO-FOLLOW.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from pydantic import ValidationError

from pystreetlight.config import GeolocationOptions
from pystreetlight.exceptions import SensorUnavailableError
from pystreetlight.models.light import LatLng
from pystreetlight.models.status import HeadingView
from pystreetlight.orientation.heading import OrientationSample, PositionFix, normalize_heading, wrap_degrees
from pystreetlight.orientation.permission import MotionPermissionGate

_logger = logging.getLogger(__name__)


class CameraSurface(Protocol):
    """The external map camera."""

    def set_heading(self, heading: float) -> None: ...

    def set_tilt(self, tilt: float) -> None: ...

    def pan_to(self, position: LatLng) -> None: ...

    def get_heading(self) -> float | None: ...


class Subscription(Protocol):
    def cancel(self) -> None: ...


class SensorSource(Protocol):
    """Platform geolocation + device-orientation streams."""

    def watch_position(
        self,
        on_position: Callable[[PositionFix | dict[str, Any]], None],
        on_error: Callable[[Exception], None],
        options: GeolocationOptions,
    ) -> Subscription: ...

    def watch_orientation(
        self,
        on_sample: Callable[[OrientationSample | dict[str, Any]], None],
    ) -> Subscription: ...


class OrientationController:
    """Owns heading/follow state for one map view.

    Once a motion-permission request is denied, orientation samples are
    ignored and the orientation stream is released until a later request
    is granted.
    """

    def __init__(self, camera: CameraSurface | None = None) -> None:
        self._camera = camera
        self.heading_deg: float = 0.0
        self.follow_enabled: bool = True
        self.has_motion_permission: bool = False
        self.motion_permission_denied: bool = False
        self.user_position: LatLng | None = None
        self._sensors: SensorSource | None = None
        self._position_sub: Subscription | None = None
        self._orientation_sub: Subscription | None = None

    # ------------------------------------------------------------------
    # Camera lifecycle
    # ------------------------------------------------------------------

    def attach_camera(self, camera: CameraSurface) -> None:
        self._camera = camera

    def detach_camera(self) -> None:
        self._camera = None

    # ------------------------------------------------------------------
    # Sensor inputs
    # ------------------------------------------------------------------

    def on_orientation(self, sample: OrientationSample | dict[str, Any]) -> float | None:
        """Apply one orientation sample; returns the new heading or ``None``."""
        if self.motion_permission_denied:
            return None
        heading = normalize_heading(sample)
        if heading is None:
            return None
        self.heading_deg = heading
        if self.follow_enabled and self._camera is not None:
            self._camera.set_heading(heading)
        return heading

    def on_position(self, fix: PositionFix | dict[str, Any]) -> LatLng | None:
        """Apply one position fix; malformed payloads are logged and dropped."""
        if not isinstance(fix, PositionFix):
            try:
                fix = PositionFix.model_validate(fix)
            except ValidationError as exc:
                _logger.warning("Ignoring malformed position payload: %s", exc)
                return None
        position = LatLng(lat=fix.lat, lng=fix.lng)
        self.user_position = position
        if self.follow_enabled and self._camera is not None:
            self._camera.pan_to(position)
        return position

    def on_position_error(self, error: Exception) -> None:
        _logger.warning("Geolocation error: %s", error)

    # ------------------------------------------------------------------
    # Camera / user inputs
    # ------------------------------------------------------------------

    def on_drag_start(self) -> None:
        if self.follow_enabled:
            _logger.debug("Camera drag started; switching to manual")
        self.follow_enabled = False

    def on_camera_heading_changed(self) -> None:
        """Reflect a camera rotation (e.g. two-finger rotate) in the display."""
        if self._camera is None:
            return
        self.heading_deg = wrap_degrees(float(self._camera.get_heading() or 0.0))

    def set_follow(self, enabled: bool) -> None:
        self.follow_enabled = bool(enabled)

    def toggle_follow(self) -> bool:
        self.follow_enabled = not self.follow_enabled
        return self.follow_enabled

    def reset_north(self) -> None:
        """Point the camera north and flatten it; follow mode is unchanged."""
        if self._camera is None:
            return
        self._camera.set_heading(0.0)
        self._camera.set_tilt(0.0)

    async def request_motion_permission(self, gate: MotionPermissionGate) -> bool:
        granted = await gate.request()
        self.has_motion_permission = granted
        self.motion_permission_denied = not granted
        if granted:
            self._watch_orientation()
        else:
            self._release_orientation()
        return granted

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    @property
    def is_tracking(self) -> bool:
        return self._position_sub is not None or self._orientation_sub is not None

    def start(self, sensors: SensorSource | None, options: GeolocationOptions | None = None) -> None:
        """Subscribe to position and orientation streams.

        A missing or unavailable stream disables that feature only.
        """
        self.stop()
        if sensors is None:
            _logger.debug("No sensor source; heading and follow disabled")
            return
        self._sensors = sensors
        options = options or GeolocationOptions()

        try:
            self._position_sub = sensors.watch_position(self.on_position, self.on_position_error, options)
        except SensorUnavailableError:
            _logger.info("Geolocation unavailable", exc_info=True)

        self._watch_orientation()

    def _watch_orientation(self) -> None:
        if self._sensors is None or self._orientation_sub is not None or self.motion_permission_denied:
            return
        try:
            self._orientation_sub = self._sensors.watch_orientation(self.on_orientation)
        except SensorUnavailableError:
            _logger.info("Device orientation unavailable", exc_info=True)

    def _release_orientation(self) -> None:
        subscription, self._orientation_sub = self._orientation_sub, None
        if subscription is not None:
            subscription.cancel()

    def stop(self) -> None:
        """Release every sensor subscription."""
        position_sub, self._position_sub = self._position_sub, None
        if position_sub is not None:
            position_sub.cancel()
        self._release_orientation()
        self._sensors = None

    def view(self) -> HeadingView:
        return HeadingView(
            heading_deg=self.heading_deg,
            follow_enabled=self.follow_enabled,
            has_motion_permission=self.has_motion_permission,
        )
