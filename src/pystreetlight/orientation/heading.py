"""Device-orientation sample normalization."""

from __future__ import annotations

import math
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pystreetlight.ingestion.normalize import safe_float


class OrientationSample(BaseModel):
    """One raw ``deviceorientation`` reading.

    Parameters
    ----------
    compass_heading : float or None
        Platform compass heading (``webkitCompassHeading`` on iOS), degrees
        clockwise from north.
    alpha : float or None
        Rotation around the z-axis in ``[0, 360)``, counter-clockwise.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    compass_heading: float | None = Field(
        default=None,
        validation_alias=AliasChoices("webkitCompassHeading", "compass_heading", "compassHeading"),
    )
    alpha: float | None = None

    @field_validator("compass_heading", "alpha", mode="before")
    @classmethod
    def _coerce_angle(cls, value: Any) -> float | None:
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return None
        return safe_float(value)


class PositionFix(BaseModel):
    """One geolocation reading."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    lat: float = Field(validation_alias=AliasChoices("latitude", "lat"))
    lng: float = Field(validation_alias=AliasChoices("longitude", "lng", "lon"))
    accuracy: float | None = None


def wrap_degrees(value: float) -> float:
    """Reduce *value* into ``[0, 360)``."""
    wrapped = math.fmod(value, 360.0)
    if wrapped < 0:
        wrapped += 360.0
    # fmod(-1e-17, 360) + 360 rounds to 360.0
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def normalize_heading(sample: OrientationSample | dict[str, Any]) -> float | None:
    """Heading in ``[0, 360)`` for a sample, or ``None`` to ignore it.

    A compass heading is used as-is; otherwise the heading is ``360 - alpha``.
    """
    if not isinstance(sample, OrientationSample):
        sample = OrientationSample.model_validate(sample)
    if sample.compass_heading is not None:
        return wrap_degrees(sample.compass_heading)
    if sample.alpha is not None:
        return wrap_degrees(360.0 - sample.alpha)
    return None
