"""Derived status models exposed to the rendering surface."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class StatusTier(StrEnum):
    """Severity tier derived from the number of reports since the last fix."""

    OPERATIONAL = "Operational"
    REPORTED = "Reported"
    LIKELY_OUT = "Likely out"
    CONFIRMED_OUT = "Confirmed out"


#: Marker color per tier.
TIER_COLORS: dict[StatusTier, str] = {
    StatusTier.OPERATIONAL: "#111",
    StatusTier.REPORTED: "#f6c343",
    StatusTier.LIKELY_OUT: "#f39c12",
    StatusTier.CONFIRMED_OUT: "#d32f2f",
}


class LightStatus(BaseModel):
    """Point-in-time classification of one light.

    ``majority_report_type`` is ``None`` when no report falls in the
    since-fix window; ``label`` then reads ``"Operational"``.
    """

    model_config = ConfigDict(frozen=True)

    light_id: str
    tier: StatusTier
    color: str
    report_count_since_fix: int
    majority_report_type: str | None
    label: str
    fixed_at_ms: int = 0

    @property
    def is_fixed(self) -> bool:
        return self.report_count_since_fix == 0


class MarkerView(BaseModel):
    """What the map needs to draw one light marker."""

    model_config = ConfigDict(frozen=True)

    light_id: str
    display_id: str | None
    lat: float
    lng: float
    color: str
    label: str
    tier: StatusTier


class HeadingView(BaseModel):
    """State for the compass/heading overlay."""

    model_config = ConfigDict(frozen=True)

    heading_deg: float
    follow_enabled: bool
    has_motion_permission: bool
