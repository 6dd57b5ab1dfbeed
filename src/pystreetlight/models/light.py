"""Official streetlight model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pystreetlight.ingestion.normalize import safe_float, safe_str


class LatLng(BaseModel):
    """A geographic position in degrees."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    lat: float
    lng: float


class OfficialLight(BaseModel):
    """A physical streetlight from the seeded ``official_lights`` table.

    Parameters
    ----------
    id : str
        Opaque stable key referenced by every event table as ``light_id``.
    display_id : str or None
        Human-readable pole code (``sl_id``).
    lat : float
        Latitude in degrees (finite).
    lng : float
        Longitude in degrees (finite).
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: str
    display_id: str | None = Field(default=None, validation_alias=AliasChoices("sl_id", "display_id"))
    lat: float
    lng: float

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("id must be non-empty")
        return text

    @field_validator("display_id", mode="before")
    @classmethod
    def _coerce_display_id(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> float:
        parsed = safe_float(value)
        if parsed is None:
            raise ValueError(f"coordinate must be a finite number, got {value!r}")
        return parsed

    @property
    def position(self) -> LatLng:
        return LatLng(lat=self.lat, lng=self.lng)
