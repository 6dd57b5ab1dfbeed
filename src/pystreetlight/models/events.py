"""Event rows keyed by light id.

All three event tables are append-only from this library's point of view.
Timestamps are normalized to epoch milliseconds at validation time; an
unparsable timestamp becomes ``0``.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from pystreetlight._constants import FIX_ACTION
from pystreetlight.ingestion.normalize import report_tally_key, safe_str, to_epoch_ms


class _EventBase(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    light_id: str = Field(default="", validation_alias=AliasChoices("light_id", "lightId"))

    @field_validator("light_id", mode="before")
    @classmethod
    def _coerce_light_id(cls, value: Any) -> str:
        return safe_str(value) or ""


class FixEvent(_EventBase):
    """A ``fixed_lights`` row: the light was repaired at ``fixed_at_ms``."""

    fixed_at_ms: int = Field(default=0, validation_alias=AliasChoices("fixed_at", "fixed_at_ms"))

    @field_validator("fixed_at_ms", mode="before")
    @classmethod
    def _coerce_fixed_at(cls, value: Any) -> int:
        return to_epoch_ms(value)


class ActionEvent(_EventBase):
    """A ``light_actions`` row.

    Only ``action == "fix"`` rows take part in fix-time reconciliation.
    """

    action: str = ""
    created_at_ms: int = Field(default=0, validation_alias=AliasChoices("created_at", "created_at_ms"))

    @field_validator("action", mode="before")
    @classmethod
    def _coerce_action(cls, value: Any) -> str:
        return (safe_str(value) or "").lower()

    @field_validator("created_at_ms", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> int:
        return to_epoch_ms(value)

    @property
    def is_fix(self) -> bool:
        return self.action == FIX_ACTION


class Report(_EventBase):
    """A citizen-submitted incident report.

    Parameters
    ----------
    id : str or None
        Row id.
    report_type : str or None
        Report category key (``out``, ``flickering``, ...).
    legacy_type : str or None
        Older rows carried the category in a ``type`` column.
    created_at_ms : int
        Submission time in epoch milliseconds (``0`` if unknown).
    reporter_user_id, reporter_email, reporter_phone : str or None
        Reporter contact columns; ``None`` unless the read selected them.
    """

    id: str | None = None
    report_type: str | None = None
    legacy_type: str | None = Field(default=None, validation_alias=AliasChoices("type", "legacy_type"))
    created_at_ms: int = Field(default=0, validation_alias=AliasChoices("created_at", "created_at_ms", "ts"))
    reporter_user_id: str | None = None
    reporter_email: str | None = None
    reporter_phone: str | None = None

    @field_validator(
        "id",
        "report_type",
        "legacy_type",
        "reporter_user_id",
        "reporter_email",
        "reporter_phone",
        mode="before",
    )
    @classmethod
    def _coerce_optional_str(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("created_at_ms", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> int:
        return to_epoch_ms(value)

    @property
    def tally_key(self) -> str:
        return report_tally_key(self.report_type, self.legacy_type)
