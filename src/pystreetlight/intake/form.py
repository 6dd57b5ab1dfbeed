"""Report dialog state machine.

States: CLOSED -> EDITING -> VALIDATING -> SUBMITTING -> CLOSED.

``submit`` is the only way into SUBMITTING and passes through a single guard,
so "hazard = yes always blocks" lives in one place.  A blocked submit drops
back to EDITING with field-level messages; nothing here is fatal.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pystreetlight._constants import DEFAULT_REPORT_TYPE, REPORT_TYPES
from pystreetlight.exceptions import ReportValidationError

_logger = logging.getLogger(__name__)

NOTE_REQUIRED_MESSAGE = "Please add a brief note for “Other”."
POWER_REQUIRED_MESSAGE = "Please answer whether power is on in the area."
HAZARD_REQUIRED_MESSAGE = "Please answer whether this is a hazardous situation."
HAZARD_WARNING_MESSAGE = (
    "Please stay away from the area and call emergency services if this is an immediate hazard."
)


class DialogState(StrEnum):
    CLOSED = "closed"
    EDITING = "editing"
    VALIDATING = "validating"
    SUBMITTING = "submitting"


class Answer(StrEnum):
    UNSET = ""
    YES = "yes"
    NO = "no"


class FormValidation(BaseModel):
    """Validation result the dialog renders from."""

    model_config = ConfigDict(frozen=True)

    can_submit: bool
    errors: dict[str, str] = Field(default_factory=dict)
    note_required: bool = False
    hazard_required: bool = False
    safety_warning: bool = False
    show_downed_pole_notice: bool = False


class ReportDraft(BaseModel):
    """Payload handed to the external submitter."""

    model_config = ConfigDict(frozen=True)

    light_id: str
    report_type: str
    note: str
    area_power_on: Answer
    hazard: Answer

    def to_row(self) -> dict[str, Any]:
        return {
            "light_id": self.light_id,
            "report_type": self.report_type,
            "note": self.note,
            "area_power_on": self.area_power_on.value,
            "hazard": self.hazard.value or None,
        }


class ReportDialog:
    """Power/hazard-gated report form for one light at a time."""

    def __init__(self) -> None:
        self.state = DialogState.CLOSED
        self.light_id: str | None = None
        self.report_type = DEFAULT_REPORT_TYPE
        self.note = ""
        self.area_power_on = Answer.UNSET
        self.hazard = Answer.UNSET

    @property
    def is_open(self) -> bool:
        return self.state != DialogState.CLOSED

    @property
    def saving(self) -> bool:
        return self.state == DialogState.SUBMITTING

    def _editable(self, field: str) -> bool:
        if self.state == DialogState.EDITING:
            return True
        _logger.debug("Ignoring %s change while %s", field, self.state)
        return False

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def open(self, light_id: str) -> None:
        if not light_id:
            raise ValueError("light_id is required to open the report dialog")
        if self.saving:
            raise ReportValidationError("A report is already being submitted")
        self.light_id = light_id
        self.report_type = DEFAULT_REPORT_TYPE
        self.note = ""
        self.area_power_on = Answer.UNSET
        self.hazard = Answer.UNSET
        self.state = DialogState.EDITING

    def cancel(self) -> bool:
        """Close without submitting; ignored while a submit is in flight."""
        if self.saving:
            return False
        self._close()
        return True

    def submit(self) -> ReportDraft:
        """Validate and move to SUBMITTING.

        Raises
        ------
        ReportValidationError
            When any rule blocks submission (including ``hazard == yes``).
        """
        if self.state != DialogState.EDITING or self.light_id is None:
            raise ReportValidationError(f"Cannot submit from state {self.state}")

        self.state = DialogState.VALIDATING
        result = self.validate()
        if not result.can_submit:
            self.state = DialogState.EDITING
            raise ReportValidationError("Report cannot be submitted", errors=result.errors)

        self.state = DialogState.SUBMITTING
        return ReportDraft(
            light_id=self.light_id,
            report_type=self.report_type,
            note=self.note.strip(),
            area_power_on=self.area_power_on,
            hazard=self.hazard,
        )

    def finish(self, *, success: bool = True) -> None:
        """Complete a submit; a failed save returns to EDITING."""
        if not self.saving:
            return
        if success:
            self._close()
        else:
            self.state = DialogState.EDITING

    def _close(self) -> None:
        self.state = DialogState.CLOSED
        self.light_id = None
        self.note = ""

    # ------------------------------------------------------------------
    # Field edits
    # ------------------------------------------------------------------

    def set_report_type(self, report_type: str) -> None:
        if report_type not in REPORT_TYPES:
            raise ValueError(f"report_type must be one of {tuple(REPORT_TYPES)}, got {report_type!r}")
        if self._editable("report_type"):
            self.report_type = report_type

    def set_note(self, note: str) -> None:
        if self._editable("note"):
            self.note = note or ""

    def set_area_power_on(self, answer: Answer | str) -> None:
        answer = Answer(answer)
        if answer == Answer.UNSET:
            raise ValueError("area_power_on must be 'yes' or 'no'")
        if self._editable("area_power_on"):
            self.area_power_on = answer
            self.hazard = Answer.UNSET

    def set_hazard(self, answer: Answer | str) -> None:
        answer = Answer(answer)
        if answer == Answer.UNSET:
            raise ValueError("hazard must be 'yes' or 'no'")
        if not self._editable("hazard"):
            return
        if self.area_power_on != Answer.YES:
            _logger.debug("Hazard question is not asked unless power is on; ignoring")
            return
        self.hazard = answer

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def validate(self) -> FormValidation:
        errors: dict[str, str] = {}

        note_required = self.report_type == "other"
        if note_required and not self.note.strip():
            errors["note"] = NOTE_REQUIRED_MESSAGE

        if self.area_power_on == Answer.UNSET:
            errors["area_power_on"] = POWER_REQUIRED_MESSAGE

        hazard_required = self.area_power_on == Answer.YES
        if hazard_required and self.hazard == Answer.UNSET:
            errors["hazard"] = HAZARD_REQUIRED_MESSAGE

        safety_warning = self.hazard == Answer.YES
        if safety_warning:
            errors["hazard"] = HAZARD_WARNING_MESSAGE

        return FormValidation(
            can_submit=not self.saving and not errors,
            errors=errors,
            note_required=note_required,
            hazard_required=hazard_required,
            safety_warning=safety_warning,
            show_downed_pole_notice=self.report_type == "downed_pole",
        )
