from __future__ import annotations

import pytest

from pystreetlight.exceptions import ReportValidationError
from pystreetlight.intake.form import (
    HAZARD_REQUIRED_MESSAGE,
    HAZARD_WARNING_MESSAGE,
    NOTE_REQUIRED_MESSAGE,
    POWER_REQUIRED_MESSAGE,
    Answer,
    DialogState,
    ReportDialog,
)


def _open_dialog(light_id: str = "L1") -> ReportDialog:
    dialog = ReportDialog()
    dialog.open(light_id)
    return dialog


def test_open_resets_every_field() -> None:
    dialog = _open_dialog()
    dialog.set_report_type("other")
    dialog.set_note("tree in the way")
    dialog.set_area_power_on("yes")
    dialog.set_hazard("no")

    dialog.cancel()
    dialog.open("L2")

    assert dialog.state == DialogState.EDITING
    assert dialog.light_id == "L2"
    assert dialog.report_type == "out"
    assert dialog.note == ""
    assert dialog.area_power_on == Answer.UNSET
    assert dialog.hazard == Answer.UNSET


def test_fresh_dialog_requires_power_answer() -> None:
    result = _open_dialog().validate()

    assert result.can_submit is False
    assert result.errors == {"area_power_on": POWER_REQUIRED_MESSAGE}


def test_other_without_note_is_blocked() -> None:
    dialog = _open_dialog()
    dialog.set_report_type("other")
    dialog.set_area_power_on("no")
    dialog.set_note("   ")

    result = dialog.validate()

    assert result.can_submit is False
    assert result.note_required is True
    assert result.errors["note"] == NOTE_REQUIRED_MESSAGE


def test_power_yes_requires_hazard_answer() -> None:
    dialog = _open_dialog()
    dialog.set_area_power_on("yes")

    result = dialog.validate()

    assert result.hazard_required is True
    assert result.errors == {"hazard": HAZARD_REQUIRED_MESSAGE}


def test_hazard_yes_always_blocks_with_safety_warning() -> None:
    dialog = _open_dialog()
    dialog.set_area_power_on("yes")
    dialog.set_hazard("yes")

    result = dialog.validate()

    assert result.can_submit is False
    assert result.safety_warning is True
    assert result.errors["hazard"] == HAZARD_WARNING_MESSAGE

    with pytest.raises(ReportValidationError) as excinfo:
        dialog.submit()
    assert excinfo.value.errors["hazard"] == HAZARD_WARNING_MESSAGE
    assert dialog.state == DialogState.EDITING


def test_power_no_is_submittable_without_hazard() -> None:
    dialog = _open_dialog()
    dialog.set_area_power_on(Answer.NO)

    draft = dialog.submit()

    assert dialog.state == DialogState.SUBMITTING
    assert draft.light_id == "L1"
    assert draft.to_row() == {
        "light_id": "L1",
        "report_type": "out",
        "note": "",
        "area_power_on": "no",
        "hazard": None,
    }


def test_selecting_power_clears_hazard() -> None:
    dialog = _open_dialog()
    dialog.set_area_power_on("yes")
    dialog.set_hazard("no")

    dialog.set_area_power_on("yes")

    assert dialog.hazard == Answer.UNSET


def test_hazard_ignored_unless_power_is_on() -> None:
    dialog = _open_dialog()
    dialog.set_area_power_on("no")

    dialog.set_hazard("yes")

    assert dialog.hazard == Answer.UNSET
    assert dialog.validate().can_submit is True


def test_downed_pole_shows_notice() -> None:
    dialog = _open_dialog()
    dialog.set_report_type("downed_pole")

    assert dialog.validate().show_downed_pole_notice is True


def test_unknown_report_type_rejected() -> None:
    with pytest.raises(ValueError):
        _open_dialog().set_report_type("broken")


def test_cancel_is_ignored_while_submitting() -> None:
    dialog = _open_dialog()
    dialog.set_area_power_on("no")
    dialog.submit()

    assert dialog.cancel() is False
    assert dialog.state == DialogState.SUBMITTING
    assert dialog.validate().can_submit is False


def test_edits_ignored_while_submitting() -> None:
    dialog = _open_dialog()
    dialog.set_area_power_on("no")
    dialog.submit()

    dialog.set_note("late edit")

    assert dialog.note == ""


def test_open_while_submitting_raises() -> None:
    dialog = _open_dialog()
    dialog.set_area_power_on("no")
    dialog.submit()

    with pytest.raises(ReportValidationError):
        dialog.open("L2")


def test_finish_success_closes_and_failure_returns_to_editing() -> None:
    dialog = _open_dialog()
    dialog.set_area_power_on("no")
    dialog.submit()
    dialog.finish(success=False)
    assert dialog.state == DialogState.EDITING

    dialog.submit()
    dialog.finish()
    assert dialog.state == DialogState.CLOSED
    assert dialog.light_id is None


def test_open_requires_light_id() -> None:
    with pytest.raises(ValueError):
        ReportDialog().open("")


def test_submit_from_closed_raises() -> None:
    with pytest.raises(ReportValidationError):
        ReportDialog().submit()
