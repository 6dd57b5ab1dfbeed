"""Report intake: dialog validation and reporter cooldowns."""

from pystreetlight.intake.cooldown import ReportCooldowns, can_identity_report_light, reporter_identity_key
from pystreetlight.intake.form import Answer, DialogState, FormValidation, ReportDialog, ReportDraft

__all__ = [
    "Answer",
    "DialogState",
    "FormValidation",
    "ReportCooldowns",
    "ReportDialog",
    "ReportDraft",
    "can_identity_report_light",
    "reporter_identity_key",
]
