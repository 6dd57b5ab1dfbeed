"""Reporter guardrails.

Two independent rules:

* one report per light per reporter identity since that light was last
  fixed (checked against loaded report rows), and
* a client-side 24 hour cooldown per light, persisted as a small JSON blob.
"""

from __future__ import annotations

import json
import logging
import re
import time
from collections.abc import Iterable, Mapping
from typing import Any

from pystreetlight._constants import REPORT_COOLDOWN_MS
from pystreetlight.ingestion.normalize import safe_float
from pystreetlight.models.events import Report
from pystreetlight.state.reconcile import last_fixed_at

_logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^\d]")

ALREADY_REPORTED_MESSAGE = "You already reported this light. You can report again after it is marked fixed."
COOLDOWN_MESSAGE = "This light was reported from this device in the last 24 hours."


def _now_ms() -> int:
    return int(time.time() * 1000)


def normalize_email(value: Any) -> str:
    return str(value or "").strip().lower()


def normalize_phone(value: Any) -> str:
    return _NON_DIGITS.sub("", str(value or ""))


def reporter_identity_key(
    *,
    user_id: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    name: str | None = None,
) -> str | None:
    """Stable identity for cooldown checks.

    Signed-in users win, then email, then phone, then name, so guests cannot
    dodge the rule by omitting their email.
    """
    if user_id:
        return f"uid:{user_id}"
    normalized_email = normalize_email(email)
    if normalized_email:
        return f"email:{normalized_email}"
    normalized_phone = normalize_phone(phone)
    if normalized_phone:
        return f"phone:{normalized_phone}"
    normalized_name = str(name or "").strip().lower()
    if normalized_name:
        return f"name:{normalized_name}"
    return None


def _as_report(row: Report | Mapping[str, Any]) -> Report:
    if isinstance(row, Report):
        return row
    return Report.model_validate(row)


def row_identity_key(row: Report | Mapping[str, Any]) -> str | None:
    """Identity key of a stored report (no name fallback)."""
    report = _as_report(row)
    if report.reporter_user_id:
        return f"uid:{report.reporter_user_id}"
    email = normalize_email(report.reporter_email)
    if email:
        return f"email:{email}"
    phone = normalize_phone(report.reporter_phone)
    if phone:
        return f"phone:{phone}"
    return None


def can_identity_report_light(
    light_id: str,
    identity_key: str | None,
    reports: Iterable[Report | Mapping[str, Any]],
    fixed_at_by_light: Mapping[str, int],
) -> bool:
    """Whether *identity_key* may report *light_id* again.

    *reports* are :class:`Report` models or raw ``reports`` rows (ISO
    ``created_at`` or epoch-ms ``created_at_ms``/``ts``).  Reports without
    reporter columns never match.  A light that was never fixed is blocked
    by any earlier report from the same identity.  Without an identity the
    rule cannot be enforced and the answer is ``True``.
    """
    if not identity_key:
        return True
    fixed_at_ms = last_fixed_at(fixed_at_by_light, light_id)
    for row in reports:
        report = _as_report(row)
        if report.light_id != light_id:
            continue
        if row_identity_key(report) != identity_key:
            continue
        if not fixed_at_ms or report.created_at_ms > fixed_at_ms:
            return False
    return True


def is_signed_in_identity(identity_key: str | None) -> bool:
    return identity_key is not None and identity_key.startswith("uid:")


class ReportCooldowns:
    """Per-light client cooldowns keyed by light id (epoch ms of last report)."""

    def __init__(self, entries: Mapping[str, float] | None = None, *, cooldown_ms: int = REPORT_COOLDOWN_MS) -> None:
        self._cooldown_ms = cooldown_ms
        self._entries: dict[str, int] = {}
        for light_id, ts in (entries or {}).items():
            parsed = safe_float(ts)
            if parsed is not None:
                self._entries[str(light_id)] = int(parsed)

    def can_report(self, light_id: str, *, now_ms: int | None = None) -> bool:
        last = self._entries.get(light_id)
        if not last:
            return True
        now = _now_ms() if now_ms is None else now_ms
        return now - last > self._cooldown_ms

    def record(self, light_id: str, *, now_ms: int | None = None) -> None:
        self._entries[light_id] = _now_ms() if now_ms is None else now_ms

    def prune(self, *, now_ms: int | None = None) -> int:
        """Drop expired entries; returns how many were removed."""
        now = _now_ms() if now_ms is None else now_ms
        before = len(self._entries)
        self._entries = {k: ts for k, ts in self._entries.items() if now - ts <= self._cooldown_ms}
        return before - len(self._entries)

    def as_dict(self) -> dict[str, int]:
        return dict(self._entries)

    def dumps(self) -> str:
        return json.dumps(self._entries, separators=(",", ":"))

    @classmethod
    def loads(cls, raw: str | None, *, cooldown_ms: int = REPORT_COOLDOWN_MS) -> ReportCooldowns:
        """Parse a persisted blob; corrupt input yields an empty set."""
        if not raw:
            return cls(cooldown_ms=cooldown_ms)
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            _logger.warning("Discarding unreadable cooldown data")
            return cls(cooldown_ms=cooldown_ms)
        if not isinstance(parsed, dict):
            return cls(cooldown_ms=cooldown_ms)
        return cls(parsed, cooldown_ms=cooldown_ms)
