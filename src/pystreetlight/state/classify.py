"""Per-light status classification.

Everything here is a pure function of (light, fix times, reports).  There
is no cached state; recompute whenever any input set changes.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from pystreetlight._constants import OPERATIONAL_LABEL
from pystreetlight.ingestion.normalize import report_type_label
from pystreetlight.models.events import Report
from pystreetlight.models.light import OfficialLight
from pystreetlight.models.status import TIER_COLORS, LightStatus, MarkerView, StatusTier
from pystreetlight.state.reconcile import last_fixed_at


def tier_for_count(count: int) -> StatusTier:
    """Map a since-fix report count to a tier (first match wins)."""
    if count <= 0:
        return StatusTier.OPERATIONAL
    if count <= 3:
        return StatusTier.REPORTED
    if count <= 6:
        return StatusTier.LIKELY_OUT
    return StatusTier.CONFIRMED_OUT


def majority_report_type(reports: Iterable[Report]) -> str | None:
    """Most frequent tally key, or ``None`` for no reports.

    Ties go to the key that entered the tally first (dict insertion order),
    so identical input order always yields the same answer.
    """
    counts: dict[str, int] = {}
    for report in reports:
        key = report.tally_key
        counts[key] = counts.get(key, 0) + 1

    best: str | None = None
    best_n = -1
    for key, n in counts.items():
        if n > best_n:
            best_n = n
            best = key
    return best


def public_label(count: int, majority: str | None) -> str:
    if count == 0 or majority is None:
        return OPERATIONAL_LABEL
    return report_type_label(majority)


def reports_since_fix(reports: Iterable[Report], fixed_at_ms: int) -> list[Report]:
    """Reports strictly newer than *fixed_at_ms* (all of them if never fixed)."""
    if fixed_at_ms > 0:
        return [r for r in reports if r.created_at_ms > fixed_at_ms]
    return list(reports)


def _status(light_id: str, relevant: Iterable[Report], fixed_at_ms: int) -> LightStatus:
    since_fix = reports_since_fix(relevant, fixed_at_ms)
    count = len(since_fix)
    tier = tier_for_count(count)
    majority = majority_report_type(since_fix)
    return LightStatus(
        light_id=light_id,
        tier=tier,
        color=TIER_COLORS[tier],
        report_count_since_fix=count,
        majority_report_type=majority,
        label=public_label(count, majority),
        fixed_at_ms=fixed_at_ms,
    )


def classify(
    light: OfficialLight,
    fixed_at_by_light: Mapping[str, int],
    all_reports: Iterable[Report],
) -> LightStatus:
    """Classify one light from its fix time and the full report set."""
    fixed_at_ms = last_fixed_at(fixed_at_by_light, light.id)
    relevant = [r for r in all_reports if r.light_id == light.id]
    return _status(light.id, relevant, fixed_at_ms)


def group_reports(reports: Iterable[Report]) -> dict[str, list[Report]]:
    """Bucket reports by light id, keeping input order inside each bucket."""
    grouped: dict[str, list[Report]] = {}
    for report in reports:
        grouped.setdefault(report.light_id, []).append(report)
    return grouped


def classify_all(
    lights: Sequence[OfficialLight],
    fixed_at_by_light: Mapping[str, int],
    reports: Iterable[Report],
) -> dict[str, LightStatus]:
    """Classify every light with a single pass over the reports."""
    grouped = group_reports(reports)
    return {
        light.id: _status(light.id, grouped.get(light.id, ()), last_fixed_at(fixed_at_by_light, light.id))
        for light in lights
    }


def marker_for(light: OfficialLight, status: LightStatus) -> MarkerView:
    return MarkerView(
        light_id=light.id,
        display_id=light.display_id,
        lat=light.lat,
        lng=light.lng,
        color=status.color,
        label=status.label,
        tier=status.tier,
    )
