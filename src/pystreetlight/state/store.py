"""In-memory store for one map session's datasets.

This is the only component allowed to hold loaded lights, fix times and
reports.  Whole datasets are replaced on reload ("latest write wins");
individual events may also be appended as they arrive, in any order.
Statuses are derived on read and never cached.
"""

from __future__ import annotations

from collections.abc import Iterable

from pystreetlight.models.events import ActionEvent, FixEvent, Report
from pystreetlight.models.light import OfficialLight
from pystreetlight.models.status import LightStatus, MarkerView
from pystreetlight.state.classify import classify_all, marker_for, reports_since_fix
from pystreetlight.state.reconcile import last_fixed_at, merge_fix_times, reconcile


class SnapshotStore:
    """Owned session context for the status pipeline."""

    def __init__(self) -> None:
        self._lights: dict[str, OfficialLight] = {}
        self._fixed_at: dict[str, int] = {}
        self._reports: list[Report] = []
        self._report_ids: set[str] = set()
        self._degraded: set[str] = set()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def replace_lights(self, lights: Iterable[OfficialLight]) -> None:
        self._lights = {light.id: light for light in lights}

    def replace_fix_times(
        self,
        fix_events: Iterable[FixEvent],
        action_events: Iterable[ActionEvent],
    ) -> None:
        self._fixed_at = reconcile(fix_events, action_events)

    def replace_reports(self, reports: Iterable[Report]) -> None:
        self._reports = list(reports)
        self._report_ids = {r.id for r in self._reports if r.id}

    def apply_fix_event(self, event: FixEvent | ActionEvent) -> None:
        """Fold one late-arriving fix into the current fix times."""
        if isinstance(event, FixEvent):
            incoming = reconcile([event], [])
        else:
            incoming = reconcile([], [event])
        self._fixed_at = merge_fix_times(self._fixed_at, incoming)

    def append_report(self, report: Report) -> bool:
        """Add one report; duplicates (same id) are ignored."""
        if report.id:
            if report.id in self._report_ids:
                return False
            self._report_ids.add(report.id)
        self._reports.append(report)
        return True

    def mark_degraded(self, dataset: str) -> None:
        self._degraded.add(dataset)

    def clear_degraded(self) -> None:
        self._degraded.clear()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def lights(self) -> list[OfficialLight]:
        return list(self._lights.values())

    @property
    def fixed_at_by_light(self) -> dict[str, int]:
        return dict(self._fixed_at)

    @property
    def reports(self) -> list[Report]:
        return list(self._reports)

    @property
    def degraded(self) -> frozenset[str]:
        return frozenset(self._degraded)

    def get_light(self, light_id: str) -> OfficialLight | None:
        return self._lights.get(light_id)

    def statuses(self) -> dict[str, LightStatus]:
        return classify_all(self.lights, self._fixed_at, self._reports)

    def status_for(self, light_id: str) -> LightStatus | None:
        light = self._lights.get(light_id)
        if light is None:
            return None
        return classify_all([light], self._fixed_at, self._reports)[light_id]

    def markers(self) -> list[MarkerView]:
        statuses = self.statuses()
        return [marker_for(light, statuses[light.id]) for light in self._lights.values()]

    def reports_since_fix(self, light_id: str) -> list[Report]:
        """Since-fix reports for one light, newest first."""
        relevant = [r for r in self._reports if r.light_id == light_id]
        since_fix = reports_since_fix(relevant, last_fixed_at(self._fixed_at, light_id))
        return sorted(since_fix, key=lambda r: r.created_at_ms, reverse=True)
