"""Map session: the single owner of client-side state for one view.

A session ties together the snapshot store, the orientation controller and
the report dialog.  Every continuation after an ``await`` checks the
liveness flag and a refresh generation, so a torn-down view (or a refresh
superseded by a newer one) never writes to the store.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pystreetlight._constants import FIXED_LIGHTS_TABLE, LIGHT_ACTIONS_TABLE, REPORTS_TABLE
from pystreetlight.client import StreetlightClient
from pystreetlight.exceptions import BatchFetchError, ReportValidationError, StreetlightError
from pystreetlight.intake.cooldown import (
    ALREADY_REPORTED_MESSAGE,
    COOLDOWN_MESSAGE,
    ReportCooldowns,
    can_identity_report_light,
    is_signed_in_identity,
)
from pystreetlight.intake.form import ReportDialog, ReportDraft
from pystreetlight.models.events import Report
from pystreetlight.models.status import HeadingView, LightStatus, MarkerView
from pystreetlight.orientation.controller import CameraSurface, OrientationController, SensorSource
from pystreetlight.state.store import SnapshotStore

_logger = logging.getLogger(__name__)


def _log_degraded(table: str, error: BatchFetchError | None, rows: int) -> bool:
    if error is None:
        return False
    _logger.error(
        "%s load incomplete (chunk %d failed, %d rows kept): %s",
        table,
        error.chunk_index + 1,
        rows,
        error,
    )
    return True


class MapSession:
    """State owner for one map view.

    Usage::

        async with StreetlightClient(config) as client:
            async with MapSession(client, sensors=sensors, camera=camera) as view:
                await view.refresh()
                markers = view.markers()
    """

    def __init__(
        self,
        client: StreetlightClient,
        *,
        sensors: SensorSource | None = None,
        camera: CameraSurface | None = None,
        cooldowns: ReportCooldowns | None = None,
    ) -> None:
        self._client = client
        self._sensors = sensors
        self.store = SnapshotStore()
        self.orientation = OrientationController(camera)
        self.dialog = ReportDialog()
        self.cooldowns = cooldowns
        self._reporter_key: str | None = None
        self._alive = True
        self._generation = 0

    @property
    def is_alive(self) -> bool:
        return self._alive

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> MapSession:
        self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()

    def start(self) -> None:
        self._alive = True
        self.orientation.start(self._sensors, self._client.config.geolocation)

    def close(self) -> None:
        """Tear down: release sensors and discard any in-flight refresh."""
        self._alive = False
        self._generation += 1
        self.orientation.stop()
        self.orientation.detach_camera()

    def _is_current(self, generation: int) -> bool:
        return self._alive and generation == self._generation

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """Reload lights, fix events and reports.

        Returns ``True`` when a snapshot was applied, ``False`` when the
        light list failed to load or the refresh was discarded.
        """
        self._generation += 1
        generation = self._generation

        try:
            lights = await self._client.get_official_lights()
        except StreetlightError:
            _logger.error("official_lights load failed", exc_info=True)
            return False

        if not self._is_current(generation):
            _logger.debug("Discarding stale refresh after light list")
            return False

        light_ids = [light.id for light in lights]
        if not light_ids:
            self.store.replace_lights([])
            self.store.replace_fix_times([], [])
            self.store.replace_reports([])
            self.store.clear_degraded()
            return True

        (fixes, fix_err), (actions, act_err), (reports, rep_err) = await asyncio.gather(
            self._client.get_fix_events(light_ids),
            self._client.get_fix_actions(light_ids),
            self._client.get_reports(light_ids),
        )

        if not self._is_current(generation):
            _logger.debug("Discarding stale refresh after event reads")
            return False

        self.store.clear_degraded()
        for table, error, rows in (
            (FIXED_LIGHTS_TABLE, fix_err, len(fixes)),
            (LIGHT_ACTIONS_TABLE, act_err, len(actions)),
            (REPORTS_TABLE, rep_err, len(reports)),
        ):
            if _log_degraded(table, error, rows):
                self.store.mark_degraded(table)

        self.store.replace_lights(lights)
        self.store.replace_fix_times(fixes, actions)
        self.store.replace_reports(reports)
        self._log_diagnostics(light_ids, reports)
        return True

    def _log_diagnostics(self, light_ids: list[str], reports: list[Report]) -> None:
        known = set(light_ids)
        unmatched = [r.light_id for r in reports if r.light_id not in known]
        _logger.info(
            "Loaded %d lights, %d reports (%d matched, %d unmatched)",
            len(light_ids),
            len(reports),
            len(reports) - len(unmatched),
            len(unmatched),
        )
        if unmatched:
            _logger.debug("Sample unmatched report light ids: %s", unmatched[:8])

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def markers(self) -> list[MarkerView]:
        return self.store.markers()

    def status_for(self, light_id: str) -> LightStatus | None:
        return self.store.status_for(light_id)

    def heading_view(self) -> HeadingView:
        return self.orientation.view()

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _check_guardrails(self, light_id: str, identity_key: str | None, now_ms: int | None) -> None:
        if not can_identity_report_light(light_id, identity_key, self.store.reports, self.store.fixed_at_by_light):
            raise ReportValidationError(ALREADY_REPORTED_MESSAGE, errors={"light_id": ALREADY_REPORTED_MESSAGE})
        if self.cooldowns is None or is_signed_in_identity(identity_key):
            return
        if not self.cooldowns.can_report(light_id, now_ms=now_ms):
            raise ReportValidationError(COOLDOWN_MESSAGE, errors={"light_id": COOLDOWN_MESSAGE})

    def open_report(self, light_id: str, *, identity_key: str | None = None, now_ms: int | None = None) -> None:
        """Open the report dialog for a known light.

        Raises
        ------
        ValueError
            If *light_id* is not a loaded light.
        ReportValidationError
            If this identity already reported the light since its last fix,
            or (for guests) the light is still in its device cooldown.
        """
        if self.store.get_light(light_id) is None:
            raise ValueError(f"Unknown light id {light_id!r}")
        self._check_guardrails(light_id, identity_key, now_ms)
        self.dialog.open(light_id)
        self._reporter_key = identity_key

    def submit_report(self, *, identity_key: str | None = None, now_ms: int | None = None) -> ReportDraft:
        """Re-check the guardrails, then move the dialog to SUBMITTING.

        *identity_key* replaces the one given to :meth:`open_report` (guests
        enter contact details inside the dialog).
        """
        if identity_key is not None:
            self._reporter_key = identity_key
        if self.dialog.light_id is not None:
            self._check_guardrails(self.dialog.light_id, self._reporter_key, now_ms)
        return self.dialog.submit()

    def finish_report(
        self,
        *,
        success: bool = True,
        saved: Report | dict[str, Any] | None = None,
        now_ms: int | None = None,
    ) -> None:
        """Complete a submit; on success the saved row joins the store."""
        light_id = self.dialog.light_id
        was_saving = self.dialog.saving
        self.dialog.finish(success=success)
        if not (was_saving and success and light_id):
            return
        if saved is not None:
            report = saved if isinstance(saved, Report) else Report.model_validate(saved)
            self.store.append_report(report)
        if self.cooldowns is not None and not is_signed_in_identity(self._reporter_key):
            self.cooldowns.record(light_id, now_ms=now_ms)
        self._reporter_key = None
