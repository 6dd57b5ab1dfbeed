"""Last-fixed-at reconciliation.

Two independent sources record repairs: the ``fixed_lights`` cache and
``light_actions`` rows with ``action == "fix"``.  Both are authoritative,
so the effective fix time is a max-reduction over the union.  Max is
associative, commutative and idempotent, which makes the result independent
of arrival order and of duplicated rows.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from pystreetlight.models.events import ActionEvent, FixEvent


def _fold_max(target: dict[str, int], light_id: str, ts_ms: int) -> None:
    if not light_id:
        return
    current = target.get(light_id)
    if current is None or ts_ms > current:
        target[light_id] = ts_ms


def reconcile(
    fix_events: Iterable[FixEvent],
    action_events: Iterable[ActionEvent],
) -> dict[str, int]:
    """Return the latest fix time (epoch ms) per light id.

    Lights without any fix event are absent from the result; callers treat
    absence as ``0``.  Action rows other than ``"fix"`` are ignored even if
    the server-side filter was not applied.
    """
    fixed_at: dict[str, int] = {}
    for event in fix_events:
        _fold_max(fixed_at, event.light_id, event.fixed_at_ms)
    for action in action_events:
        if not action.is_fix:
            continue
        _fold_max(fixed_at, action.light_id, action.created_at_ms)
    return fixed_at


def merge_fix_times(*maps: Mapping[str, int]) -> dict[str, int]:
    """Max-merge already reduced fix-time maps."""
    merged: dict[str, int] = {}
    for mapping in maps:
        for light_id, ts_ms in mapping.items():
            _fold_max(merged, light_id, ts_ms)
    return merged


def last_fixed_at(fixed_at_by_light: Mapping[str, int], light_id: str) -> int:
    return int(fixed_at_by_light.get(light_id) or 0)
