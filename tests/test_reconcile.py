from __future__ import annotations

import itertools
import random

from pystreetlight.models.events import ActionEvent, FixEvent
from pystreetlight.state.reconcile import last_fixed_at, merge_fix_times, reconcile


def _fix(light_id: str, ts: object) -> FixEvent:
    return FixEvent.model_validate({"light_id": light_id, "fixed_at": ts})


def _action(light_id: str, ts: object, action: str = "fix") -> ActionEvent:
    return ActionEvent.model_validate({"light_id": light_id, "action": action, "created_at": ts})


FIXES = [_fix("a", 100), _fix("b", 300), _fix("a", 90), _fix("c", "not-a-date")]
ACTIONS = [_action("a", 150), _action("b", 200), _action("d", "2024-01-01T00:00:00Z")]


def test_max_across_both_sources() -> None:
    result = reconcile(FIXES, ACTIONS)

    assert result["a"] == 150
    assert result["b"] == 300
    assert result["c"] == 0
    assert result["d"] == 1_704_067_200_000


def test_lights_without_events_are_absent() -> None:
    result = reconcile(FIXES, ACTIONS)

    assert "zzz" not in result
    assert last_fixed_at(result, "zzz") == 0


def test_order_independent_under_permutation() -> None:
    expected = reconcile(FIXES, ACTIONS)

    for fixes in itertools.permutations(FIXES):
        assert reconcile(fixes, reversed(ACTIONS)) == expected


def test_idempotent_under_duplication() -> None:
    expected = reconcile(FIXES, ACTIONS)
    rng = random.Random(7)

    for _ in range(20):
        fixes = FIXES * 3
        actions = ACTIONS * 2
        rng.shuffle(fixes)
        rng.shuffle(actions)
        assert reconcile(fixes, actions) == expected


def test_sources_are_interchangeable() -> None:
    # A fix recorded in either table counts the same.
    as_fixes = reconcile([_fix("a", 150)], [])
    as_actions = reconcile([], [_action("a", 150)])

    assert as_fixes == as_actions == {"a": 150}


def test_non_fix_actions_are_ignored() -> None:
    result = reconcile([], [_action("a", 500, action="note"), _action("a", 100)])

    assert result == {"a": 100}


def test_merge_fix_times_is_commutative() -> None:
    left = reconcile(FIXES[:2], ACTIONS[:1])
    right = reconcile(FIXES[2:], ACTIONS[1:])

    assert merge_fix_times(left, right) == merge_fix_times(right, left) == reconcile(FIXES, ACTIONS)
