from __future__ import annotations

from pystreetlight._constants import REPORT_COOLDOWN_MS
from pystreetlight.intake.cooldown import (
    ReportCooldowns,
    can_identity_report_light,
    reporter_identity_key,
    row_identity_key,
)
from pystreetlight.models.events import Report


def test_identity_prefers_user_then_email_then_phone_then_name() -> None:
    assert reporter_identity_key(user_id="u1", email="a@b.c") == "uid:u1"
    assert reporter_identity_key(email=" A@B.C ", phone="555") == "email:a@b.c"
    assert reporter_identity_key(phone="(440) 555-0101") == "phone:4405550101"
    assert reporter_identity_key(name=" Pat ") == "name:pat"
    assert reporter_identity_key() is None


def test_row_identity_has_no_name_fallback() -> None:
    assert row_identity_key({"reporter_name": "Pat"}) is None
    assert row_identity_key({"reporter_email": "Pat@Example.com"}) == "email:pat@example.com"


ROWS = [
    {"light_id": "L1", "reporter_email": "pat@example.com", "created_at_ms": 1_000},
    {"light_id": "L2", "reporter_phone": "440-555-0101", "created_at_ms": 5_000},
]


def test_identity_blocked_until_light_is_fixed() -> None:
    identity = reporter_identity_key(email="pat@example.com")

    assert can_identity_report_light("L1", identity, ROWS, {}) is False
    assert can_identity_report_light("L1", identity, ROWS, {"L1": 2_000}) is True


def test_identity_only_checks_its_own_rows() -> None:
    identity = reporter_identity_key(phone="4405550101")

    assert can_identity_report_light("L1", identity, ROWS, {}) is True
    assert can_identity_report_light("L2", identity, ROWS, {}) is False


def test_iso_created_at_rows_block_until_fixed() -> None:
    rows = [{"light_id": "L1", "reporter_email": "pat@example.com", "created_at": "2024-01-03T00:00:00Z"}]
    identity = reporter_identity_key(email="pat@example.com")
    fixed_jan_1 = {"L1": 1_704_067_200_000}
    fixed_jan_4 = {"L1": 1_704_326_400_000}

    assert can_identity_report_light("L1", identity, rows, fixed_jan_1) is False
    assert can_identity_report_light("L1", identity, rows, fixed_jan_4) is True


def test_accepts_report_models() -> None:
    reports = [
        Report.model_validate(
            {"light_id": "L1", "reporter_user_id": "u1", "created_at": "2024-01-03T00:00:00Z"}
        )
    ]

    assert can_identity_report_light("L1", "uid:u1", reports, {}) is False
    assert can_identity_report_light("L1", "uid:u2", reports, {}) is True


def test_never_fixed_light_blocked_even_without_timestamp() -> None:
    rows = [{"light_id": "L1", "reporter_phone": "4405550101"}]

    assert can_identity_report_light("L1", "phone:4405550101", rows, {}) is False


def test_missing_identity_is_allowed() -> None:
    assert can_identity_report_light("L1", None, ROWS, {}) is True


def test_cooldown_window() -> None:
    cooldowns = ReportCooldowns()
    cooldowns.record("L1", now_ms=1_000)

    assert cooldowns.can_report("L1", now_ms=1_000 + REPORT_COOLDOWN_MS) is False
    assert cooldowns.can_report("L1", now_ms=1_001 + REPORT_COOLDOWN_MS) is True
    assert cooldowns.can_report("L2", now_ms=1_000) is True


def test_prune_drops_expired_entries() -> None:
    cooldowns = ReportCooldowns({"old": 0, "new": 50}, cooldown_ms=100)

    assert cooldowns.prune(now_ms=120) == 1
    assert cooldowns.as_dict() == {"new": 50}


def test_dumps_loads_and_corrupt_blobs() -> None:
    cooldowns = ReportCooldowns({"L1": 123})

    assert ReportCooldowns.loads(cooldowns.dumps()).as_dict() == {"L1": 123}
    assert ReportCooldowns.loads("{not json").as_dict() == {}
    assert ReportCooldowns.loads("[1, 2]").as_dict() == {}
    assert ReportCooldowns.loads(None).as_dict() == {}
    assert ReportCooldowns.loads('{"L1": "abc", "L2": 7}').as_dict() == {"L2": 7}
