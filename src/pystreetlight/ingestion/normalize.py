"""Normalization helpers.

Centralizes lenient parsing of remote row values.  Nothing in here raises
on bad input: unparsable values collapse to ``None`` (or ``0`` for
timestamps) so a single malformed row cannot break a status snapshot.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

from pystreetlight._constants import FALLBACK_REPORT_TYPE, LEGACY_REPORT_TYPES, REPORT_TYPES


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text if text else None


def _parse_iso(text: str) -> datetime | None:
    candidate = text.strip()
    if not candidate:
        return None
    if candidate.endswith(("Z", "z")):
        candidate = f"{candidate[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def to_epoch_ms(value: Any) -> int:
    """Convert a timestamp-like value to epoch milliseconds.

    - Missing/empty/unparsable -> ``0`` (never fixed, never dominant)
    - Numbers are taken as epoch milliseconds already
    - ISO-8601 strings and ``datetime`` objects are converted (naive = UTC)
    """

    if value is None or value == "" or isinstance(value, bool):
        return 0
    if isinstance(value, datetime):
        dt = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
        return int(dt.timestamp() * 1000)
    if isinstance(value, (int, float)):
        number = safe_float(value)
        return int(number) if number is not None else 0
    if isinstance(value, str):
        parsed = _parse_iso(value)
        if parsed is None:
            return 0
        return int(parsed.timestamp() * 1000)
    return 0


def normalize_report_type_value(value: Any) -> str:
    return str(value or "").strip().lower()


def report_tally_key(report_type: str | None, legacy_type: str | None = None) -> str:
    """Key a report contributes to the majority tally.

    ``report_type`` wins, then the legacy ``type`` column, then ``"other"``.
    The raw key is kept as-is so ties resolve on first-seen order.
    """

    return report_type or legacy_type or FALLBACK_REPORT_TYPE


def canonical_report_type(value: Any) -> str:
    key = normalize_report_type_value(value)
    return LEGACY_REPORT_TYPES.get(key, key)


def report_type_label(value: Any) -> str:
    """Human-readable name for a report type key.

    Legacy aliases resolve to their canonical label; unknown keys are
    returned unchanged.
    """

    canonical = canonical_report_type(value)
    label = REPORT_TYPES.get(canonical)
    if label is not None:
        return label
    return str(value) if value is not None else ""
