"""Helpers for safe request tracing.

Requests carry the service API key twice (``apikey`` and ``Authorization``),
equality filters may name reporter contact columns, and ``in.(...)`` filters
can run to thousands of characters.  Values are masked or truncated before
they reach a DEBUG log.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

REDACTED = "<redacted>"

_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "apikey",
        "authorization",
        "cookie",
        "reporter_user_id",
        "reporter_email",
        "reporter_phone",
    }
)


def _truncate(value: str, max_string: int) -> str:
    if len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    return value


def redact_for_log(
    pairs: Mapping[str, str] | Iterable[tuple[str, str]],
    *,
    max_string: int = 256,
) -> list[tuple[str, str]]:
    """Return ``(key, value)`` pairs with sensitive values masked.

    Accepts query parameters as produced by ``SelectQuery.to_params()`` or a
    header mapping.  Key matching is case-insensitive; other values are
    truncated to *max_string* characters.
    """
    items = pairs.items() if isinstance(pairs, Mapping) else pairs
    return [
        (key, REDACTED if key.lower() in _SENSITIVE_KEYS else _truncate(str(value), max_string))
        for key, value in items
    ]
