"""Immutable select-query builder for the PostgREST query-string dialect.

Only the handful of operators the library needs are supported: ``in``,
``eq``, ``order`` and ``limit``.  Each builder method returns a new query so
one filter callable can be applied identically to every batch.

It is internal to pystreetlight and may change at any time.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable

# Characters that force a value inside ``in.(...)`` to be double-quoted.
_RESERVED = frozenset(',()"\\ ')


def _quote(value: str) -> str:
    if not value or any(ch in _RESERVED for ch in value):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return value


@dataclasses.dataclass(frozen=True)
class SelectQuery:
    """A read against one table."""

    table: str
    select: str
    filters: tuple[tuple[str, str], ...] = ()
    order_by: tuple[tuple[str, bool], ...] = ()
    row_limit: int | None = None

    def in_(self, column: str, values: Iterable[str]) -> SelectQuery:
        joined = ",".join(_quote(str(v)) for v in values)
        return dataclasses.replace(self, filters=(*self.filters, (column, f"in.({joined})")))

    def eq(self, column: str, value: str) -> SelectQuery:
        return dataclasses.replace(self, filters=(*self.filters, (column, f"eq.{value}")))

    def order(self, column: str, *, ascending: bool = True) -> SelectQuery:
        return dataclasses.replace(self, order_by=(*self.order_by, (column, ascending)))

    def limit(self, count: int) -> SelectQuery:
        if count < 1:
            raise ValueError(f"limit must be >= 1, got {count}")
        return dataclasses.replace(self, row_limit=count)

    def to_params(self) -> list[tuple[str, str]]:
        """Render the query-string parameters (order preserved)."""
        params: list[tuple[str, str]] = [("select", self.select.replace(" ", ""))]
        params.extend(self.filters)
        if self.order_by:
            rendered = ",".join(f"{column}.{'asc' if asc else 'desc'}" for column, asc in self.order_by)
            params.append(("order", rendered))
        if self.row_limit is not None:
            params.append(("limit", str(self.row_limit)))
        return params
