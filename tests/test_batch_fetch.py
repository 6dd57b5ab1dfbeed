from __future__ import annotations

from typing import Any

import pytest

from pystreetlight._api._query import SelectQuery
from pystreetlight._api.batch import fetch_in_chunks, iter_chunks
from pystreetlight._api.tables import fetch_fix_actions, fetch_official_lights, fetch_reports
from pystreetlight.exceptions import BatchFetchError, StreetlightTransportError


def _keys_of(query: SelectQuery) -> list[str]:
    for column, value in query.filters:
        if column == "light_id" and value.startswith("in.("):
            return value[len("in.(") : -1].split(",")
    return []


class _RecordingTransport:
    """Echo one row per key; optionally fail on the n-th call (1-based)."""

    def __init__(self, fail_on_call: int | None = None) -> None:
        self.queries: list[SelectQuery] = []
        self._fail_on_call = fail_on_call

    async def select(self, query: SelectQuery) -> list[dict[str, Any]]:
        self.queries.append(query)
        if self._fail_on_call is not None and len(self.queries) == self._fail_on_call:
            raise StreetlightTransportError("HTTP 400 from /rest/v1/x", status_code=400, endpoint="/rest/v1/x")
        return [{"light_id": key} for key in _keys_of(query)]


def _keys(n: int) -> list[str]:
    return [f"L{i:04d}" for i in range(n)]


@pytest.mark.asyncio
async def test_450_keys_issue_three_requests_in_order() -> None:
    transport = _RecordingTransport()
    keys = _keys(450)

    rows, error = await fetch_in_chunks(transport, table="reports", select="id, light_id", keys=keys, chunk_size=200)

    assert error is None
    assert len(transport.queries) == 3
    assert [len(_keys_of(q)) for q in transport.queries] == [200, 200, 50]
    assert [row["light_id"] for row in rows] == keys


@pytest.mark.asyncio
async def test_second_chunk_failure_returns_first_chunk_rows_and_error() -> None:
    transport = _RecordingTransport(fail_on_call=2)
    keys = _keys(450)

    rows, error = await fetch_in_chunks(transport, table="reports", select="id, light_id", keys=keys, chunk_size=200)

    assert len(transport.queries) == 2  # third chunk never requested
    assert [row["light_id"] for row in rows] == keys[:200]
    assert isinstance(error, BatchFetchError)
    assert error.table == "reports"
    assert error.chunk_index == 1
    assert error.rows_fetched == 200
    assert isinstance(error.__cause__, StreetlightTransportError)


@pytest.mark.asyncio
async def test_build_applied_identically_to_every_chunk() -> None:
    transport = _RecordingTransport()

    await fetch_in_chunks(
        transport,
        table="light_actions",
        select="light_id, action, created_at",
        keys=_keys(5),
        chunk_size=2,
        build=lambda q: q.eq("action", "fix").order("created_at", ascending=False),
    )

    assert len(transport.queries) == 3
    for query in transport.queries:
        params = query.to_params()
        assert ("action", "eq.fix") in params
        assert ("order", "created_at.desc") in params
        assert params[0] == ("select", "light_id,action,created_at")


@pytest.mark.asyncio
async def test_empty_keys_issue_no_requests() -> None:
    transport = _RecordingTransport()

    rows, error = await fetch_in_chunks(transport, table="reports", select="id", keys=[])

    assert rows == []
    assert error is None
    assert transport.queries == []


def test_default_chunk_size_is_200() -> None:
    assert [len(c) for c in iter_chunks(_keys(401), 200)] == [200, 200, 1]


def test_chunk_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        iter_chunks(_keys(3), 0)


def test_in_filter_quotes_reserved_characters() -> None:
    query = SelectQuery(table="reports", select="id").in_("light_id", ["plain", "a,b", 'q"x'])

    assert query.filters == (("light_id", 'in.(plain,"a,b","q\\"x")'),)


@pytest.mark.asyncio
async def test_reports_reader_caps_rows_and_orders_newest_first() -> None:
    transport = _RecordingTransport()

    reports, error = await fetch_reports(transport, _keys(3), chunk_size=200, limit=5000)

    assert error is None
    assert len(reports) == 3
    params = transport.queries[0].to_params()
    assert ("order", "created_at.desc") in params
    assert ("limit", "5000") in params


@pytest.mark.asyncio
async def test_fix_actions_reader_filters_on_fix_action() -> None:
    transport = _RecordingTransport()

    await fetch_fix_actions(transport, _keys(1))

    assert ("action", "eq.fix") in transport.queries[0].to_params()


class _RowsTransport:
    def __init__(self, rows: list[dict[str, Any]]) -> None:
        self._rows = rows
        self.queries: list[SelectQuery] = []

    async def select(self, query: SelectQuery) -> list[dict[str, Any]]:
        self.queries.append(query)
        return self._rows


@pytest.mark.asyncio
async def test_official_lights_reader_drops_rows_without_finite_coordinates() -> None:
    transport = _RowsTransport(
        [
            {"id": "a", "lat": "41.86", "lng": -80.79, "sl_id": "SL001"},
            {"id": "b", "lat": None, "lng": -80.79},
            {"id": "", "lat": 41.0, "lng": -80.0},
            {"id": "c", "lat": float("nan"), "lng": -80.0},
        ]
    )

    lights = await fetch_official_lights(transport)

    assert [light.id for light in lights] == ["a"]
    assert lights[0].display_id == "SL001"
    assert lights[0].lat == pytest.approx(41.86)
    assert transport.queries[0].to_params() == [("select", "id,lat,lng,sl_id"), ("order", "created_at.desc")]
