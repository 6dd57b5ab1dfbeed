"""Typed readers for the four remote tables.

Endpoints (all read-only):
  - official_lights (full read, newest first)
  - fixed_lights    (batched by light_id)
  - light_actions   (batched by light_id, action = fix, newest first)
  - reports         (batched by light_id, newest first, capped per chunk)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from pystreetlight._api._query import SelectQuery
from pystreetlight._api.batch import fetch_in_chunks
from pystreetlight._constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_REPORTS_LIMIT,
    FIX_ACTION,
    FIXED_LIGHTS_SELECT,
    FIXED_LIGHTS_TABLE,
    LIGHT_ACTIONS_SELECT,
    LIGHT_ACTIONS_TABLE,
    OFFICIAL_LIGHTS_SELECT,
    OFFICIAL_LIGHTS_TABLE,
    REPORTS_SELECT,
    REPORTS_SELECT_WITH_REPORTER,
    REPORTS_TABLE,
)
from pystreetlight._transport import Transport
from pystreetlight.exceptions import BatchFetchError
from pystreetlight.models.events import ActionEvent, FixEvent, Report
from pystreetlight.models.light import OfficialLight

_logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=BaseModel)


def parse_rows(model: type[TModel], rows: Sequence[dict[str, Any]], *, table: str) -> list[TModel]:
    """Validate rows into *model*, dropping (and logging) malformed ones."""
    parsed: list[TModel] = []
    dropped = 0
    for row in rows:
        try:
            parsed.append(model.model_validate(row))
        except ValidationError:
            dropped += 1
            _logger.debug("Dropping malformed %s row: %s", table, row, exc_info=True)
    if dropped:
        _logger.warning("Dropped %d malformed %s rows", dropped, table)
    return parsed


async def fetch_official_lights(transport: Transport) -> list[OfficialLight]:
    """Read the full ``official_lights`` table, newest first."""
    query = SelectQuery(table=OFFICIAL_LIGHTS_TABLE, select=OFFICIAL_LIGHTS_SELECT).order(
        "created_at", ascending=False
    )
    rows = await transport.select(query)
    return parse_rows(OfficialLight, rows, table=OFFICIAL_LIGHTS_TABLE)


async def fetch_fix_events(
    transport: Transport,
    light_ids: Sequence[str],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> tuple[list[FixEvent], BatchFetchError | None]:
    rows, error = await fetch_in_chunks(
        transport,
        table=FIXED_LIGHTS_TABLE,
        select=FIXED_LIGHTS_SELECT,
        keys=light_ids,
        chunk_size=chunk_size,
    )
    return parse_rows(FixEvent, rows, table=FIXED_LIGHTS_TABLE), error


async def fetch_fix_actions(
    transport: Transport,
    light_ids: Sequence[str],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> tuple[list[ActionEvent], BatchFetchError | None]:
    rows, error = await fetch_in_chunks(
        transport,
        table=LIGHT_ACTIONS_TABLE,
        select=LIGHT_ACTIONS_SELECT,
        keys=light_ids,
        chunk_size=chunk_size,
        build=lambda q: q.eq("action", FIX_ACTION).order("created_at", ascending=False),
    )
    return parse_rows(ActionEvent, rows, table=LIGHT_ACTIONS_TABLE), error


async def fetch_reports(
    transport: Transport,
    light_ids: Sequence[str],
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    limit: int = DEFAULT_REPORTS_LIMIT,
    include_reporter: bool = False,
) -> tuple[list[Report], BatchFetchError | None]:
    rows, error = await fetch_in_chunks(
        transport,
        table=REPORTS_TABLE,
        select=REPORTS_SELECT_WITH_REPORTER if include_reporter else REPORTS_SELECT,
        keys=light_ids,
        chunk_size=chunk_size,
        build=lambda q: q.order("created_at", ascending=False).limit(limit),
    )
    return parse_rows(Report, rows, table=REPORTS_TABLE), error
