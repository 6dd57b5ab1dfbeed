"""Batched key reads.

The remote service takes key lists as ``column=in.(k1,k2,...)`` in the URL.
A few thousand uuids overflow the request line, so reads keyed by light id
are split into fixed-size chunks and issued one after another.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from pystreetlight._api._query import SelectQuery
from pystreetlight._constants import DEFAULT_CHUNK_SIZE
from pystreetlight._transport import Transport
from pystreetlight.exceptions import BatchFetchError, StreetlightError

_logger = logging.getLogger(__name__)

QueryBuilder = Callable[[SelectQuery], SelectQuery]


def iter_chunks(keys: Sequence[str], chunk_size: int) -> list[Sequence[str]]:
    """Split *keys* into consecutive slices of at most *chunk_size*."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    return [keys[i : i + chunk_size] for i in range(0, len(keys), chunk_size)]


async def fetch_in_chunks(
    transport: Transport,
    *,
    table: str,
    select: str,
    keys: Sequence[str],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    key_column: str = "light_id",
    build: QueryBuilder | None = None,
) -> tuple[list[dict[str, Any]], BatchFetchError | None]:
    """Read every row whose *key_column* is in *keys*, one chunk at a time.

    Parameters
    ----------
    transport : Transport
        Transport used for each chunk request.
    table : str
        Remote table name.
    select : str
        Comma-separated column list.
    keys : Sequence[str]
        Keys to match; may be arbitrarily long.
    chunk_size : int
        Maximum keys per request.
    key_column : str
        Column the ``in`` filter applies to.
    build : callable, optional
        Applied to every chunk query after the key filter (extra filters,
        ordering, row limit).

    Returns
    -------
    tuple[list[dict], BatchFetchError | None]
        Rows in chunk order, then server order within a chunk.  On the
        first failing chunk no further chunks are requested and the rows
        fetched so far are returned with the error.  There are no retries.
    """
    rows: list[dict[str, Any]] = []
    chunks = iter_chunks(keys, chunk_size)

    for index, chunk in enumerate(chunks):
        query = SelectQuery(table=table, select=select).in_(key_column, chunk)
        if build is not None:
            query = build(query)

        try:
            data = await transport.select(query)
        except StreetlightError as exc:
            _logger.debug(
                "%s chunk %d/%d failed after %d rows",
                table,
                index + 1,
                len(chunks),
                len(rows),
                exc_info=True,
            )
            error = BatchFetchError(
                f"{table} chunk {index + 1}/{len(chunks)} failed: {exc}",
                table=table,
                chunk_index=index,
                rows_fetched=len(rows),
            )
            error.__cause__ = exc
            return rows, error

        if data:
            rows.extend(data)

    _logger.debug("%s: %d keys in %d chunks -> %d rows", table, len(keys), len(chunks), len(rows))
    return rows, None
