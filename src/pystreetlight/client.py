"""High-level async client for the streetlight tables."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import aiohttp

from pystreetlight._api import tables as _tables_api
from pystreetlight._transport import RestTransport, Transport
from pystreetlight.config import StreetlightConfig
from pystreetlight.exceptions import BatchFetchError, StreetlightError
from pystreetlight.models.events import ActionEvent, FixEvent, Report
from pystreetlight.models.light import OfficialLight

_logger = logging.getLogger(__name__)


class StreetlightClient:
    """Async read client for lights, fix events and reports.

    Usage::

        async with StreetlightClient(config) as client:
            lights = await client.get_official_lights()
            reports, error = await client.get_reports([light.id for light in lights])
    """

    def __init__(
        self,
        config: StreetlightConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None

    @property
    def config(self) -> StreetlightConfig:
        return self._config

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> StreetlightClient:
        if self._external_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = RestTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise StreetlightError("Client not initialized. Use 'async with StreetlightClient(...) as client:'")
        return self._transport

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_official_lights(self) -> list[OfficialLight]:
        """Read every official light, newest first.

        Raises
        ------
        StreetlightTransportError
            If the table cannot be read.
        """
        return await _tables_api.fetch_official_lights(self._require_transport())

    async def get_fix_events(self, light_ids: Sequence[str]) -> tuple[list[FixEvent], BatchFetchError | None]:
        return await _tables_api.fetch_fix_events(
            self._require_transport(),
            light_ids,
            chunk_size=self._config.chunk_size,
        )

    async def get_fix_actions(self, light_ids: Sequence[str]) -> tuple[list[ActionEvent], BatchFetchError | None]:
        return await _tables_api.fetch_fix_actions(
            self._require_transport(),
            light_ids,
            chunk_size=self._config.chunk_size,
        )

    async def get_reports(self, light_ids: Sequence[str]) -> tuple[list[Report], BatchFetchError | None]:
        return await _tables_api.fetch_reports(
            self._require_transport(),
            light_ids,
            chunk_size=self._config.chunk_size,
            limit=self._config.reports_limit,
            include_reporter=self._config.include_reporter_columns,
        )
