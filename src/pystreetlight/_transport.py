"""HTTP transport for the remote tabular data service."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from pystreetlight._api._query import SelectQuery
from pystreetlight._constants import REST_PATH, USER_AGENT
from pystreetlight._redact import redact_for_log
from pystreetlight.config import StreetlightConfig
from pystreetlight.exceptions import StreetlightTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the table readers.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`RestTransport`) concrete.
    """

    async def select(self, query: SelectQuery) -> list[dict[str, Any]]:
        ...


class RestTransport:
    """Read-only PostgREST transport backed by an aiohttp session."""

    def __init__(
        self,
        config: StreetlightConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self) -> dict[str, str]:
        return {
            "accept": "application/json",
            "apikey": self._config.api_key,
            "authorization": f"Bearer {self._config.api_key}",
            "user-agent": USER_AGENT,
        }

    def build_url(self, table: str) -> str:
        return f"{self._config.base_url}{REST_PATH}/{table}"

    async def select(self, query: SelectQuery) -> list[dict[str, Any]]:
        """Run one select and return the decoded rows.

        Raises
        ------
        StreetlightTransportError
            On network failure, a non-2xx status, or a body that is not a
            JSON array.
        """
        url = self.build_url(query.table)
        params = query.to_params()
        headers = self._headers()
        endpoint = f"{REST_PATH}/{query.table}"

        if self._config.api_trace_enabled:
            _logger.debug("GET %s params=%s headers=%s", url, redact_for_log(params), redact_for_log(headers))

        try:
            async with self._http.get(url, params=params, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                if resp.status >= 300:
                    raise StreetlightTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except StreetlightTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise StreetlightTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StreetlightTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc

        if not isinstance(body, list):
            raise StreetlightTransportError(
                f"Expected a JSON array from {endpoint}, got {type(body).__name__}",
                endpoint=endpoint,
            )

        rows = [row for row in body if isinstance(row, dict)]
        if self._config.api_trace_enabled:
            _logger.debug("GET %s -> %d rows", endpoint, len(rows))
        return rows
