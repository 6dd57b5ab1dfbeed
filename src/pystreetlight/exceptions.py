"""Custom exception hierarchy for pystreetlight."""

from __future__ import annotations

from collections.abc import Mapping


class StreetlightError(Exception):
    """Base exception for all pystreetlight errors."""


class StreetlightConfigError(StreetlightError):
    """Invalid or missing configuration."""


class StreetlightTransportError(StreetlightError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class BatchFetchError(StreetlightError):
    """One chunk of a batched key read failed.

    Returned (not raised) by :func:`pystreetlight._api.batch.fetch_in_chunks`
    next to the rows that were retrieved before the failure.  Callers must
    treat the dataset as incomplete.
    """

    def __init__(
        self,
        message: str,
        *,
        table: str,
        chunk_index: int,
        rows_fetched: int = 0,
    ) -> None:
        self.table = table
        self.chunk_index = chunk_index
        self.rows_fetched = rows_fetched
        super().__init__(message)


class SensorUnavailableError(StreetlightError):
    """Geolocation/orientation API is absent or permission was denied."""


class ReportValidationError(StreetlightError):
    """Report form cannot be submitted in its current state."""

    def __init__(self, message: str, *, errors: Mapping[str, str] | None = None) -> None:
        self.errors: dict[str, str] = dict(errors or {})
        super().__init__(message)
