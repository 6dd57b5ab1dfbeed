"""Client configuration for pystreetlight."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pystreetlight._constants import DEFAULT_CHUNK_SIZE, DEFAULT_REPORTS_LIMIT
from pystreetlight.exceptions import StreetlightConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env: Mapping[str, str], key: str, cast: type) -> Any:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return cast(raw)
    except ValueError as exc:
        raise StreetlightConfigError(f"{key} must be a {cast.__name__}, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class GeolocationOptions:
    """Options passed to the platform position watcher.

    These mirror the browser ``watchPosition`` options the map view uses.
    """

    enable_high_accuracy: bool = True
    timeout_ms: int = 10_000
    maximum_age_ms: int = 1_000


@dataclasses.dataclass(frozen=True)
class StreetlightConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Base URL of the tabular data service (e.g.
        ``"https://xyz.supabase.co"``).
    api_key : str
        Anonymous API key sent as ``apikey`` and bearer token.
    chunk_size : int
        Maximum number of keys per batched ``in.(...)`` request.
    reports_limit : int
        Row cap applied to every reports chunk.
    request_timeout : float
        Total per-request timeout in seconds.
    api_trace_enabled : bool
        Log redacted request parameters and row counts at DEBUG level.
    include_reporter_columns : bool
        Also read the reporter contact columns of ``reports`` (needs an API
        key allowed to see them).  Required for the per-identity report rule.
    geolocation : GeolocationOptions
        Position watcher options.
    """

    base_url: str
    api_key: str
    chunk_size: int = DEFAULT_CHUNK_SIZE
    reports_limit: int = DEFAULT_REPORTS_LIMIT
    request_timeout: float = 15.0
    api_trace_enabled: bool = False
    include_reporter_columns: bool = False
    geolocation: GeolocationOptions = dataclasses.field(default_factory=GeolocationOptions)

    def __post_init__(self) -> None:
        if not self.base_url:
            raise StreetlightConfigError("base_url is required")
        if not self.api_key:
            raise StreetlightConfigError("api_key is required")
        if self.chunk_size < 1:
            raise StreetlightConfigError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.reports_limit < 1:
            raise StreetlightConfigError(f"reports_limit must be >= 1, got {self.reports_limit}")
        # No trailing slash; paths are joined with "/".
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls, **overrides: Any) -> StreetlightConfig:
        """Create configuration from environment variables.

        Reads ``STREETLIGHT_SUPABASE_URL`` and ``STREETLIGHT_SUPABASE_KEY``
        plus optional ``STREETLIGHT_*`` tuning variables.  Explicit keyword
        arguments override environment values.

        Returns
        -------
        StreetlightConfig
            Populated configuration.

        Raises
        ------
        StreetlightConfigError
            If required values are missing or a numeric variable is invalid.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {
            "base_url": env.get("STREETLIGHT_SUPABASE_URL", ""),
            "api_key": env.get("STREETLIGHT_SUPABASE_KEY", ""),
        }

        _ENV_NUMERIC_MAP = {
            "STREETLIGHT_CHUNK_SIZE": ("chunk_size", int),
            "STREETLIGHT_REPORTS_LIMIT": ("reports_limit", int),
            "STREETLIGHT_REQUEST_TIMEOUT": ("request_timeout", float),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            if field_name in overrides:
                continue
            value = _env_number(env, env_key, cast)
            if value is not None:
                config_kwargs[field_name] = value

        _ENV_BOOL_MAP = {
            "STREETLIGHT_API_TRACE_ENABLED": "api_trace_enabled",
            "STREETLIGHT_INCLUDE_REPORTER_COLUMNS": "include_reporter_columns",
        }
        for env_key, field_name in _ENV_BOOL_MAP.items():
            if field_name not in overrides:
                config_kwargs[field_name] = _env_bool(env.get(env_key), False)

        geo_overrides = overrides.pop("geolocation", None)
        if isinstance(geo_overrides, dict):
            config_kwargs["geolocation"] = GeolocationOptions(**geo_overrides)
        elif isinstance(geo_overrides, GeolocationOptions):
            config_kwargs["geolocation"] = geo_overrides

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
