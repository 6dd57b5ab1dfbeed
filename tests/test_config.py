from __future__ import annotations

import pytest

from pystreetlight.config import GeolocationOptions, StreetlightConfig
from pystreetlight.exceptions import StreetlightConfigError


@pytest.fixture
def base_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    monkeypatch.setenv("STREETLIGHT_SUPABASE_URL", "https://example.supabase.co/")
    monkeypatch.setenv("STREETLIGHT_SUPABASE_KEY", "anon-key")
    for key in (
        "STREETLIGHT_CHUNK_SIZE",
        "STREETLIGHT_REPORTS_LIMIT",
        "STREETLIGHT_REQUEST_TIMEOUT",
        "STREETLIGHT_API_TRACE_ENABLED",
        "STREETLIGHT_INCLUDE_REPORTER_COLUMNS",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults_from_env(base_env: pytest.MonkeyPatch) -> None:
    config = StreetlightConfig.from_env()

    assert config.base_url == "https://example.supabase.co"
    assert config.api_key == "anon-key"
    assert config.chunk_size == 200
    assert config.reports_limit == 5000
    assert config.api_trace_enabled is False
    assert config.geolocation == GeolocationOptions()


def test_numeric_and_trace_env(base_env: pytest.MonkeyPatch) -> None:
    base_env.setenv("STREETLIGHT_CHUNK_SIZE", "50")
    base_env.setenv("STREETLIGHT_REQUEST_TIMEOUT", "2.5")
    base_env.setenv("STREETLIGHT_API_TRACE_ENABLED", "yes")

    config = StreetlightConfig.from_env()

    assert config.chunk_size == 50
    assert config.request_timeout == 2.5
    assert config.api_trace_enabled is True


def test_overrides_win_over_env(base_env: pytest.MonkeyPatch) -> None:
    base_env.setenv("STREETLIGHT_CHUNK_SIZE", "50")

    config = StreetlightConfig.from_env(chunk_size=10, geolocation={"timeout_ms": 3000})

    assert config.chunk_size == 10
    assert config.geolocation.timeout_ms == 3000
    assert config.geolocation.enable_high_accuracy is True


def test_invalid_number_raises(base_env: pytest.MonkeyPatch) -> None:
    base_env.setenv("STREETLIGHT_REPORTS_LIMIT", "lots")

    with pytest.raises(StreetlightConfigError, match="STREETLIGHT_REPORTS_LIMIT"):
        StreetlightConfig.from_env()


def test_missing_credentials_raise(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STREETLIGHT_SUPABASE_URL", raising=False)
    monkeypatch.delenv("STREETLIGHT_SUPABASE_KEY", raising=False)

    with pytest.raises(StreetlightConfigError):
        StreetlightConfig.from_env()


def test_chunk_size_must_be_positive() -> None:
    with pytest.raises(StreetlightConfigError):
        StreetlightConfig(base_url="https://x", api_key="k", chunk_size=0)


def test_reporter_columns_flag_from_env(base_env: pytest.MonkeyPatch) -> None:
    assert StreetlightConfig.from_env().include_reporter_columns is False

    base_env.setenv("STREETLIGHT_INCLUDE_REPORTER_COLUMNS", "true")

    assert StreetlightConfig.from_env().include_reporter_columns is True
