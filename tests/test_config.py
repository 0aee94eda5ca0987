"""
tests/test_config.py

Environment-driven settings for the insight provider, cache and CSV sources.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from app.config import (
    DEFAULT_MODEL_VARIANTS,
    DEFAULT_PROVIDER_BASE_URL,
    get_dashboard_data_settings,
    get_insight_cache_settings,
    get_insight_provider_settings,
    get_session_settings,
)

_ENV_NAMES = (
    "INSIGHT_API_KEY",
    "GEMINI_API_KEY",
    "INSIGHT_BASE_URL",
    "INSIGHT_MODEL_VARIANTS",
    "INSIGHT_TEMPERATURE",
    "INSIGHT_MAX_TOKENS",
    "INSIGHT_ADAPTER",
    "INSIGHT_HOME_CARRIER",
    "INSIGHT_CACHE_PREFIX",
    "INSIGHT_CACHE_QUOTA_BYTES",
    "DASHBOARD_DATA_DIR",
    "DASHBOARD_BOOKINGS_FILE",
    "DASHBOARD_MAX_SESSIONS",
    "DASHBOARD_SESSION_IDLE_SECONDS",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    getters = (
        get_insight_provider_settings,
        get_insight_cache_settings,
        get_dashboard_data_settings,
        get_session_settings,
    )
    for getter in getters:
        getter.cache_clear()
    yield
    for getter in getters:
        getter.cache_clear()


class TestInsightProviderSettings:
    def test_defaults(self) -> None:
        settings = get_insight_provider_settings()

        assert settings.api_key is None
        assert settings.base_url == DEFAULT_PROVIDER_BASE_URL
        assert settings.model_variants == DEFAULT_MODEL_VARIANTS
        assert settings.model_variants[0] == "gemini-2.5-flash"
        assert settings.temperature == 0.7
        assert settings.max_tokens == 8192
        assert settings.adapter == "openai"
        assert settings.home_carrier == "FedEx"

    def test_gemini_key_is_accepted_as_fallback(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
        assert get_insight_provider_settings().api_key == "gemini-key"

    def test_insight_key_wins_over_gemini_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INSIGHT_API_KEY", "primary")
        monkeypatch.setenv("GEMINI_API_KEY", "secondary")
        assert get_insight_provider_settings().api_key == "primary"

    def test_blank_key_means_no_credential(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INSIGHT_API_KEY", "   ")
        assert get_insight_provider_settings().api_key is None

    def test_overrides_and_clamping(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INSIGHT_MODEL_VARIANTS", " model-x , ,model-y ")
        monkeypatch.setenv("INSIGHT_TEMPERATURE", "9")
        monkeypatch.setenv("INSIGHT_MAX_TOKENS", "not-a-number")
        monkeypatch.setenv("INSIGHT_ADAPTER", "MOCK")

        settings = get_insight_provider_settings()

        assert settings.model_variants == ("model-x", "model-y")
        assert settings.temperature == 2.0
        assert settings.max_tokens == 8192
        assert settings.adapter == "mock"


class TestCacheAndDataSettings:
    def test_cache_defaults(self) -> None:
        settings = get_insight_cache_settings()
        assert (settings.prefix, settings.quota_bytes) == ("eu_dashboard_cache_", 0)

    def test_negative_quota_is_unlimited(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INSIGHT_CACHE_QUOTA_BYTES", "-5")
        assert get_insight_cache_settings().quota_bytes == 0

    def test_data_paths(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("DASHBOARD_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("DASHBOARD_BOOKINGS_FILE", "bookings.csv")

        settings = get_dashboard_data_settings()

        assert settings.bookings_path == tmp_path / "bookings.csv"
        assert settings.revenue_path == tmp_path / "81_TotalRevenue.csv"

    def test_session_limits(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert get_session_settings().max_sessions == 256
        get_session_settings.cache_clear()

        monkeypatch.setenv("DASHBOARD_MAX_SESSIONS", "0")
        monkeypatch.setenv("DASHBOARD_SESSION_IDLE_SECONDS", "900")
        settings = get_session_settings()

        assert settings.max_sessions == 1
        assert settings.idle_timeout_seconds == 900
