"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_MODEL_VARIANTS: tuple[str, ...] = (
    "gemini-2.5-flash",
    "gemini-2.0-flash",
    "gemini-2.5-pro",
    "gemini-2.0-flash-exp",
)

DEFAULT_PROVIDER_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_csv_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list, dropping blank items. Empty lists fall back.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    items = tuple(item.strip() for item in raw_value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class InsightProviderSettings:
    """
    Generative provider settings for country insights.

    ``api_key`` is ``None`` when no credential is configured; the insight
    service then serves synthetic insights only.
    """

    api_key: str | None = None
    base_url: str = DEFAULT_PROVIDER_BASE_URL
    model_variants: tuple[str, ...] = DEFAULT_MODEL_VARIANTS
    temperature: float = 0.7
    max_tokens: int = 8192
    adapter: str = "openai"
    home_carrier: str = "FedEx"


@dataclass(frozen=True)
class InsightCacheSettings:
    """
    Session cache settings. ``quota_bytes`` of 0 disables the quota.
    """

    prefix: str = "eu_dashboard_cache_"
    quota_bytes: int = 0


@dataclass(frozen=True)
class SessionSettings:
    """
    Session lifetime limits. Sessions idle longer than ``idle_timeout_seconds``
    are dropped; beyond ``max_sessions`` the least recently seen goes first.
    """

    max_sessions: int = 256
    idle_timeout_seconds: int = 3600


@dataclass(frozen=True)
class DashboardDataSettings:
    """
    Location of the three CSV record sources.
    """

    data_dir: Path = Path("data")
    bookings_file: str = "01_Bookings_JK.csv"
    exceptions_file: str = "05_Exceptions_YH.csv"
    revenue_file: str = "81_TotalRevenue.csv"

    @property
    def bookings_path(self) -> Path:
        return self.data_dir / self.bookings_file

    @property
    def exceptions_path(self) -> Path:
        return self.data_dir / self.exceptions_file

    @property
    def revenue_path(self) -> Path:
        return self.data_dir / self.revenue_file


@lru_cache(maxsize=1)
def get_insight_provider_settings() -> InsightProviderSettings:
    """
    Return cached provider settings from environment variables.
    """

    return InsightProviderSettings(
        api_key=_get_optional_str_env("INSIGHT_API_KEY") or _get_optional_str_env("GEMINI_API_KEY"),
        base_url=_get_str_env("INSIGHT_BASE_URL", DEFAULT_PROVIDER_BASE_URL),
        model_variants=_get_csv_env("INSIGHT_MODEL_VARIANTS", DEFAULT_MODEL_VARIANTS),
        temperature=min(2.0, max(0.0, _get_float_env("INSIGHT_TEMPERATURE", 0.7))),
        max_tokens=max(1, _get_int_env("INSIGHT_MAX_TOKENS", 8192)),
        adapter=_get_str_env("INSIGHT_ADAPTER", "openai").lower(),
        home_carrier=_get_str_env("INSIGHT_HOME_CARRIER", "FedEx"),
    )


@lru_cache(maxsize=1)
def get_insight_cache_settings() -> InsightCacheSettings:
    """
    Return cached session cache settings from environment variables.
    """

    return InsightCacheSettings(
        prefix=_get_str_env("INSIGHT_CACHE_PREFIX", "eu_dashboard_cache_"),
        quota_bytes=max(0, _get_int_env("INSIGHT_CACHE_QUOTA_BYTES", 0)),
    )


@lru_cache(maxsize=1)
def get_dashboard_data_settings() -> DashboardDataSettings:
    """
    Return cached CSV source settings from environment variables.
    """

    return DashboardDataSettings(
        data_dir=Path(_get_str_env("DASHBOARD_DATA_DIR", "data")),
        bookings_file=_get_str_env("DASHBOARD_BOOKINGS_FILE", "01_Bookings_JK.csv"),
        exceptions_file=_get_str_env("DASHBOARD_EXCEPTIONS_FILE", "05_Exceptions_YH.csv"),
        revenue_file=_get_str_env("DASHBOARD_REVENUE_FILE", "81_TotalRevenue.csv"),
    )


@lru_cache(maxsize=1)
def get_session_settings() -> SessionSettings:
    """
    Return cached session lifetime settings from environment variables.
    """

    return SessionSettings(
        max_sessions=max(1, _get_int_env("DASHBOARD_MAX_SESSIONS", 256)),
        idle_timeout_seconds=max(1, _get_int_env("DASHBOARD_SESSION_IDLE_SECONDS", 3600)),
    )
