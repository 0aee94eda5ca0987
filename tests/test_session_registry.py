"""
tests/test_session_registry.py

Session lifetime: creation, explicit end, idle expiry and the session cap.
"""

from __future__ import annotations

import pytest

from app.config import InsightCacheSettings, SessionSettings
from app.domain.dashboard import DashboardData
from app.services.record_loader import build_dashboard_data
from app.services.session_registry import SessionRegistry
from country_insights.cache import InsightCache
from country_insights.service import InsightService


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def _empty_data() -> DashboardData:
    return build_dashboard_data([], [], [])


def _synthetic_only(cache: InsightCache) -> InsightService:
    return InsightService(cache=cache, adapter=None, model_variants=())


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


def _registry(clock: FakeClock, *, max_sessions: int = 3, idle_timeout_seconds: int = 60) -> SessionRegistry:
    return SessionRegistry(
        data_loader=_empty_data,
        insight_service_factory=_synthetic_only,
        cache_settings=InsightCacheSettings(),
        session_settings=SessionSettings(max_sessions=max_sessions, idle_timeout_seconds=idle_timeout_seconds),
        clock=clock,
    )


class TestSessionRegistry:
    def test_same_id_returns_same_session(self, clock: FakeClock) -> None:
        registry = _registry(clock)
        assert registry.get_or_create("a") is registry.get_or_create("a")
        assert len(registry) == 1

    def test_end_drops_session_and_its_storage(self, clock: FakeClock) -> None:
        registry = _registry(clock)
        session = registry.get_or_create("a")
        session.storage.set_item("k", "v")

        assert registry.end("a") is True
        assert registry.end("a") is False
        assert session.storage.keys() == []
        assert registry.get_or_create("a") is not session

    def test_session_count_is_capped(self, clock: FakeClock) -> None:
        registry = _registry(clock, max_sessions=3)
        for index in range(50):
            registry.get_or_create(f"s{index}")
            clock.now += 1

        assert len(registry) == 3

    def test_least_recently_seen_is_evicted_first(self, clock: FakeClock) -> None:
        registry = _registry(clock, max_sessions=2)
        first = registry.get_or_create("a")
        clock.now += 1
        registry.get_or_create("b")
        clock.now += 1
        assert registry.get_or_create("a") is first

        clock.now += 1
        registry.get_or_create("c")

        assert len(registry) == 2
        assert registry.get_or_create("a") is first
        assert registry.end("b") is False

    def test_idle_sessions_expire(self, clock: FakeClock) -> None:
        registry = _registry(clock, idle_timeout_seconds=60)
        idle = registry.get_or_create("idle")
        clock.now += 30
        active = registry.get_or_create("active")

        clock.now += 45
        assert registry.get_or_create("active") is active
        assert len(registry) == 1
        assert registry.get_or_create("idle") is not idle

    def test_close_all(self, clock: FakeClock) -> None:
        registry = _registry(clock)
        for session_id in ("a", "b"):
            registry.get_or_create(session_id)
        registry.close_all()
        assert len(registry) == 0
