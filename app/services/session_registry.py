"""
app/services/session_registry.py

Per-session state for the dashboard API.

A dashboard session owns one ``SessionStorage`` (and therefore one insight
cache) and the records loaded for it. Records are loaded lazily on first
use and then held immutably; ending the session drops both.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Callable

from app.config import (
    InsightCacheSettings,
    SessionSettings,
    get_dashboard_data_settings,
    get_insight_cache_settings,
    get_session_settings,
)
from app.domain.dashboard import DashboardData
from app.services.record_loader import load_dashboard_data
from country_insights.cache import InsightCache, SessionInsightCache, SessionStorage
from country_insights.service import InsightService, build_insight_service

logger = logging.getLogger(__name__)

DataLoader = Callable[[], DashboardData]
InsightServiceFactory = Callable[[InsightCache], InsightService]


def _default_data_loader() -> DashboardData:
    return load_dashboard_data(get_dashboard_data_settings())


class DashboardSession:
    """
    State bound to one ``X-Session-Id``.
    """

    def __init__(
        self,
        session_id: str,
        *,
        data_loader: DataLoader,
        insight_service_factory: InsightServiceFactory,
        cache_settings: InsightCacheSettings,
    ) -> None:
        self.session_id = session_id
        self.storage = SessionStorage(quota_bytes=cache_settings.quota_bytes)
        self.insight_service = insight_service_factory(
            SessionInsightCache(self.storage, prefix=cache_settings.prefix)
        )
        self._data_loader = data_loader
        self._data: DashboardData | None = None
        self.last_seen = 0.0

    def data(self) -> DashboardData:
        """
        Return the session's dashboard data, loading it on first access.

        Raises RecordLoadError if loading fails; a later call retries.
        """

        if self._data is None:
            self._data = self._data_loader()
            logger.info("Dashboard data loaded for session=%r", self.session_id)
        return self._data

    def close(self) -> None:
        self.storage.clear()
        self._data = None


class SessionRegistry:
    """
    Creates sessions on first sight and drops them on explicit end, after
    ``idle_timeout_seconds`` without a request, or as the least recently
    seen session once ``max_sessions`` is reached.
    """

    def __init__(
        self,
        *,
        data_loader: DataLoader | None = None,
        insight_service_factory: InsightServiceFactory | None = None,
        cache_settings: InsightCacheSettings | None = None,
        session_settings: SessionSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._data_loader = data_loader or _default_data_loader
        self._insight_service_factory = insight_service_factory or build_insight_service
        self._cache_settings = cache_settings or get_insight_cache_settings()
        self._session_settings = session_settings or get_session_settings()
        self._clock = clock
        # Ordered least recently seen first.
        self._sessions: OrderedDict[str, DashboardSession] = OrderedDict()

    def get_or_create(self, session_id: str) -> DashboardSession:
        now = self._clock()
        self._evict_idle(now)

        session = self._sessions.get(session_id)
        if session is None:
            while len(self._sessions) >= self._session_settings.max_sessions:
                oldest_id = next(iter(self._sessions))
                logger.info("Evicting least recently seen session=%r", oldest_id)
                self.end(oldest_id)
            session = DashboardSession(
                session_id,
                data_loader=self._data_loader,
                insight_service_factory=self._insight_service_factory,
                cache_settings=self._cache_settings,
            )
            self._sessions[session_id] = session
            logger.info("Dashboard session started session=%r", session_id)
        else:
            self._sessions.move_to_end(session_id)

        session.last_seen = now
        return session

    def _evict_idle(self, now: float) -> None:
        cutoff = now - self._session_settings.idle_timeout_seconds
        idle = [sid for sid, session in self._sessions.items() if session.last_seen < cutoff]
        for session_id in idle:
            logger.info("Evicting idle session=%r", session_id)
            self.end(session_id)

    def end(self, session_id: str) -> bool:
        """
        End *session_id*. Returns False when no such session exists.
        """

        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.close()
        logger.info("Dashboard session ended session=%r", session_id)
        return True

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.end(session_id)

    def __len__(self) -> int:
        return len(self._sessions)
