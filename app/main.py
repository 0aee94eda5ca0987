from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.config import SessionSettings, get_insight_provider_settings, load_env_files
from app.services.session_registry import DataLoader, InsightServiceFactory, SessionRegistry


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _log_provider_mode() -> None:
    """
    Report at startup whether insights will come from a live provider.
    """

    settings = get_insight_provider_settings()
    log = logging.getLogger(__name__)
    if settings.adapter == "mock":
        log.info("Insight provider: mock adapter")
    elif settings.api_key:
        log.info("Insight provider: %s via %s", ", ".join(settings.model_variants), settings.base_url)
    else:
        log.warning("No insight provider credential configured; serving synthetic insights only")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Log provider mode on boot; drop every session on exit."""
    _log_provider_mode()
    try:
        yield
    finally:
        registry: SessionRegistry = application.state.sessions
        logging.getLogger(__name__).info("Shutting down with %d active session(s)", len(registry))
        registry.close_all()


def create_app(
    *,
    data_loader: DataLoader | None = None,
    insight_service_factory: InsightServiceFactory | None = None,
    session_settings: SessionSettings | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    ``data_loader`` and ``insight_service_factory`` replace the CSV loader
    and the settings-driven insight service, and ``session_settings`` the
    session limits from the environment, mainly for tests.
    """

    load_env_files()
    _configure_logging()

    application = FastAPI(
        title="Operations Dashboard API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.state.sessions = SessionRegistry(
        data_loader=data_loader,
        insight_service_factory=insight_service_factory,
        session_settings=session_settings,
    )

    from app.api.routers import dashboard_router, insights_router

    application.include_router(dashboard_router)
    application.include_router(insights_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
