"""
app/api/routers/insights_router.py

Country market insight endpoints.

Insight acquisition never fails from the caller's point of view: provider
problems degrade to synthetic insights inside the service. The cache routes
are declared before ``/{country}`` so they are not shadowed by it.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.dependencies import get_dashboard_session, get_session_id, get_session_registry, load_session_data
from app.schemas.dashboard import InsightCacheClearedResponse, InsightCacheResponse
from app.services.aggregation_service import country_totals
from app.services.session_registry import DashboardSession
from country_insights.provider import ProviderFatalError
from country_insights.schema import CountryInsights

logger = logging.getLogger(__name__)

router = APIRouter(tags=["insights"])


@router.get("/insights/cache", response_model=InsightCacheResponse)
def list_cached_insights(session: DashboardSession = Depends(get_dashboard_session)) -> InsightCacheResponse:
    return InsightCacheResponse(countries=session.insight_service.cached_countries())


@router.delete("/insights/cache", response_model=InsightCacheClearedResponse)
def clear_cached_insights(session: DashboardSession = Depends(get_dashboard_session)) -> InsightCacheClearedResponse:
    return InsightCacheClearedResponse(removed=session.insight_service.clear_insights_cache())


@router.get("/insights/{country}", response_model=CountryInsights)
async def get_country_insights(
    country: str,
    session: DashboardSession = Depends(get_dashboard_session),
) -> CountryInsights:
    """
    Insights for *country*, seeded with its untruncated revenue and bookings.
    """

    data = load_session_data(session)
    totals = country_totals(data.bookings, data.revenue, country)
    try:
        return await session.insight_service.get_country_insights(
            country, totals.revenue, totals.bookings
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ProviderFatalError as exc:
        logger.error("Insight acquisition failed country=%r: %s", country, exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Insight provider unavailable.",
        ) from exc


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
def end_session(request: Request, session_id: str = Depends(get_session_id)) -> None:
    """
    End the caller's session, dropping its cache and loaded records.
    """

    get_session_registry(request).end(session_id)
