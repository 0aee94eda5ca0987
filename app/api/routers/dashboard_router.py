"""
app/api/routers/dashboard_router.py

Dashboard aggregate endpoints.

Every view is recomputed from the session's immutable records on request.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.dependencies import get_dashboard_session, load_session_data
from app.schemas.dashboard import (
    BookingsViewResponse,
    DashboardOverviewResponse,
    ExceptionsViewResponse,
    RevenueViewResponse,
)
from app.services.aggregation_service import (
    aggregate_bookings_by_country,
    aggregate_bookings_by_month,
    aggregate_bookings_by_type,
    aggregate_exception_rate_by_country,
    aggregate_exceptions_by_month,
    aggregate_exceptions_by_ops_source,
    aggregate_revenue_by_country,
    aggregate_revenue_by_division,
    aggregate_revenue_by_month,
)
from app.services.session_registry import DashboardSession

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardOverviewResponse)
def get_dashboard(session: DashboardSession = Depends(get_dashboard_session)) -> DashboardOverviewResponse:
    """
    Headline metrics and the top-15 country / monthly revenue views.
    """

    data = load_session_data(session)
    return DashboardOverviewResponse(
        metrics=data.metrics,
        country_bookings=data.processed.country_bookings,
        monthly_revenue=data.processed.monthly_revenue,
        country_exceptions=data.processed.country_exceptions,
    )


@router.get("/bookings", response_model=BookingsViewResponse)
def get_bookings_view(session: DashboardSession = Depends(get_dashboard_session)) -> BookingsViewResponse:
    data = load_session_data(session)
    return BookingsViewResponse(
        total_bookings=data.metrics.total_bookings,
        by_country=aggregate_bookings_by_country(data.bookings),
        by_month=aggregate_bookings_by_month(data.bookings),
        by_type=aggregate_bookings_by_type(data.bookings),
    )


@router.get("/exceptions", response_model=ExceptionsViewResponse)
def get_exceptions_view(session: DashboardSession = Depends(get_dashboard_session)) -> ExceptionsViewResponse:
    data = load_session_data(session)
    return ExceptionsViewResponse(
        average_exception_rate=data.metrics.average_exception_rate,
        by_country=aggregate_exception_rate_by_country(data.bookings, data.exceptions),
        by_month=aggregate_exceptions_by_month(data.exceptions),
        by_ops_source=aggregate_exceptions_by_ops_source(data.exceptions),
    )


@router.get("/revenue", response_model=RevenueViewResponse)
def get_revenue_view(session: DashboardSession = Depends(get_dashboard_session)) -> RevenueViewResponse:
    data = load_session_data(session)
    return RevenueViewResponse(
        total_revenue=data.metrics.total_revenue,
        by_month=aggregate_revenue_by_month(data.revenue),
        by_division=aggregate_revenue_by_division(data.revenue),
        by_country=aggregate_revenue_by_country(data.revenue),
    )
