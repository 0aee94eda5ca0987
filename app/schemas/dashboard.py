"""
app/schemas/dashboard.py

Response schemas for dashboard and insight endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.domain.dashboard import (
    CategoryTotal,
    CountryBookings,
    CountryException,
    CountryRevenue,
    DashboardMetrics,
    MonthlyCount,
    MonthlyRevenue,
)


class DashboardOverviewResponse(BaseModel):
    """
    Headline metrics plus the three primary chart views.
    """

    metrics: DashboardMetrics
    country_bookings: list[CountryBookings] = Field(default_factory=list)
    monthly_revenue: list[MonthlyRevenue] = Field(default_factory=list)
    country_exceptions: list[CountryException] = Field(default_factory=list)


class BookingsViewResponse(BaseModel):
    total_bookings: int
    by_country: list[CountryBookings] = Field(default_factory=list)
    by_month: list[MonthlyCount] = Field(default_factory=list)
    by_type: list[CategoryTotal] = Field(default_factory=list)


class ExceptionsViewResponse(BaseModel):
    average_exception_rate: float
    by_country: list[CountryException] = Field(default_factory=list)
    by_month: list[MonthlyCount] = Field(default_factory=list)
    by_ops_source: list[CategoryTotal] = Field(default_factory=list)


class RevenueViewResponse(BaseModel):
    total_revenue: int
    by_month: list[MonthlyRevenue] = Field(default_factory=list)
    by_division: list[CategoryTotal] = Field(default_factory=list)
    by_country: list[CountryRevenue] = Field(default_factory=list)


class InsightCacheResponse(BaseModel):
    """
    Countries with cached insights in the caller's session.
    """

    countries: list[str] = Field(default_factory=list)


class InsightCacheClearedResponse(BaseModel):
    removed: int = Field(..., ge=0)
