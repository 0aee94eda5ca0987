"""
app/domain/dashboard.py

Aggregated shapes consumed by the dashboard views.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.domain.records import BookingRecord, ExceptionRecord, RevenueRecord


@dataclass(frozen=True)
class CountryBookings:
    country: str
    total_bookings: int


@dataclass(frozen=True)
class MonthlyRevenue:
    month: str
    revenue: int


@dataclass(frozen=True)
class CountryException:
    """
    Exception rate for one booking country.

    ``exception_rate`` is a percentage rounded to 2 decimals.
    """

    country: str
    bookings: int
    exceptions: int
    exception_rate: float


@dataclass(frozen=True)
class MonthlyCount:
    month: str
    count: int


@dataclass(frozen=True)
class CategoryTotal:
    """
    Total for one category label (booking type, ops source, division).
    """

    label: str
    value: int


@dataclass(frozen=True)
class CountryRevenue:
    country: str
    revenue: int


@dataclass(frozen=True)
class CountryTotals:
    """
    Untruncated revenue and booking volume for a single country.
    """

    country: str
    revenue: int
    bookings: int


@dataclass(frozen=True)
class DashboardMetrics:
    """
    Dashboard-wide scalars computed over the full, untruncated input.
    """

    total_revenue: int
    total_bookings: int
    average_exception_rate: float
    active_countries: int


@dataclass(frozen=True)
class ProcessedData:
    country_bookings: list[CountryBookings] = field(default_factory=list)
    monthly_revenue: list[MonthlyRevenue] = field(default_factory=list)
    country_exceptions: list[CountryException] = field(default_factory=list)


@dataclass(frozen=True)
class DashboardData:
    """
    Everything loaded for one dashboard session.

    The raw record tuples are immutable; derived views are recomputed
    from them on demand.
    """

    bookings: tuple[BookingRecord, ...]
    exceptions: tuple[ExceptionRecord, ...]
    revenue: tuple[RevenueRecord, ...]
    metrics: DashboardMetrics
    processed: ProcessedData
