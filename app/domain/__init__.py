"""
app/domain package marker.
"""

from app.domain.dashboard import (
    CategoryTotal,
    CountryBookings,
    CountryException,
    CountryRevenue,
    CountryTotals,
    DashboardData,
    DashboardMetrics,
    MonthlyCount,
    MonthlyRevenue,
    ProcessedData,
)
from app.domain.records import BookingRecord, ExceptionRecord, RevenueRecord

__all__ = [
    "BookingRecord",
    "CategoryTotal",
    "CountryBookings",
    "CountryException",
    "CountryRevenue",
    "CountryTotals",
    "DashboardData",
    "DashboardMetrics",
    "ExceptionRecord",
    "MonthlyCount",
    "MonthlyRevenue",
    "ProcessedData",
    "RevenueRecord",
]
