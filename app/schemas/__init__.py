"""
app/schemas package marker.
"""

from app.schemas.dashboard import (
    BookingsViewResponse,
    DashboardOverviewResponse,
    ExceptionsViewResponse,
    InsightCacheClearedResponse,
    InsightCacheResponse,
    RevenueViewResponse,
)

__all__ = [
    "BookingsViewResponse",
    "DashboardOverviewResponse",
    "ExceptionsViewResponse",
    "InsightCacheClearedResponse",
    "InsightCacheResponse",
    "RevenueViewResponse",
]
