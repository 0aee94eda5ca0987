"""
app/services/metrics_service.py

Dashboard-wide KPI calculation.

Metrics are computed straight from the raw record arrays, never from the
top-15 views, so that truncation cannot bias the headline numbers.

Formulas
--------
Total Revenue           = sum(Revenue_EUR) over all revenue rows
Total Bookings          = sum(RecordCount) over all booking rows
Average Exception Rate  = sum(exception RecordCount) / Total Bookings * 100
Active Countries        = distinct Country values among booking rows

Unparsable counts contribute ``0``. With no bookings the average exception
rate is ``0.0`` rather than an error.
"""

from __future__ import annotations

import logging
from typing import Sequence

from app.domain.dashboard import DashboardMetrics
from app.domain.records import BookingRecord, ExceptionRecord, RevenueRecord
from app.validators.numeric import parse_count, round_half_up

logger = logging.getLogger(__name__)


def calculate_dashboard_metrics(
    bookings: Sequence[BookingRecord],
    exceptions: Sequence[ExceptionRecord],
    revenue: Sequence[RevenueRecord],
) -> DashboardMetrics:
    """
    Compute the four headline scalars over the full input.

    Exception and revenue country sets play no part in
    ``active_countries``; only booking countries are counted.
    """

    total_bookings = sum(parse_count(record.record_count) for record in bookings)
    total_revenue = sum(parse_count(record.revenue_eur) for record in revenue)
    total_exceptions = sum(parse_count(record.record_count) for record in exceptions)

    average_exception_rate = (
        round_half_up(total_exceptions / total_bookings * 100, 2) if total_bookings > 0 else 0.0
    )
    active_countries = len({record.country for record in bookings})

    logger.debug(
        "calculate_dashboard_metrics bookings=%d exceptions=%d revenue=%d countries=%d",
        total_bookings,
        total_exceptions,
        total_revenue,
        active_countries,
    )
    return DashboardMetrics(
        total_revenue=total_revenue,
        total_bookings=total_bookings,
        average_exception_rate=average_exception_rate,
        active_countries=active_countries,
    )
