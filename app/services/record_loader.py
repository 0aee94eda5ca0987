"""
app/services/record_loader.py

Loads the three operational CSV sources and builds per-session dashboard data.

Each file has a header row and one aggregate count row per line. Blank
lines are skipped; numeric cells are kept as text and parsed leniently by
the aggregation layer. A missing file or a missing required header is a
load failure; malformed cell values never are.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Callable, Iterable, Mapping, TypeVar

from app.config import DashboardDataSettings
from app.domain.dashboard import DashboardData, ProcessedData
from app.domain.records import (
    BOOKING_COLUMNS,
    EXCEPTION_COLUMNS,
    REVENUE_COLUMNS,
    BookingRecord,
    ExceptionRecord,
    RevenueRecord,
)
from app.services.aggregation_service import (
    aggregate_bookings_by_country,
    aggregate_exception_rate_by_country,
    aggregate_revenue_by_month,
)
from app.services.metrics_service import calculate_dashboard_metrics

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

# Exception rows may arrive without a country column at all.
_OPTIONAL_EXCEPTION_COLUMNS = frozenset({"Country"})


class RecordLoadError(RuntimeError):
    """
    Raised when a record source cannot be read or lacks required headers.
    """


def _is_blank_row(row: Mapping[str, str | None]) -> bool:
    return all(value is None or not str(value).strip() for value in row.values())


def parse_records(
    text: str,
    *,
    source: str,
    required_columns: Iterable[str],
    factory: Callable[[Mapping[str, str | None]], _T],
) -> tuple[_T, ...]:
    """
    Parse CSV *text* into records built by *factory*.

    Raises:
        RecordLoadError: if the header row is missing or lacks a required column.
    """

    reader = csv.DictReader(io.StringIO(text.lstrip("\ufeff"), newline=""))
    headers = [header.strip() for header in (reader.fieldnames or [])]
    if not headers:
        raise RecordLoadError(f"{source}: CSV header row is missing.")

    missing = [column for column in required_columns if column not in headers]
    if missing:
        raise RecordLoadError(f"{source}: missing required column(s): {', '.join(missing)}.")

    records: list[_T] = []
    for raw_row in reader:
        row = {(key or "").strip(): value for key, value in raw_row.items()}
        if _is_blank_row(row):
            continue
        records.append(factory(row))
    return tuple(records)


def parse_booking_records(text: str) -> tuple[BookingRecord, ...]:
    return parse_records(
        text,
        source="bookings",
        required_columns=BOOKING_COLUMNS,
        factory=BookingRecord.from_row,
    )


def parse_exception_records(text: str) -> tuple[ExceptionRecord, ...]:
    return parse_records(
        text,
        source="exceptions",
        required_columns=[c for c in EXCEPTION_COLUMNS if c not in _OPTIONAL_EXCEPTION_COLUMNS],
        factory=ExceptionRecord.from_row,
    )


def parse_revenue_records(text: str) -> tuple[RevenueRecord, ...]:
    return parse_records(
        text,
        source="revenue",
        required_columns=REVENUE_COLUMNS,
        factory=RevenueRecord.from_row,
    )


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise RecordLoadError(f"Unable to read record source {path}: {exc}") from exc


def build_dashboard_data(
    bookings: Iterable[BookingRecord],
    exceptions: Iterable[ExceptionRecord],
    revenue: Iterable[RevenueRecord],
) -> DashboardData:
    """
    Freeze the raw records and derive metrics and the primary views.
    """

    bookings = tuple(bookings)
    exceptions = tuple(exceptions)
    revenue = tuple(revenue)

    return DashboardData(
        bookings=bookings,
        exceptions=exceptions,
        revenue=revenue,
        metrics=calculate_dashboard_metrics(bookings, exceptions, revenue),
        processed=ProcessedData(
            country_bookings=aggregate_bookings_by_country(bookings),
            monthly_revenue=aggregate_revenue_by_month(revenue),
            country_exceptions=aggregate_exception_rate_by_country(bookings, exceptions),
        ),
    )


def load_dashboard_data(settings: DashboardDataSettings) -> DashboardData:
    """
    Read all three sources from ``settings.data_dir`` and build dashboard data.

    Raises:
        RecordLoadError: if any source is unreadable or malformed at header level.
    """

    logger.info("Loading dashboard data from %s", settings.data_dir)

    bookings = parse_booking_records(_read_text(settings.bookings_path))
    exceptions = parse_exception_records(_read_text(settings.exceptions_path))
    revenue = parse_revenue_records(_read_text(settings.revenue_path))

    logger.info(
        "Loaded %d bookings, %d exceptions, %d revenue records",
        len(bookings),
        len(exceptions),
        len(revenue),
    )
    return build_dashboard_data(bookings, exceptions, revenue)
