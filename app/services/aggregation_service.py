"""
app/services/aggregation_service.py

Data aggregation layer for the dashboard views.

Translates raw booking, exception and revenue rows into the grouped
shapes the charts and tables consume.

Shape conventions
-----------------
Every view follows the same three steps:

    group   – sum a parsed count per key, keeping first-seen key order
    sort    – month-keyed trends ascending by key, everything else
              descending by value (stable, so ties keep first-seen order)
    slice   – country-ranked views keep the top ``TOP_N`` groups

Every function is pure and total: rows with unparsable numbers count as
``0`` and are never skipped, and no accumulator outlives a single call.
Empty input yields an empty list.
"""

from __future__ import annotations

from typing import Callable, Final, Iterable, TypeVar

from app.domain.dashboard import (
    CategoryTotal,
    CountryBookings,
    CountryException,
    CountryRevenue,
    CountryTotals,
    MonthlyCount,
    MonthlyRevenue,
)
from app.domain.records import BookingRecord, ExceptionRecord, RevenueRecord
from app.validators.numeric import parse_count, round_half_up

TOP_N: Final[int] = 15
"""Number of groups kept in country-ranked views."""

UNKNOWN_LABEL: Final[str] = "Unknown"
"""Label used when a grouping column is empty."""

_R = TypeVar("_R")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _group_sum(
    records: Iterable[_R],
    key: Callable[[_R], str],
    value: Callable[[_R], int],
) -> dict[str, int]:
    """
    Sum ``value(record)`` per ``key(record)``.

    Dict insertion order is first-seen order, which the stable sorts below
    rely on for tie-breaking.
    """

    totals: dict[str, int] = {}
    for record in records:
        group = key(record)
        totals[group] = totals.get(group, 0) + value(record)
    return totals


def _rank_desc(totals: dict[str, int], limit: int | None = None) -> list[tuple[str, int]]:
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked if limit is None else ranked[:limit]


def _by_month(totals: dict[str, int]) -> list[tuple[str, int]]:
    return sorted(totals.items(), key=lambda item: item[0])


def _or_unknown(value: str) -> str:
    return value or UNKNOWN_LABEL


def _exception_rate(exceptions: int, bookings: int) -> float:
    if bookings <= 0:
        return 0.0
    return round_half_up(exceptions / bookings * 100, 2)


# ---------------------------------------------------------------------------
# Primary views
# ---------------------------------------------------------------------------


def aggregate_bookings_by_country(records: Iterable[BookingRecord]) -> list[CountryBookings]:
    """
    Total bookings per country, highest first, top 15.
    """

    totals = _group_sum(records, lambda r: r.country, lambda r: parse_count(r.record_count))
    return [
        CountryBookings(country=country, total_bookings=total)
        for country, total in _rank_desc(totals, TOP_N)
    ]


def aggregate_revenue_by_month(records: Iterable[RevenueRecord]) -> list[MonthlyRevenue]:
    """
    Total revenue per ``YYYY-MM`` key in chronological order. No truncation.
    """

    totals = _group_sum(records, lambda r: r.month_key, lambda r: parse_count(r.revenue_eur))
    return [MonthlyRevenue(month=month, revenue=total) for month, total in _by_month(totals)]


def aggregate_exception_rate_by_country(
    bookings: Iterable[BookingRecord],
    exceptions: Iterable[ExceptionRecord],
) -> list[CountryException]:
    """
    Exception rate per booking country, highest rate first, top 15.

    The result is driven by the countries present in *bookings*: a country
    that only appears in *exceptions* has no denominator and is left out.
    Exception rows without a country are grouped under ``"Unknown"``.
    """

    bookings_by_country = _group_sum(
        bookings, lambda r: r.country, lambda r: parse_count(r.record_count)
    )
    exceptions_by_country = _group_sum(
        exceptions, lambda r: _or_unknown(r.country), lambda r: parse_count(r.record_count)
    )

    results = [
        CountryException(
            country=country,
            bookings=booking_count,
            exceptions=exceptions_by_country.get(country, 0),
            exception_rate=_exception_rate(exceptions_by_country.get(country, 0), booking_count),
        )
        for country, booking_count in bookings_by_country.items()
    ]
    results.sort(key=lambda item: item.exception_rate, reverse=True)
    return results[:TOP_N]


# ---------------------------------------------------------------------------
# Page-level views
# ---------------------------------------------------------------------------


def aggregate_bookings_by_month(records: Iterable[BookingRecord]) -> list[MonthlyCount]:
    totals = _group_sum(records, lambda r: r.month_key, lambda r: parse_count(r.record_count))
    return [MonthlyCount(month=month, count=total) for month, total in _by_month(totals)]


def aggregate_exceptions_by_month(records: Iterable[ExceptionRecord]) -> list[MonthlyCount]:
    totals = _group_sum(records, lambda r: r.month_key, lambda r: parse_count(r.record_count))
    return [MonthlyCount(month=month, count=total) for month, total in _by_month(totals)]


def aggregate_bookings_by_type(records: Iterable[BookingRecord]) -> list[CategoryTotal]:
    totals = _group_sum(
        records, lambda r: _or_unknown(r.booking_type), lambda r: parse_count(r.record_count)
    )
    return [CategoryTotal(label=label, value=total) for label, total in _rank_desc(totals)]


def aggregate_exceptions_by_ops_source(records: Iterable[ExceptionRecord]) -> list[CategoryTotal]:
    totals = _group_sum(
        records, lambda r: _or_unknown(r.ops_source_code), lambda r: parse_count(r.record_count)
    )
    return [CategoryTotal(label=label, value=total) for label, total in _rank_desc(totals)]


def aggregate_revenue_by_division(records: Iterable[RevenueRecord]) -> list[CategoryTotal]:
    totals = _group_sum(
        records, lambda r: _or_unknown(r.division), lambda r: parse_count(r.revenue_eur)
    )
    return [CategoryTotal(label=label, value=total) for label, total in _rank_desc(totals)]


def aggregate_revenue_by_country(records: Iterable[RevenueRecord]) -> list[CountryRevenue]:
    """
    Total revenue per country, highest first, top 15.
    """

    totals = _group_sum(
        records, lambda r: _or_unknown(r.country), lambda r: parse_count(r.revenue_eur)
    )
    return [
        CountryRevenue(country=country, revenue=total)
        for country, total in _rank_desc(totals, TOP_N)
    ]


def country_totals(
    bookings: Iterable[BookingRecord],
    revenue: Iterable[RevenueRecord],
    country: str,
) -> CountryTotals:
    """
    Untruncated revenue and booking totals for *country* (exact match).

    Used to seed insight prompts, so a country outside the top-15 views
    still gets its real volume.
    """

    return CountryTotals(
        country=country,
        revenue=sum(parse_count(r.revenue_eur) for r in revenue if r.country == country),
        bookings=sum(parse_count(r.record_count) for r in bookings if r.country == country),
    )
