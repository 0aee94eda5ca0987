"""
tests/test_aggregation_service.py

Pytest unit tests for the dashboard aggregation functions.

All tests are pure Python with in-memory records only.

Coverage
--------
- Country booking totals, ranking, top-15 truncation and tie order
- Monthly revenue ordering and one-entry-per-month
- Exception rates driven by booking countries
- Page-level grouped views
- Lenient numeric parsing (unparsable counts as zero, never skipped)
- Statelessness across repeated calls
"""

from __future__ import annotations

import pytest

from app.domain.dashboard import CategoryTotal, CountryBookings, CountryException, MonthlyCount, MonthlyRevenue
from app.domain.records import BookingRecord, ExceptionRecord, RevenueRecord
from app.services.aggregation_service import (
    TOP_N,
    aggregate_bookings_by_country,
    aggregate_bookings_by_month,
    aggregate_bookings_by_type,
    aggregate_exception_rate_by_country,
    aggregate_exceptions_by_month,
    aggregate_exceptions_by_ops_source,
    aggregate_revenue_by_country,
    aggregate_revenue_by_division,
    aggregate_revenue_by_month,
    country_totals,
)


def _booking(country: str, count: str, *, year: str = "2024", month: str = "01", booking_type: str = "Express") -> BookingRecord:
    return BookingRecord(year=year, month=month, country=country, booking_type=booking_type, record_count=count)


def _exception(country: str, count: str, *, year: str = "2024", month: str = "01", source: str = "OPS") -> ExceptionRecord:
    return ExceptionRecord(year=year, month=month, country=country, record_count=count, ops_source_code=source)


def _revenue(
    country: str,
    amount: str,
    *,
    year: str = "2024",
    month: str = "01",
    division: str = "Express",
) -> RevenueRecord:
    return RevenueRecord(
        year=year,
        month=month,
        country=country,
        record_count="1",
        division=division,
        revenue_eur=amount,
    )


# ---------------------------------------------------------------------------
# Bookings by country
# ---------------------------------------------------------------------------


class TestBookingsByCountry:
    def test_groups_and_ranks_descending(self) -> None:
        records = [_booking("NL", "10"), _booking("NL", "5"), _booking("DE", "3")]
        assert aggregate_bookings_by_country(records) == [
            CountryBookings(country="NL", total_bookings=15),
            CountryBookings(country="DE", total_bookings=3),
        ]

    def test_empty_input_returns_empty_list(self) -> None:
        assert aggregate_bookings_by_country([]) == []

    def test_truncates_to_top_fifteen(self) -> None:
        records = [_booking(f"C{i:02d}", str(i)) for i in range(1, 21)]
        result = aggregate_bookings_by_country(records)

        assert len(result) == TOP_N
        assert result[0] == CountryBookings(country="C20", total_bookings=20)
        assert result[-1] == CountryBookings(country="C06", total_bookings=6)

    def test_truncated_sum_never_exceeds_full_total(self) -> None:
        records = [_booking(f"C{i:02d}", str(i * 3)) for i in range(1, 21)]
        full_total = sum(i * 3 for i in range(1, 21))
        assert sum(r.total_bookings for r in aggregate_bookings_by_country(records)) < full_total

    def test_sum_equals_full_total_with_fifteen_or_fewer_countries(self) -> None:
        records = [_booking(f"C{i:02d}", str(i)) for i in range(1, 16)] + [_booking("C01", "7")]
        result = aggregate_bookings_by_country(records)
        assert sum(r.total_bookings for r in result) == sum(range(1, 16)) + 7

    def test_ties_keep_first_seen_order(self) -> None:
        records = [_booking("FR", "4"), _booking("BE", "4"), _booking("AT", "9"), _booking("ES", "4")]
        result = aggregate_bookings_by_country(records)
        assert [r.country for r in result] == ["AT", "FR", "BE", "ES"]

    def test_unparsable_counts_are_zero_and_country_is_kept(self) -> None:
        records = [_booking("NL", "12abc"), _booking("PL", "n/a"), _booking("PL", ""), _booking("DE", "1.9")]
        result = aggregate_bookings_by_country(records)
        assert result == [
            CountryBookings(country="NL", total_bookings=12),
            CountryBookings(country="DE", total_bookings=1),
            CountryBookings(country="PL", total_bookings=0),
        ]

    def test_repeated_calls_are_identical(self) -> None:
        records = [_booking("NL", "10"), _booking("DE", "3")]
        assert aggregate_bookings_by_country(records) == aggregate_bookings_by_country(records)

    def test_accepts_a_generator(self) -> None:
        result = aggregate_bookings_by_country(_booking(c, "1") for c in ("NL", "NL", "DE"))
        assert result[0] == CountryBookings(country="NL", total_bookings=2)


# ---------------------------------------------------------------------------
# Revenue by month
# ---------------------------------------------------------------------------


class TestRevenueByMonth:
    def test_sorted_chronologically_with_padding(self) -> None:
        records = [
            _revenue("NL", "100", year="2024", month="10"),
            _revenue("NL", "50", year="2024", month="2"),
            _revenue("DE", "25", year="2023", month="12"),
            _revenue("DE", "5", year="2024", month="02"),
        ]
        assert aggregate_revenue_by_month(records) == [
            MonthlyRevenue(month="2023-12", revenue=25),
            MonthlyRevenue(month="2024-02", revenue=55),
            MonthlyRevenue(month="2024-10", revenue=100),
        ]

    def test_one_entry_per_month_no_truncation(self) -> None:
        records = [
            _revenue("NL", "1", year=str(2020 + i // 12), month=str(i % 12 + 1))
            for i in range(30)
        ]
        result = aggregate_revenue_by_month(records)
        months = [r.month for r in result]

        assert len(result) == 30
        assert months == sorted(months)
        assert len(set(months)) == len(months)

    def test_empty_input_returns_empty_list(self) -> None:
        assert aggregate_revenue_by_month([]) == []


# ---------------------------------------------------------------------------
# Exception rate by country
# ---------------------------------------------------------------------------


class TestExceptionRateByCountry:
    def test_rate_is_percentage_of_bookings(self) -> None:
        result = aggregate_exception_rate_by_country([_booking("NL", "20")], [_exception("NL", "2")])
        assert result == [CountryException(country="NL", bookings=20, exceptions=2, exception_rate=10.0)]

    def test_rate_rounded_to_two_decimals(self) -> None:
        result = aggregate_exception_rate_by_country([_booking("NL", "3")], [_exception("NL", "1")])
        assert result[0].exception_rate == pytest.approx(33.33)

    def test_exact_half_rate_rounds_up(self) -> None:
        result = aggregate_exception_rate_by_country([_booking("NL", "800")], [_exception("NL", "1")])
        assert result[0].exception_rate == 0.13

    def test_country_without_exceptions_has_zero_rate(self) -> None:
        result = aggregate_exception_rate_by_country([_booking("DE", "40")], [])
        assert result == [CountryException(country="DE", bookings=40, exceptions=0, exception_rate=0.0)]

    def test_country_only_in_exceptions_is_excluded(self) -> None:
        result = aggregate_exception_rate_by_country(
            [_booking("NL", "10")],
            [_exception("NL", "1"), _exception("XX", "50")],
        )
        assert [r.country for r in result] == ["NL"]

    def test_zero_booking_country_has_zero_rate(self) -> None:
        result = aggregate_exception_rate_by_country([_booking("PL", "oops")], [_exception("PL", "3")])
        assert result == [CountryException(country="PL", bookings=0, exceptions=3, exception_rate=0.0)]

    def test_missing_exception_country_counts_as_unknown(self) -> None:
        result = aggregate_exception_rate_by_country(
            [_booking("Unknown", "10"), _booking("NL", "10")],
            [_exception("", "5")],
        )
        by_country = {r.country: r for r in result}
        assert by_country["Unknown"].exceptions == 5
        assert by_country["NL"].exceptions == 0

    def test_ranked_by_rate_and_truncated(self) -> None:
        bookings = [_booking(f"C{i:02d}", "100") for i in range(20)]
        exceptions = [_exception(f"C{i:02d}", str(i)) for i in range(20)]
        result = aggregate_exception_rate_by_country(bookings, exceptions)

        assert len(result) == TOP_N
        rates = [r.exception_rate for r in result]
        assert rates == sorted(rates, reverse=True)
        assert result[0].country == "C19"

    def test_empty_inputs(self) -> None:
        assert aggregate_exception_rate_by_country([], []) == []


# ---------------------------------------------------------------------------
# Page-level views
# ---------------------------------------------------------------------------


class TestGroupedViews:
    def test_bookings_by_type_defaults_missing_type(self) -> None:
        records = [
            _booking("NL", "5", booking_type="Express"),
            _booking("NL", "9", booking_type=""),
            _booking("DE", "2", booking_type="Express"),
        ]
        assert aggregate_bookings_by_type(records) == [
            CategoryTotal(label="Unknown", value=9),
            CategoryTotal(label="Express", value=7),
        ]

    def test_monthly_trends_ascending(self) -> None:
        bookings = [_booking("NL", "1", month="3"), _booking("NL", "2", month="1")]
        exceptions = [_exception("NL", "4", month="12"), _exception("NL", "1", month="02")]

        assert aggregate_bookings_by_month(bookings) == [
            MonthlyCount(month="2024-01", count=2),
            MonthlyCount(month="2024-03", count=1),
        ]
        assert aggregate_exceptions_by_month(exceptions) == [
            MonthlyCount(month="2024-02", count=1),
            MonthlyCount(month="2024-12", count=4),
        ]

    def test_exceptions_by_ops_source(self) -> None:
        records = [_exception("NL", "1", source="HUB"), _exception("NL", "3", source="LINEHAUL"), _exception("DE", "1", source="HUB")]
        assert aggregate_exceptions_by_ops_source(records) == [
            CategoryTotal(label="LINEHAUL", value=3),
            CategoryTotal(label="HUB", value=2),
        ]

    def test_revenue_by_division(self) -> None:
        records = [_revenue("NL", "100", division="Ground"), _revenue("NL", "300", division="Express")]
        assert [r.label for r in aggregate_revenue_by_division(records)] == ["Express", "Ground"]

    def test_revenue_by_country_is_top_fifteen(self) -> None:
        records = [_revenue(f"C{i:02d}", str(i * 10)) for i in range(18)]
        result = aggregate_revenue_by_country(records)
        assert len(result) == TOP_N
        assert result[0].country == "C17"

    def test_country_totals_are_untruncated(self) -> None:
        bookings = [_booking("NL", "10"), _booking("NL", "5"), _booking("DE", "3")]
        revenue = [_revenue("NL", "1000"), _revenue("NL", "250"), _revenue("DE", "9")]
        totals = country_totals(bookings, revenue, "NL")
        assert (totals.revenue, totals.bookings) == (1250, 15)

    def test_country_totals_unknown_country_is_zero(self) -> None:
        totals = country_totals([_booking("NL", "10")], [], "Atlantis")
        assert (totals.revenue, totals.bookings) == (0, 0)
