"""
app/domain/records.py

Raw operational records as read from the CSV sources.

One record is one aggregate count row (a pre-summed count for a
year/month/country/category combination), not an individual shipment.
Numeric columns are kept exactly as received; they are parsed with
:func:`app.validators.numeric.parse_count` at the point of use.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from app.validators.numeric import month_key

BOOKING_COLUMNS: tuple[str, ...] = ("YearVal", "MonthVal", "Country", "BookingType", "RecordCount")
EXCEPTION_COLUMNS: tuple[str, ...] = ("YearVal", "MonthVal", "Country", "RecordCount", "OpsSourceCode")
REVENUE_COLUMNS: tuple[str, ...] = (
    "YearVal",
    "MonthVal",
    "Country",
    "RecordCount",
    "Division",
    "Revenue_EUR",
)


def _cell(row: Mapping[str, str | None], column: str) -> str:
    value = row.get(column)
    return value.strip() if isinstance(value, str) else ""


@dataclass(frozen=True)
class BookingRecord:
    """
    One bookings row: ``YearVal, MonthVal, Country, BookingType, RecordCount``.
    """

    year: str
    month: str
    country: str
    booking_type: str
    record_count: str

    @property
    def month_key(self) -> str:
        return month_key(self.year, self.month)

    @classmethod
    def from_row(cls, row: Mapping[str, str | None]) -> "BookingRecord":
        return cls(
            year=_cell(row, "YearVal"),
            month=_cell(row, "MonthVal"),
            country=_cell(row, "Country"),
            booking_type=_cell(row, "BookingType"),
            record_count=_cell(row, "RecordCount"),
        )


@dataclass(frozen=True)
class ExceptionRecord:
    """
    One exceptions row. ``country`` may be empty; aggregation reports such
    rows under ``"Unknown"``.
    """

    year: str
    month: str
    country: str
    record_count: str
    ops_source_code: str

    @property
    def month_key(self) -> str:
        return month_key(self.year, self.month)

    @classmethod
    def from_row(cls, row: Mapping[str, str | None]) -> "ExceptionRecord":
        return cls(
            year=_cell(row, "YearVal"),
            month=_cell(row, "MonthVal"),
            country=_cell(row, "Country"),
            record_count=_cell(row, "RecordCount"),
            ops_source_code=_cell(row, "OpsSourceCode"),
        )


@dataclass(frozen=True)
class RevenueRecord:
    """
    One revenue row. ``revenue_eur`` is the row's revenue in whole euros.
    """

    year: str
    month: str
    country: str
    record_count: str
    division: str
    revenue_eur: str

    @property
    def month_key(self) -> str:
        return month_key(self.year, self.month)

    @classmethod
    def from_row(cls, row: Mapping[str, str | None]) -> "RevenueRecord":
        return cls(
            year=_cell(row, "YearVal"),
            month=_cell(row, "MonthVal"),
            country=_cell(row, "Country"),
            record_count=_cell(row, "RecordCount"),
            division=_cell(row, "Division"),
            revenue_eur=_cell(row, "Revenue_EUR"),
        )
