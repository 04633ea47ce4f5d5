"""Date helpers for rental windows.

All windows are half-open ``[start, end)``: a booking ending on the 1st and
another starting on the same 1st do not collide.
"""

from dataclasses import dataclass
from datetime import date

from dateutil.relativedelta import relativedelta


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(f"Date range end ({self.end}) must be after start ({self.start})")

    def overlaps(self, other: "DateRange") -> bool:
        return ranges_overlap(self.start, self.end, other.start, other.end)

    def contains(self, day: date) -> bool:
        return self.start <= day < self.end


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Half-open interval overlap; touching boundaries are not an overlap"""
    return start_a < end_b and end_a > start_b


def add_months(day: date, months: int) -> date:
    """Calendar-month arithmetic, clamped to the last day of shorter months"""
    return day + relativedelta(months=months)


def start_of_next_month(day: date) -> date:
    return (day + relativedelta(months=1)).replace(day=1)


def ceil_to_month_start(day: date) -> date:
    """The 1st of the month on or after ``day``"""
    return day if day.day == 1 else start_of_next_month(day)
