"""
Quarter calendar and month arithmetic used by the board-timing rules.

Board cycles recur quarterly: Q1 is January-March, Q2 April-June,
Q3 July-September and Q4 October-December of the calendar year.
"""
from dataclasses import dataclass
from datetime import date, timedelta

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, order=True)
class Quarter:
    year: int
    quarter: int

    @property
    def ordinal(self) -> int:
        return self.year * 4 + self.quarter

    def __str__(self):
        return f"Q{self.quarter} {self.year}"


def quarter_of(day: date) -> Quarter:
    return Quarter(year=day.year, quarter=(day.month - 1) // 3 + 1)


def previous_quarter(q: Quarter) -> Quarter:
    if q.quarter == 1:
        return Quarter(year=q.year - 1, quarter=4)
    return Quarter(year=q.year, quarter=q.quarter - 1)


def next_quarter(q: Quarter) -> Quarter:
    if q.quarter == 4:
        return Quarter(year=q.year + 1, quarter=1)
    return Quarter(year=q.year, quarter=q.quarter + 1)


def ordinal(q: Quarter) -> int:
    return q.ordinal


def add_months(day: date, months: int) -> date:
    """
    Shift ``day`` by ``months`` calendar months keeping the day of month.

    Days that do not exist in the target month roll over into the next one,
    so 31 January + 1 month is 3 March (2 March in a leap year).
    """
    total = day.year * 12 + (day.month - 1) + months
    year, month_index = divmod(total, 12)
    return date(year, month_index + 1, 1) + timedelta(days=day.day - 1)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``; the day of month is ignored."""
    return (end.year - start.year) * 12 + (end.month - start.month)
