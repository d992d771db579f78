"""Date manipulation utilities"""

import calendar
from datetime import date
from typing import Tuple

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_range(year: int, month: int) -> Tuple[date, date]:
    """Return the first and last day of a calendar month (inclusive)"""
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def in_month(day: date, year: int, month: int) -> bool:
    return day.year == year and day.month == month


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end precedes start)"""
    return (end - start).days
