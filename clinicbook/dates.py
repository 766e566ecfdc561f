"""Jalali calendar dates as used throughout the books.

Dates are kept as ``YYYY/MM/DD`` strings in the Jalali (Solar Hijri)
calendar. They are compared only through `to_sortable`, which never raises
and maps malformed input to 0, so that a bad row drops out of a date range
instead of breaking a report.
"""

import datetime

from .base import ClinicBookError

MONTH_NAMES = (
    "فروردین",
    "اردیبهشت",
    "خرداد",
    "تیر",
    "مرداد",
    "شهریور",
    "مهر",
    "آبان",
    "آذر",
    "دی",
    "بهمن",
    "اسفند",
)

# Positions of leap years within the 33-year cycle.
LEAP_RESIDUES = (1, 5, 9, 13, 17, 22, 26, 30)


def _segments(date_str) -> tuple[int, int, int] | None:
    if not date_str or not isinstance(date_str, str):
        return None
    parts = date_str.split("/")
    if len(parts) != 3:
        return None
    if not all(part.strip().isdecimal() for part in parts):
        return None
    y, m, d = (int(part) for part in parts)
    return y, m, d


def to_sortable(date_str) -> int:
    """Convert 'Y/M/D' string to YYYYMMDD integer, 0 for malformed input."""
    segments = _segments(date_str)
    if segments is None:
        return 0
    y, m, d = segments
    return y * 10_000 + m * 100 + d


def in_range(date_str, start: str | None = None, end: str | None = None) -> bool:
    """Return True if *date_str* is a valid date within [start, end]."""
    value = to_sortable(date_str)
    if value == 0:
        return False
    if start is not None and value < to_sortable(start):
        return False
    if end is not None and value > to_sortable(end):
        return False
    return True


def parse(date_str: str) -> tuple[int, int, int]:
    segments = _segments(date_str)
    if segments is None:
        raise ClinicBookError(f"Invalid date: {date_str!r}")
    y, m, d = segments
    if not 1 <= m <= 12 or not 1 <= d <= month_length(y, m):
        raise ClinicBookError(f"Invalid date: {date_str!r}")
    return y, m, d


def fmt(year: int, month: int, day: int) -> str:
    return f"{year:04d}/{month:02d}/{day:02d}"


def is_leap(year: int) -> bool:
    return year % 33 in LEAP_RESIDUES


def month_length(year: int, month: int) -> int:
    if month <= 6:
        return 31
    if month <= 11:
        return 30
    return 30 if is_leap(year) else 29


def add_months(date_str: str, months: int = 1, day: int | None = None) -> str:
    """Move date by calendar months keeping the day of month.

    The day is clamped to the length of the target month. Pass *day* to
    anchor on a fixed pay day so that a clamped month does not drift later
    dates.
    """
    y, m, d = parse(date_str)
    index = y * 12 + (m - 1) + months
    year, month = divmod(index, 12)
    month += 1
    target_day = day if day is not None else d
    return fmt(year, month, min(target_day, month_length(year, month)))


def pay_period(date_str: str) -> str:
    """Pay period label like 'مرداد 1403' for the month of *date_str*."""
    y, m, _ = parse(date_str)
    return f"{MONTH_NAMES[m - 1]} {y}"


def ordinal(date_str: str) -> int:
    """Day number counted from 0001/01/01."""
    y, m, d = parse(date_str)
    previous = y - 1
    cycles, rest = divmod(previous, 33)
    leaps = cycles * len(LEAP_RESIDUES) + sum(1 for r in LEAP_RESIDUES if r <= rest)
    day_of_year = sum(month_length(y, k) for k in range(1, m)) + d
    return previous * 365 + leaps + day_of_year


def days_between(earlier: str, later: str) -> int:
    return ordinal(later) - ordinal(earlier)


def from_gregorian(value: datetime.date) -> str:
    """Convert Gregorian date to Jalali 'YYYY/MM/DD' string."""
    gy, gm, gd = value.year, value.month, value.day
    days_before_month = (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334)
    gy2 = gy + 1 if gm > 2 else gy
    days = (
        355666
        + 365 * gy
        + (gy2 + 3) // 4
        - (gy2 + 99) // 100
        + (gy2 + 399) // 400
        + gd
        + days_before_month[gm - 1]
    )
    jy = -1595 + 33 * (days // 12053)
    days %= 12053
    jy += 4 * (days // 1461)
    days %= 1461
    if days > 365:
        jy += (days - 1) // 365
        days = (days - 1) % 365
    if days < 186:
        jm, jd = 1 + days // 31, 1 + days % 31
    else:
        jm, jd = 7 + (days - 186) // 30, 1 + (days - 186) % 30
    return fmt(jy, jm, jd)


def today() -> str:
    return from_gregorian(datetime.date.today())


# 1 Farvardin 1403 fell on 20 March 2024.
_EPOCH = ("1403/01/01", datetime.date(2024, 3, 20))


def to_gregorian(date_str: str) -> datetime.date:
    jalali, gregorian = _EPOCH
    return gregorian + datetime.timedelta(days=days_between(jalali, date_str))
