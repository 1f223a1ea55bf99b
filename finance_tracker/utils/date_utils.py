"""Date manipulation utilities"""

import calendar
from datetime import date, datetime
from typing import Union

ISO_DATE_FORMAT = "%Y-%m-%d"


def today() -> date:
    return date.today()


def to_date(value: Union[date, datetime]) -> date:
    """Truncate a datetime to its calendar date; dates pass through"""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_iso_date(value: str) -> date:
    """Parse a strict 'YYYY-MM-DD' string.

    Raises:
        ValueError: If the value is empty, not a string, or not a valid date
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"expected 'YYYY-MM-DD' date string, got {value!r}")
    if len(value) != 10:
        raise ValueError(f"expected 'YYYY-MM-DD' date string, got {value!r}")
    return datetime.strptime(value, ISO_DATE_FORMAT).date()


def format_iso_date(d: date) -> str:
    return d.strftime(ISO_DATE_FORMAT)


def is_iso_date(value: str) -> bool:
    try:
        parse_iso_date(value)
    except ValueError:
        return False
    return True


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(d: date, n: int) -> date:
    """Shift by n calendar months; a day past the target month's end becomes its last day"""
    month_index = d.year * 12 + d.month - 1 + n
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, min(d.day, last_day_of_month(year, month)))
