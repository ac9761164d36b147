"""
General helper utilities
"""
import calendar
from datetime import date, timedelta
from typing import Iterator


def format_currency(amount: float) -> str:
    """Format amount as pounds sterling"""
    return f"£{amount:,.2f}"


def week_start(value: date) -> date:
    """Return the Monday of the ISO week containing value"""
    return value - timedelta(days=value.weekday())


def week_label(start: date) -> str:
    iso_year, iso_week, _ = start.isocalendar()
    end = start + timedelta(days=6)
    return f"{iso_year} W{iso_week:02d} ({start.strftime('%d %b')} - {end.strftime('%d %b')})"


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end], inclusive"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def subtract_months(value: date, months: int) -> date:
    """Same day-of-month `months` calendar months earlier, clamped to month end"""
    month_index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
