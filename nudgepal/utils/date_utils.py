"""Date manipulation utilities"""

import calendar
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

from nudgepal.domain.exceptions import ValidationError


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def as_date(value: Union[date, datetime]) -> date:
    """Drop any time-of-day component"""
    if isinstance(value, datetime):
        return value.date()
    return value


def parse_iso_date(value: Union[str, date, datetime]) -> date:
    """
    Parse a calendar date for primary computation inputs.

    Accepts YYYY-MM-DD or a full ISO timestamp (only the date part is kept).

    Raises:
        ValidationError: If the value is not a valid date
    """
    if isinstance(value, (date, datetime)):
        return as_date(value)
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date: {value!r}")
    try:
        return date.fromisoformat(value.split("T")[0].strip())
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value!r}") from e


def try_parse_iso_date(value) -> Optional[date]:
    """Lenient variant for historical data: None instead of raising"""
    try:
        return parse_iso_date(value)
    except ValidationError:
        return None


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def week_start(day: date) -> date:
    """Sunday on or before the given day"""
    return day - timedelta(days=(day.weekday() + 1) % 7)
