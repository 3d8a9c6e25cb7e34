"""
Week Arithmetic Service

ISO-8601 week identifiers ('YYYY-Www') and the mapping from a week
identifier plus day index (Monday=0 .. Sunday=6) to a calendar date.
"""

import re
from datetime import date, datetime, timedelta

from constants import ALL_DAYS

WEEK_PATTERN = re.compile(r'^(\d{4})-W(\d{2})$')


def parse_week_identifier(week_identifier):
    """Return (year, week) for a 'YYYY-Www' string, or None if it is malformed."""
    if not isinstance(week_identifier, str):
        return None
    match = WEEK_PATTERN.match(week_identifier.strip())
    if not match:
        return None
    year, week = int(match.group(1)), int(match.group(2))
    if year < 1 or not 1 <= week <= weeks_in_year(year):
        return None
    return year, week


def weeks_in_year(year):
    """52 or 53; Dec 28th always falls in the last ISO week of its year."""
    return date(year, 12, 28).isocalendar()[1]


def is_valid_week_identifier(week_identifier):
    return parse_week_identifier(week_identifier) is not None


def format_week_identifier(year, week):
    return f"{year:04d}-W{week:02d}"


def current_week_identifier(today=None):
    """ISO week identifier containing `today` (defaults to the local date)."""
    if today is None:
        today = date.today()
    year, week, _ = today.isocalendar()
    return format_week_identifier(year, week)


def check_day_id(day_id):
    """Raise ValueError unless day_id is an int in 0..6."""
    if isinstance(day_id, bool) or not isinstance(day_id, int) or day_id not in ALL_DAYS:
        raise ValueError(f"day_id must be an integer in 0..6, got {day_id!r}")
    return day_id


def week_one_monday(year):
    """Monday of ISO week 1: the Monday on or before January 4th."""
    jan4 = date(year, 1, 4)
    return jan4 - timedelta(days=jan4.weekday())


def week_day_to_date(week_identifier, day_id, today=None):
    """
    Calendar date of `day_id` in the given ISO week.

    A malformed week identifier falls back to `today` instead of raising,
    since the identifier usually comes straight from a date picker.
    An out-of-range day_id is a caller bug and raises ValueError.
    """
    check_day_id(day_id)
    parsed = parse_week_identifier(week_identifier)
    if parsed is None:
        return today if today is not None else date.today()
    year, week = parsed
    try:
        return week_one_monday(year) + timedelta(days=(week - 1) * 7 + day_id)
    except OverflowError:
        # Last days of year 9999 are past date.max
        return today if today is not None else date.today()


def week_day_to_iso_date(week_identifier, day_id, today=None):
    """Same as week_day_to_date but formatted as 'YYYY-MM-DD'."""
    return week_day_to_date(week_identifier, day_id, today=today).isoformat()


def week_dates(week_identifier, today=None):
    """The seven dates (Monday first) of an ISO week."""
    return [week_day_to_date(week_identifier, day_id, today=today) for day_id in ALL_DAYS]


def days_between(later, earlier):
    """Whole days from `earlier` to `later` (negative if earlier is in the future)."""
    return (later - earlier).days


def parse_iso_date(value):
    """Parse 'YYYY-MM-DD' (or a date) into a date; None for empty or invalid values."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        return None
