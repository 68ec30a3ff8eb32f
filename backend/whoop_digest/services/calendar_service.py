"""UTC calendar and ISO-8601 week arithmetic.

Every fetch window and note key is derived from a UTC calendar instant, a
timezone-aware ``datetime`` truncated to midnight. Nothing here looks at the
host machine's local timezone.
"""

import math
import re
from datetime import datetime, timedelta, timezone

from whoop_digest.schemas.stats import IsoWeek

_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


class InvalidDateError(ValueError):
    """Raised when a date string is not a valid YYYY-MM-DD calendar date."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid date {value!r}. Use YYYY-MM-DD format.")


def _as_utc(instant: datetime) -> datetime:
    # Naive datetimes are taken to already be UTC.
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def start_of_day(instant: datetime) -> datetime:
    """Truncate an instant to 00:00:00.000 UTC of the same UTC calendar date."""
    utc = _as_utc(instant)
    return datetime(utc.year, utc.month, utc.day, tzinfo=timezone.utc)


def add_days(instant: datetime, n: int) -> datetime:
    """Shift an instant by ``n`` calendar days."""
    return _as_utc(instant) + timedelta(days=n)


def iso_weekday(instant: datetime) -> int:
    """Day of week with Monday=1 ... Sunday=7."""
    return _as_utc(instant).isoweekday()


def iso_week(instant: datetime) -> IsoWeek:
    """
    Return the ISO-8601 week number and week-numbering year.

    The Thursday of the instant's Monday-based week decides the year, and the
    week number is that Thursday's 1-based day of year divided by seven,
    rounded up. This moves late-December dates into week 1 of the next year
    and early-January dates into week 52/53 of the previous one.

    Example:
        >>> iso_week(datetime(2016, 1, 1, tzinfo=timezone.utc))
        IsoWeek(week=53, year=2015)
    """
    day = start_of_day(instant)
    thursday = day + timedelta(days=4 - iso_weekday(day))
    day_of_year = thursday.timetuple().tm_yday
    return IsoWeek(week=math.ceil(day_of_year / 7), year=thursday.year)


def iso_week_start(instant: datetime) -> datetime:
    """Return UTC midnight of the Monday of the instant's ISO week."""
    day = start_of_day(instant)
    return day - timedelta(days=iso_weekday(day) - 1)


def pad(n: int, width: int = 2) -> str:
    """Zero-pad a number to ``width`` digits."""
    return str(n).zfill(width)


def format_date(instant: datetime) -> str:
    """Format the UTC calendar date as YYYY-MM-DD."""
    utc = _as_utc(instant)
    return f"{pad(utc.year, 4)}-{pad(utc.month)}-{pad(utc.day)}"


def format_iso_week(instant: datetime) -> str:
    """Format the ISO week as YYYY-Www."""
    key = iso_week(instant)
    return f"{pad(key.year, 4)}-W{pad(key.week)}"


def to_api_timestamp(instant: datetime) -> str:
    """Format an instant the way the WHOOP API expects, e.g. 2026-02-22T00:00:00.000Z."""
    utc = _as_utc(instant)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def parse_date(value: str) -> datetime:
    """
    Parse a strict YYYY-MM-DD string into UTC midnight.

    Raises:
        InvalidDateError: If the string is malformed or not a real date
    """
    match = _DATE_RE.match(value.strip()) if value else None
    if not match:
        raise InvalidDateError(value)
    year, month, day = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        raise InvalidDateError(value)


def utc_today() -> datetime:
    """UTC midnight of the current day."""
    return start_of_day(datetime.now(timezone.utc))


# Navigation keys used by note rendering.

def prev_day(instant: datetime) -> str:
    return format_date(add_days(instant, -1))


def next_day(instant: datetime) -> str:
    return format_date(add_days(instant, 1))


def prev_day_year(instant: datetime) -> int:
    return add_days(instant, -1).year


def next_day_year(instant: datetime) -> int:
    return add_days(instant, 1).year


def prev_week(instant: datetime) -> str:
    return format_iso_week(add_days(instant, -7))


def next_week(instant: datetime) -> str:
    return format_iso_week(add_days(instant, 7))


def prev_week_year(instant: datetime) -> int:
    return iso_week(add_days(instant, -7)).year


def next_week_year(instant: datetime) -> int:
    return iso_week(add_days(instant, 7)).year
