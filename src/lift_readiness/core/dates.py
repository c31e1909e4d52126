"""
Calendar-day handling.

Every date that crosses into the engine is a local calendar day written as
``YYYY-MM-DD``.  Timestamps are normalised here, at the boundary, and never
compared directly with day strings inside the model.
"""

from datetime import date, datetime

DATE_FORMAT = "%Y-%m-%d"


def is_calendar_day(value: str) -> bool:
    """Return True if *value* is a strict ``YYYY-MM-DD`` string."""
    if not isinstance(value, str) or len(value) != 10:
        return False
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return False
    return True


def parse_day(value: str) -> date:
    """
    Parse a calendar-day string.

    Raises:
        ValueError: If the string is not ``YYYY-MM-DD``
    """
    if not is_calendar_day(value):
        raise ValueError(f"Expected a YYYY-MM-DD calendar day, got {value!r}")
    return datetime.strptime(value, DATE_FORMAT).date()


def to_calendar_day(value: str | date | datetime) -> str:
    """
    Normalise a date-like value to the canonical day string.

    Datetimes keep their own (local) calendar day; the time of day is
    dropped.  Strings longer than a day (ISO timestamps) are cut to their
    date part before validation.

    Args:
        value: Day string, ISO timestamp string, date or datetime

    Returns:
        ``YYYY-MM-DD`` string
    """
    if isinstance(value, datetime):
        return value.date().strftime(DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    text = str(value).strip()
    if len(text) > 10 and text[10] in ("T", " "):
        text = text[:10]
    parse_day(text)
    return text


def days_between(from_day: str, to_day: str) -> int:
    """Signed whole days from *from_day* to *to_day*."""
    return (parse_day(to_day) - parse_day(from_day)).days


def today() -> str:
    """Today's local calendar day."""
    return date.today().strftime(DATE_FORMAT)
