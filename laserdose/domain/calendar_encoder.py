"""
Floating-time calendar timestamps.

A dose at 08:00 in the clinic must show up at 08:00 in every calendar app,
wherever the device is. Timestamps are therefore written as iCalendar
"floating" date-times: ``YYYYMMDDTHHMMSS`` with no ``Z`` and no offset.
"""

import re
from datetime import date, datetime, time

import pendulum

from .exceptions import CalendarEncodingError

_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_date(value: str) -> date:
    """
    Parse a ``YYYY-MM-DD`` string into a pendulum Date.

    Raises:
        CalendarEncodingError: If the text is malformed or names an impossible day
    """
    match = _DATE_PATTERN.match(value.strip())
    if not match:
        raise CalendarEncodingError(f"Invalid date '{value}', expected YYYY-MM-DD")
    year, month, day = (int(part) for part in match.groups())
    try:
        return pendulum.date(year, month, day)
    except ValueError as exc:
        raise CalendarEncodingError(f"Invalid date '{value}': {exc}") from exc


def parse_clock_time(value: str) -> time:
    """
    Parse ``HH:MM`` or ``HH:MM:SS`` into a naive time.

    Raises:
        CalendarEncodingError: If the text is malformed or out of range
    """
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise CalendarEncodingError(f"Invalid time '{value}', expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    second = int(match.group(3) or 0)
    try:
        return time(hour, minute, second)
    except ValueError as exc:
        raise CalendarEncodingError(f"Invalid time '{value}': {exc}") from exc


def _coerce_date(value: date | str) -> date:
    if isinstance(value, str):
        return parse_date(value)
    if isinstance(value, datetime):
        raise CalendarEncodingError("Pass the calendar date and the time of day separately, not a datetime")
    if isinstance(value, date):
        return value
    raise CalendarEncodingError(f"Unsupported date value {value!r}")


def _coerce_time(value: time | str) -> time:
    if isinstance(value, str):
        return parse_clock_time(value)
    if isinstance(value, time):
        if value.tzinfo is not None:
            raise CalendarEncodingError("Floating timestamps cannot carry a timezone")
        return value
    raise CalendarEncodingError(f"Unsupported time value {value!r}")


def to_ical_datetime(day: date | str, at: time | str) -> str:
    """
    Encode a wall-clock date and time as a floating iCalendar timestamp.

    No timezone lookup, no DST adjustment and no dependency on the local
    clock: the digits of the input are written out verbatim.

    Args:
        day: Calendar date (``date`` or ``YYYY-MM-DD``)
        at: Time of day (naive ``time`` or ``HH:MM[:SS]``)

    Returns:
        A 15-character string such as ``20251225T080000``

    Raises:
        CalendarEncodingError: If either part is malformed
    """
    parsed_day = _coerce_date(day)
    parsed_time = _coerce_time(at)
    return (
        f"{parsed_day.year:04d}{parsed_day.month:02d}{parsed_day.day:02d}"
        f"T{parsed_time.hour:02d}{parsed_time.minute:02d}{parsed_time.second:02d}"
    )
