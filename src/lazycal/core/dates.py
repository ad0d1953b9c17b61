# src/lazycal/core/dates.py

"""
Calendar/date helpers shared by the store, the views and persistence.

All datetimes handled by the core are naive local time. Timestamps coming from
persisted data may carry an offset (e.g. a trailing "Z" from a browser export);
those are converted to local time and made naive on parse.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

from dateutil import parser as dateutil_parser
from dateutil.parser import ParserError

from .errors import ValidationError

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def date_key(value: date | datetime) -> str:
    """
    Key used for per-day progress entries.

    en-US short date without zero padding ("3/7/2025"). Every progress read and
    write goes through this function, otherwise lookups silently miss.
    """
    d = as_date(value)
    return f"{d.month}/{d.day}/{d.year}"


def start_of_day(value: date | datetime) -> datetime:
    return datetime.combine(as_date(value), time.min)


def end_of_day(value: date | datetime) -> datetime:
    return datetime.combine(as_date(value), time.max)


def start_of_week(value: date | datetime) -> date:
    """Sunday on or before the given day."""
    d = as_date(value)
    # weekday(): Monday=0 .. Sunday=6
    return d - timedelta(days=(d.weekday() + 1) % 7)


def _from_epoch(raw: object) -> datetime:
    try:
        return datetime.fromtimestamp(float(raw))
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"timestamp out of range {raw!r}") from e


def parse_timestamp(raw: object) -> datetime:
    """
    Parse a persisted timestamp.

    Accepts datetime/date objects, epoch seconds (int/float or numeric strings)
    and ISO-8601 strings with or without an offset.
    """
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, date):
        return as_datetime(raw)
    elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return _from_epoch(raw)
    elif isinstance(raw, str):
        s = raw.strip()
        if not s:
            raise ValueError("empty timestamp")
        if s.replace(".", "", 1).isdigit():
            return _from_epoch(s)
        try:
            dt = dateutil_parser.isoparse(s)
        except (ParserError, ValueError, OverflowError) as e:
            raise ValueError(f"invalid timestamp {raw!r}") from e
    else:
        raise ValueError(f"unsupported timestamp type {type(raw).__name__}")

    if dt.tzinfo is not None:
        try:
            dt = dt.astimezone().replace(tzinfo=None)
        except (OverflowError, OSError) as e:
            raise ValueError(f"timestamp out of range {raw!r}") from e
    return dt


def format_timestamp(value: datetime) -> str:
    return value.isoformat()


def parse_hhmm(value: str) -> tuple[int, int]:
    """Parse a reminder time of day ("HH:MM")."""
    m = _HHMM_RE.match((value or "").strip())
    if not m:
        raise ValidationError(f"invalid time of day {value!r}; expected HH:MM")
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise ValidationError(f"invalid time of day {value!r}; expected HH:MM")
    return hour, minute
