'''
Name: apps/planner/utils/timegrid.py
Description: Hour-granular time helpers shared by the scheduler.
                "HH:MM" <-> hour conversion
                Overnight interval splitting
                Date/timestamp parsing and weekday numbering (Sunday=0)
Authors: Planner Team
Created: October 5, 2026
Last Modified: October 17, 2026
'''

from datetime import date, datetime, time
from typing import List, Optional, Tuple

from django.utils.dateparse import parse_date, parse_datetime
from django.utils.timezone import is_aware, localtime

from .constants import END_OF_DAY, HOURS_PER_DAY
from .exceptions import InvalidInput


def parse_hour(value) -> int:
    """
    Accepts "HH:MM" (or "HH:MM:SS"), a time object or an int and returns the hour.
    Minutes are truncated; the slot grid is hour-granular.
    """
    if isinstance(value, bool):
        raise InvalidInput(f"Invalid time: {value!r}")
    if isinstance(value, int):
        hour = value
    elif isinstance(value, (time, datetime)):
        hour = value.hour
    else:
        text = str(value or "").strip()
        head = text.split(":", 1)[0]
        if not head.isdigit() or len(head) > 2:
            raise InvalidInput(f"Invalid time: {value!r}")
        hour = int(head)
    if not 0 <= hour < HOURS_PER_DAY:
        raise InvalidInput(f"Hour out of range: {value!r}")
    return hour


def format_hour(hour: int) -> str:
    # Zero padding keeps "HH:MM" strings sortable as text
    return f"{hour:02d}:00"


def parse_clock(value) -> Optional[str]:
    """Normalize a time value to zero-padded "HH:MM". Returns None if empty."""
    if value is None or value == "":
        return None
    if isinstance(value, (time, datetime)):
        return f"{value.hour:02d}:{value.minute:02d}"
    text = str(value).strip()
    parts = text.split(":")
    if len(parts) < 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise InvalidInput(f"Invalid time: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    if not 0 <= hour < HOURS_PER_DAY or not 0 <= minute < 60:
        raise InvalidInput(f"Invalid time: {value!r}")
    return f"{hour:02d}:{minute:02d}"


def parse_end_clock(value) -> Optional[str]:
    """parse_clock for end times; "24:00" is kept as the end of the day."""
    if isinstance(value, str) and value.strip() in ("24:00", "24:00:00"):
        return END_OF_DAY
    return parse_clock(value)


def end_hour(value) -> int:
    """
    Exclusive hour bound of an end time. A partial hour counts as a whole
    one (09:30 -> 10) and "24:00" is 24.
    """
    clock = parse_end_clock(value)
    if clock is None:
        raise InvalidInput(f"Invalid time: {value!r}")
    hour, minute = int(clock[:2]), int(clock[3:5])
    return hour + 1 if minute else hour


def blocked_ranges(start_hour: int, end_hour: int) -> List[Tuple[int, int]]:
    """
    Return half-open [start, end) hour ranges covered by an interval.
    An interval that wraps midnight (start > end, e.g. 23 -> 7) becomes
    [start, 24) and [0, end). start == end covers nothing.
    """
    if start_hour > end_hour:
        return [(start_hour, HOURS_PER_DAY), (0, end_hour)]
    if start_hour == end_hour:
        return []
    return [(start_hour, end_hour)]


def in_ranges(hour: int, ranges: List[Tuple[int, int]]) -> bool:
    return any(s <= hour < e for s, e in ranges)


def weekday_of(d: date) -> int:
    """Weekday number with Sunday=0 .. Saturday=6."""
    return (d.weekday() + 1) % 7


def to_local_naive(dt: datetime) -> datetime:
    """Aware datetimes are shifted to the current timezone and made naive."""
    if is_aware(dt):
        return localtime(dt).replace(tzinfo=None)
    return dt


def coerce_date(value) -> date:
    """Accepts a date, datetime or "YYYY-MM-DD" string."""
    if isinstance(value, datetime):
        return to_local_naive(value).date()
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value or "").strip()[:10])
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidInput(f"Invalid date: {value!r}")
    return parsed


def coerce_timestamp(value) -> Optional[datetime]:
    """
    Accepts a datetime, date or ISO string and returns a naive local datetime.
    Date-only values map to midnight. Returns None if value is empty.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    text = str(value).strip()
    try:
        parsed = parse_datetime(text)
        if parsed is None:
            only_date = parse_date(text)
            parsed = datetime.combine(only_date, time.min) if only_date else None
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidInput(f"Invalid timestamp: {value!r}")
    return to_local_naive(parsed)
