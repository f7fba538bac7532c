'''
Name: apps/planner/utils/icsImportExport.py
Description: Module for importing recurring events from exported calendar
             text and exporting a generated day schedule in ICS format.
Authors: Planner Team
Created: October 10, 2026
Last Modified: October 18, 2026
Functions: import_calendar_text(raw_text)
            import_calendar_report(raw_text)
            export_schedule_ics(result)
'''

import logging
import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import List, Optional

import pytz
from django.utils.timezone import get_current_timezone, make_aware
from ics import Calendar, Event

from .constants import ICS_WEEKDAY_CODES, LOGGER_NAME, EventCategory, RecurrencePattern
from .exceptions import InvalidInput
from .records import RecurringEventRecord

logger = logging.getLogger(LOGGER_NAME)

# "T0930" inside values like 20251103T093000Z
TIME_TOKEN = re.compile(r"T(\d{2})(\d{2})")


@dataclass(frozen=True)
class ImportReport:
    events: List[RecurringEventRecord]
    blocks: int

    @property
    def skipped(self) -> int:
        return self.blocks - len(self.events)


def _unfold(raw_text: str) -> List[str]:
    """Join folded continuation lines (leading space or tab) onto the previous line."""
    lines: List[str] = []
    for line in (raw_text or "").replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        if line[:1] in (" ", "\t") and lines:
            lines[-1] += line[1:]
        else:
            lines.append(line)
    return lines


def _parse_time_token(value: str):
    match = TIME_TOKEN.search(value)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def _rrule_days(rrule: str) -> List[int]:
    parts = {}
    for x in rrule.split(";"):
        if "=" in x:
            a, b = x.split("=", 1)
            parts[a.strip().upper()] = b.strip().upper()
    byday = parts.get("BYDAY")
    if not byday:
        return []
    days = []
    for d in byday.split(","):
        # "1MO" / "-1FR" style ordinals keep the code in the last two letters
        code = d.strip()[-2:]
        if code in ICS_WEEKDAY_CODES and ICS_WEEKDAY_CODES[code] not in days:
            days.append(ICS_WEEKDAY_CODES[code])
    return days


def categorize_event(name: str, description: str = "") -> str:
    """
    Categorizes an event based on its name or description.
    Returns an EventCategory value.
    """
    text = f"{name} {description or ''}"
    lowered = text.lower()

    if re.search(r"\b(class|lecture|seminar|course|lab|discussion|tutorial)\b", lowered):
        return EventCategory.CLASS

    # Checks for common course code patterns (e.g., EECS 101, MATH202)
    if re.search(r"[A-Z]{2,4}\s?\d{3}", text):
        return EventCategory.CLASS

    if re.search(r"\b(work|meeting|shift|job|internship|office)\b", lowered):
        return EventCategory.WORK

    if re.search(r"\b(practice|club|gym|workout|rehearsal|game|training|volunteer)\b", lowered):
        return EventCategory.ACTIVITY

    return EventCategory.OTHER


def _finish_block(fields: dict) -> Optional[RecurringEventRecord]:
    name = (fields.get("name") or "").strip()
    if not name:
        logger.warning("import_calendar: dropped block without summary")
        return None
    start = fields.get("start")
    end = fields.get("end")
    try:
        return RecurringEventRecord(
            name=name,
            description=fields.get("description"),
            category=categorize_event(name, fields.get("description")),
            start_time=f"{start[0]:02d}:{start[1]:02d}" if start else None,
            end_time=f"{end[0]:02d}:{end[1]:02d}" if end else None,
            recurrence_pattern=RecurrencePattern.WEEKLY if fields.get("recurring") else RecurrencePattern.DAILY,
            days_of_week=tuple(fields.get("days") or ()),
            duration=fields.get("duration"),
        )
    except InvalidInput as exc:
        logger.warning("import_calendar: dropped block name=%r (%s)", name, exc)
        return None


def import_calendar_report(raw_text: str) -> ImportReport:
    """
    Best-effort, line-oriented scan of VEVENT blocks. Never raises.
    Per block:
      SUMMARY     -> event name (blocks without one are dropped)
      DTSTART     -> start "HH:MM" from the Thhmm token
      DTEND       -> end "HH:MM"; with a start already seen, duration =
                     end hour - start hour (whole hours, not clamped)
      RRULE       -> weekly pattern, BYDAY codes mapped to 0-6 (Sunday=0)
    Blocks without RRULE become daily events.
    """
    events = []
    blocks = 0
    current = None
    for line in _unfold(raw_text):
        stripped = line.strip()
        upper = stripped.upper()
        if upper == "BEGIN:VEVENT":
            if current is not None:
                logger.warning("import_calendar: unterminated block discarded")
            current = {}
            blocks += 1
            continue
        if upper == "END:VEVENT":
            if current is not None:
                event = _finish_block(current)
                if event is not None:
                    events.append(event)
            current = None
            continue
        if current is None or ":" not in stripped:
            continue

        key, value = stripped.split(":", 1)
        prop = key.split(";", 1)[0].strip().upper()
        if prop == "SUMMARY":
            current["name"] = value.strip()
        elif prop == "DESCRIPTION":
            current["description"] = value.strip()
        elif prop == "DTSTART":
            current["start"] = _parse_time_token(value)
        elif prop == "DTEND":
            end = _parse_time_token(value)
            current["end"] = end
            if end and current.get("start"):
                current["duration"] = end[0] - current["start"][0]
        elif prop == "RRULE":
            current["recurring"] = True
            current["days"] = _rrule_days(value)

    if current is not None:
        logger.warning("import_calendar: unterminated block at end of input discarded")

    logger.info("import_calendar: blocks=%d events=%d skipped=%d", blocks, len(events), blocks - len(events))
    return ImportReport(events=events, blocks=blocks)


def import_calendar_text(raw_text: str) -> List[RecurringEventRecord]:
    """Recurring-event candidates found in raw_text (see import_calendar_report)."""
    return import_calendar_report(raw_text).events


def _to_utc(day, clock: str) -> datetime:
    hour, minute = int(clock[:2]), int(clock[3:5])
    extra_days = hour // 24
    local = make_aware(datetime.combine(day, time(hour % 24, minute)), get_current_timezone())
    return (local + timedelta(days=extra_days)).astimezone(pytz.UTC)


def export_schedule_ics(result):
    """
    Exports a generated day schedule (manual and automatic assignments)
    as ICS text.

    Parameters:
        result (ScheduleResult): output of generate_schedule.
    Returns:
        Iterator of ICS text chunks.
    """
    calendar = Calendar()
    for a in list(result.manual_assignments) + list(result.scheduled_assignments):
        ics_event = Event()
        ics_event.name = a.task.title if a.task else "Study Task"
        ics_event.begin = _to_utc(a.date, a.start_time)
        ics_event.end = _to_utc(a.date, a.end_time)
        ics_event.description = str(a.reason)
        calendar.events.add(ics_event)

    logger.info("export_schedule_ics: date=%s events=%d", result.date, len(calendar.events))
    return calendar.serialize_iter() # serialize_iter in case file gets large
