'''
Name: apps/planner/utils/availability.py
Description: Builds the ordered list of free hour slots for a day,
             around sleep, recurring events and already-elapsed hours.
Authors: Planner Team
Created: October 7, 2026
Last Modified: October 18, 2026
'''
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

from .constants import HOURS_PER_DAY, LOGGER_NAME
from .energy import EnergyHistogram
from .records import RecurringEventRecord, SleepPreference
from .timegrid import format_hour, in_ranges, to_local_naive, weekday_of

logger = logging.getLogger(LOGGER_NAME)


@dataclass(frozen=True)
class FreeSlot:
    hour: int
    energy_level: str

    @property
    def time(self) -> str:
        return format_hour(self.hour)

    def to_dict(self) -> dict:
        return {"hour": self.hour, "time": self.time, "energy_level": str(self.energy_level)}


def applicable_events(events: Iterable[RecurringEventRecord], weekday: int) -> List[RecurringEventRecord]:
    """Daily events always apply; weekly ones only on their listed weekdays."""
    return [e for e in events if e.applies_on(weekday)]


def busy_ranges(sleep: SleepPreference, events: Iterable[RecurringEventRecord],
                extra: Iterable[Tuple[int, int]] = ()) -> List[Tuple[int, int]]:
    """All blocked [start, end) hour ranges for a day (sleep first, then events)."""
    ranges = list(sleep.hour_ranges())
    for ev in events:
        ranges.extend(ev.hour_ranges())
    ranges.extend(extra)
    return ranges


def free_slots(
    target_date: date,
    sleep: SleepPreference,
    events: Iterable[RecurringEventRecord],
    histogram: EnergyHistogram,
    now: Optional[datetime] = None,
    extra_busy: Iterable[Tuple[int, int]] = (),
) -> List[FreeSlot]:
    """
    Free hours of target_date, earliest first, each tagged with the
    dominant energy level recorded for that weekday/hour.

    - Sleep hours are skipped (overnight windows split at midnight).
    - Hours inside [start, end) of an applicable recurring event are skipped.
    - When target_date is today, hours <= the current hour are skipped.
    Pure function of its inputs; call again to restart.
    """
    weekday = weekday_of(target_date)
    todays_events = applicable_events(events, weekday)
    blocked = busy_ranges(sleep, todays_events, extra_busy)

    cutoff = -1
    if now is not None:
        now = to_local_naive(now)
        if now.date() == target_date:
            cutoff = now.hour

    slots = []
    for hour in range(HOURS_PER_DAY):
        if hour <= cutoff:
            continue
        if in_ranges(hour, blocked):
            continue
        slots.append(FreeSlot(hour=hour, energy_level=histogram.level_at(weekday, hour)))

    logger.info("free_slots: date=%s weekday=%d events=%d blocked_ranges=%d free=%d cutoff=%d",
                target_date, weekday, len(todays_events), len(blocked), len(slots), cutoff)
    return slots
