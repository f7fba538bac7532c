'''
Name: apps/planner/utils/scheduler.py
Description: Module for building a day's schedule
                Task prioritization (urgency bucket, then priority)
                Greedy slot assignment with energy matching
                Schedule result + rendering timeline
Authors: Planner Team
Created: October 7, 2026
Last Modified: October 19, 2026
'''

import logging
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from django.utils.timezone import localtime

from .availability import FreeSlot, applicable_events, free_slots
from .constants import (
    DEFAULT_TASK_HOURS, LOGGER_NAME, PRIORITY_ORDER, URGENCY_WINDOW_DAYS,
    AssignmentReason,
)
from .energy import EnergyHistogram
from .records import (
    AssignmentRecord, EnergyObservation, RecurringEventRecord, SleepPreference,
    TaskRecord,
)
from .timegrid import blocked_ranges, coerce_date, end_hour, format_hour, parse_hour, to_local_naive, weekday_of

logger = logging.getLogger(LOGGER_NAME)


def is_urgent(task: TaskRecord, target: date) -> bool:
    """Due within URGENCY_WINDOW_DAYS of target and not already in the past."""
    days = task.days_until_due(target)
    return days is not None and 0 <= days <= URGENCY_WINDOW_DAYS

# Used to order candidate tasks before slot assignment
def schedule_sort_key(task: TaskRecord, target: date):
    return (0 if is_urgent(task, target) else 1, PRIORITY_ORDER.get(task.priority, 1))


def prioritize_tasks(tasks: Iterable[TaskRecord], target: date) -> List[TaskRecord]:
    """
    Non-completed tasks, urgent ones first, then high > medium > low.
    sorted() is stable so equal keys keep their input order.
    """
    pending = [t for t in tasks if not t.is_completed]
    ordered = sorted(pending, key=lambda t: schedule_sort_key(t, target))
    logger.debug("prioritize_tasks: order=%r", [t.id for t in ordered])
    return ordered


def required_slots(task: TaskRecord) -> int:
    hours = task.estimated_hours if task.estimated_hours is not None else DEFAULT_TASK_HOURS
    return max(1, math.ceil(hours))


def _assignment_reason(task: TaskRecord, slot: FreeSlot, target: date) -> str:
    if task.energy_level and slot.energy_level == task.energy_level:
        return AssignmentReason.ENERGY_MATCH
    days = task.days_until_due(target)
    if days is not None and days < URGENCY_WINDOW_DAYS:
        return AssignmentReason.URGENT
    return AssignmentReason.BEST_AVAILABLE


def _find_energy_match(slots: Sequence[FreeSlot], cursor: int, level: str) -> Optional[int]:
    for idx in range(cursor, len(slots)):
        if slots[idx].energy_level == level:
            return idx
    return None


def assign_slots(slots: Sequence[FreeSlot], tasks: Sequence[TaskRecord], target: date) -> List[AssignmentRecord]:
    """
    Greedy placement of prioritized tasks onto free slots.

    A single cursor walks the slot list and only moves forward. Each task
    takes a run of required_slots(task) consecutive entries of the list,
    starting at the first slot whose energy matches the task's preference
    (when that run fits), otherwise at the cursor. Slots skipped over to
    reach an energy match are not offered to later tasks. A task whose run
    does not fit before the end of the list is left out.
    """
    assignments = []
    cursor = 0
    for task in tasks:
        if cursor >= len(slots):
            break
        needed = required_slots(task)

        start = cursor
        if task.energy_level:
            match = _find_energy_match(slots, cursor, task.energy_level)
            if match is not None and match + needed <= len(slots):
                start = match

        if start + needed > len(slots):
            logger.warning("assign_slots: UNSCHEDULED task=%r needed=%d remaining=%d",
                           task.id, needed, len(slots) - start)
            continue

        first, last = slots[start], slots[start + needed - 1]
        assignment = AssignmentRecord(
            task_id=task.id,
            date=target,
            start_time=first.time,
            end_time=format_hour(last.hour + 1),
            energy_level=first.energy_level,
            reason=_assignment_reason(task, first, target),
            task=task,
            slot_span=(start, start + needed),
        )
        assignments.append(assignment)
        logger.info("assign_slots: scheduled task=%r start=%s end=%s reason=%s",
                    task.id, assignment.start_time, assignment.end_time, assignment.reason)
        cursor = start + needed
    return assignments


@dataclass(frozen=True)
class ScheduleResult:
    date: date
    weekday: int
    sleep_schedule: SleepPreference
    recurring_events: List[RecurringEventRecord]
    free_slots: List[FreeSlot]
    scheduled_assignments: List[AssignmentRecord]
    manual_assignments: List[AssignmentRecord] = field(default_factory=list)

    @property
    def total_assigned_tasks(self) -> int:
        return len(self.scheduled_assignments)

    @property
    def total_assigned_hours(self) -> int:
        return sum(a.hours for a in self.scheduled_assignments)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "day_of_week": self.weekday,
            "sleep_schedule": self.sleep_schedule.to_dict(),
            "recurring_events": [e.to_dict() for e in self.recurring_events],
            "free_slots": [s.to_dict() for s in self.free_slots],
            "scheduled_assignments": [a.to_dict() for a in self.scheduled_assignments],
            "manual_assignments": [a.to_dict() for a in self.manual_assignments],
            "total_assigned_tasks": self.total_assigned_tasks,
            "total_assigned_hours": self.total_assigned_hours,
        }


def _as_records(items, record_cls):
    return [i if isinstance(i, record_cls) else record_cls.from_dict(i) for i in items or []]


def generate_schedule(
    target_date,
    sleep_schedule: Optional[SleepPreference],
    recurring_events: Iterable[RecurringEventRecord],
    pending_tasks: Iterable[TaskRecord],
    energy_log: Iterable[EnergyObservation],
    now: Optional[datetime] = None,
    manual_assignments: Iterable[AssignmentRecord] = (),
) -> ScheduleResult:
    """
    Main scheduling routine.
    Inputs:
      - target_date: date or "YYYY-MM-DD"
      - sleep_schedule: sleep window (default 23:00-07:00 when None)
      - recurring_events / pending_tasks / energy_log: records or their dict form
      - now: current local time; hours up to now.hour are skipped when
        target_date is today (default: current time)
      - manual_assignments: pinned entries; those on target_date replace
        automatic placement of their task and block their hours
    Raises InvalidInput before any slot computation on bad input.
    """
    target = coerce_date(target_date)
    sleep = sleep_schedule if sleep_schedule is not None else SleepPreference()
    if isinstance(sleep, dict):
        sleep = SleepPreference.from_dict(sleep)
    events = _as_records(recurring_events, RecurringEventRecord)
    tasks = _as_records(pending_tasks, TaskRecord)
    observations = _as_records(energy_log, EnergyObservation)
    pinned = [a for a in _as_records(manual_assignments, AssignmentRecord) if a.date == target]
    now = to_local_naive(now) if now is not None else to_local_naive(localtime())

    logger.info("generate_schedule: date=%s tasks_in=%d events_in=%d observations=%d manual=%d",
                target, len(tasks), len(events), len(observations), len(pinned))

    weekday = weekday_of(target)
    histogram = EnergyHistogram.from_observations(observations)

    pinned_ids = {a.task_id for a in pinned}
    pinned_busy = []
    for a in pinned:
        # A pin blocks every hour it touches
        pinned_busy.extend(blocked_ranges(parse_hour(a.start_time), end_hour(a.end_time)))

    slots = free_slots(target, sleep, events, histogram, now=now, extra_busy=pinned_busy)
    ordered = prioritize_tasks([t for t in tasks if t.id not in pinned_ids], target)
    assignments = assign_slots(slots, ordered, target)

    by_id = {t.id: t for t in tasks}
    manual = [
        AssignmentRecord(
            task_id=a.task_id, date=a.date, start_time=a.start_time, end_time=a.end_time,
            energy_level=a.energy_level or histogram.level_at(weekday, parse_hour(a.start_time)),
            reason=AssignmentReason.MANUAL, is_manual=True, task=a.task or by_id.get(a.task_id),
        )
        for a in pinned
    ]

    result = ScheduleResult(
        date=target,
        weekday=weekday,
        sleep_schedule=sleep,
        recurring_events=applicable_events(events, weekday),
        free_slots=slots,
        scheduled_assignments=assignments,
        manual_assignments=manual,
    )
    logger.info("generate_schedule: done date=%s scheduled=%d hours=%d unscheduled=%d",
                target, result.total_assigned_tasks, result.total_assigned_hours,
                len(ordered) - len(assignments))
    return result


def build_timeline(result: ScheduleResult) -> List[dict]:
    """
    Merge sleep, recurring events and assignments into one list sorted by
    start time. Sorting compares "HH:MM" text, which relies on every time
    being zero-padded.
    """
    entries = []
    sleep = result.sleep_schedule
    if sleep.wraps_midnight:
        entries.append({"start": sleep.bedtime, "end": "23:59", "title": "Sleep", "kind": "sleep"})
        entries.append({"start": "00:00", "end": sleep.wake_time, "title": "Sleep", "kind": "sleep"})
    else:
        entries.append({"start": sleep.bedtime, "end": sleep.wake_time, "title": "Sleep", "kind": "sleep"})

    for ev in result.recurring_events:
        entries.append({
            "start": ev.start_time,
            "end": ev.end_time,
            "title": ev.name or "Recurring Event",
            "kind": "recurring",
            "meta": str(ev.recurrence_pattern),
        })

    for a in list(result.manual_assignments) + list(result.scheduled_assignments):
        entries.append({
            "start": a.start_time,
            "end": a.end_time,
            "title": a.task.title if a.task else a.task_id,
            "kind": "task",
            "meta": str(a.reason),
            "energy_level": str(a.energy_level) if a.energy_level else None,
        })

    entries.sort(key=lambda e: e["start"] or "")
    return entries
