'''
Name: apps/planner/utils/records.py
Description: Typed, read-only records handed to the scheduling utilities,
             and the snapshot that groups them.
Authors: Planner Team
Created: October 6, 2026
Last Modified: October 18, 2026
'''

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from .constants import (
    DEFAULT_BEDTIME, DEFAULT_SLEEP_HOURS, DEFAULT_WAKE_TIME, HOURS_PER_DAY,
    AssignmentReason, EnergyLevel, EventCategory, Priority, RecurrencePattern,
    TaskCategory, TaskStatus,
)
from .exceptions import InvalidInput
from .timegrid import blocked_ranges, coerce_date, coerce_timestamp, parse_clock, parse_end_clock, parse_hour

# Data shapes accepted by from_dict() mirror the persisted document:
# {
#   "tasks": [...], "subtasks": [...], "energy_observations": [...],
#   "recurring_events": [...], "scheduled_assignments": [...],
#   "sleep_schedule": {...} | None
# }
# Timestamps are ISO strings, times of day are "HH:MM".


def _choice(value, choices, field_name, default=None):
    """Validate a choice token against a TextChoices enum."""
    if value is None or value == "":
        return default
    token = str(value).strip().lower()
    if token not in choices.values:
        raise InvalidInput(f"Unknown {field_name}: {value!r}")
    return choices(token)


def _hours(value, field_name):
    if value is None or value == "":
        return None
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"Invalid {field_name}: {value!r}")
    if hours < 0:
        raise InvalidInput(f"{field_name} must not be negative")
    return hours


def _iso(value):
    return value.isoformat() if value is not None else None


@dataclass(frozen=True)
class TaskRecord:
    id: str
    title: str
    description: Optional[str] = None
    category: str = TaskCategory.OTHER
    priority: str = Priority.MEDIUM
    status: str = TaskStatus.PENDING
    due_date: Optional[datetime] = None
    estimated_hours: Optional[float] = None
    energy_level: Optional[str] = None
    completed_hours: float = 0.0
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "category", _choice(self.category, TaskCategory, "category", TaskCategory.OTHER))
        object.__setattr__(self, "priority", _choice(self.priority, Priority, "priority", Priority.MEDIUM))
        object.__setattr__(self, "status", _choice(self.status, TaskStatus, "status", TaskStatus.PENDING))
        object.__setattr__(self, "energy_level", _choice(self.energy_level, EnergyLevel, "energy level"))
        object.__setattr__(self, "estimated_hours", _hours(self.estimated_hours, "estimated hours"))
        object.__setattr__(self, "completed_hours", _hours(self.completed_hours, "completed hours") or 0.0)
        object.__setattr__(self, "due_date", coerce_timestamp(self.due_date))
        object.__setattr__(self, "created_at", coerce_timestamp(self.created_at))
        object.__setattr__(self, "completed_at", coerce_timestamp(self.completed_at))

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def days_until_due(self, target: date) -> Optional[int]:
        '''
        Whole days between the target date and the due date.
        None when the task has no due date.
        '''
        if self.due_date is None:
            return None
        return (self.due_date.date() - target).days

    @classmethod
    def from_dict(cls, data: dict) -> "TaskRecord":
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            description=data.get("description"),
            # "type" is the older key for category
            category=data.get("category") or data.get("type"),
            priority=data.get("priority"),
            status=data.get("status"),
            due_date=data.get("due_date"),
            estimated_hours=data.get("estimated_hours"),
            energy_level=data.get("energy_level"),
            completed_hours=data.get("completed_hours"),
            created_at=data.get("created_at"),
            completed_at=data.get("completed_at"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "category": str(self.category),
            "priority": str(self.priority),
            "status": str(self.status),
            "due_date": _iso(self.due_date),
            "estimated_hours": self.estimated_hours,
            "energy_level": str(self.energy_level) if self.energy_level else None,
            "completed_hours": self.completed_hours,
            "created_at": _iso(self.created_at),
            "completed_at": _iso(self.completed_at),
        }


@dataclass(frozen=True)
class SubtaskRecord:
    id: str
    parent_id: str
    title: str
    status: str = TaskStatus.PENDING
    order_index: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "SubtaskRecord":
        return cls(
            id=str(data.get("id")),
            parent_id=str(data.get("parent_id")),
            title=data.get("title") or "",
            status=_choice(data.get("status"), TaskStatus, "status", TaskStatus.PENDING),
            order_index=int(data.get("order_index") or 0),
        )


@dataclass(frozen=True)
class EnergyObservation:
    day_of_week: int
    hour: int
    energy_level: str
    recorded_at: Optional[datetime] = None

    def __post_init__(self):
        try:
            day, hour = int(self.day_of_week), int(self.hour)
        except (TypeError, ValueError):
            raise InvalidInput(f"Invalid energy observation: {self.day_of_week!r}/{self.hour!r}")
        if not 0 <= day <= 6:
            raise InvalidInput(f"Weekday out of range: {self.day_of_week!r}")
        if not 0 <= hour < HOURS_PER_DAY:
            raise InvalidInput(f"Hour out of range: {self.hour!r}")
        object.__setattr__(self, "day_of_week", day)
        object.__setattr__(self, "hour", hour)
        level = _choice(self.energy_level, EnergyLevel, "energy level")
        if level is None:
            raise InvalidInput("Energy level is required")
        object.__setattr__(self, "energy_level", level)
        object.__setattr__(self, "recorded_at", coerce_timestamp(self.recorded_at))

    @classmethod
    def from_dict(cls, data: dict) -> "EnergyObservation":
        return cls(
            day_of_week=data.get("day_of_week"),
            hour=data.get("hour"),
            energy_level=data.get("energy_level"),
            recorded_at=data.get("recorded_at"),
        )


@dataclass(frozen=True)
class RecurringEventRecord:
    '''
    A class, work shift or other commitment that repeats daily or on
    selected weekdays. start_date/end_date are carried but not checked
    when computing availability.
    '''
    name: str
    start_time: Optional[str]
    end_time: Optional[str] = None
    recurrence_pattern: str = RecurrencePattern.WEEKLY
    days_of_week: Tuple[int, ...] = ()
    id: Optional[str] = None
    category: str = EventCategory.OTHER
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    # Whole hours; only set by the calendar importer
    duration: Optional[int] = None

    def __post_init__(self):
        if self.id is not None:
            object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "start_time", parse_clock(self.start_time))
        object.__setattr__(self, "end_time", parse_clock(self.end_time))
        object.__setattr__(self, "recurrence_pattern", _choice(self.recurrence_pattern, RecurrencePattern, "recurrence pattern", RecurrencePattern.WEEKLY))
        object.__setattr__(self, "category", _choice(self.category, EventCategory, "category", EventCategory.OTHER))
        days = []
        for d in self.days_of_week or ():
            try:
                day = int(d)
            except (TypeError, ValueError):
                raise InvalidInput(f"Invalid weekday: {d!r}")
            if not 0 <= day <= 6:
                raise InvalidInput(f"Weekday out of range: {d!r}")
            days.append(day)
        object.__setattr__(self, "days_of_week", tuple(days))
        if self.start_date is not None:
            object.__setattr__(self, "start_date", coerce_date(self.start_date))
        if self.end_date is not None:
            object.__setattr__(self, "end_date", coerce_date(self.end_date))

    def applies_on(self, weekday: int) -> bool:
        if self.recurrence_pattern == RecurrencePattern.DAILY:
            return True
        return weekday in self.days_of_week

    def hour_ranges(self) -> List[Tuple[int, int]]:
        """Blocked [start, end) hour ranges; overnight events are split at midnight."""
        if not self.start_time:
            return []
        start = parse_hour(self.start_time)
        if self.end_time:
            end = parse_hour(self.end_time)
        else:
            end = (start + max(self.duration or 1, 1)) % HOURS_PER_DAY
        return blocked_ranges(start, end)

    @classmethod
    def from_dict(cls, data: dict) -> "RecurringEventRecord":
        return cls(
            id=data.get("id"),
            name=data.get("name") or data.get("title") or "",
            category=data.get("category") or data.get("type"),
            description=data.get("description"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            recurrence_pattern=data.get("recurrence_pattern") or data.get("pattern"),
            days_of_week=tuple(data.get("days_of_week") or data.get("days") or ()),
            start_date=data.get("start_date") or None,
            end_date=data.get("end_date") or None,
            duration=data.get("duration"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": str(self.category),
            "description": self.description,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "recurrence_pattern": str(self.recurrence_pattern),
            "days_of_week": list(self.days_of_week),
            "start_date": _iso(self.start_date),
            "end_date": _iso(self.end_date),
            "duration": self.duration,
        }


@dataclass(frozen=True)
class SleepPreference:
    '''
    Sleep window. optimize and flexible are stored for the UI only;
    the scheduler does not read them.
    '''
    bedtime: str = DEFAULT_BEDTIME
    wake_time: str = DEFAULT_WAKE_TIME
    desired_hours: float = DEFAULT_SLEEP_HOURS
    optimize: bool = False
    flexible: bool = False

    def __post_init__(self):
        object.__setattr__(self, "bedtime", parse_clock(self.bedtime) or DEFAULT_BEDTIME)
        object.__setattr__(self, "wake_time", parse_clock(self.wake_time) or DEFAULT_WAKE_TIME)
        hours = _hours(self.desired_hours, "desired hours")
        object.__setattr__(self, "desired_hours", DEFAULT_SLEEP_HOURS if hours is None else hours)

    @property
    def wraps_midnight(self) -> bool:
        return parse_hour(self.bedtime) > parse_hour(self.wake_time)

    def hour_ranges(self) -> List[Tuple[int, int]]:
        return blocked_ranges(parse_hour(self.bedtime), parse_hour(self.wake_time))

    @classmethod
    def from_dict(cls, data: dict) -> "SleepPreference":
        return cls(
            bedtime=data.get("bedtime"),
            wake_time=data.get("wake_time"),
            desired_hours=data.get("desired_hours"),
            optimize=bool(data.get("optimize")),
            flexible=bool(data.get("flexible")),
        )

    def to_dict(self) -> dict:
        return {
            "bedtime": self.bedtime,
            "wake_time": self.wake_time,
            "desired_hours": self.desired_hours,
            "optimize": self.optimize,
            "flexible": self.flexible,
        }


@dataclass(frozen=True)
class AssignmentRecord:
    task_id: str
    date: date
    start_time: str
    end_time: str
    energy_level: Optional[str] = None
    reason: str = AssignmentReason.BEST_AVAILABLE
    is_manual: bool = False
    task: Optional[TaskRecord] = None
    # Slot indices consumed from the free-slot sequence (automatic only)
    slot_span: Optional[Tuple[int, int]] = None

    def __post_init__(self):
        object.__setattr__(self, "task_id", str(self.task_id))
        object.__setattr__(self, "date", coerce_date(self.date))
        object.__setattr__(self, "start_time", parse_clock(self.start_time))
        object.__setattr__(self, "end_time", parse_end_clock(self.end_time))

    @property
    def hours(self) -> int:
        """Scheduled length in whole hours."""
        if self.slot_span is not None:
            return self.slot_span[1] - self.slot_span[0]
        return max(int(self.end_time[:2]) - int(self.start_time[:2]), 0)

    @classmethod
    def from_dict(cls, data: dict) -> "AssignmentRecord":
        return cls(
            task_id=data.get("task_id"),
            date=data.get("scheduled_date") or data.get("date"),
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            energy_level=data.get("energy_level"),
            reason=data.get("reason") or (AssignmentReason.MANUAL if data.get("is_manual") else AssignmentReason.BEST_AVAILABLE),
            is_manual=bool(data.get("is_manual")),
        )

    def to_dict(self) -> dict:
        return {
            "task_id": self.task_id,
            "task": self.task.to_dict() if self.task else None,
            "date": self.date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "energy_level": str(self.energy_level) if self.energy_level else None,
            "reason": str(self.reason),
            "is_manual": self.is_manual,
        }


@dataclass(frozen=True)
class PlannerSnapshot:
    '''
    Everything the scheduler reads for one call. Built once by the caller
    and never written to by the scheduling utilities.
    '''
    tasks: Tuple[TaskRecord, ...] = ()
    subtasks: Tuple[SubtaskRecord, ...] = ()
    energy_observations: Tuple[EnergyObservation, ...] = ()
    recurring_events: Tuple[RecurringEventRecord, ...] = ()
    scheduled_assignments: Tuple[AssignmentRecord, ...] = ()
    sleep_schedule: Optional[SleepPreference] = None

    @classmethod
    def from_document(cls, document: Dict) -> "PlannerSnapshot":
        sleep = document.get("sleep_schedule")
        return cls(
            tasks=tuple(TaskRecord.from_dict(t) for t in document.get("tasks") or []),
            subtasks=tuple(SubtaskRecord.from_dict(s) for s in document.get("subtasks") or []),
            energy_observations=tuple(
                EnergyObservation.from_dict(o) for o in document.get("energy_observations") or []
            ),
            recurring_events=tuple(
                RecurringEventRecord.from_dict(e) for e in document.get("recurring_events") or []
            ),
            scheduled_assignments=tuple(
                AssignmentRecord.from_dict(a) for a in document.get("scheduled_assignments") or []
            ),
            sleep_schedule=SleepPreference.from_dict(sleep) if sleep else None,
        )

    def pending_tasks(self) -> List[TaskRecord]:
        return [t for t in self.tasks if not t.is_completed]

    def manual_assignments_on(self, target: date) -> List[AssignmentRecord]:
        return [a for a in self.scheduled_assignments if a.is_manual and a.date == target]

    def subtasks_of(self, task_id: str) -> List[SubtaskRecord]:
        return sorted((s for s in self.subtasks if s.parent_id == str(task_id)), key=lambda s: s.order_index)
