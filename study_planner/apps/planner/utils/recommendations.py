'''
Name: apps/planner/utils/recommendations.py
Description: Heuristic study advisories computed from pending tasks and
             the energy log: urgent deadlines, next high-energy slot,
             break reminders and category balance.
Authors: Planner Team
Created: October 9, 2026
Last Modified: October 18, 2026
'''
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import ClassVar, Dict, Iterable, List, Optional

from django.utils.timezone import localtime

from .constants import (
    BREAK_THRESHOLD_HOURS, DAY_NAMES, LOGGER_NAME, OPTIMAL_TIME_SEARCH_DAYS,
    OPTIMAL_TIME_TASK_LIMIT, PRIORITY_ORDER, RECOMMENDATION_TASK_LIMIT,
    URGENCY_WINDOW_DAYS, AdvisoryKind, EnergyLevel, Priority,
)
from .energy import EnergyHistogram
from .records import EnergyObservation, TaskRecord
from .timegrid import to_local_naive, weekday_of

logger = logging.getLogger(LOGGER_NAME)


def _task_ref(task: TaskRecord, *keys) -> dict:
    ref = {"id": task.id, "title": task.title}
    for key in keys:
        value = getattr(task, key)
        if isinstance(value, datetime):
            value = value.isoformat()
        elif value is not None and key == "priority":
            value = str(value)
        ref[key] = value
    return ref


@dataclass(frozen=True)
class UrgentAdvisory:
    kind: ClassVar[str] = AdvisoryKind.URGENT
    tasks: List[TaskRecord]
    title: str = "Urgent Deadlines Approaching"
    suggestion: str = ("These tasks are due within 3 days. "
                       "Consider scheduling focused study sessions today.")

    def to_dict(self) -> dict:
        return {
            "type": str(self.kind),
            "title": self.title,
            "suggestion": self.suggestion,
            "tasks": [_task_ref(t, "due_date", "priority") for t in self.tasks],
        }


@dataclass(frozen=True)
class OptimalTimeAdvisory:
    kind: ClassVar[str] = AdvisoryKind.OPTIMAL_TIME
    day: int
    hour: int
    recommended_tasks: List[TaskRecord]
    title: str = "Optimal Study Time Detected"

    @property
    def description(self) -> str:
        return f"{DAY_NAMES[self.day]} at {self.hour}:00"

    @property
    def suggestion(self) -> str:
        return f"Based on your energy patterns, {self.description} is a great time for focused work."

    def to_dict(self) -> dict:
        return {
            "type": str(self.kind),
            "title": self.title,
            "suggestion": self.suggestion,
            "time": {"day": self.day, "hour": self.hour, "description": self.description},
            "recommended_tasks": [_task_ref(t, "estimated_hours") for t in self.recommended_tasks],
        }


@dataclass(frozen=True)
class BreakAdvisory:
    kind: ClassVar[str] = AdvisoryKind.BREAK
    tasks: List[TaskRecord]
    title: str = "Long Tasks Detected"
    suggestion: str = ("Consider using the Pomodoro technique "
                       "(25 min work, 5 min break) for these longer tasks.")

    def to_dict(self) -> dict:
        return {
            "type": str(self.kind),
            "title": self.title,
            "suggestion": self.suggestion,
            "tasks": [_task_ref(t, "estimated_hours") for t in self.tasks],
        }


@dataclass(frozen=True)
class BalanceAdvisory:
    kind: ClassVar[str] = AdvisoryKind.BALANCE
    distribution: Dict[str, int] = field(default_factory=dict)
    title: str = "Task Distribution"
    suggestion: str = "Maintain a balanced schedule across different types of activities."

    def to_dict(self) -> dict:
        return {
            "type": str(self.kind),
            "title": self.title,
            "suggestion": self.suggestion,
            "distribution": dict(self.distribution),
        }


def select_candidates(tasks: Iterable[TaskRecord], limit: int = RECOMMENDATION_TASK_LIMIT) -> List[TaskRecord]:
    """
    Non-completed tasks, undated ones first, then by earliest due date and
    priority, capped at limit.
    """
    pending = [t for t in tasks if not t.is_completed]
    pending.sort(key=lambda t: (
        t.due_date is not None,
        t.due_date or datetime.min,
        PRIORITY_ORDER.get(t.priority, 1),
    ))
    return pending[:limit]


def find_next_high_energy_slot(histogram: EnergyHistogram, now: datetime):
    """
    Earliest (weekday, hour) strictly after now with a recorded high-energy
    observation, looking up to OPTIMAL_TIME_SEARCH_DAYS ahead. Returns None
    when there is none.
    """
    high_hours: Dict[int, List[int]] = {}
    for day, hour, level, _count in histogram.buckets():
        if level == EnergyLevel.HIGH:
            high_hours.setdefault(day, []).append(hour)

    today = weekday_of(now.date())
    for offset in range(OPTIMAL_TIME_SEARCH_DAYS):
        day = (today + offset) % 7
        for hour in sorted(high_hours.get(day, [])):
            if offset == 0 and hour <= now.hour:
                continue
            return day, hour
    return None


def generate_recommendations(candidate_tasks: Iterable[TaskRecord],
                             energy_log: Iterable[EnergyObservation],
                             now: Optional[datetime] = None) -> list:
    """
    Advisories in fixed order: urgent, optimal time, break, balance.
    candidate_tasks is normally the output of select_candidates().
    """
    tasks = [t if isinstance(t, TaskRecord) else TaskRecord.from_dict(t) for t in candidate_tasks]
    observations = [o if isinstance(o, EnergyObservation) else EnergyObservation.from_dict(o) for o in energy_log]
    now = to_local_naive(now) if now is not None else to_local_naive(localtime())
    histogram = EnergyHistogram.from_observations(observations)

    advisories = []

    horizon = now + timedelta(days=URGENCY_WINDOW_DAYS)
    urgent = [t for t in tasks if t.due_date is not None and now <= t.due_date <= horizon]
    if urgent:
        advisories.append(UrgentAdvisory(tasks=urgent))

    high_priority = [t for t in tasks if t.priority == Priority.HIGH]
    if high_priority:
        slot = find_next_high_energy_slot(histogram, now)
        if slot is not None:
            day, hour = slot
            advisories.append(OptimalTimeAdvisory(
                day=day, hour=hour, recommended_tasks=high_priority[:OPTIMAL_TIME_TASK_LIMIT],
            ))

    long_tasks = [t for t in tasks if t.estimated_hours is not None and t.estimated_hours > BREAK_THRESHOLD_HOURS]
    if long_tasks:
        advisories.append(BreakAdvisory(tasks=long_tasks))

    distribution = Counter(str(t.category) for t in tasks)
    advisories.append(BalanceAdvisory(distribution=dict(distribution)))

    logger.info("generate_recommendations: tasks=%d observations=%d advisories=%s",
                len(tasks), len(observations), [str(a.kind) for a in advisories])
    return advisories
