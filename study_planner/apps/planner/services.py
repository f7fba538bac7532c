'''
Name: apps/planner/services.py
Description: Glue between the database and the scheduling utilities.
                Reads every table into a read-only PlannerSnapshot
                Runs schedule generation, recommendations and stats on it
                Stores recurring events found by the calendar importer
Authors: Planner Team
Created: October 13, 2026
Last Modified: October 19, 2026
'''
import logging
from datetime import datetime, timedelta

from django.db import transaction
from django.utils import timezone

from .models import (
    EnergyObservation, RecurringEvent, ScheduledAssignment, SleepSchedule,
    StudySession, Subtask, Task,
)
from .utils import records
from .utils.constants import LOGGER_NAME, AssignmentReason
from .utils.energy import EnergyHistogram
from .utils.icsImportExport import import_calendar_report
from .utils.recommendations import generate_recommendations, select_candidates
from .utils.scheduler import generate_schedule
from .utils.stats import compute_task_stats
from .utils.timegrid import parse_clock, to_local_naive

logger = logging.getLogger(LOGGER_NAME)


def _task_record(task: Task) -> records.TaskRecord:
    return records.TaskRecord(
        id=task.id,
        title=task.title,
        description=task.description,
        category=task.category,
        priority=task.priority,
        status=task.status,
        due_date=task.due_date,
        estimated_hours=task.estimated_hours,
        energy_level=task.energy_level,
        completed_hours=task.completed_hours,
        created_at=task.created_at,
        completed_at=task.completed_at,
    )


def _event_record(event: RecurringEvent) -> records.RecurringEventRecord:
    return records.RecurringEventRecord(
        id=event.id,
        name=event.name,
        description=event.description,
        category=event.category,
        start_time=event.start_time,
        end_time=event.end_time,
        recurrence_pattern=event.recurrence_pattern,
        days_of_week=tuple(event.days_of_week or ()),
        start_date=event.start_date,
        end_date=event.end_date,
    )


def load_snapshot() -> records.PlannerSnapshot:
    '''
    Read the whole planner state once. The scheduling utilities only ever
    see this snapshot, never the ORM.
    '''
    tasks = [_task_record(t) for t in Task.objects.all()]
    by_id = {t.id: t for t in tasks}

    subtasks = [
        records.SubtaskRecord(
            id=str(s.id), parent_id=str(s.task_id), title=s.title,
            status=s.status, order_index=s.order_index,
        )
        for s in Subtask.objects.all()
    ]
    observations = [
        records.EnergyObservation(
            day_of_week=o.day_of_week, hour=o.hour,
            energy_level=o.energy_level, recorded_at=o.recorded_at,
        )
        for o in EnergyObservation.objects.all()
    ]
    assignments = [
        records.AssignmentRecord(
            task_id=a.task_id,
            date=a.scheduled_date,
            start_time=a.start_time,
            end_time=parse_clock(a.end_time),
            energy_level=a.energy_level,
            reason=a.reason or AssignmentReason.MANUAL,
            is_manual=a.is_manual,
            task=by_id.get(str(a.task_id)),
        )
        for a in ScheduledAssignment.objects.all()
    ]
    sleep = SleepSchedule.objects.current()

    snapshot = records.PlannerSnapshot(
        tasks=tuple(tasks),
        subtasks=tuple(subtasks),
        energy_observations=tuple(observations),
        recurring_events=tuple(_event_record(e) for e in RecurringEvent.objects.all()),
        scheduled_assignments=tuple(assignments),
        sleep_schedule=records.SleepPreference(
            bedtime=sleep.bedtime, wake_time=sleep.wake_time,
            desired_hours=sleep.desired_hours,
            optimize=sleep.optimize, flexible=sleep.flexible,
        ) if sleep else None,
    )
    logger.debug("load_snapshot: tasks=%d events=%d observations=%d assignments=%d",
                 len(tasks), len(snapshot.recurring_events), len(observations), len(assignments))
    return snapshot


def generate_for_date(target_date, now=None):
    '''Schedule target_date from the stored state, honouring manual pins.'''
    snapshot = load_snapshot()
    return generate_schedule(
        target_date,
        snapshot.sleep_schedule,
        snapshot.recurring_events,
        snapshot.pending_tasks(),
        snapshot.energy_observations,
        now=now,
        manual_assignments=[a for a in snapshot.scheduled_assignments if a.is_manual],
    )


def recommendations(now=None):
    snapshot = load_snapshot()
    return generate_recommendations(select_candidates(snapshot.tasks), snapshot.energy_observations, now=now)


def energy_histogram() -> EnergyHistogram:
    return EnergyHistogram.from_observations(load_snapshot().energy_observations)


def task_stats(today=None):
    today = today or to_local_naive(timezone.localtime()).date()
    tasks = [_task_record(t) for t in Task.objects.all()]
    minutes = StudySession.objects.values_list("duration_minutes", flat=True)
    return compute_task_stats(tasks, minutes, today)


def _clock(value: str):
    return datetime.strptime(value, "%H:%M").time()


def _end_or_default(event: records.RecurringEventRecord):
    if event.end_time:
        return _clock(event.end_time)
    start = datetime.strptime(event.start_time, "%H:%M")
    return (start + timedelta(hours=1)).time()


def import_calendar(raw_text: str) -> dict:
    '''
    Parse calendar text and store every candidate that has a start time
    as a recurring event. A missing end time becomes start + 1 hour.
    '''
    report = import_calendar_report(raw_text)
    saved = []
    with transaction.atomic():
        for event in report.events:
            if not event.start_time:
                logger.warning("import_calendar: no start time, not stored name=%r", event.name)
                continue
            saved.append(RecurringEvent.objects.create(
                name=event.name,
                description=event.description,
                category=event.category,
                start_time=_clock(event.start_time),
                end_time=_end_or_default(event),
                recurrence_pattern=event.recurrence_pattern,
                days_of_week=list(event.days_of_week),
            ))

    logger.info("import_calendar: stored=%d blocks=%d", len(saved), report.blocks)
    return {
        "imported": len(saved),
        "blocks": report.blocks,
        "skipped": report.blocks - len(saved),
        "events": [e.to_dict() for e in saved],
    }
