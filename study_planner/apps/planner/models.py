"""
Models for tasks, energy tracking, recurring commitments and schedules
Along with instance methods

Authors: Planner Team
Created: October 8, 2026
Last Modified: October 19, 2026
"""
import math
import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models, transaction
from django.utils import timezone
from django.core.exceptions import ValidationError

from .utils.constants import (
    BREAKDOWN_MAX_SUBTASKS, BREAKDOWN_THRESHOLD_HOURS, DEFAULT_SLEEP_HOURS,
    PROJECT_PHASES, AssignmentReason, EnergyLevel, EventCategory, Priority,
    RecurrencePattern, TaskCategory, TaskStatus,
)
from .utils.timegrid import weekday_of


def break_down_project(estimated_hours):
    '''
    Subtask titles for a large task: one per two estimated hours, at most
    BREAKDOWN_MAX_SUBTASKS, named after the standard project phases.
    '''
    count = min(math.ceil(estimated_hours / 2), BREAKDOWN_MAX_SUBTASKS)
    return [
        PROJECT_PHASES[i] if i < len(PROJECT_PHASES) else f"Complete phase {i + 1}"
        for i in range(count)
    ]

# -----------------------------------
# QuerySets & Managers
# -----------------------------------
class TaskQuerySet(models.QuerySet):
    def pending(self):
        """Tasks that are not completed."""
        return self.exclude(status=TaskStatus.COMPLETED)


class TaskManager(models.Manager):
    def get_queryset(self):
        return TaskQuerySet(self.model, using=self._db)

    def pending(self):
        return self.get_queryset().pending()

    def create_task(self, **fields):
        '''
        Create a task. Tasks estimated above BREAKDOWN_THRESHOLD_HOURS get
        subtasks for each project phase.
        '''
        with transaction.atomic():
            task = self.create(**fields)
            hours = task.estimated_hours
            if hours and hours > BREAKDOWN_THRESHOLD_HOURS:
                for index, title in enumerate(break_down_project(hours)):
                    Subtask.objects.create(task=task, title=title, order_index=index)
        return task


class SleepScheduleManager(models.Manager):
    def current(self):
        return self.get_queryset().first()

    def save_preference(self, **fields):
        '''
        Replace the single stored sleep schedule.
        '''
        with transaction.atomic():
            self.get_queryset().exclude(pk=1).delete()
            schedule, _ = self.update_or_create(pk=1, defaults=fields)
        return schedule


class ScheduledAssignmentQuerySet(models.QuerySet):
    def on_date(self, day):
        return self.filter(scheduled_date=day)

    def manual(self):
        return self.filter(is_manual=True)


class ScheduledAssignmentManager(models.Manager):
    def get_queryset(self):
        return ScheduledAssignmentQuerySet(self.model, using=self._db).select_related("task")

    def on_date(self, day):
        return self.get_queryset().on_date(day)

    def manual(self):
        return self.get_queryset().manual()

    def pin(self, task, scheduled_date, start_time, end_time, energy_level=None):
        '''
        Pin a task to a time on a date. Any earlier assignment for the same
        (task, date) is removed first; last write wins.
        '''
        if end_time <= start_time:
            raise ValidationError("End time must be after start time.")
        with transaction.atomic():
            self.get_queryset().filter(task=task, scheduled_date=scheduled_date).delete()
            return self.create(
                task=task,
                scheduled_date=scheduled_date,
                start_time=start_time,
                end_time=end_time,
                energy_level=energy_level,
                reason=AssignmentReason.MANUAL,
                is_manual=True,
            )

# -----------------------------------
# Models
# -----------------------------------
class Task(models.Model):
    '''
    A study task, exam or activity the planner can schedule.
    '''
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=20, choices=TaskCategory.choices, default=TaskCategory.OTHER)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    status = models.CharField(max_length=20, choices=TaskStatus.choices, default=TaskStatus.PENDING)
    due_date = models.DateTimeField(blank=True, null=True)
    estimated_hours = models.FloatField(blank=True, null=True, validators=[MinValueValidator(0)])
    completed_hours = models.FloatField(default=0, validators=[MinValueValidator(0)])
    energy_level = models.CharField(max_length=10, choices=EnergyLevel.choices, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(blank=True, null=True)

    objects = TaskManager()

    class Meta:
        db_table = "task"
        ordering = ["due_date", "created_at"]
        indexes = [
            models.Index(fields=["status"], name="task_status_idx"),
            models.Index(fields=["due_date"], name="task_due_date_idx"),
        ]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if self.status == TaskStatus.COMPLETED and self.completed_at is None:
            self.completed_at = timezone.now()
        super().save(*args, **kwargs)

    def to_dict(self):
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "priority": self.priority,
            "status": self.status,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "estimated_hours": self.estimated_hours,
            "completed_hours": self.completed_hours,
            "energy_level": self.energy_level,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "subtasks": [s.to_dict() for s in self.subtasks.all()],
        }


class Subtask(models.Model):
    '''
    Checklist step of a task. Only shown to the user; never scheduled.
    '''
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="subtasks")
    title = models.CharField(max_length=200)
    status = models.CharField(max_length=20, choices=TaskStatus.choices, default=TaskStatus.PENDING)
    order_index = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "subtask"
        ordering = ["order_index"]

    def __str__(self):
        return self.title

    def to_dict(self):
        return {
            "id": str(self.id),
            "parent_id": str(self.task_id),
            "title": self.title,
            "status": self.status,
            "order_index": self.order_index,
        }


class EnergyObservation(models.Model):
    '''
    One self-reported energy level. Append-only; histograms are derived
    from the full log on each query.
    '''
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    # Sunday=0 .. Saturday=6
    day_of_week = models.PositiveSmallIntegerField(validators=[MaxValueValidator(6)])
    hour = models.PositiveSmallIntegerField(validators=[MaxValueValidator(23)])
    energy_level = models.CharField(max_length=10, choices=EnergyLevel.choices)
    recorded_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "energy_observation"
        ordering = ["recorded_at"]

    def __str__(self):
        return f"{self.energy_level} @ {self.day_of_week}/{self.hour:02d}"

    @classmethod
    def record_at(cls, when, energy_level):
        '''
        Log an energy level for the weekday/hour of a datetime
        '''
        local = timezone.localtime(when) if timezone.is_aware(when) else when
        return cls.objects.create(day_of_week=weekday_of(local.date()), hour=local.hour, energy_level=energy_level)


class StudySession(models.Model):
    '''
    A completed block of study; also feeds the energy log.
    '''
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    task = models.ForeignKey(Task, on_delete=models.SET_NULL, null=True, blank=True, related_name="study_sessions")
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    duration_minutes = models.PositiveIntegerField(blank=True, null=True)
    energy_level = models.CharField(max_length=10, choices=EnergyLevel.choices)
    productivity_rating = models.PositiveSmallIntegerField(
        blank=True, null=True, validators=[MinValueValidator(1), MaxValueValidator(10)]
    )

    class Meta:
        db_table = "study_session"
        ordering = ["start_time"]

    def __str__(self):
        return f"Study session {self.start_time:%Y-%m-%d %H:%M}"

    def safe(self):
        if self.end_time and self.start_time and self.end_time <= self.start_time:
            raise ValidationError("End time must be after start time.")

    def save(self, *args, **kwargs):
        self.safe()
        if not self.duration_minutes and self.start_time and self.end_time:
            self.duration_minutes = int((self.end_time - self.start_time).total_seconds() // 60)
        super().save(*args, **kwargs)

    @classmethod
    def record(cls, **fields):
        '''
        Save a session and log its energy level at the session start
        '''
        with transaction.atomic():
            session = cls.objects.create(**fields)
            EnergyObservation.record_at(session.start_time, session.energy_level)
        return session


class RecurringEvent(models.Model):
    '''
    Class, work shift or other commitment repeating daily or weekly.
    start_date/end_date are stored but not applied by the scheduler.
    '''
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=20, choices=EventCategory.choices, default=EventCategory.OTHER)
    start_time = models.TimeField()
    end_time = models.TimeField()
    recurrence_pattern = models.CharField(max_length=10, choices=RecurrencePattern.choices, default=RecurrencePattern.WEEKLY)
    # Sunday=0 .. Saturday=6
    days_of_week = models.JSONField(default=list, blank=True)
    start_date = models.DateField(blank=True, null=True)
    end_date = models.DateField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "recurring_event"
        ordering = ["start_time", "name"]

    def __str__(self):
        return self.name

    def to_dict(self):
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "recurrence_pattern": self.recurrence_pattern,
            "days_of_week": list(self.days_of_week or []),
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


class SleepSchedule(models.Model):
    '''
    Single sleep preference, overwritten on each save.
    optimize/flexible are kept for the UI; the scheduler ignores them.
    '''
    bedtime = models.TimeField()
    wake_time = models.TimeField()
    desired_hours = models.FloatField(default=DEFAULT_SLEEP_HOURS, validators=[MinValueValidator(0), MaxValueValidator(24)])
    optimize = models.BooleanField(default=False)
    flexible = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    objects = SleepScheduleManager()

    class Meta:
        db_table = "sleep_schedule"

    def __str__(self):
        return f"Sleep {self.bedtime:%H:%M}-{self.wake_time:%H:%M}"

    def to_dict(self):
        return {
            "bedtime": self.bedtime.strftime("%H:%M"),
            "wake_time": self.wake_time.strftime("%H:%M"),
            "desired_hours": self.desired_hours,
            "optimize": self.optimize,
            "flexible": self.flexible,
        }


class ScheduledAssignment(models.Model):
    '''
    A task pinned to a time on a date. At most one per (task, date).
    '''
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name="assignments")
    scheduled_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    energy_level = models.CharField(max_length=10, choices=EnergyLevel.choices, blank=True, null=True)
    reason = models.CharField(max_length=50, blank=True, default="")
    is_manual = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ScheduledAssignmentManager()

    class Meta:
        db_table = "scheduled_assignment"
        ordering = ["scheduled_date", "start_time"]
        constraints = [
            models.UniqueConstraint(fields=["task", "scheduled_date"], name="unique_assignment_per_task_date")
        ]

    def __str__(self):
        return f"{self.task} on {self.scheduled_date} {self.start_time:%H:%M}"

    def to_dict(self):
        return {
            "id": str(self.id),
            "task_id": str(self.task_id),
            "scheduled_date": self.scheduled_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "energy_level": self.energy_level,
            "reason": self.reason,
            "is_manual": self.is_manual,
        }
