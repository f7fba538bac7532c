'''
Name: apps/planner/utils/constants.py
Description: Constants used in the planner app.
                Choice enums (priority, energy, status, categories)
                Scheduling thresholds
                Recommendation limits
                Debug logger
Authors: Planner Team
Created: October 5, 2026
Last Modified: October 19, 2026
'''


from django.db import models

class Priority(models.TextChoices):
    HIGH = "high", "High"
    MEDIUM = "medium", "Medium"
    LOW = "low", "Low"

class EnergyLevel(models.TextChoices):
    HIGH = "high", "High"
    MEDIUM = "medium", "Medium"
    LOW = "low", "Low"

class TaskStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"

class TaskCategory(models.TextChoices):
    ASSIGNMENT = "assignment", "Assignment"
    EXAM = "exam", "Exam"
    ACTIVITY = "activity", "Activity"
    OTHER = "other", "Other"

class EventCategory(models.TextChoices):
    CLASS = "class", "Class"
    WORK = "work", "Work"
    ACTIVITY = "activity", "Activity"
    OTHER = "other", "Other"

class RecurrencePattern(models.TextChoices):
    DAILY = "daily", "Daily"
    WEEKLY = "weekly", "Weekly"

class AssignmentReason(models.TextChoices):
    ENERGY_MATCH = "Optimal energy match"
    URGENT = "Urgent deadline"
    BEST_AVAILABLE = "Best available slot"
    MANUAL = "Manually scheduled"

class AdvisoryKind(models.TextChoices):
    URGENT = "urgent", "Urgent"
    OPTIMAL_TIME = "optimal_time", "Optimal Time"
    BREAK = "break_suggestion", "Break Suggestion"
    BALANCE = "balance", "Balance"


LOGGER_NAME = "apps.planner"

# Lower value sorts first
PRIORITY_ORDER = {
    "high": 0,
    "medium": 1,
    "low": 2
}

# Tie-break order for dominant energy level (earlier wins)
ENERGY_TIE_ORDER = ("high", "medium", "low")
DEFAULT_ENERGY_LEVEL = "medium"

# Sunday=0, matches the weekday codes used by calendar exports
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
ICS_WEEKDAY_CODES = {"SU": 0, "MO": 1, "TU": 2, "WE": 3, "TH": 4, "FR": 5, "SA": 6}

HOURS_PER_DAY = 24
# End time of a run that finishes in the last slot of the day
END_OF_DAY = "24:00"
URGENCY_WINDOW_DAYS = 3
DEFAULT_TASK_HOURS = 1

DEFAULT_BEDTIME = "23:00"
DEFAULT_WAKE_TIME = "07:00"
DEFAULT_SLEEP_HOURS = 8

RECOMMENDATION_TASK_LIMIT = 10
OPTIMAL_TIME_TASK_LIMIT = 3
OPTIMAL_TIME_SEARCH_DAYS = 7
BREAK_THRESHOLD_HOURS = 3

BREAKDOWN_THRESHOLD_HOURS = 4
BREAKDOWN_MAX_SUBTASKS = 8
PROJECT_PHASES = [
    "Research and planning",
    "Outline and structure",
    "Draft first section",
    "Draft middle sections",
    "Draft final section",
    "Review and edit",
    "Finalize and polish",
    "Final review",
]
