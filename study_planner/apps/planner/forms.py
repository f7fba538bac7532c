'''
Name: apps/planner/forms.py
Description: Forms validating every write made through the planner API:
             tasks, energy logs, study sessions, recurring events, sleep
             schedule, manual pins, schedule generation and calendar import.
Authors: Planner Team
Created: October 12, 2026
Last Modified: October 19, 2026
'''

from django import forms

from .utils.constants import (
    DEFAULT_SLEEP_HOURS, EnergyLevel, EventCategory, Priority,
    RecurrencePattern, TaskCategory, TaskStatus,
)

WEEKDAY_CHOICES = [(i, str(i)) for i in range(7)]


class TaskForm(forms.Form):
    '''Create or update a task. "type" is accepted as an alias of category.'''

    title = forms.CharField(max_length=200)
    description = forms.CharField(required=False, widget=forms.Textarea)
    category = forms.ChoiceField(choices=TaskCategory.choices, required=False)
    priority = forms.ChoiceField(choices=Priority.choices, required=False)
    status = forms.ChoiceField(choices=TaskStatus.choices, required=False)
    due_date = forms.DateTimeField(required=False)
    estimated_hours = forms.FloatField(required=False, min_value=0)
    completed_hours = forms.FloatField(required=False, min_value=0)
    energy_level = forms.ChoiceField(choices=EnergyLevel.choices, required=False)

    def __init__(self, data=None, *args, **kwargs):
        if data is not None and not data.get("category") and data.get("type"):
            data = data.copy()
            data["category"] = data["type"]
        super().__init__(data, *args, **kwargs)

    def clean(self):
        cleaned = super().clean()
        # Blank choices fall back to the model defaults
        cleaned["category"] = cleaned.get("category") or TaskCategory.OTHER
        cleaned["priority"] = cleaned.get("priority") or Priority.MEDIUM
        cleaned["status"] = cleaned.get("status") or TaskStatus.PENDING
        cleaned["energy_level"] = cleaned.get("energy_level") or None
        if cleaned.get("completed_hours") is None:
            cleaned["completed_hours"] = 0
        return cleaned


class SubtaskStatusForm(forms.Form):
    status = forms.ChoiceField(choices=TaskStatus.choices)


class EnergyLogForm(forms.Form):
    '''
    Self-reported energy level. Weekday (Sunday=0) and hour default to the
    current local time when left out.
    '''

    energy_level = forms.ChoiceField(choices=EnergyLevel.choices)
    day_of_week = forms.IntegerField(required=False, min_value=0, max_value=6)
    hour = forms.IntegerField(required=False, min_value=0, max_value=23)

    def clean(self):
        cleaned = super().clean()
        if (cleaned.get("day_of_week") is None) != (cleaned.get("hour") is None):
            raise forms.ValidationError("Provide both day_of_week and hour, or neither.")
        return cleaned


class StudySessionForm(forms.Form):
    task_id = forms.UUIDField(required=False)
    start_time = forms.DateTimeField()
    end_time = forms.DateTimeField()
    duration_minutes = forms.IntegerField(required=False, min_value=0)
    energy_level = forms.ChoiceField(choices=EnergyLevel.choices)
    productivity_rating = forms.IntegerField(required=False, min_value=1, max_value=10)

    def clean(self):
        cleaned = super().clean()
        start = cleaned.get("start_time")
        end = cleaned.get("end_time")
        if start and end and end <= start:
            self.add_error("end_time", "End time must be after start time.")
        return cleaned


class RecurringEventForm(forms.Form):
    '''
    Class, work shift or other repeating commitment. Weekly events need
    at least one weekday; daily events ignore days_of_week.
    '''

    name = forms.CharField(max_length=200)
    description = forms.CharField(required=False, widget=forms.Textarea)
    category = forms.ChoiceField(choices=EventCategory.choices, required=False)
    start_time = forms.TimeField(widget=forms.TimeInput(attrs={"type": "time"}))
    end_time = forms.TimeField(widget=forms.TimeInput(attrs={"type": "time"}))
    recurrence_pattern = forms.ChoiceField(choices=RecurrencePattern.choices, required=False)
    days_of_week = forms.TypedMultipleChoiceField(choices=WEEKDAY_CHOICES, coerce=int, required=False)
    start_date = forms.DateField(required=False)
    end_date = forms.DateField(required=False)

    def __init__(self, data=None, *args, **kwargs):
        # The web client posts "title"/"type"
        if data is not None:
            data = data.copy()
            if not data.get("name") and data.get("title"):
                data["name"] = data["title"]
            if not data.get("category") and data.get("type"):
                data["category"] = data["type"]
        super().__init__(data, *args, **kwargs)

    def clean(self):
        cleaned = super().clean()
        cleaned["category"] = cleaned.get("category") or EventCategory.OTHER
        pattern = cleaned.get("recurrence_pattern") or RecurrencePattern.WEEKLY
        cleaned["recurrence_pattern"] = pattern

        if pattern == RecurrencePattern.WEEKLY and not cleaned.get("days_of_week"):
            self.add_error("days_of_week", "Select at least one day for a weekly event.")
        if pattern == RecurrencePattern.DAILY:
            cleaned["days_of_week"] = []
        else:
            cleaned["days_of_week"] = sorted(set(cleaned.get("days_of_week") or []))

        start, end = cleaned.get("start_date"), cleaned.get("end_date")
        if start and end and start > end:
            self.add_error("end_date", "End date must be on or after start date.")
        return cleaned


class SleepScheduleForm(forms.Form):
    bedtime = forms.TimeField(widget=forms.TimeInput(attrs={"type": "time"}))
    wake_time = forms.TimeField(widget=forms.TimeInput(attrs={"type": "time"}))
    desired_hours = forms.FloatField(required=False, min_value=0, max_value=24)
    optimize = forms.BooleanField(required=False)
    flexible = forms.BooleanField(required=False)

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("desired_hours") is None:
            cleaned["desired_hours"] = DEFAULT_SLEEP_HOURS
        return cleaned


class ManualScheduleForm(forms.Form):
    '''Pin a task to a time on a date.'''

    task_id = forms.UUIDField()
    scheduled_date = forms.DateField()
    start_time = forms.TimeField()
    end_time = forms.TimeField()
    energy_level = forms.ChoiceField(choices=EnergyLevel.choices, required=False)

    def clean(self):
        cleaned = super().clean()
        start = cleaned.get("start_time")
        end = cleaned.get("end_time")
        if start and end and end <= start:
            self.add_error("end_time", "End time must be after start time.")
        cleaned["energy_level"] = cleaned.get("energy_level") or None
        return cleaned


class GenerateScheduleForm(forms.Form):
    date = forms.DateField(required=False)


class ICSUploadForm(forms.Form):
    '''
    Calendar import. Takes either an uploaded .ics file or the raw text
    ("ics_content"; the web client sends "icsContent").
    '''

    ics_file = forms.FileField(
        required=False,
        label="Upload ICS File",
        widget=forms.ClearableFileInput(attrs={'accept': '.ics'}),
    )
    ics_content = forms.CharField(required=False, strip=False)

    def __init__(self, data=None, files=None, *args, **kwargs):
        if data is not None and not data.get("ics_content") and data.get("icsContent"):
            data = data.copy()
            data["ics_content"] = data["icsContent"]
        super().__init__(data, files, *args, **kwargs)

    def clean(self):
        cleaned = super().clean()
        upload = cleaned.get("ics_file")
        if upload:
            if not upload.name.lower().endswith(".ics"):
                self.add_error("ics_file", "Only .ics files are accepted.")
                return cleaned
            cleaned["ics_content"] = upload.read().decode("utf-8", errors="replace")
        if not cleaned.get("ics_content"):
            raise forms.ValidationError("Please select a .ics file or paste calendar text to import.")
        return cleaned
