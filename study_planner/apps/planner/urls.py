'''
Name: apps/planner/urls.py
Description: URL configurations for the planner API.
Authors: Planner Team
Created: October 14, 2026
Last Modified: October 19, 2026
'''

from django.urls import path
from .views import (
    calendar_import, energy_log, recommendations, recurring_event_detail,
    recurring_events, schedule, schedule_export, schedule_generate,
    sleep_schedule, stats, study_sessions, subtask_detail, task_detail, tasks,
)

app_name = "planner"

urlpatterns = [
    path('tasks/', tasks, name='tasks'),
    path('tasks/<uuid:task_id>/', task_detail, name='task_detail'),
    path('subtasks/<uuid:subtask_id>/', subtask_detail, name='subtask_detail'),
    path('energy-patterns/', energy_log, name='energy_log'),
    path('study-sessions/', study_sessions, name='study_sessions'),
    path('recurring-events/', recurring_events, name='recurring_events'),
    path('recurring-events/<uuid:event_id>/', recurring_event_detail, name='recurring_event_detail'),
    path('sleep-schedule/', sleep_schedule, name='sleep_schedule'),
    path('schedule/generate/', schedule_generate, name='schedule_generate'),
    path('schedule/export/', schedule_export, name='schedule_export'),
    path('schedule/', schedule, name='schedule'),
    path('recommendations/', recommendations, name='recommendations'),
    path('calendar/import/', calendar_import, name='calendar_import'),
    path('stats/', stats, name='stats'),
]
