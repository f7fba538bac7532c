'''
Name: apps/planner/utils/stats.py
Description: Utility module with summary statistics for tasks,
             study sessions and generated schedules.
Authors: Planner Team
Created: October 11, 2026
Last Modified: October 16, 2026
'''
from collections import defaultdict
from datetime import date


def compute_task_stats(tasks, study_minutes, today: date):
    """
    Given task records and the study-session minutes logged, return counts
    by status plus overdue tasks (not completed, due before today).
    """
    stats = {
        "total": 0,
        "pending": 0,
        "in_progress": 0,
        "completed": 0,
        "overdue": 0,
        "total_study_minutes": 0,
    }
    for task in tasks:
        stats["total"] += 1
        status = str(task.status)
        if status in stats:
            stats[status] += 1
        if not task.is_completed and task.due_date is not None and task.due_date.date() < today:
            stats["overdue"] += 1

    total_minutes = 0
    for minutes in study_minutes:
        # Sessions without a logged duration don't count
        if minutes:
            total_minutes += minutes
    stats["total_study_minutes"] = total_minutes
    stats["total_study_hours"] = round(total_minutes / 60.0, 1)
    return stats


def compute_hours_by_category(result):
    """
    Given a ScheduleResult, return a list of
    { "category": str, "hours": int } summaries.
    """
    totals = defaultdict(int)

    for a in list(result.manual_assignments) + list(result.scheduled_assignments):
        category = str(a.task.category) if a.task else "other"
        if a.hours > 0:
            totals[category] += a.hours

    # Convert to a nicer list so it's easy to use in templates / charts
    return [
        {"category": category, "hours": hours}
        for category, hours in totals.items()
    ]
