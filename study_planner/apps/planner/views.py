'''
Name: apps/planner/views.py
Description: JSON views for the planner API: tasks, energy log, study
                sessions, recurring events, sleep schedule, schedule
                generation/pinning/export, recommendations, calendar
                import and statistics.
Authors: Planner Team
Created: October 14, 2026
Last Modified: October 19, 2026
'''
import json
import logging

from django.http import JsonResponse, QueryDict, StreamingHttpResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from . import services
from .forms import (
    EnergyLogForm, GenerateScheduleForm, ICSUploadForm, ManualScheduleForm,
    RecurringEventForm, SleepScheduleForm, StudySessionForm, SubtaskStatusForm,
    TaskForm,
)
from .models import (
    EnergyObservation, RecurringEvent, ScheduledAssignment, SleepSchedule,
    StudySession, Subtask, Task,
)
from .utils.constants import DAY_NAMES, LOGGER_NAME
from .utils.exceptions import InvalidInput
from .utils.icsImportExport import export_schedule_ics
from .utils.records import SleepPreference
from .utils.scheduler import build_timeline
from .utils.stats import compute_hours_by_category
from .utils.timegrid import to_local_naive, weekday_of

logger = logging.getLogger(LOGGER_NAME)

# ============================================================
#  HELPERS
# ============================================================

def _today():
    return to_local_naive(timezone.localtime()).date()


def _request_data(request):
    '''
    Body of a write request: parsed JSON for application/json,
    form data otherwise. Django only fills request.POST for POST, so
    url-encoded PUT/PATCH bodies are parsed here.
    '''
    if request.content_type == "application/json":
        if not request.body:
            return {}
        data = json.loads(request.body)
        if not isinstance(data, dict):
            raise InvalidInput("Request body must be a JSON object.")
        return data
    if request.method == "POST":
        return request.POST
    if request.content_type == "application/x-www-form-urlencoded":
        return QueryDict(request.body, encoding=request.encoding)
    raise InvalidInput(f"Unsupported content type for {request.method}: {request.content_type or 'none'}.")


def _error(message, status=400, **extra):
    return JsonResponse({"error": message, **extra}, status=status)


def _form_error(form, name):
    logger.warning("%s: form invalid: %s", name, form.errors.as_json())
    return _error("Invalid input.", details=form.errors.get_json_data())


def _bad_body(name, exc):
    logger.warning("%s: bad request body (%s)", name, exc)
    return _error(str(exc) or "Malformed request body.")

# ============================================================
#  TASKS
# ============================================================

@require_http_methods(["GET", "POST"])
def tasks(request):
    '''
    GET: all tasks with their subtasks, earliest due first.
    POST: create a task (large tasks get project-phase subtasks).
    '''
    if request.method == "GET":
        qs = Task.objects.prefetch_related("subtasks")
        return JsonResponse([t.to_dict() for t in qs], safe=False)

    try:
        form = TaskForm(_request_data(request))
    except ValueError as exc:
        return _bad_body("tasks", exc)
    if not form.is_valid():
        return _form_error(form, "tasks")

    task = Task.objects.create_task(**form.cleaned_data)
    logger.info("tasks: created task=%s subtasks=%d", task.id, task.subtasks.count())
    return JsonResponse(task.to_dict(), status=201)


@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
def task_detail(request, task_id):
    task = get_object_or_404(Task, pk=task_id)

    if request.method == "GET":
        return JsonResponse(task.to_dict())

    if request.method == "DELETE":
        task.delete()
        logger.info("task_detail: deleted task=%s", task_id)
        return JsonResponse({"message": "Task deleted successfully"})

    try:
        body = dict(_request_data(request).items())
    except ValueError as exc:
        return _bad_body("task_detail", exc)
    if "type" in body and "category" not in body:
        body["category"] = body.pop("type")

    # Fields left out of the body keep their stored values
    current = task.to_dict()
    data = {key: current[key] for key in TaskForm.base_fields}
    data.update(body)
    form = TaskForm(data)
    if not form.is_valid():
        return _form_error(form, "task_detail")

    for field, value in form.cleaned_data.items():
        setattr(task, field, value)
    task.save()
    logger.info("task_detail: updated task=%s status=%s", task.id, task.status)
    return JsonResponse(task.to_dict())


@require_http_methods(["PUT", "PATCH"])
def subtask_detail(request, subtask_id):
    subtask = get_object_or_404(Subtask, pk=subtask_id)
    try:
        form = SubtaskStatusForm(_request_data(request))
    except ValueError as exc:
        return _bad_body("subtask_detail", exc)
    if not form.is_valid():
        return _form_error(form, "subtask_detail")

    subtask.status = form.cleaned_data["status"]
    subtask.save(update_fields=["status"])
    return JsonResponse(subtask.to_dict())

# ============================================================
#  ENERGY & STUDY SESSIONS
# ============================================================

@require_http_methods(["GET", "POST"])
def energy_log(request):
    '''
    GET: observed energy counts per hour for one weekday (?day=0-6, Sunday=0;
    default today). POST: append an observation.
    '''
    if request.method == "GET":
        try:
            day = int(request.GET.get("day", weekday_of(_today())))
        except ValueError:
            return _error("day must be an integer 0-6.")
        if not 0 <= day <= 6:
            return _error("day must be an integer 0-6.")
        histogram = services.energy_histogram()
        return JsonResponse({
            "day_of_week": day,
            "day_name": DAY_NAMES[day],
            "hours": [
                {"hour": hour, "counts": counts, "energy_level": histogram.level_at(day, hour)}
                for hour, counts in histogram.distribution_for(day).items()
            ],
        })

    try:
        form = EnergyLogForm(_request_data(request))
    except ValueError as exc:
        return _bad_body("energy_log", exc)
    if not form.is_valid():
        return _form_error(form, "energy_log")

    cleaned = form.cleaned_data
    if cleaned.get("day_of_week") is None:
        observation = EnergyObservation.record_at(timezone.now(), cleaned["energy_level"])
    else:
        observation = EnergyObservation.objects.create(
            day_of_week=cleaned["day_of_week"], hour=cleaned["hour"], energy_level=cleaned["energy_level"],
        )
    logger.info("energy_log: recorded %s", observation)
    return JsonResponse({
        "message": "Energy pattern recorded",
        "day_of_week": observation.day_of_week,
        "hour": observation.hour,
        "energy_level": observation.energy_level,
    }, status=201)


@require_POST
def study_sessions(request):
    '''Record a study session; its energy level is also logged.'''
    try:
        form = StudySessionForm(_request_data(request))
    except ValueError as exc:
        return _bad_body("study_sessions", exc)
    if not form.is_valid():
        return _form_error(form, "study_sessions")

    cleaned = dict(form.cleaned_data)
    task_id = cleaned.pop("task_id", None)
    task = get_object_or_404(Task, pk=task_id) if task_id else None
    session = StudySession.record(task=task, **cleaned)
    logger.info("study_sessions: recorded session=%s minutes=%s", session.id, session.duration_minutes)
    return JsonResponse({
        "message": "Study session recorded",
        "id": str(session.id),
        "duration_minutes": session.duration_minutes,
    }, status=201)

# ============================================================
#  RECURRING EVENTS & SLEEP
# ============================================================

@require_http_methods(["GET", "POST"])
def recurring_events(request):
    if request.method == "GET":
        return JsonResponse([e.to_dict() for e in RecurringEvent.objects.all()], safe=False)

    try:
        form = RecurringEventForm(_request_data(request))
    except ValueError as exc:
        return _bad_body("recurring_events", exc)
    if not form.is_valid():
        return _form_error(form, "recurring_events")

    event = RecurringEvent.objects.create(**form.cleaned_data)
    logger.info("recurring_events: created event=%s pattern=%s days=%s",
                event.id, event.recurrence_pattern, event.days_of_week)
    return JsonResponse(event.to_dict(), status=201)


@require_http_methods(["PUT", "DELETE"])
def recurring_event_detail(request, event_id):
    event = get_object_or_404(RecurringEvent, pk=event_id)

    if request.method == "DELETE":
        event.delete()
        logger.info("recurring_event_detail: deleted event=%s", event_id)
        return JsonResponse({"message": "Recurring event deleted"})

    try:
        form = RecurringEventForm(_request_data(request))
    except ValueError as exc:
        return _bad_body("recurring_event_detail", exc)
    if not form.is_valid():
        return _form_error(form, "recurring_event_detail")

    for field, value in form.cleaned_data.items():
        setattr(event, field, value)
    event.save()
    return JsonResponse(event.to_dict())


@require_http_methods(["GET", "POST"])
def sleep_schedule(request):
    '''
    GET: the saved sleep schedule, or the default window when none was saved.
    POST: overwrite it.
    '''
    if request.method == "GET":
        schedule = SleepSchedule.objects.current()
        if schedule is None:
            return JsonResponse(dict(SleepPreference().to_dict(), is_default=True))
        return JsonResponse(dict(schedule.to_dict(), is_default=False))

    try:
        form = SleepScheduleForm(_request_data(request))
    except ValueError as exc:
        return _bad_body("sleep_schedule", exc)
    if not form.is_valid():
        return _form_error(form, "sleep_schedule")

    schedule = SleepSchedule.objects.save_preference(**form.cleaned_data)
    logger.info("sleep_schedule: saved %s", schedule)
    return JsonResponse(dict(schedule.to_dict(), is_default=False))

# ============================================================
#  SCHEDULE
# ============================================================

@require_POST
def schedule_generate(request):
    '''
    Build the schedule for a date (default today) from the stored state.
    Response carries the schedule plus the merged display timeline.
    '''
    try:
        form = GenerateScheduleForm(_request_data(request))
    except ValueError as exc:
        return _bad_body("schedule_generate", exc)
    if not form.is_valid():
        return _form_error(form, "schedule_generate")

    target = form.cleaned_data.get("date") or _today()
    try:
        result = services.generate_for_date(target)
    except InvalidInput as exc:
        logger.warning("schedule_generate: invalid stored data (%s)", exc)
        return _error(str(exc))

    payload = result.to_dict()
    payload["timeline"] = build_timeline(result)
    logger.info("schedule_generate: date=%s scheduled=%d", target, result.total_assigned_tasks)
    return JsonResponse(payload)


@require_POST
def schedule(request):
    '''Manually pin a task; replaces any earlier pin for the same task and date.'''
    try:
        form = ManualScheduleForm(_request_data(request))
    except ValueError as exc:
        return _bad_body("schedule", exc)
    if not form.is_valid():
        return _form_error(form, "schedule")

    cleaned = form.cleaned_data
    task = get_object_or_404(Task, pk=cleaned["task_id"])
    assignment = ScheduledAssignment.objects.pin(
        task,
        cleaned["scheduled_date"],
        cleaned["start_time"],
        cleaned["end_time"],
        energy_level=cleaned["energy_level"],
    )
    logger.info("schedule: pinned task=%s date=%s %s-%s", task.id, assignment.scheduled_date,
                assignment.start_time, assignment.end_time)
    return JsonResponse(assignment.to_dict(), status=201)


@require_GET
def schedule_export(request):
    '''Download the generated schedule of ?date= (default today) as .ics.'''
    form = GenerateScheduleForm(request.GET)
    if not form.is_valid():
        return _form_error(form, "schedule_export")
    target = form.cleaned_data.get("date") or _today()
    try:
        result = services.generate_for_date(target)
    except InvalidInput as exc:
        return _error(str(exc))

    response = StreamingHttpResponse(export_schedule_ics(result), content_type="text/calendar")
    response["Content-Disposition"] = f'attachment; filename="schedule-{target.isoformat()}.ics"'
    return response

# ============================================================
#  RECOMMENDATIONS, IMPORT, STATS
# ============================================================

@require_GET
def recommendations(request):
    try:
        advisories = services.recommendations()
    except InvalidInput as exc:
        return _error(str(exc))
    return JsonResponse([a.to_dict() for a in advisories], safe=False)


@require_POST
def calendar_import(request):
    '''
    Import recurring events from an exported calendar, either as an
    uploaded .ics file or as raw text. Malformed blocks are skipped.
    '''
    try:
        form = ICSUploadForm(_request_data(request), request.FILES)
    except ValueError as exc:
        return _bad_body("calendar_import", exc)
    if not form.is_valid():
        return _form_error(form, "calendar_import")

    summary = services.import_calendar(form.cleaned_data["ics_content"])
    logger.info("calendar_import: imported=%d skipped=%d", summary["imported"], summary["skipped"])
    return JsonResponse(summary, status=201)


@require_GET
def stats(request):
    '''
    Task counts and study time. With ?date=, also the scheduled hours per
    task category for that day.
    '''
    data = services.task_stats(_today())
    if request.GET.get("date"):
        form = GenerateScheduleForm(request.GET)
        if not form.is_valid():
            return _form_error(form, "stats")
        try:
            result = services.generate_for_date(form.cleaned_data["date"])
        except InvalidInput as exc:
            return _error(str(exc))
        data["hours_by_category"] = compute_hours_by_category(result)
    return JsonResponse(data)
