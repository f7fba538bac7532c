from datetime import date, datetime, time, timedelta

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from apps.planner import services
from apps.planner.models import (
    EnergyObservation, RecurringEvent, ScheduledAssignment, SleepSchedule,
    StudySession, Task, break_down_project,
)
from apps.planner.utils.constants import AssignmentReason, PROJECT_PHASES


class TaskModelTests(TestCase):

    # -----------------------------------
    # Project breakdown
    # -----------------------------------
    def test_break_down_project(self):
        self.assertEqual(break_down_project(5), PROJECT_PHASES[:3])
        self.assertEqual(len(break_down_project(40)), 8)
        self.assertEqual(break_down_project(40)[-1], "Final review")

    def test_large_task_gets_subtasks(self):
        task = Task.objects.create_task(title="Capstone report", estimated_hours=6)
        titles = list(task.subtasks.values_list("title", flat=True))
        self.assertEqual(titles, ["Research and planning", "Outline and structure", "Draft first section"])
        self.assertEqual(list(task.subtasks.values_list("order_index", flat=True)), [0, 1, 2])

    def test_small_task_has_no_subtasks(self):
        task = Task.objects.create_task(title="Worksheet", estimated_hours=4)
        self.assertEqual(task.subtasks.count(), 0)

    def test_completion_stamps_completed_at(self):
        task = Task.objects.create_task(title="Quiz prep")
        self.assertIsNone(task.completed_at)
        task.status = "completed"
        task.save()
        self.assertIsNotNone(task.completed_at)
        self.assertEqual(list(Task.objects.pending()), [])


class SleepScheduleTests(TestCase):

    def test_save_preference_overwrites_singleton(self):
        SleepSchedule.objects.save_preference(bedtime=time(23, 0), wake_time=time(7, 0))
        SleepSchedule.objects.save_preference(bedtime=time(0, 30), wake_time=time(8, 0), desired_hours=7.5)
        self.assertEqual(SleepSchedule.objects.count(), 1)
        current = SleepSchedule.objects.current()
        self.assertEqual(current.bedtime, time(0, 30))
        self.assertEqual(current.desired_hours, 7.5)


class ManualAssignmentTests(TestCase):

    def setUp(self):
        self.task = Task.objects.create_task(title="Problem set")
        self.day = date(2030, 1, 8)

    def test_last_write_wins(self):
        ScheduledAssignment.objects.pin(self.task, self.day, time(9, 0), time(10, 0))
        second = ScheduledAssignment.objects.pin(self.task, self.day, time(15, 0), time(17, 0))
        remaining = ScheduledAssignment.objects.on_date(self.day)
        self.assertEqual(list(remaining), [second])
        self.assertEqual(second.reason, AssignmentReason.MANUAL)
        self.assertTrue(second.is_manual)

    def test_other_dates_are_kept(self):
        ScheduledAssignment.objects.pin(self.task, self.day, time(9, 0), time(10, 0))
        ScheduledAssignment.objects.pin(self.task, self.day + timedelta(days=1), time(9, 0), time(10, 0))
        self.assertEqual(ScheduledAssignment.objects.manual().count(), 2)

    def test_end_must_follow_start(self):
        with self.assertRaises(ValidationError):
            ScheduledAssignment.objects.pin(self.task, self.day, time(10, 0), time(9, 0))


class StudySessionTests(TestCase):

    def test_record_logs_energy_and_duration(self):
        start = timezone.make_aware(datetime(2026, 10, 19, 14, 30))  # Monday
        session = StudySession.record(start_time=start, end_time=start + timedelta(minutes=90),
                                      energy_level="high")
        self.assertEqual(session.duration_minutes, 90)
        observation = EnergyObservation.objects.get()
        self.assertEqual((observation.day_of_week, observation.hour, observation.energy_level), (1, 14, "high"))

    def test_end_before_start_rejected(self):
        start = timezone.now()
        with self.assertRaises(ValidationError):
            StudySession.record(start_time=start, end_time=start, energy_level="low")
        self.assertEqual(EnergyObservation.objects.count(), 0)


class ServiceTests(TestCase):

    def setUp(self):
        self.day = date(2030, 1, 8)  # Tuesday
        SleepSchedule.objects.save_preference(bedtime=time(23, 0), wake_time=time(7, 0))
        RecurringEvent.objects.create(name="Lecture", start_time=time(7, 0), end_time=time(9, 0),
                                      recurrence_pattern="weekly", days_of_week=[2])
        self.essay = Task.objects.create_task(title="Essay", estimated_hours=2, priority="high")
        self.reading = Task.objects.create_task(title="Reading", estimated_hours=1)

    def test_load_snapshot(self):
        snapshot = services.load_snapshot()
        self.assertEqual(len(snapshot.tasks), 2)
        self.assertEqual(snapshot.recurring_events[0].start_time, "07:00")
        self.assertEqual(snapshot.sleep_schedule.bedtime, "23:00")

    def test_generate_for_date_respects_pins(self):
        ScheduledAssignment.objects.pin(self.reading, self.day, time(9, 0), time(10, 0))
        result = services.generate_for_date(self.day)
        [manual] = result.manual_assignments
        self.assertEqual((manual.task.title, manual.start_time), ("Reading", "09:00"))
        [auto] = result.scheduled_assignments
        self.assertEqual((auto.task.title, auto.start_time, auto.end_time), ("Essay", "10:00", "12:00"))

    def test_import_calendar_stores_events(self):
        text = (
            "BEGIN:VEVENT\nSUMMARY:Chem lab\nDTSTART:20300107T133000\n"
            "RRULE:FREQ=WEEKLY;BYDAY=TU\nEND:VEVENT\n"
            "BEGIN:VEVENT\nSUMMARY:No time\nEND:VEVENT\n"
            "BEGIN:VEVENT\nDTSTART:20300107T100000\nEND:VEVENT\n"
        )
        summary = services.import_calendar(text)
        self.assertEqual((summary["imported"], summary["blocks"], summary["skipped"]), (1, 3, 2))
        event = RecurringEvent.objects.get(name="Chem lab")
        self.assertEqual((event.start_time, event.end_time), (time(13, 30), time(14, 30)))
        self.assertEqual(event.days_of_week, [2])
        self.assertEqual(event.category, "class")

    def test_task_stats(self):
        self.essay.status = "completed"
        self.essay.save()
        stats = services.task_stats(date(2030, 1, 8))
        self.assertEqual((stats["total"], stats["completed"], stats["pending"]), (2, 1, 1))
