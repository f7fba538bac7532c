from datetime import date, datetime

from django.test import SimpleTestCase

from apps.planner.utils.availability import FreeSlot
from apps.planner.utils.constants import AssignmentReason
from apps.planner.utils.exceptions import InvalidInput
from apps.planner.utils.records import (
    AssignmentRecord, EnergyObservation, PlannerSnapshot, RecurringEventRecord, SleepPreference,
    TaskRecord,
)
from apps.planner.utils.scheduler import (
    assign_slots, build_timeline, generate_schedule, is_urgent, prioritize_tasks,
    required_slots,
)
from apps.planner.utils.timegrid import weekday_of

TARGET = date(2026, 10, 20)  # Tuesday
WEEKDAY = weekday_of(TARGET)
DAY_BEFORE = datetime(2026, 10, 19, 12, 0)
SLEEP = SleepPreference(bedtime="23:00", wake_time="07:00")


def task(task_id, **fields):
    fields.setdefault("title", f"Task {task_id}")
    return TaskRecord(id=task_id, **fields)


def schedule(tasks, observations=(), events=(), manual=(), sleep=SLEEP, now=DAY_BEFORE):
    return generate_schedule(TARGET, sleep, events, tasks, observations, now=now, manual_assignments=manual)


class PrioritizerTests(SimpleTestCase):

    def test_near_deadline_beats_priority(self):
        near = task("near", priority="low", due_date="2026-10-22T12:00:00")
        far = task("far", priority="high", due_date="2026-10-30T12:00:00")
        ordered = prioritize_tasks([far, near], TARGET)
        self.assertEqual([t.id for t in ordered], ["near", "far"])

    def test_priority_orders_within_bucket(self):
        tasks = [task("l", priority="low"), task("h", priority="high"), task("m", priority="medium")]
        self.assertEqual([t.id for t in prioritize_tasks(tasks, TARGET)], ["h", "m", "l"])

    def test_sort_is_stable(self):
        tasks = [task(str(i), priority="medium") for i in range(6)]
        self.assertEqual([t.id for t in prioritize_tasks(tasks, TARGET)], [str(i) for i in range(6)])

    def test_overdue_and_undated_are_not_urgent(self):
        self.assertFalse(is_urgent(task("old", due_date="2026-10-19T09:00:00"), TARGET))
        self.assertFalse(is_urgent(task("none"), TARGET))
        self.assertTrue(is_urgent(task("today", due_date="2026-10-20T23:00:00"), TARGET))
        self.assertTrue(is_urgent(task("edge", due_date="2026-10-23T08:00:00"), TARGET))

    def test_completed_tasks_are_dropped(self):
        tasks = [task("done", status="completed"), task("open")]
        self.assertEqual([t.id for t in prioritize_tasks(tasks, TARGET)], ["open"])

    def test_required_slots(self):
        self.assertEqual(required_slots(task("a")), 1)
        self.assertEqual(required_slots(task("b", estimated_hours=0)), 1)
        self.assertEqual(required_slots(task("c", estimated_hours=2.5)), 3)


class SlotAssignerTests(SimpleTestCase):

    def test_scenario_a_best_available(self):
        result = schedule([task("a", estimated_hours=2, priority="high")])
        self.assertEqual(len(result.free_slots), 16)
        self.assertEqual([s.hour for s in result.free_slots], list(range(7, 23)))
        [assignment] = result.scheduled_assignments
        self.assertEqual((assignment.start_time, assignment.end_time), ("07:00", "09:00"))
        self.assertEqual(assignment.reason, AssignmentReason.BEST_AVAILABLE)
        self.assertEqual(result.total_assigned_tasks, 1)
        self.assertEqual(result.total_assigned_hours, 2)

    def test_scenario_b_energy_match(self):
        observations = [EnergyObservation(day_of_week=WEEKDAY, hour=14, energy_level="high")]
        result = schedule([task("a", estimated_hours=2, priority="high", energy_level="high")], observations)
        [assignment] = result.scheduled_assignments
        self.assertEqual((assignment.start_time, assignment.end_time), ("14:00", "16:00"))
        self.assertEqual(assignment.reason, AssignmentReason.ENERGY_MATCH)
        self.assertEqual(str(assignment.energy_level), "high")

    def test_slots_skipped_for_energy_match_are_forfeit(self):
        observations = [EnergyObservation(day_of_week=WEEKDAY, hour=14, energy_level="high")]
        tasks = [
            task("focus", priority="high", estimated_hours=2, energy_level="high"),
            task("later", priority="low"),
        ]
        result = schedule(tasks, observations)
        starts = {a.task_id: a.start_time for a in result.scheduled_assignments}
        self.assertEqual(starts, {"focus": "14:00", "later": "16:00"})

    def test_no_match_falls_back_to_cursor(self):
        result = schedule([task("a", energy_level="low")])
        [assignment] = result.scheduled_assignments
        self.assertEqual(assignment.start_time, "07:00")
        self.assertEqual(assignment.reason, AssignmentReason.BEST_AVAILABLE)

    def test_urgent_reason(self):
        result = schedule([task("a", due_date="2026-10-21T17:00:00")])
        self.assertEqual(result.scheduled_assignments[0].reason, AssignmentReason.URGENT)

    def test_task_too_long_is_omitted(self):
        tasks = [task("huge", estimated_hours=20), task("small")]
        result = schedule(tasks)
        self.assertEqual([a.task_id for a in result.scheduled_assignments], ["small"])
        self.assertEqual(result.scheduled_assignments[0].start_time, "07:00")

    def test_assignments_never_overlap(self):
        tasks = [task(str(i), estimated_hours=(i % 3) + 1) for i in range(8)]
        result = schedule(tasks)
        spans = [a.slot_span for a in result.scheduled_assignments]
        for (s1, e1), (s2, e2) in zip(spans, spans[1:]):
            self.assertLessEqual(e1, s2)
        used = sum(e - s for s, e in spans)
        self.assertLessEqual(used, len(result.free_slots))

    def test_run_spans_gaps_between_free_hours(self):
        slots = [FreeSlot(7, "medium"), FreeSlot(8, "medium"), FreeSlot(12, "medium")]
        [assignment] = assign_slots(slots, [task("a", estimated_hours=3)], TARGET)
        self.assertEqual((assignment.start_time, assignment.end_time), ("07:00", "13:00"))
        self.assertEqual(assignment.hours, 3)

    def test_no_slots(self):
        self.assertEqual(assign_slots([], [task("a")], TARGET), [])


class GenerateScheduleTests(SimpleTestCase):

    def test_result_metadata(self):
        event = RecurringEventRecord(name="Lecture", start_time="09:00", end_time="10:00",
                                     days_of_week=(WEEKDAY,))
        other = RecurringEventRecord(name="Shift", start_time="09:00", end_time="10:00",
                                     days_of_week=((WEEKDAY + 3) % 7,))
        result = schedule([], events=[event, other])
        self.assertEqual(result.date, TARGET)
        self.assertEqual(result.weekday, WEEKDAY)
        self.assertEqual([e.name for e in result.recurring_events], ["Lecture"])
        data = result.to_dict()
        self.assertEqual(data["total_assigned_tasks"], 0)
        self.assertEqual(data["sleep_schedule"]["bedtime"], "23:00")

    def test_missing_sleep_schedule_uses_default(self):
        result = schedule([], sleep=None)
        self.assertEqual([s.hour for s in result.free_slots], list(range(7, 23)))

    def test_accepts_document_dicts(self):
        result = generate_schedule(
            "2026-10-20",
            {"bedtime": "23:00", "wake_time": "07:00"},
            [{"title": "Class", "start_time": "07:00", "end_time": "08:00", "pattern": "daily"}],
            [{"id": "x", "title": "Read", "type": "assignment", "estimated_hours": 1}],
            [],
            now=DAY_BEFORE,
        )
        self.assertEqual(result.scheduled_assignments[0].start_time, "08:00")

    def test_manual_assignment_supersedes_automatic(self):
        pinned = AssignmentRecord(task_id="a", date=TARGET, start_time="07:00", end_time="09:00", is_manual=True)
        elsewhere = AssignmentRecord(task_id="b", date=date(2026, 10, 21), start_time="07:00",
                                     end_time="08:00", is_manual=True)
        result = schedule([task("a", estimated_hours=2), task("b")], manual=[pinned, elsewhere])
        self.assertEqual([a.task_id for a in result.scheduled_assignments], ["b"])
        self.assertEqual(result.scheduled_assignments[0].start_time, "09:00")
        [manual] = result.manual_assignments
        self.assertEqual(manual.reason, AssignmentReason.MANUAL)
        self.assertEqual(manual.task.id, "a")
        self.assertNotIn(7, [s.hour for s in result.free_slots])
        self.assertEqual(result.total_assigned_tasks, 1)

    def test_run_ending_in_last_slot_reloads(self):
        result = schedule([task("long", estimated_hours=17)],
                          sleep=SleepPreference(bedtime="00:00", wake_time="07:00"))
        [assignment] = result.scheduled_assignments
        self.assertEqual((assignment.start_time, assignment.end_time), ("07:00", "24:00"))

        snapshot = PlannerSnapshot.from_document(result.to_dict())
        [reloaded] = snapshot.scheduled_assignments
        self.assertEqual((reloaded.start_time, reloaded.end_time), ("07:00", "24:00"))
        self.assertEqual(reloaded.hours, 17)

    def test_partial_hour_pins_block_every_hour_touched(self):
        short = AssignmentRecord(task_id="p", date=TARGET, start_time="07:00", end_time="07:30", is_manual=True)
        offset = AssignmentRecord(task_id="q", date=TARGET, start_time="09:30", end_time="10:30", is_manual=True)
        result = schedule([task("p"), task("q"), task("b"), task("c")], manual=[short, offset])
        free_hours = [s.hour for s in result.free_slots]
        for hour in (7, 9, 10):
            self.assertNotIn(hour, free_hours)
        placed = [(a.task_id, a.start_time, a.end_time) for a in result.scheduled_assignments]
        self.assertEqual(placed, [("b", "08:00", "09:00"), ("c", "11:00", "12:00")])

    def test_invalid_input_is_rejected(self):
        with self.assertRaises(InvalidInput):
            schedule([{"id": "a", "title": "A", "priority": "urgent"}])
        with self.assertRaises(InvalidInput):
            schedule([{"id": "a", "title": "A", "estimated_hours": -2}])
        with self.assertRaises(InvalidInput):
            generate_schedule("20-10-2026", SLEEP, [], [], [], now=DAY_BEFORE)
        with self.assertRaises(InvalidInput):
            schedule([], observations=[{"day_of_week": 7, "hour": 3, "energy_level": "high"}])


class TimelineTests(SimpleTestCase):

    def test_wrapped_sleep_and_sorted_entries(self):
        event = RecurringEventRecord(name="Lecture", start_time="09:00", end_time="10:00",
                                     recurrence_pattern="daily")
        result = schedule([task("a", title="Essay", estimated_hours=1)], events=[event])
        timeline = build_timeline(result)
        starts = [e["start"] for e in timeline]
        self.assertEqual(starts, sorted(starts))
        self.assertEqual(timeline[0], {"start": "00:00", "end": "07:00", "title": "Sleep", "kind": "sleep"})
        self.assertEqual(timeline[-1]["end"], "23:59")
        essay = [e for e in timeline if e["kind"] == "task"][0]
        self.assertEqual((essay["title"], essay["start"]), ("Essay", "07:00"))

    def test_non_wrapping_sleep_is_one_block(self):
        result = schedule([], sleep=SleepPreference(bedtime="01:00", wake_time="08:00"))
        sleep = [e for e in build_timeline(result) if e["kind"] == "sleep"]
        self.assertEqual(len(sleep), 1)
        self.assertEqual((sleep[0]["start"], sleep[0]["end"]), ("01:00", "08:00"))
