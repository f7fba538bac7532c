from datetime import datetime

from django.test import SimpleTestCase

from apps.planner.utils.constants import AdvisoryKind
from apps.planner.utils.energy import EnergyHistogram
from apps.planner.utils.records import EnergyObservation, TaskRecord
from apps.planner.utils.recommendations import (
    BalanceAdvisory, OptimalTimeAdvisory, UrgentAdvisory, find_next_high_energy_slot,
    generate_recommendations, select_candidates,
)

NOW = datetime(2026, 10, 19, 10, 0)  # Monday (weekday 1)


def task(task_id, **fields):
    fields.setdefault("title", f"Task {task_id}")
    return TaskRecord(id=task_id, **fields)


def high(day, hour):
    return EnergyObservation(day_of_week=day, hour=hour, energy_level="high")


class RecommendationTests(SimpleTestCase):

    def kinds(self, advisories):
        return [str(a.kind) for a in advisories]

    def test_balance_is_always_last_and_present(self):
        advisories = generate_recommendations([], [], now=NOW)
        self.assertEqual(self.kinds(advisories), ["balance"])
        self.assertEqual(advisories[0].distribution, {})

    def test_fixed_order_of_all_advisories(self):
        tasks = [
            task("soon", priority="high", due_date="2026-10-20T09:00:00", estimated_hours=5, category="exam"),
            task("later", category="assignment"),
        ]
        advisories = generate_recommendations(tasks, [high(1, 15)], now=NOW)
        self.assertEqual(self.kinds(advisories), ["urgent", "optimal_time", "break_suggestion", "balance"])
        self.assertEqual(advisories[-1].distribution, {"exam": 1, "assignment": 1})

    def test_urgent_window(self):
        tasks = [
            task("tomorrow", due_date="2026-10-20T09:00:00"),
            task("next_week", due_date="2026-10-26T09:00:00"),
            task("past", due_date="2026-10-18T09:00:00"),
        ]
        urgent = generate_recommendations(tasks, [], now=NOW)[0]
        self.assertIsInstance(urgent, UrgentAdvisory)
        self.assertEqual([t.id for t in urgent.tasks], ["tomorrow"])
        self.assertEqual(urgent.to_dict()["type"], AdvisoryKind.URGENT)

    def test_optimal_time_needs_high_priority_and_high_energy(self):
        self.assertNotIn("optimal_time", self.kinds(generate_recommendations([task("a", priority="high")], [], now=NOW)))
        self.assertNotIn("optimal_time", self.kinds(generate_recommendations([task("a")], [high(1, 15)], now=NOW)))

    def test_optimal_time_payload(self):
        tasks = [task(str(i), priority="high", estimated_hours=1) for i in range(5)]
        advisories = generate_recommendations(tasks, [high(1, 15)], now=NOW)
        optimal = [a for a in advisories if isinstance(a, OptimalTimeAdvisory)][0]
        self.assertEqual((optimal.day, optimal.hour), (1, 15))
        self.assertEqual(optimal.description, "Monday at 15:00")
        self.assertEqual(len(optimal.recommended_tasks), 3)
        self.assertEqual(optimal.to_dict()["time"], {"day": 1, "hour": 15, "description": "Monday at 15:00"})

    def test_break_threshold(self):
        self.assertNotIn("break_suggestion", self.kinds(
            generate_recommendations([task("a", estimated_hours=3)], [], now=NOW)))
        self.assertIn("break_suggestion", self.kinds(
            generate_recommendations([task("a", estimated_hours=3.5)], [], now=NOW)))

    def test_balance_to_dict(self):
        data = BalanceAdvisory(distribution={"exam": 2}).to_dict()
        self.assertEqual(data["type"], "balance")
        self.assertEqual(data["distribution"], {"exam": 2})


class NextHighEnergySlotTests(SimpleTestCase):

    def slot(self, observations):
        return find_next_high_energy_slot(EnergyHistogram.from_observations(observations), NOW)

    def test_later_today_first(self):
        self.assertEqual(self.slot([high(1, 9), high(1, 16), high(2, 8)]), (1, 16))

    def test_current_hour_is_not_after_now(self):
        self.assertEqual(self.slot([high(1, 10), high(3, 7)]), (3, 7))

    def test_wraps_into_next_week(self):
        self.assertEqual(self.slot([high(0, 20)]), (0, 20))

    def test_same_weekday_earlier_hour_is_out_of_range(self):
        self.assertIsNone(self.slot([high(1, 8)]))

    def test_medium_buckets_ignored(self):
        histogram = EnergyHistogram.from_observations([
            EnergyObservation(day_of_week=2, hour=9, energy_level="medium"),
        ])
        self.assertIsNone(find_next_high_energy_slot(histogram, NOW))


class CandidateSelectionTests(SimpleTestCase):

    def test_undated_first_then_due_date_capped(self):
        tasks = [task(f"d{i}", due_date=f"2026-11-{i + 1:02d}T09:00:00") for i in range(12)]
        tasks.insert(5, task("undated"))
        tasks.append(task("done", status="completed"))
        chosen = select_candidates(tasks)
        self.assertEqual(len(chosen), 10)
        self.assertEqual(chosen[0].id, "undated")
        self.assertEqual([t.id for t in chosen[1:]], [f"d{i}" for i in range(9)])
