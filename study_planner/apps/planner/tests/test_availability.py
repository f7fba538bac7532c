from datetime import date, datetime

from django.test import SimpleTestCase

from apps.planner.utils.availability import applicable_events, free_slots
from apps.planner.utils.energy import EnergyHistogram
from apps.planner.utils.records import EnergyObservation, RecurringEventRecord, SleepPreference
from apps.planner.utils.timegrid import weekday_of

TARGET = date(2026, 10, 20)  # Tuesday
WEEKDAY = weekday_of(TARGET)
DAY_BEFORE = datetime(2026, 10, 19, 12, 0)
EMPTY = EnergyHistogram.from_observations([])


def hours(slots):
    return [s.hour for s in slots]


class FreeSlotTests(SimpleTestCase):

    def test_overnight_sleep_leaves_daytime_hours(self):
        sleep = SleepPreference(bedtime="23:00", wake_time="07:00")
        slots = free_slots(TARGET, sleep, [], EMPTY, now=DAY_BEFORE)
        self.assertEqual(hours(slots), list(range(7, 23)))
        self.assertEqual(slots[0].time, "07:00")

    def test_recurring_events_block_their_hours(self):
        sleep = SleepPreference(bedtime="00:00", wake_time="07:00")
        events = [
            RecurringEventRecord(name="Lecture", start_time="09:00", end_time="12:00", days_of_week=(WEEKDAY,)),
            RecurringEventRecord(name="Lab", start_time="13:00", end_time="15:00", days_of_week=(WEEKDAY,)),
        ]
        slots = free_slots(TARGET, sleep, events, EMPTY, now=DAY_BEFORE)
        self.assertEqual(hours(slots), [7, 8, 12] + list(range(15, 24)))
        for blocked in (9, 10, 11, 13, 14):
            self.assertNotIn(blocked, hours(slots))

    def test_non_wrapping_sleep_hours_never_free(self):
        sleep = SleepPreference(bedtime="01:00", wake_time="09:00")
        slots = free_slots(TARGET, sleep, [], EMPTY, now=DAY_BEFORE)
        for hour in hours(slots):
            self.assertFalse(1 <= hour < 9)

    def test_weekly_event_on_other_day_is_ignored(self):
        sleep = SleepPreference()
        event = RecurringEventRecord(name="Shift", start_time="10:00", end_time="14:00",
                                     days_of_week=((WEEKDAY + 1) % 7,))
        slots = free_slots(TARGET, sleep, [event], EMPTY, now=DAY_BEFORE)
        self.assertIn(10, hours(slots))
        self.assertEqual(applicable_events([event], WEEKDAY), [])

    def test_daily_event_applies_every_day(self):
        event = RecurringEventRecord(name="Gym", start_time="18:00", end_time="19:30",
                                     recurrence_pattern="daily")
        slots = free_slots(TARGET, SleepPreference(), [event], EMPTY, now=DAY_BEFORE)
        self.assertNotIn(18, hours(slots))
        # Minutes are truncated, so 19:30 frees the 19:00 slot
        self.assertIn(19, hours(slots))

    def test_overnight_event_is_split(self):
        sleep = SleepPreference(bedtime="03:00", wake_time="06:00")
        event = RecurringEventRecord(name="Night shift", start_time="22:00", end_time="02:00",
                                     recurrence_pattern="daily")
        slots = free_slots(TARGET, sleep, [event], EMPTY, now=DAY_BEFORE)
        self.assertEqual(hours(slots), [2] + list(range(6, 22)))

    def test_same_day_skips_elapsed_hours(self):
        now = datetime(2026, 10, 20, 10, 30)
        slots = free_slots(TARGET, SleepPreference(), [], EMPTY, now=now)
        self.assertTrue(all(h > 10 for h in hours(slots)))
        self.assertEqual(hours(slots)[0], 11)

    def test_slots_carry_dominant_energy(self):
        histogram = EnergyHistogram.from_observations([
            EnergyObservation(day_of_week=WEEKDAY, hour=14, energy_level="high"),
            EnergyObservation(day_of_week=WEEKDAY, hour=8, energy_level="low"),
        ])
        slots = {s.hour: str(s.energy_level) for s in free_slots(TARGET, SleepPreference(), [], histogram, now=DAY_BEFORE)}
        self.assertEqual(slots[14], "high")
        self.assertEqual(slots[8], "low")
        self.assertEqual(slots[10], "medium")

    def test_restartable(self):
        args = (TARGET, SleepPreference(), [], EMPTY)
        self.assertEqual(free_slots(*args, now=DAY_BEFORE), free_slots(*args, now=DAY_BEFORE))
