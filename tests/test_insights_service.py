import os
import sys
import datetime
import json
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
sys.path.append(os.path.dirname(__file__))
from insights_service import InsightsService
from models import InvalidSessionError
from factories import NOW, make_exercise, make_record, make_session, make_set


def training_log() -> list:
    sessions = []
    for d in range(0, 28, 2):
        weight = 60.0 + 2 * (28 - d)
        exercises = [
            make_exercise(sets=[make_set(8, weight), make_set(8, weight)]),
            make_exercise("Squat", "Legs", sets=[make_set(5, weight + 40)]),
        ]
        sessions.append(make_session(d, exercises=exercises, duration=3600))
    sessions.append(make_session(0, completed=False, hour=22))
    return sessions


class InsightsServiceTestCase(unittest.TestCase):
    def test_full_report(self) -> None:
        report = InsightsService().analyze(training_log(), NOW)
        self.assertEqual(report.generated_at, NOW)
        self.assertEqual(report.statistics["total_workouts"], 14)
        self.assertEqual(report.streaks, {"current": 1, "longest": 1})
        self.assertEqual(len(report.indicators), 5)
        self.assertTrue(report.recovery["estimated"])
        self.assertLessEqual(len(report.recommendations), 5)
        self.assertEqual(len(report.muscle_balance.analysis), 6)
        self.assertIn("Bench Press", report.progress.improving_exercises)
        self.assertEqual(report.progress.overall_progress, "excellent")
        self.assertEqual(report.profile.equipment_access, ("Barbell",))
        self.assertEqual(report.profile.workout_frequency, 4)
        self.assertIsInstance(report.recovery["insights"], list)
        ids = [a.id for a in report.alerts]
        self.assertEqual(len(ids), len(set(ids)))

    def test_empty_log(self) -> None:
        report = InsightsService().analyze([], NOW)
        self.assertEqual(report.statistics["total_workouts"], 0)
        self.assertEqual(report.patterns, [])
        self.assertEqual(report.alerts, [])
        self.assertEqual(report.progress.overall_progress, "moderate")

    def test_analysis_is_repeatable(self) -> None:
        service = InsightsService()
        first = service.analyze(training_log(), NOW).model_dump_json()
        second = service.analyze(training_log(), NOW).model_dump_json()
        self.assertEqual(first, second)

    def test_cache(self) -> None:
        service = InsightsService(use_cache=True)
        log = training_log()
        first = service.analyze(log, NOW)
        self.assertIs(service.analyze(log, NOW), first)
        later = NOW + datetime.timedelta(hours=1)
        self.assertIsNot(service.analyze(log, later), first)
        service.clear_cache()
        self.assertIsNot(service.analyze(log, NOW), first)

    def test_explicit_records(self) -> None:
        records = [make_record("Squat", 100, d) for d in (40, 30, 0)]
        report = InsightsService().analyze(training_log(), NOW, records)
        self.assertEqual(report.progress.plateau_exercises, ("Squat",))

    def test_raw_dicts_accepted(self) -> None:
        raw = [s.model_dump(mode="json") for s in training_log()]
        report = InsightsService().analyze(raw, NOW)
        self.assertEqual(report.statistics["total_workouts"], 14)

    def test_invalid_session_rejected(self) -> None:
        raw = [s.model_dump(mode="json") for s in training_log()]
        del raw[3]["exercises"]
        with self.assertRaises(InvalidSessionError):
            InsightsService().analyze(raw, NOW)

    def test_sleep_indicator_serialized_as_estimate(self) -> None:
        data = json.loads(InsightsService().analyze(training_log(), NOW).model_dump_json())
        sleep = data["indicators"][-1]
        self.assertTrue(sleep["estimated"])
        self.assertIn("basis", sleep)


if __name__ == "__main__":
    unittest.main()
