import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
sys.path.append(os.path.dirname(__file__))
from stats_service import StatisticsService
from factories import NOW, make_exercise, make_session, make_set


class StatisticsServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.service = StatisticsService()

    def test_empty_overview(self) -> None:
        stats = self.service.overview([], NOW)
        self.assertEqual(stats["total_workouts"], 0)
        self.assertEqual(stats["average_duration_seconds"], 0.0)
        self.assertEqual(stats["favorite_exercises"], [])
        self.assertEqual(stats["recent_personal_records"], [])

    def test_overview_totals(self) -> None:
        bench = make_exercise(sets=[make_set(), make_set(completed=False)])
        squat = make_exercise("Squat", "Legs", sets=[make_set(5, 140.0, pr=True)])
        sessions = [
            make_session(1, exercises=[bench, squat], duration=3600),
            make_session(10, exercises=[bench], duration=1800),
            make_session(40, exercises=[bench], duration=1800),
            make_session(0, exercises=[squat], completed=False),
        ]
        stats = self.service.overview(sessions, NOW)
        self.assertEqual(stats["total_workouts"], 3)
        self.assertEqual(stats["total_duration_seconds"], 7200)
        self.assertEqual(stats["average_duration_seconds"], 2400)
        self.assertEqual(stats["total_sets"], 4)
        self.assertEqual(stats["total_reps"], 35)
        self.assertEqual(stats["total_volume"], 3700.0)
        self.assertEqual(stats["workouts_last_7_days"], 1)
        self.assertEqual(stats["workouts_last_30_days"], 2)
        self.assertEqual(
            stats["favorite_exercises"],
            [{"name": "Bench Press", "count": 3}, {"name": "Squat", "count": 1}],
        )
        records = stats["recent_personal_records"]
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].exercise_name, "Squat")
        self.assertEqual(records[0].value, 140.0)

    def test_favorites_ties_keep_first_seen_order(self) -> None:
        sessions = [
            make_session(1, exercises=[make_exercise("Row", "Back")]),
            make_session(2, exercises=[make_exercise("Curl", "Arms")]),
        ]
        names = [f["name"] for f in self.service.favorite_exercises(sessions)]
        self.assertEqual(names, ["Row", "Curl"])

    def test_favorite_limit(self) -> None:
        service = StatisticsService(favorite_limit=1)
        sessions = [
            make_session(1, exercises=[make_exercise("Row", "Back"), make_exercise()])
        ]
        self.assertEqual(len(service.favorite_exercises(sessions)), 1)

    def test_detect_personal_records(self) -> None:
        sessions = [
            make_session(3, exercises=[make_exercise(sets=[make_set(5, 100.0)])]),
            make_session(2, exercises=[make_exercise(sets=[make_set(5, 90.0)])]),
            make_session(1, exercises=[make_exercise(sets=[make_set(8, 110.0)])]),
        ]
        records = self.service.detect_personal_records(sessions)
        weights = [r.value for r in records if r.metric == "weight"]
        reps = [r.value for r in records if r.metric == "reps"]
        self.assertEqual(weights, [100.0, 110.0])
        self.assertEqual(reps, [5.0, 8.0])

    def test_exercise_metrics_trend(self) -> None:
        sessions = [
            make_session(d, exercises=[make_exercise(sets=[make_set(5, w)])])
            for d, w in [(12, 100), (10, 100), (8, 100), (6, 120), (4, 120), (2, 120)]
        ]
        metrics = self.service.exercise_metrics(sessions, "bench press")
        self.assertEqual(metrics["trend"], "up")
        self.assertEqual(metrics["total_sets"], 6)
        self.assertEqual(metrics["max_weight"], 120.0)
        self.assertEqual(metrics["average_weight"], 110.0)
        self.assertEqual(metrics["last_performed"], sessions[-1].completed_at)

    def test_exercise_metrics_unknown(self) -> None:
        metrics = self.service.exercise_metrics([make_session(1)], "Deadlift")
        self.assertEqual(metrics["total_sets"], 0)
        self.assertEqual(metrics["trend"], "stable")

    def test_weekly_trends(self) -> None:
        sessions = [make_session(1, duration=1800), make_session(2, duration=1800)]
        trend = self.service.weekly_trends(sessions, NOW, "duration", weeks=2)
        self.assertEqual([t["value"] for t in trend], [0.0, 60.0])
        frequency = self.service.weekly_trends(sessions, NOW, "frequency", weeks=1)
        self.assertEqual(frequency[0]["value"], 2.0)
        with self.assertRaises(ValueError):
            self.service.weekly_trends(sessions, NOW, "calories")

    def test_workout_metrics(self) -> None:
        sets = [make_set().model_copy(update={"rest_duration_seconds": 90.0}) for _ in range(5)]
        sets.append(make_set(completed=False))
        session = make_session(1, exercises=[make_exercise(sets=sets)], duration=3600)
        metrics = self.service.workout_metrics(session)
        self.assertEqual(metrics["total_volume"], 5000.0)
        self.assertEqual(metrics["total_sets"], 5)
        self.assertEqual(metrics["total_reps"], 50)
        self.assertEqual(metrics["average_rest_seconds"], 90.0)
        self.assertEqual(metrics["calories_burned"], 800)
        self.assertEqual(metrics["intensity_score"], 67)

    def test_workout_metrics_rest_lowers_intensity(self) -> None:
        session = make_session(1, duration=3600).model_copy(
            update={"total_rest_seconds": 3600.0}
        )
        metrics = self.service.workout_metrics(session)
        self.assertEqual(metrics["intensity_score"], 41)
        self.assertEqual(metrics["calories_burned"], 240)

    def test_workout_metrics_without_completed_sets(self) -> None:
        session = make_session(1, exercises=[make_exercise(sets=[make_set(completed=False)])])
        metrics = self.service.workout_metrics(session)
        self.assertEqual(metrics["intensity_score"], 0)
        self.assertEqual(metrics["calories_burned"], 480)

    def test_summary_for_session(self) -> None:
        sessions = [make_session(1, session_id="w1")]
        self.assertEqual(self.service.summary_for(sessions, NOW, session_id="w1")["id"], "w1")
        with self.assertRaises(ValueError):
            self.service.summary_for(sessions, NOW, session_id="w2")

    def test_summary_for_exercise(self) -> None:
        summary = self.service.summary_for([make_session(1)], NOW, "Bench Press")
        self.assertEqual(summary["name"], "Bench Press")
        self.assertIn("total_workouts", self.service.summary_for([], NOW))


if __name__ == "__main__":
    unittest.main()
