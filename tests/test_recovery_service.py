import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
sys.path.append(os.path.dirname(__file__))
from recovery_service import RecoveryService
from factories import NOW, make_exercise, make_session, make_set


def heavy_session(days_ago: int):
    sets = [make_set() for _ in range(5)]
    return make_session(days_ago, exercises=[make_exercise(sets=sets)])


class RecoveryServiceTestCase(unittest.TestCase):
    def test_empty_history(self) -> None:
        status = RecoveryService.analyze([], NOW)
        self.assertEqual(status["fatigue_level"], 0.0)
        self.assertEqual(status["recovery_score"], 100.0)
        self.assertEqual(status["recommended_rest_days"], 0)
        self.assertEqual(status["next_workout_intensity"], "high")
        self.assertEqual(status["recovery_trend"], "stable")
        self.assertTrue(status["estimated"])

    def test_estimated_exertion(self) -> None:
        self.assertEqual(RecoveryService.estimated_exertion(heavy_session(0)), 6)
        empty = make_session(0, exercises=[])
        self.assertEqual(RecoveryService.estimated_exertion(empty), 1)

    def test_daily_heavy_training(self) -> None:
        sessions = [heavy_session(d) for d in range(7)]
        status = RecoveryService.analyze(sessions, NOW)
        self.assertEqual(status["fatigue_level"], 74)
        self.assertEqual(status["recovery_score"], 36)
        self.assertEqual(status["recommended_rest_days"], 2)
        self.assertEqual(status["next_workout_intensity"], "light")
        self.assertEqual(status["consecutive_days"], 7)
        self.assertEqual(status["muscle_group_fatigue"], {"Chest": 76})

    def test_old_sessions_do_not_count(self) -> None:
        sessions = [heavy_session(d) for d in range(20, 27)]
        self.assertEqual(RecoveryService.fatigue_level(sessions, NOW), 0.0)

    def test_insights_for_rested_athlete(self) -> None:
        status = RecoveryService.analyze([], NOW)
        self.assertEqual([i.id for i in status["insights"]], ["excellent-recovery"])
        self.assertFalse(status["insights"][0].actionable)

    def test_insights_for_daily_training(self) -> None:
        status = RecoveryService.analyze([heavy_session(d) for d in range(7)], NOW)
        insights = status["insights"]
        self.assertEqual([i.id for i in insights], ["consecutive-days-warning"])
        self.assertEqual(
            insights[0].description,
            "You've worked out 7 days in a row. Consider a rest day.",
        )

    def test_insights_from_status(self) -> None:
        status = {
            "fatigue_level": 80.0,
            "recovery_score": 20.0,
            "muscle_group_fatigue": {"Legs": 85.0, "Chest": 50.0},
            "consecutive_days": 2,
            "recovery_trend": "declining",
        }
        insights = RecoveryService.insights(status)
        self.assertEqual(
            [i.id for i in insights],
            ["high-fatigue-warning", "muscle-fatigue-Legs", "declining-recovery"],
        )
        self.assertEqual(insights[0].priority, "high")
        self.assertEqual(insights[1].muscle_groups, ("Legs",))
        self.assertEqual(
            insights[1].description, "Your legs muscles need extra recovery time."
        )
        self.assertEqual(insights[2].type, "suggestion")

    def test_rest_day_table(self) -> None:
        self.assertEqual(RecoveryService.recommended_rest_days(29), 0)
        self.assertEqual(RecoveryService.recommended_rest_days(30), 1)
        self.assertEqual(RecoveryService.recommended_rest_days(50), 2)
        self.assertEqual(RecoveryService.recommended_rest_days(75), 3)

    def test_recovery_trend(self) -> None:
        easy = [make_session(d, exercises=[make_exercise()]) for d in range(3)]
        hard = [
            make_session(
                d, exercises=[make_exercise(sets=[make_set() for _ in range(4)] + [make_set(completed=False)])]
            )
            for d in range(3, 6)
        ]
        self.assertEqual(RecoveryService.recovery_trend(easy + hard, NOW), "improving")
        self.assertEqual(RecoveryService.recovery_trend(easy, NOW), "stable")


if __name__ == "__main__":
    unittest.main()
