import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
sys.path.append(os.path.dirname(__file__))
from pydantic import ValidationError
from models import (
    InvalidRecordError,
    InvalidSessionError,
    WorkoutSession,
    parse_records,
    parse_sessions,
)
from factories import make_exercise, make_session, make_set


class ModelsTestCase(unittest.TestCase):
    def raw_session(self) -> dict:
        return {
            "id": "w1",
            "started_at": "2024-06-10T09:00:00",
            "completed_at": "2024-06-10T10:00:00",
            "total_duration_seconds": 3600,
            "exercises": [
                {
                    "exercise_name": "Squat",
                    "primary_muscle_group": "Legs",
                    "sets": [
                        {
                            "target_reps": 5,
                            "target_weight": 140,
                            "actual_reps": 5,
                            "actual_weight": 140,
                            "is_completed": True,
                        }
                    ],
                }
            ],
        }

    def test_parse_sessions(self) -> None:
        sessions = parse_sessions([self.raw_session()])
        self.assertEqual(len(sessions), 1)
        session = sessions[0]
        self.assertEqual(session.exercises[0].sets[0].volume, 700.0)
        self.assertEqual(session.started_at.tzinfo, datetime.timezone.utc)
        self.assertEqual(session.started_at.hour, 9)

    def test_missing_exercises_fails_fast(self) -> None:
        raw = self.raw_session()
        del raw["exercises"]
        with self.assertRaises(InvalidSessionError) as ctx:
            parse_sessions([self.raw_session(), raw])
        self.assertIn("index 1", str(ctx.exception))
        self.assertIsInstance(ctx.exception, ValueError)

    def test_completion_before_start_rejected(self) -> None:
        raw = self.raw_session()
        raw["completed_at"] = "2024-06-10T08:00:00"
        with self.assertRaises(InvalidSessionError):
            parse_sessions([raw])

    def test_negative_values_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            make_set(reps=-1)
        raw = self.raw_session()
        raw["total_duration_seconds"] = -5
        with self.assertRaises(InvalidSessionError):
            parse_sessions([raw])

    def test_parsed_models_pass_through(self) -> None:
        session = make_session(0)
        self.assertIs(parse_sessions([session])[0], session)

    def test_sessions_are_immutable(self) -> None:
        session = make_session(0)
        with self.assertRaises(ValidationError):
            session.total_duration_seconds = 10

    def test_volume_ignores_incomplete_sets(self) -> None:
        self.assertEqual(make_set(completed=False).volume, 0.0)
        self.assertEqual(make_set(reps=8, weight=50).volume, 400.0)

    def test_muscle_groups_include_secondary(self) -> None:
        ex = make_exercise(group="Chest", secondary=("Arms", "Chest"))
        self.assertEqual(ex.muscle_groups, ("Chest", "Arms"))
        self.assertTrue(ex.trains("arms"))
        self.assertFalse(ex.trains("Legs"))

    def test_in_progress_session(self) -> None:
        session = make_session(0, completed=False)
        self.assertIsInstance(session, WorkoutSession)
        self.assertFalse(session.is_completed)

    def test_parse_records(self) -> None:
        records = parse_records(
            [{"exercise_name": "Squat", "value": 150, "achieved_at": "2024-06-01T10:00:00"}]
        )
        self.assertEqual(records[0].metric, "weight")
        with self.assertRaises(InvalidRecordError):
            parse_records([{"exercise_name": "Squat", "value": 150}])


if __name__ == "__main__":
    unittest.main()
