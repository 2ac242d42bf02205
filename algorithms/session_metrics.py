from __future__ import annotations
import datetime
from typing import Iterable, List

from models import WorkoutSession
from .math_tools import MathTools


class SessionMetrics:
    """Per-session measurements used across the analytics services."""

    @staticmethod
    def completed(sessions: Iterable[WorkoutSession]) -> List[WorkoutSession]:
        """Return completed sessions ordered newest first."""
        done = [s for s in sessions if s.completed_at is not None]
        return sorted(done, key=lambda s: s.completed_at, reverse=True)

    @staticmethod
    def volume(session: WorkoutSession) -> float:
        return MathTools.volume(
            (int(st.actual_reps or 0), float(st.actual_weight or 0))
            for ex in session.exercises
            for st in ex.sets
            if st.is_completed
        )

    @staticmethod
    def total_sets(session: WorkoutSession) -> int:
        return sum(len(ex.sets) for ex in session.exercises)

    @staticmethod
    def completed_sets(session: WorkoutSession) -> int:
        return sum(1 for ex in session.exercises for st in ex.sets if st.is_completed)

    @staticmethod
    def completed_reps(session: WorkoutSession) -> int:
        return sum(
            int(st.actual_reps or 0)
            for ex in session.exercises
            for st in ex.sets
            if st.is_completed
        )

    @classmethod
    def completion_rate(cls, session: WorkoutSession) -> float:
        """Return the share of sets completed as a fraction in [0, 1]."""
        return MathTools.safe_ratio(cls.completed_sets(session), cls.total_sets(session))

    @staticmethod
    def duration_hours(session: WorkoutSession) -> float:
        return session.total_duration_seconds / 3600

    @classmethod
    def performance(cls, session: WorkoutSession) -> float:
        """Return completed volume per hour scaled by completion rate."""
        hours = cls.duration_hours(session)
        if hours <= 0:
            return 0.0
        return cls.volume(session) * cls.completion_rate(session) / hours

    @staticmethod
    def muscle_groups(session: WorkoutSession) -> list[str]:
        """Return the distinct muscle groups trained, in first-seen order."""
        groups: list[str] = []
        for ex in session.exercises:
            for g in ex.muscle_groups:
                if g not in groups:
                    groups.append(g)
        return groups

    @staticmethod
    def within_days(
        sessions: Iterable[WorkoutSession],
        now: datetime.datetime,
        days: int,
    ) -> List[WorkoutSession]:
        """Return sessions completed in the ``days`` before ``now``."""
        start = now - datetime.timedelta(days=days)
        return [
            s
            for s in sessions
            if s.completed_at is not None and start < s.completed_at <= now
        ]
