from __future__ import annotations
import datetime
from typing import Iterable, Optional

from models import WorkoutSession, ensure_aware

MILESTONES: tuple[tuple[int, str], ...] = (
    (3, "Getting Started"),
    (7, "One Week Strong"),
    (14, "Two Week Warrior"),
    (30, "Monthly Master"),
    (50, "Unstoppable Force"),
    (100, "Century Club"),
    (365, "Year Champion"),
)

MULTIPLIERS: tuple[tuple[int, float], ...] = (
    (100, 3.0),
    (50, 2.5),
    (30, 2.0),
    (14, 1.5),
    (7, 1.2),
)


class StreakService:
    """Compute consecutive-day training streaks."""

    @staticmethod
    def training_dates(sessions: Iterable[WorkoutSession]) -> list[datetime.date]:
        """Return unique completion dates, newest first."""
        dates = {s.completed_at.date() for s in sessions if s.completed_at is not None}
        return sorted(dates, reverse=True)

    @classmethod
    def current_streak(
        cls, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> int:
        """Return the run of consecutive training days ending today.

        A streak whose latest day is yesterday still counts, so a missing
        session today does not break it until the day is over.
        """
        today = ensure_aware(now).date()
        dates = [d for d in cls.training_dates(sessions) if d <= today]
        if not dates or (today - dates[0]).days > 1:
            return 0
        return cls._leading_run(dates)

    @staticmethod
    def _leading_run(dates: list[datetime.date]) -> int:
        count = 1
        for prev, nxt in zip(dates, dates[1:]):
            if (prev - nxt).days != 1:
                break
            count += 1
        return count

    @classmethod
    def longest_streak(cls, sessions: Iterable[WorkoutSession]) -> int:
        dates = sorted(cls.training_dates(sessions))
        if not dates:
            return 0
        record = 1
        current = 1
        for i in range(1, len(dates)):
            if (dates[i] - dates[i - 1]).days == 1:
                current += 1
            else:
                current = 1
            record = max(record, current)
        return record

    @classmethod
    def consecutive_days(cls, sessions: Iterable[WorkoutSession]) -> int:
        """Return days in a row ending at the most recent session date."""
        dates = cls.training_dates(sessions)
        if not dates:
            return 0
        return cls._leading_run(dates)

    @classmethod
    def streaks(
        cls, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> dict[str, int]:
        """Return current and record streak lengths."""
        items = list(sessions)
        return {
            "current": cls.current_streak(items, now),
            "longest": cls.longest_streak(items),
        }

    @staticmethod
    def next_milestone(days: int) -> Optional[dict[str, object]]:
        for threshold, title in MILESTONES:
            if threshold > days:
                return {"days": threshold, "title": title}
        return None

    @staticmethod
    def multiplier(days: int) -> float:
        for threshold, value in MULTIPLIERS:
            if days >= threshold:
                return value
        return 1.0
