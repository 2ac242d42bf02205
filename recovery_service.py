from __future__ import annotations
import datetime
import logging
from typing import Iterable

from algorithms import MathTools, SessionMetrics
from models import RecoveryInsight, WorkoutSession, ensure_aware
from streak_service import StreakService

logger = logging.getLogger(__name__)


class RecoveryService:
    """Estimate overall fatigue and recovery status from recent sessions.

    All values are heuristics derived from logged volume, duration and set
    completion. They are estimates, not physiological measurements.
    """

    HISTORY_DAYS = 14
    RECENT_SESSIONS = 7
    STREAK_DAYS = 7
    HIGH_FATIGUE = 75
    MUSCLE_OVERLOAD = 80
    CONSECUTIVE_LIMIT = 5
    EXCELLENT_RECOVERY = 80
    LOW_FATIGUE = 30

    @staticmethod
    def estimated_exertion(session: WorkoutSession) -> int:
        """Return a 1-10 exertion estimate for ``session``."""
        volume_factor = min(SessionMetrics.volume(session) / 1000, 10)
        hours_factor = min(SessionMetrics.duration_hours(session), 2)
        rate = SessionMetrics.completion_rate(session)
        return int(min(round(volume_factor * hours_factor * rate) + 1, 10))

    @classmethod
    def recent(
        cls, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> list[WorkoutSession]:
        done = SessionMetrics.completed(sessions)
        return SessionMetrics.within_days(done, ensure_aware(now), cls.HISTORY_DAYS)

    @classmethod
    def fatigue_level(
        cls, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> float:
        """Return an aggregate fatigue level in [0, 100]."""
        window = cls.recent(sessions, now)[: cls.RECENT_SESSIONS]
        if not window:
            return 0.0
        avg_exertion = MathTools.mean(cls.estimated_exertion(s) for s in window)
        avg_volume = MathTools.mean(SessionMetrics.volume(s) for s in window)
        frequency = len(window) / 7
        level = (
            avg_exertion / 10 * 40
            + min(avg_volume / 2000 * 30, 30)
            + min(frequency * 20, 30)
        )
        return MathTools.clamp(round(level), 0.0, 100.0)

    @classmethod
    def muscle_group_fatigue(
        cls, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> dict[str, float]:
        loads: dict[str, list[int]] = {}
        for s in cls.recent(sessions, now)[: cls.RECENT_SESSIONS]:
            exertion = cls.estimated_exertion(s)
            for group in SessionMetrics.muscle_groups(s):
                loads.setdefault(group, []).append(exertion)
        fatigue: dict[str, float] = {}
        for group, values in loads.items():
            score = MathTools.mean(values) / 10 * 60 + len(values) / 7 * 40
            fatigue[group] = MathTools.clamp(round(score), 0.0, 100.0)
        return fatigue

    @classmethod
    def recovery_score(
        cls, sessions: Iterable[WorkoutSession], now: datetime.datetime, fatigue: float
    ) -> float:
        last_three = cls.recent(sessions, now)[:3]
        rest_bonus = (3 - len(last_three)) * 10
        if last_three:
            completion = MathTools.mean(SessionMetrics.completion_rate(s) for s in last_three)
        else:
            completion = 1.0
        score = 100 - fatigue + rest_bonus + completion * 10
        return MathTools.clamp(round(score), 0.0, 100.0)

    @staticmethod
    def recommended_rest_days(fatigue: float) -> int:
        if fatigue < 30:
            return 0
        if fatigue < 50:
            return 1
        if fatigue < 75:
            return 2
        return 3

    @staticmethod
    def next_intensity(fatigue: float, recovery: float) -> str:
        if fatigue > 70 or recovery < 40:
            return "light"
        if fatigue > 50 or recovery < 70:
            return "moderate"
        return "high"

    @classmethod
    def recovery_trend(
        cls, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> str:
        window = cls.recent(sessions, now)
        if len(window) < 6:
            return "stable"
        recent, previous = window[:3], window[3:6]
        exertion_now = MathTools.mean(cls.estimated_exertion(s) for s in recent)
        exertion_before = MathTools.mean(cls.estimated_exertion(s) for s in previous)
        completion_now = MathTools.mean(SessionMetrics.completion_rate(s) for s in recent)
        completion_before = MathTools.mean(SessionMetrics.completion_rate(s) for s in previous)
        if exertion_now < exertion_before and completion_now > completion_before:
            return "improving"
        if exertion_now > exertion_before and completion_now < completion_before:
            return "declining"
        return "stable"


    @classmethod
    def insights(cls, status: dict[str, object]) -> list[RecoveryInsight]:
        """Turn a recovery status into user-facing observations."""
        items: list[RecoveryInsight] = []
        fatigue = status["fatigue_level"]
        if fatigue > cls.HIGH_FATIGUE:
            items.append(
                RecoveryInsight(
                    id="high-fatigue-warning",
                    type="warning",
                    title="High Fatigue Detected",
                    description=(
                        "Your body is showing signs of high fatigue. "
                        "Consider taking 1-2 rest days."
                    ),
                    actionable=True,
                    priority="high",
                )
            )
        for group, value in status["muscle_group_fatigue"].items():
            if value > cls.MUSCLE_OVERLOAD:
                items.append(
                    RecoveryInsight(
                        id=f"muscle-fatigue-{group}",
                        type="warning",
                        title=f"{group} Overtraining",
                        description=f"Your {group.lower()} muscles need extra recovery time.",
                        actionable=True,
                        priority="medium",
                        muscle_groups=(group,),
                    )
                )
        days = status["consecutive_days"]
        if days >= cls.CONSECUTIVE_LIMIT:
            items.append(
                RecoveryInsight(
                    id="consecutive-days-warning",
                    type="warning",
                    title="Too Many Consecutive Days",
                    description=(
                        f"You've worked out {days} days in a row. Consider a rest day."
                    ),
                    actionable=True,
                    priority="medium",
                )
            )
        if status["recovery_trend"] == "declining":
            items.append(
                RecoveryInsight(
                    id="declining-recovery",
                    type="suggestion",
                    title="Recovery Trend Declining",
                    description=(
                        "Your recovery is getting worse. Focus on sleep, nutrition, "
                        "and lighter workouts."
                    ),
                    actionable=True,
                    priority="medium",
                )
            )
        if status["recovery_score"] > cls.EXCELLENT_RECOVERY and fatigue < cls.LOW_FATIGUE:
            items.append(
                RecoveryInsight(
                    id="excellent-recovery",
                    type="positive",
                    title="Excellent Recovery Status",
                    description="You're well-recovered and ready for an intense workout!",
                    actionable=False,
                    priority="low",
                )
            )
        return items

    @classmethod
    def analyze(
        cls, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> dict[str, object]:
        """Return the complete recovery status for ``sessions`` at ``now``."""
        items = list(sessions)
        now = ensure_aware(now)
        fatigue = cls.fatigue_level(items, now)
        recovery = cls.recovery_score(items, now, fatigue)
        last_week = SessionMetrics.within_days(items, now, cls.STREAK_DAYS)
        result = {
            "fatigue_level": fatigue,
            "recovery_score": recovery,
            "muscle_group_fatigue": cls.muscle_group_fatigue(items, now),
            "recommended_rest_days": cls.recommended_rest_days(fatigue),
            "next_workout_intensity": cls.next_intensity(fatigue, recovery),
            "recovery_trend": cls.recovery_trend(items, now),
            "consecutive_days": StreakService.consecutive_days(last_week),
            "estimated": True,
        }
        result["insights"] = cls.insights(result)
        logger.debug("recovery status: fatigue=%s recovery=%s", fatigue, recovery)
        return result
