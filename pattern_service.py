from __future__ import annotations
import datetime
import logging
from collections import Counter
from typing import Iterable, List, Optional

from algorithms import MathTools, SessionMetrics
from models import (
    FrequencyReport,
    IntensityReport,
    MuscleBalanceReport,
    MuscleGroupAnalysis,
    PersonalRecord,
    ProgressReport,
    ProgressTrend,
    UserProfile,
    WorkoutSession,
    ensure_aware,
)
from settings_schema import AnalyticsThresholds, DEFAULT_THRESHOLDS

logger = logging.getLogger(__name__)

WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

PROGRESS_ADVICE = {
    "improving": "Great progress! Continue with your current approach.",
    "plateauing": "Try varying rep ranges, adding volume, or changing exercise variations.",
    "declining": "Consider reducing intensity and focusing on form and recovery.",
}


class PatternAnalyzer:
    """Analyze muscle balance, schedule, intensity and progress patterns."""

    def __init__(self, thresholds: Optional[AnalyticsThresholds] = None) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    @staticmethod
    def _history(
        sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> List[WorkoutSession]:
        """Return completed sessions up to ``now``, oldest first."""
        done = [s for s in SessionMetrics.completed(sessions) if s.completed_at <= now]
        done.reverse()
        return done

    # muscle balance

    def muscle_balance(
        self, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> MuscleBalanceReport:
        t = self.thresholds
        now = ensure_aware(now)
        history = self._history(sessions, now)
        span = datetime.timedelta(days=t.muscle_trend_days)
        analysis = []
        for group in t.muscle_groups:
            relevant = [s for s in history if any(ex.trains(group) for ex in s.exercises)]
            volume = sum(
                st.volume
                for s in relevant
                for ex in s.exercises
                if ex.trains(group)
                for st in ex.sets
            )
            last = max((s.started_at for s in relevant), default=None)
            recent = sum(1 for s in relevant if s.started_at > now - span)
            older = sum(1 for s in relevant if now - 2 * span < s.started_at <= now - span)
            if recent > older:
                trend = "increasing"
            elif recent < older:
                trend = "decreasing"
            else:
                trend = "stable"
            stale = last is None or (now - last).days > t.muscle_stale_days
            analysis.append(
                MuscleGroupAnalysis(
                    muscle_group=group,
                    frequency=len(relevant),
                    last_trained=last,
                    average_volume=MathTools.safe_ratio(volume, len(relevant)),
                    trend=trend,
                    needs_attention=stale or len(relevant) < t.muscle_min_frequency,
                )
            )
        attention = tuple(a.muscle_group for a in analysis if a.needs_attention)
        return MuscleBalanceReport(
            analysis=tuple(analysis),
            needs_attention=attention,
            balanced=len(attention) <= t.balanced_max_attention,
        )

    # frequency and timing

    def time_slot(self, ts: datetime.datetime) -> str:
        if ts.hour < self.thresholds.morning_end_hour:
            return "Morning"
        if ts.hour < self.thresholds.afternoon_end_hour:
            return "Afternoon"
        return "Evening"

    def frequency_recommendation(self, average: float, consistency: float) -> str:
        t = self.thresholds
        if average < t.low_frequency:
            return "Try to increase workout frequency to 2-3 times per week for better results."
        if average > t.high_frequency:
            return "Consider adding rest days to prevent overtraining and improve recovery."
        if consistency < t.min_consistency:
            return "Try to maintain a more consistent workout schedule for optimal progress."
        return "Great job maintaining a consistent workout routine!"

    def frequency(
        self, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> FrequencyReport:
        t = self.thresholds
        history = self._history(sessions, ensure_aware(now))
        if not history:
            return FrequencyReport(
                recommendation="Start with 2-3 workouts per week for optimal results.",
            )
        days: Counter[str] = Counter()
        slots: Counter[str] = Counter()
        weeks: Counter[tuple[int, int]] = Counter()
        for s in history:
            days[WEEKDAYS[s.started_at.weekday()]] += 1
            slots[self.time_slot(s.started_at)] += 1
            iso = s.started_at.isocalendar()
            weeks[(iso[0], iso[1])] += 1
        weekly = [weeks[key] for key in sorted(weeks)]
        return self.frequency_from_counts(
            weekly,
            preferred_days=[d for d, _ in days.most_common(t.preferred_days)],
            preferred_times=[s for s, _ in slots.most_common(t.preferred_times)],
        )

    def frequency_from_counts(
        self,
        weekly: List[int],
        preferred_days: Optional[List[str]] = None,
        preferred_times: Optional[List[str]] = None,
    ) -> FrequencyReport:
        """Summarize weekly session counts into average and consistency."""
        average = MathTools.mean(weekly)
        consistency = 0.0
        if average > 0:
            consistency = MathTools.clamp(
                1 - MathTools.variance(weekly) / average, 0.0, 1.0
            )
        return FrequencyReport(
            average_frequency=average,
            preferred_days=tuple(preferred_days or ()),
            preferred_times=tuple(preferred_times or ()),
            weekly_counts=tuple(weekly),
            consistency=consistency,
            recommendation=self.frequency_recommendation(average, consistency),
        )

    # intensity

    @staticmethod
    def session_intensity(session: WorkoutSession) -> float:
        """Return a 0-10 intensity score from volume and set pace."""
        seconds = session.total_duration_seconds
        density = MathTools.session_density(SessionMetrics.volume(session), seconds)
        pace = MathTools.set_pace(SessionMetrics.completed_sets(session), seconds)
        return MathTools.clamp(density / 100 + pace * 2, 0.0, 10.0)

    def intensity(
        self, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> IntensityReport:
        t = self.thresholds
        history = self._history(sessions, ensure_aware(now))
        if not history:
            return IntensityReport(
                recommendation=(
                    "Start with moderate intensity and gradually increase "
                    "as you build strength."
                ),
            )
        scores = [self.session_intensity(s) for s in history]
        average = MathTools.mean(scores)
        n = t.intensity_window
        recent = scores[-n:]
        older = scores[-2 * n : -n]
        trend = "stable"
        if older:
            recent_avg = MathTools.mean(recent)
            older_avg = MathTools.mean(older)
            if recent_avg > older_avg * (1 + t.intensity_dead_band):
                trend = "increasing"
            elif recent_avg < older_avg * (1 - t.intensity_dead_band):
                trend = "decreasing"
        hard = sum(1 for score in recent if score > t.intensity_high)
        recovery = hard >= t.intensity_high_sessions or average > t.intensity_overall_high
        if recovery:
            advice = (
                "Consider incorporating rest days or lower intensity workouts "
                "for better recovery."
            )
        elif average < t.intensity_low:
            advice = "You can safely increase workout intensity to see better results."
        elif trend == "decreasing":
            advice = (
                "Try to maintain or gradually increase workout intensity "
                "to continue progressing."
            )
        else:
            advice = "Your workout intensity is well-balanced. Keep up the great work!"
        return IntensityReport(
            average_intensity=average,
            intensity_trend=trend,
            recovery_needed=recovery,
            recommendation=advice,
        )

    # progress

    def _trend_for(self, exercise: str, records: List[PersonalRecord], now) -> tuple:
        t = self.thresholds
        n = t.progress_window
        recent = records[-n:]
        older = records[-2 * n : -n]
        trend = "plateauing"
        change = 0.0
        confidence = t.base_confidence
        if older:
            recent_best = max(r.value for r in recent)
            older_best = max(r.value for r in older)
            change = MathTools.percent_change(recent_best, older_best)
            if change > t.progress_change:
                trend = "improving"
            elif change < -t.progress_change:
                trend = "declining"
            if trend != "plateauing":
                confidence = min(t.max_confidence, t.base_confidence + abs(change) / 100)
        start = now - datetime.timedelta(days=t.plateau_days)
        before = [r.value for r in records if r.achieved_at <= start]
        inside = [r.value for r in records if r.achieved_at > start]
        stale = bool(before) and (not inside or max(inside) <= max(before))
        return (
            ProgressTrend(
                exercise=exercise,
                metric=records[0].metric,
                trend=trend,
                change_rate=round(change, 2),
                confidence=MathTools.clamp(confidence, 0.0, 1.0),
                recommendation=PROGRESS_ADVICE[trend],
            ),
            stale or trend == "plateauing",
        )

    def progress(
        self, records: Iterable[PersonalRecord], now: datetime.datetime
    ) -> ProgressReport:
        t = self.thresholds
        now = ensure_aware(now)
        groups: dict[tuple[str, str], list[PersonalRecord]] = {}
        for record in records:
            if record.achieved_at <= now:
                groups.setdefault((record.exercise_name, record.metric), []).append(record)
        trends: list[ProgressTrend] = []
        plateaus: list[str] = []
        improving: list[str] = []
        plateau_count = 0
        improving_count = 0
        for (exercise, _metric), items in groups.items():
            if len(items) < 2:
                continue
            items.sort(key=lambda r: r.achieved_at)
            trend, plateau = self._trend_for(exercise, items, now)
            trends.append(trend)
            # ratios count (exercise, metric) trends; the name lists are per exercise
            if plateau:
                plateau_count += 1
                if exercise not in plateaus:
                    plateaus.append(exercise)
            if trend.trend == "improving":
                improving_count += 1
                if exercise not in improving:
                    improving.append(exercise)
        improving_ratio = MathTools.safe_ratio(improving_count, len(trends))
        plateau_ratio = MathTools.safe_ratio(plateau_count, len(trends))
        if improving_ratio > t.excellent_ratio:
            overall = "excellent"
        elif improving_ratio > t.good_ratio:
            overall = "good"
        elif plateau_ratio > t.plateau_ratio:
            overall = "needs_attention"
        else:
            overall = "moderate"
        logger.debug("progress over %d exercises: %s", len(trends), overall)
        return ProgressReport(
            trends=tuple(trends),
            plateau_exercises=tuple(plateaus),
            improving_exercises=tuple(improving),
            overall_progress=overall,
        )

    # profile

    def fitness_level(self, workouts: int, exercises: float, minutes: float) -> str:
        t = self.thresholds
        if (
            workouts > t.advanced_min_workouts
            and exercises > t.advanced_min_exercises
            and minutes > t.advanced_min_minutes
        ):
            return "advanced"
        if (
            workouts > t.intermediate_min_workouts
            and exercises > t.intermediate_min_exercises
            and minutes > t.intermediate_min_minutes
        ):
            return "intermediate"
        return "beginner"

    def user_profile(
        self, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> UserProfile:
        """Infer level, habits and equipment from the completed history."""
        history = self._history(sessions, ensure_aware(now))
        if not history:
            return UserProfile()
        total = len(history)
        minutes = MathTools.mean(s.total_duration_seconds / 60 for s in history)
        level = self.fitness_level(
            total, MathTools.mean(len(s.exercises) for s in history), minutes
        )
        types = Counter(s.workout_type or "strength" for s in history)
        equipment: list[str] = []
        for s in history:
            for ex in s.exercises:
                if ex.equipment and ex.equipment not in equipment:
                    equipment.append(ex.equipment)
        span = history[-1].started_at - history[0].started_at
        weeks = span.total_seconds() / (7 * 86400)
        if weeks <= 0:
            weeks = 1.0
        frequency = int(MathTools.clamp(round(total / weeks), 1, 7))
        return UserProfile(
            fitness_level=level,
            primary_goals=("strength", "muscle_gain"),
            available_time_minutes=round(minutes),
            preferred_workout_types=tuple(
                name for name, _ in types.most_common(self.thresholds.profile_workout_types)
            ),
            equipment_access=tuple(equipment),
            workout_frequency=frequency,
        )
