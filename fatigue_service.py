"""Fatigue indicators and training-state patterns.

Every score here is a descriptive heuristic over logged sessions. None of
the formulas are medically or scientifically validated, and the sleep
indicator in particular is an estimate inferred from performance variance.
"""
from __future__ import annotations
import datetime
import logging
from typing import Iterable, List, Optional, Sequence

from algorithms import MathTools, SessionMetrics
from models import (
    EstimatedFatigueIndicator,
    FatigueIndicator,
    FatiguePattern,
    WorkoutSession,
    ensure_aware,
)
from settings_schema import AnalyticsThresholds, DEFAULT_THRESHOLDS

logger = logging.getLogger(__name__)

PERFORMANCE_DECLINE = "performance-decline"
VOLUME_TOLERANCE = "volume-tolerance"
RECOVERY_RATE = "recovery-rate"
MOTIVATION_LEVEL = "motivation-level"
SLEEP_QUALITY = "sleep-quality"

INDICATOR_TEXT = {
    PERFORMANCE_DECLINE: (
        "Performance Decline",
        "Measures decrease in workout performance over time",
        "Consider reducing workout intensity or taking rest days",
        "Performance is stable, continue current routine",
    ),
    VOLUME_TOLERANCE: (
        "Volume Tolerance",
        "Ability to handle current training volume",
        "Reduce training volume by 20-30%",
        "Current volume is manageable",
    ),
    RECOVERY_RATE: (
        "Recovery Rate",
        "How quickly you recover between sessions",
        "Increase rest time between workouts",
        "Recovery rate is adequate",
    ),
    MOTIVATION_LEVEL: (
        "Motivation Level",
        "Psychological readiness and workout completion rates",
        "Consider varying your routine or taking a deload week",
        "Motivation levels are healthy",
    ),
    SLEEP_QUALITY: (
        "Sleep Quality (Estimated)",
        "Estimated sleep quality based on performance patterns, not measured sleep",
        "Focus on improving sleep hygiene and duration",
        "Sleep patterns appear adequate",
    ),
}


class FatigueIndicatorEngine:
    """Compute the five fatigue sub-scores from a session log."""

    def __init__(self, thresholds: Optional[AnalyticsThresholds] = None) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def status(self, value: float) -> str:
        t = self.thresholds
        if value < t.status_low:
            return "low"
        if value < t.status_moderate:
            return "moderate"
        if value < t.status_high:
            return "high"
        return "critical"

    def _alert_cutoff(self, indicator_id: str) -> float:
        t = self.thresholds
        return {
            PERFORMANCE_DECLINE: t.performance_decline_alert,
            VOLUME_TOLERANCE: t.volume_tolerance_alert,
            RECOVERY_RATE: t.recovery_rate_alert,
            MOTIVATION_LEVEL: t.motivation_alert,
            SLEEP_QUALITY: t.sleep_quality_alert,
        }[indicator_id]

    def make_indicator(self, indicator_id: str, value: float) -> FatigueIndicator:
        """Build an indicator with status and advice derived from ``value``."""
        name, description, high_advice, low_advice = INDICATOR_TEXT[indicator_id]
        value = MathTools.clamp(float(value), 0.0, 100.0)
        advice = high_advice if value > self._alert_cutoff(indicator_id) else low_advice
        if indicator_id == SLEEP_QUALITY:
            return EstimatedFatigueIndicator(
                id=indicator_id,
                name=name,
                value=value,
                status=self.status(value),
                description=description,
                recommendation=advice,
                basis="variance of recent session performance",
            )
        return FatigueIndicator(
            id=indicator_id,
            name=name,
            value=value,
            status=self.status(value),
            description=description,
            recommendation=advice,
        )

    def performance_decline(self, sessions: Iterable[WorkoutSession]) -> float:
        n = self.thresholds.performance_window
        done = SessionMetrics.completed(sessions)
        if len(done) < 2 * n:
            return 0.0
        recent = MathTools.mean(SessionMetrics.performance(s) for s in done[:n])
        older = MathTools.mean(SessionMetrics.performance(s) for s in done[n : 2 * n])
        if older == 0:
            return 0.0
        decline = (older - recent) / older * 100
        return MathTools.clamp(decline, 0.0, 100.0)

    def volume_tolerance(self, sessions: Iterable[WorkoutSession]) -> float:
        n = self.thresholds.volume_window
        done = SessionMetrics.completed(sessions)
        if len(done) < n:
            return 0.0
        window = done[:n]
        weights = MathTools.recency_weights(len(window), self.thresholds.recency_weight_step)
        stress = 0.0
        for session, weight in zip(window, weights):
            load = (
                SessionMetrics.volume(session)
                / 1000
                * SessionMetrics.duration_hours(session)
                * (1 - SessionMetrics.completion_rate(session))
            )
            stress += load * weight
        return MathTools.clamp(stress * self.thresholds.volume_stress_scale, 0.0, 100.0)

    def recovery_rate(
        self,
        sessions: Iterable[WorkoutSession],
        now: datetime.datetime,
        fatigue_level: float,
    ) -> float:
        """Score recovery strain from ``fatigue_level`` and recent frequency.

        ``fatigue_level`` is an aggregate computed by the caller, typically
        ``RecoveryService.fatigue_level``.
        """
        days = self.thresholds.recovery_days
        recent = SessionMetrics.within_days(sessions, ensure_aware(now), days)
        level = MathTools.clamp(float(fatigue_level), 0.0, 100.0)
        value = level / 100 * (len(recent) / days) * 100
        return MathTools.clamp(value, 0.0, 100.0)

    def motivation_level(self, sessions: Iterable[WorkoutSession]) -> float:
        t = self.thresholds
        done = SessionMetrics.completed(sessions)
        if len(done) < t.motivation_window:
            return 0.0
        window = done[: t.motivation_window]
        scores = []
        for session in window:
            planned = len(session.exercises) * t.planned_minutes_per_exercise * 60
            ratio = MathTools.safe_ratio(session.total_duration_seconds, planned)
            scores.append(SessionMetrics.completion_rate(session) * min(ratio, 1.0))
        weights = MathTools.recency_weights(len(window), t.recency_weight_step)
        average = MathTools.weighted_mean(scores, weights)
        return MathTools.clamp((1 - average) * 100, 0.0, 100.0)

    def sleep_quality(self, sessions: Iterable[WorkoutSession]) -> float:
        """Return the estimated sleep-quality fatigue score."""
        n = self.thresholds.sleep_window
        done = SessionMetrics.completed(sessions)
        if len(done) < n:
            return 0.0
        perf = [SessionMetrics.performance(s) for s in done[:n]]
        value = MathTools.variance(perf) * self.thresholds.sleep_variance_scale
        return MathTools.clamp(value, 0.0, 100.0)

    def detect(
        self,
        sessions: Iterable[WorkoutSession],
        now: datetime.datetime,
        fatigue_level: float,
    ) -> List[FatigueIndicator]:
        """Return all five indicators in a fixed order."""
        now = ensure_aware(now)
        items = [s for s in SessionMetrics.completed(sessions) if s.completed_at <= now]
        values = [
            (PERFORMANCE_DECLINE, self.performance_decline(items)),
            (VOLUME_TOLERANCE, self.volume_tolerance(items)),
            (RECOVERY_RATE, self.recovery_rate(items, now, fatigue_level)),
            (MOTIVATION_LEVEL, self.motivation_level(items)),
            (SLEEP_QUALITY, self.sleep_quality(items)),
        ]
        logger.debug("fatigue indicators over %d sessions: %s", len(items), values)
        return [self.make_indicator(key, value) for key, value in values]


class FatiguePatternClassifier:
    """Classify overreaching, overtraining and deload needs from indicators."""

    def __init__(self, thresholds: Optional[AnalyticsThresholds] = None) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def affected_muscle_groups(self, sessions: Sequence[WorkoutSession]) -> tuple[str, ...]:
        """Return groups trained in more than the configured share of ``sessions``."""
        counts: dict[str, int] = {}
        for s in sessions:
            for group in SessionMetrics.muscle_groups(s):
                counts[group] = counts.get(group, 0) + 1
        limit = len(sessions) * self.thresholds.affected_group_share
        return tuple(g for g, c in counts.items() if c > limit)

    def overreaching(
        self, sessions: Sequence[WorkoutSession], indicators: Sequence[FatigueIndicator]
    ) -> Optional[FatiguePattern]:
        t = self.thresholds
        count = sum(1 for i in indicators if i.status in ("high", "critical"))
        if count < t.overreaching_min_indicators:
            return None
        return FatiguePattern(
            type="overreaching",
            confidence=MathTools.clamp(count * t.overreaching_confidence_step, 0.0, 100.0),
            duration_days=t.overreaching_duration_days,
            severity="severe" if count >= t.overreaching_severe_indicators else "moderate",
            affected_muscle_groups=self.affected_muscle_groups(
                sessions[: t.overreaching_window]
            ),
        )

    def overtraining(
        self, sessions: Sequence[WorkoutSession], indicators: Sequence[FatigueIndicator]
    ) -> Optional[FatiguePattern]:
        t = self.thresholds
        critical = sum(1 for i in indicators if i.status == "critical")
        high = sum(1 for i in indicators if i.status == "high")
        triggered = critical >= t.overtraining_critical_indicators or (
            critical >= 1 and high >= t.overtraining_high_indicators
        )
        if not triggered:
            return None
        confidence = critical * t.overtraining_critical_weight + high * t.overtraining_high_weight
        return FatiguePattern(
            type="overtraining",
            confidence=MathTools.clamp(confidence, 0.0, 100.0),
            duration_days=t.overtraining_duration_days,
            severity="severe" if critical >= t.overtraining_severe_indicators else "moderate",
            affected_muscle_groups=self.affected_muscle_groups(
                sessions[: t.overtraining_window]
            ),
        )

    def deload_needed(
        self, sessions: Sequence[WorkoutSession], indicators: Sequence[FatigueIndicator]
    ) -> Optional[FatiguePattern]:
        t = self.thresholds
        count = sum(1 for i in indicators if i.status in ("moderate", "high"))
        if count < t.deload_min_indicators:
            return None
        window = sessions[: t.deload_window]
        avg_volume = MathTools.mean(SessionMetrics.volume(s) for s in window)
        if avg_volume <= t.deload_volume_threshold:
            return None
        return FatiguePattern(
            type="deload_needed",
            confidence=MathTools.clamp(count * t.deload_confidence_step, 0.0, 100.0),
            duration_days=t.deload_duration_days,
            severity="mild",
            affected_muscle_groups=self.affected_muscle_groups(window),
        )

    def classify(
        self,
        sessions: Iterable[WorkoutSession],
        indicators: Sequence[FatigueIndicator],
        now: datetime.datetime,
    ) -> List[FatiguePattern]:
        """Return every pattern whose trigger fires; may be empty."""
        now = ensure_aware(now)
        done = [s for s in SessionMetrics.completed(sessions) if s.completed_at <= now]
        patterns = []
        for detector in (self.overreaching, self.overtraining, self.deload_needed):
            pattern = detector(done, indicators)
            if pattern is not None:
                patterns.append(pattern)
        logger.debug("fatigue patterns: %s", [p.type for p in patterns])
        return patterns
