from __future__ import annotations
import datetime
import hashlib
import json
import logging
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict

from alert_service import AlertGenerator
from fatigue_service import FatigueIndicatorEngine, FatiguePatternClassifier
from models import (
    AnyFatigueIndicator,
    FatigueAlert,
    FatiguePattern,
    FrequencyReport,
    IntensityReport,
    MuscleBalanceReport,
    PersonalRecord,
    ProgressReport,
    UserProfile,
    WorkoutSession,
    ensure_aware,
    parse_records,
    parse_sessions,
)
from pattern_service import PatternAnalyzer
from recommendation_service import RecommendationComposer
from recovery_service import RecoveryService
from settings_schema import AnalyticsThresholds, DEFAULT_THRESHOLDS
from stats_service import StatisticsService
from streak_service import StreakService

logger = logging.getLogger(__name__)


class InsightsReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    generated_at: datetime.datetime
    statistics: dict[str, Any]
    streaks: dict[str, int]
    recovery: dict[str, Any]
    indicators: List[AnyFatigueIndicator]
    patterns: List[FatiguePattern]
    alerts: List[FatigueAlert]
    muscle_balance: MuscleBalanceReport
    frequency: FrequencyReport
    intensity: IntensityReport
    progress: ProgressReport
    profile: UserProfile
    recommendations: List[str]


class InsightsService:
    """Run every analytics stage over one session log."""

    def __init__(
        self,
        thresholds: Optional[AnalyticsThresholds] = None,
        use_cache: bool = False,
    ) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS
        self.stats = StatisticsService()
        self.indicators = FatigueIndicatorEngine(self.thresholds)
        self.classifier = FatiguePatternClassifier(self.thresholds)
        self.alerts = AlertGenerator(self.thresholds)
        self.patterns = PatternAnalyzer(self.thresholds)
        self.composer = RecommendationComposer(self.thresholds)
        self.use_cache = use_cache
        self._cache: dict[str, InsightsReport] = {}

    def clear_cache(self) -> None:
        """Clear any cached reports."""
        self._cache.clear()

    @staticmethod
    def cache_key(
        sessions: List[WorkoutSession],
        records: List[PersonalRecord],
        now: datetime.datetime,
    ) -> str:
        payload = {
            "sessions": [s.model_dump(mode="json") for s in sessions],
            "records": [r.model_dump(mode="json") for r in records],
            "now": now.isoformat(),
        }
        raw = json.dumps(payload, sort_keys=True).encode("utf-8")
        return hashlib.sha256(raw).hexdigest()

    def analyze(
        self,
        sessions: Iterable[Any],
        now: datetime.datetime,
        records: Optional[Iterable[Any]] = None,
    ) -> InsightsReport:
        """Return the full report for ``sessions`` at ``now``.

        When ``records`` is omitted the personal-record log is derived from
        the sessions themselves.
        """
        now = ensure_aware(now)
        items = parse_sessions(sessions)
        if records is None:
            record_log = self.stats.detect_personal_records(items)
        else:
            record_log = parse_records(records)

        key = None
        if self.use_cache:
            key = self.cache_key(items, record_log, now)
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("insights cache hit %s", key[:12])
                return cached

        recovery = RecoveryService.analyze(items, now)
        indicators = self.indicators.detect(items, now, recovery["fatigue_level"])
        patterns = self.classifier.classify(items, indicators, now)
        alerts = self.alerts.generate(indicators, patterns, now)
        muscles = self.patterns.muscle_balance(items, now)
        frequency = self.patterns.frequency(items, now)
        intensity = self.patterns.intensity(items, now)
        progress = self.patterns.progress(record_log, now)
        report = InsightsReport(
            generated_at=now,
            statistics=self.stats.overview(items, now),
            streaks=StreakService.streaks(items, now),
            recovery=recovery,
            indicators=indicators,
            patterns=patterns,
            alerts=alerts,
            muscle_balance=muscles,
            frequency=frequency,
            intensity=intensity,
            progress=progress,
            profile=self.patterns.user_profile(items, now),
            recommendations=self.composer.compose(muscles, frequency, intensity, progress),
        )
        if key is not None:
            self._cache[key] = report
        return report
