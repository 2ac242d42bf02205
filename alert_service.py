from __future__ import annotations
import datetime
import logging
from typing import List, Optional, Sequence

from models import FatigueAlert, FatigueIndicator, FatiguePattern, ensure_aware
from settings_schema import AnalyticsThresholds, DEFAULT_THRESHOLDS
from fatigue_service import PERFORMANCE_DECLINE

logger = logging.getLogger(__name__)

SEVERITY_RANK = {"critical": 3, "warning": 2, "info": 1}

CRITICAL_FATIGUE_ACTIONS = (
    "Take 2-3 complete rest days",
    "Focus on sleep and nutrition",
    "Consider light stretching or walking only",
    "Consult with a healthcare provider if symptoms persist",
)
OVERTRAINING_ACTIONS = (
    "Reduce training volume by 40-50%",
    "Increase rest days between sessions",
    "Focus on recovery activities",
    "Monitor symptoms closely",
)
DELOAD_ACTIONS = (
    "Reduce weights by 40-60% for one week",
    "Maintain movement patterns but lower intensity",
    "Focus on mobility and recovery work",
    "Return to normal intensity after deload week",
)
PERFORMANCE_ACTIONS = (
    "Review your current training program",
    "Ensure adequate nutrition and hydration",
    "Consider reducing training frequency",
    "Evaluate sleep quality and stress levels",
)


class AlertGenerator:
    """Turn indicators and patterns into user-facing alerts."""

    def __init__(self, thresholds: Optional[AnalyticsThresholds] = None) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def generate(
        self,
        indicators: Sequence[FatigueIndicator],
        patterns: Sequence[FatiguePattern],
        now: datetime.datetime,
    ) -> List[FatigueAlert]:
        """Return alerts ordered critical, warning, info."""
        now = ensure_aware(now)
        alerts: list[FatigueAlert] = []

        critical = [i for i in indicators if i.status == "critical"]
        if critical:
            alerts.append(
                FatigueAlert(
                    id="critical-fatigue",
                    type="critical",
                    title="Critical Fatigue Detected",
                    message=(
                        f"{len(critical)} critical fatigue indicators detected. "
                        "Immediate rest recommended."
                    ),
                    created_at=now,
                    action_required=True,
                    recommendations=CRITICAL_FATIGUE_ACTIONS,
                )
            )

        overtraining = next((p for p in patterns if p.type == "overtraining"), None)
        if overtraining is not None:
            alerts.append(
                FatigueAlert(
                    id="overtraining-warning",
                    type="warning",
                    title="Overtraining Syndrome Risk",
                    message=(
                        "Signs of overtraining detected with "
                        f"{overtraining.confidence:g}% confidence."
                    ),
                    created_at=now,
                    action_required=True,
                    recommendations=OVERTRAINING_ACTIONS,
                )
            )

        if any(p.type == "deload_needed" for p in patterns):
            alerts.append(
                FatigueAlert(
                    id="deload-recommendation",
                    type="info",
                    title="Deload Week Recommended",
                    message="Your body would benefit from a planned deload week.",
                    created_at=now,
                    action_required=False,
                    recommendations=DELOAD_ACTIONS,
                )
            )

        performance = next((i for i in indicators if i.id == PERFORMANCE_DECLINE), None)
        if (
            performance is not None
            and performance.value > self.thresholds.performance_warning_value
        ):
            alerts.append(
                FatigueAlert(
                    id="performance-decline",
                    type="warning",
                    title="Performance Decline Detected",
                    message="Your workout performance has been declining recently.",
                    created_at=now,
                    action_required=True,
                    recommendations=PERFORMANCE_ACTIONS,
                )
            )

        unique: dict[str, FatigueAlert] = {}
        for alert in alerts:
            unique.setdefault(alert.id, alert)
        ordered = sorted(unique.values(), key=lambda a: -SEVERITY_RANK[a.type])
        logger.debug("generated alerts: %s", [a.id for a in ordered])
        return ordered
