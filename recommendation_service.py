from __future__ import annotations
from typing import List, Optional

from models import FrequencyReport, IntensityReport, MuscleBalanceReport, ProgressReport
from settings_schema import AnalyticsThresholds, DEFAULT_THRESHOLDS


class RecommendationComposer:
    """Merge pattern analyses into a short ranked list of suggestions."""

    def __init__(self, thresholds: Optional[AnalyticsThresholds] = None) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def compose(
        self,
        muscles: MuscleBalanceReport,
        frequency: FrequencyReport,
        intensity: IntensityReport,
        progress: ProgressReport,
    ) -> List[str]:
        """Return at most ``max_recommendations`` suggestions, most urgent first."""
        t = self.thresholds
        items: list[str] = []

        if muscles.needs_attention:
            groups = " and ".join(muscles.needs_attention)
            items.append(f"Focus on {groups} - these muscle groups need more attention.")

        if frequency.average_frequency < t.low_frequency:
            items.append("Increase workout frequency to 2-3 times per week for better results.")
        elif frequency.average_frequency > t.high_frequency:
            items.append("Add rest days to prevent overtraining and improve recovery.")
        elif frequency.consistency < t.min_consistency:
            items.append("Try to maintain a more consistent workout schedule.")

        if intensity.recovery_needed:
            items.append("Consider adding rest days or reducing intensity to improve recovery.")
        elif intensity.average_intensity < t.intensity_low:
            items.append("You can safely increase workout intensity for better results.")

        if progress.plateau_exercises:
            names = " and ".join(progress.plateau_exercises[: t.plateau_mentions])
            items.append(f"Break through plateaus in {names} by varying your approach.")

        if progress.overall_progress == "excellent":
            items.append(
                "Excellent progress! Keep up the great work and consider setting new challenges."
            )
        elif progress.overall_progress == "needs_attention":
            items.append("Consider reviewing your program and focusing on progressive overload.")

        return items[: t.max_recommendations]
