from typing import Iterable, Sequence
import numpy as np


class MathTools:
    """Provides the numeric helpers shared by the analytics services."""

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        if value != value:
            return min_value
        return max(min_value, min(value, max_value))

    @staticmethod
    def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
        """Return ``numerator / denominator`` or ``default`` for a zero denominator."""
        if denominator == 0:
            return default
        return numerator / denominator

    @staticmethod
    def volume(sets: Iterable[tuple[int, float]]) -> float:
        """Compute training volume as the sum of reps times weight."""
        vol = 0.0
        for reps, weight in sets:
            vol += reps * weight
        return vol

    @staticmethod
    def mean(values: Iterable[float]) -> float:
        data = list(values)
        if not data:
            return 0.0
        return float(np.mean(np.array(data, dtype=float)))

    @staticmethod
    def variance(values: Iterable[float]) -> float:
        """Return the population variance of ``values``."""
        data = list(values)
        if not data:
            return 0.0
        return float(np.var(np.array(data, dtype=float)))

    @staticmethod
    def percent_change(new: float, old: float) -> float:
        """Return the change from ``old`` to ``new`` in percent."""
        if old == 0:
            return 0.0
        return (new - old) / old * 100.0

    @staticmethod
    def recency_weights(count: int, step: float) -> list[float]:
        """Return weights for ``count`` items ordered newest first.

        The newest item receives ``1 + step * (count - 1)`` and the oldest 1.
        """
        return [1 + step * (count - 1 - idx) for idx in range(count)]

    @staticmethod
    def weighted_mean(values: Sequence[float], weights: Sequence[float]) -> float:
        if len(values) != len(weights):
            raise ValueError("values and weights must have equal length")
        total = float(sum(weights))
        if total == 0:
            return 0.0
        return float(np.dot(np.array(values, dtype=float), np.array(weights, dtype=float))) / total

    @staticmethod
    def session_density(volume: float, duration_seconds: float) -> float:
        """Return training volume per minute."""
        if duration_seconds <= 0:
            return 0.0
        return volume / (duration_seconds / 60)

    @staticmethod
    def set_pace(sets: int, duration_seconds: float) -> float:
        """Return sets completed per minute."""
        if duration_seconds <= 0:
            return 0.0
        return sets / (duration_seconds / 60)
