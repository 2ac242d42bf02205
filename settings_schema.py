from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class AnalyticsThresholds(BaseModel):
    """Tunable constants used by the analytics services."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # indicator status breakpoints
    status_low: float = 25.0
    status_moderate: float = 50.0
    status_high: float = 75.0

    # indicator recommendation cut-offs
    performance_decline_alert: float = 60.0
    volume_tolerance_alert: float = 70.0
    recovery_rate_alert: float = 65.0
    motivation_alert: float = 60.0
    sleep_quality_alert: float = 50.0

    # indicator windows
    performance_window: int = Field(3, ge=1)
    volume_window: int = Field(4, ge=1)
    motivation_window: int = Field(5, ge=1)
    sleep_window: int = Field(3, ge=2)
    recovery_days: int = Field(7, ge=1)
    recency_weight_step: float = Field(0.2, ge=0.0)
    volume_stress_scale: float = 10.0
    sleep_variance_scale: float = 50.0
    planned_minutes_per_exercise: float = Field(45.0, gt=0.0)

    # fatigue patterns
    overreaching_min_indicators: int = 2
    overreaching_severe_indicators: int = 3
    overreaching_confidence_step: float = 25.0
    overreaching_duration_days: int = 7
    overreaching_window: int = 7
    overtraining_critical_indicators: int = 2
    overtraining_high_indicators: int = 2
    overtraining_severe_indicators: int = 3
    overtraining_critical_weight: float = 40.0
    overtraining_high_weight: float = 20.0
    overtraining_duration_days: int = 14
    overtraining_window: int = 14
    deload_min_indicators: int = 3
    deload_confidence_step: float = 20.0
    deload_duration_days: int = 7
    deload_window: int = 14
    deload_volume_threshold: float = 1500.0
    affected_group_share: float = Field(0.5, ge=0.0, le=1.0)

    # alerts
    performance_warning_value: float = 70.0

    # muscle balance
    muscle_groups: tuple[str, ...] = (
        "Chest",
        "Back",
        "Shoulders",
        "Arms",
        "Legs",
        "Core",
    )
    muscle_trend_days: int = Field(14, ge=1)
    muscle_stale_days: int = 7
    muscle_min_frequency: int = 2
    balanced_max_attention: int = 1

    # frequency and timing
    morning_end_hour: int = Field(12, ge=0, le=24)
    afternoon_end_hour: int = Field(17, ge=0, le=24)
    preferred_days: int = 3
    preferred_times: int = 2
    low_frequency: float = 2.0
    high_frequency: float = 6.0
    min_consistency: float = 0.7

    # intensity
    intensity_window: int = Field(5, ge=1)
    intensity_dead_band: float = Field(0.1, ge=0.0)
    intensity_high: float = 7.0
    intensity_high_sessions: int = 3
    intensity_overall_high: float = 8.0
    intensity_low: float = 4.0

    # progress
    progress_window: int = Field(3, ge=1)
    progress_change: float = 5.0
    plateau_days: int = Field(28, ge=1)
    base_confidence: float = 0.5
    max_confidence: float = Field(0.9, ge=0.0, le=1.0)
    excellent_ratio: float = 0.7
    good_ratio: float = 0.4
    plateau_ratio: float = 0.6

    # user profile
    advanced_min_workouts: int = 50
    advanced_min_exercises: float = 6.0
    advanced_min_minutes: float = 60.0
    intermediate_min_workouts: int = 20
    intermediate_min_exercises: float = 4.0
    intermediate_min_minutes: float = 45.0
    profile_workout_types: int = Field(2, ge=1)

    # recommendations
    max_recommendations: int = Field(5, ge=0)
    plateau_mentions: int = 2

    @model_validator(mode="after")
    def _check_ordering(self) -> "AnalyticsThresholds":
        if not self.status_low < self.status_moderate < self.status_high:
            raise ValueError("status breakpoints must be strictly increasing")
        if not self.morning_end_hour <= self.afternoon_end_hour:
            raise ValueError("morning must end before afternoon")
        if not self.low_frequency <= self.high_frequency:
            raise ValueError("low_frequency must not exceed high_frequency")
        return self


DEFAULT_THRESHOLDS = AnalyticsThresholds()


def validate_settings(data: dict) -> AnalyticsThresholds:
    try:
        return AnalyticsThresholds(**data)
    except ValidationError as e:
        raise ValueError(str(e))
