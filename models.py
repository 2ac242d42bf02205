"""Data model shared by the analytics services.

Sessions, exercise logs, sets and personal records arrive from the storage
layer and are treated as read-only here. Output models are plain records
for the presentation layer.
"""
from __future__ import annotations
import datetime
from typing import Iterable, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

IndicatorStatus = Literal["low", "moderate", "high", "critical"]
PatternType = Literal["overreaching", "overtraining", "normal", "deload_needed"]
PatternSeverity = Literal["mild", "moderate", "severe"]
AlertType = Literal["info", "warning", "critical"]
MetricType = Literal["weight", "reps", "duration"]
MuscleTrend = Literal["increasing", "decreasing", "stable"]
ProgressDirection = Literal["improving", "plateauing", "declining"]
InsightType = Literal["warning", "suggestion", "positive"]
InsightPriority = Literal["high", "medium", "low"]
FitnessLevel = Literal["beginner", "intermediate", "advanced"]


class AnalyticsInputError(ValueError):
    """Raised when input data does not match the expected schema."""


class InvalidSessionError(AnalyticsInputError):
    pass


class InvalidRecordError(AnalyticsInputError):
    pass


def ensure_aware(ts: datetime.datetime) -> datetime.datetime:
    """Return ``ts`` with UTC attached when it carries no timezone."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=datetime.timezone.utc)
    return ts


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class SetRecord(_Frozen):
    target_reps: Optional[int] = Field(None, ge=0)
    target_weight: Optional[float] = Field(None, ge=0)
    target_duration_seconds: Optional[float] = Field(None, ge=0)
    actual_reps: Optional[int] = Field(None, ge=0)
    actual_weight: Optional[float] = Field(None, ge=0)
    actual_duration_seconds: Optional[float] = Field(None, ge=0)
    rest_duration_seconds: Optional[float] = Field(None, ge=0)
    is_completed: bool = False
    is_personal_record: bool = False

    @property
    def volume(self) -> float:
        """Weight times reps for a completed set, else 0."""
        if not self.is_completed or not self.actual_weight or not self.actual_reps:
            return 0.0
        return float(self.actual_weight) * int(self.actual_reps)


class ExerciseLog(_Frozen):
    exercise_name: str = Field(min_length=1)
    primary_muscle_group: str
    secondary_muscle_groups: tuple[str, ...] = ()
    equipment: Optional[str] = None
    sets: tuple[SetRecord, ...]

    @property
    def muscle_groups(self) -> tuple[str, ...]:
        groups = [self.primary_muscle_group]
        for g in self.secondary_muscle_groups:
            if g not in groups:
                groups.append(g)
        return tuple(groups)

    def trains(self, muscle_group: str) -> bool:
        target = muscle_group.casefold()
        return any(g.casefold() == target for g in self.muscle_groups)


class WorkoutSession(_Frozen):
    id: str
    started_at: datetime.datetime
    completed_at: Optional[datetime.datetime] = None
    exercises: tuple[ExerciseLog, ...]
    total_duration_seconds: float = Field(0.0, ge=0)
    total_rest_seconds: float = Field(0.0, ge=0)
    workout_type: Optional[str] = None

    @field_validator("started_at", "completed_at")
    @classmethod
    def _attach_tz(cls, value: Optional[datetime.datetime]):
        return ensure_aware(value) if value is not None else None

    @model_validator(mode="after")
    def _check_order(self) -> "WorkoutSession":
        if self.completed_at is not None and self.completed_at < self.started_at:
            raise ValueError("completed_at must not precede started_at")
        return self

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None


class PersonalRecord(_Frozen):
    exercise_name: str = Field(min_length=1)
    value: float = Field(ge=0)
    metric: MetricType = "weight"
    achieved_at: datetime.datetime

    @field_validator("achieved_at")
    @classmethod
    def _attach_tz(cls, value: datetime.datetime) -> datetime.datetime:
        return ensure_aware(value)


class FatigueIndicator(_Frozen):
    id: str
    name: str
    value: float = Field(ge=0, le=100)
    status: IndicatorStatus
    description: str
    recommendation: str


class EstimatedFatigueIndicator(FatigueIndicator):
    """Indicator derived from performance proxies rather than measured data."""

    estimated: Literal[True] = True
    basis: str


class FatiguePattern(_Frozen):
    type: PatternType
    confidence: float = Field(ge=0, le=100)
    duration_days: int = Field(ge=0)
    severity: PatternSeverity
    affected_muscle_groups: tuple[str, ...] = ()


class FatigueAlert(_Frozen):
    id: str
    type: AlertType
    title: str
    message: str
    created_at: datetime.datetime
    action_required: bool
    recommendations: tuple[str, ...]


class MuscleGroupAnalysis(_Frozen):
    muscle_group: str
    frequency: int = Field(ge=0)
    last_trained: Optional[datetime.datetime] = None
    average_volume: float = Field(ge=0)
    trend: MuscleTrend
    needs_attention: bool


class ProgressTrend(_Frozen):
    exercise: str
    metric: MetricType = "weight"
    trend: ProgressDirection
    change_rate: float
    confidence: float = Field(ge=0, le=1)
    recommendation: str


def _parse(model: type[BaseModel], raw: Iterable[object], error: type, label: str) -> list:
    items = []
    for idx, item in enumerate(raw):
        if isinstance(item, model):
            items.append(item)
            continue
        try:
            items.append(model.model_validate(item))
        except ValidationError as e:
            raise error(f"invalid {label} at index {idx}: {e}")
    return items


def parse_sessions(raw: Iterable[object]) -> list[WorkoutSession]:
    """Validate raw session mappings, failing fast on the first bad item."""
    return _parse(WorkoutSession, raw, InvalidSessionError, "session")


def parse_records(raw: Iterable[object]) -> list[PersonalRecord]:
    return _parse(PersonalRecord, raw, InvalidRecordError, "personal record")


class MuscleBalanceReport(_Frozen):
    analysis: tuple[MuscleGroupAnalysis, ...] = ()
    needs_attention: tuple[str, ...] = ()
    balanced: bool = True


class FrequencyReport(_Frozen):
    average_frequency: float = Field(0.0, ge=0)
    preferred_days: tuple[str, ...] = ()
    preferred_times: tuple[str, ...] = ()
    weekly_counts: tuple[int, ...] = ()
    consistency: float = Field(0.0, ge=0, le=1)
    recommendation: str


class IntensityReport(_Frozen):
    average_intensity: float = Field(0.0, ge=0, le=10)
    intensity_trend: MuscleTrend = "stable"
    recovery_needed: bool = False
    recommendation: str


class ProgressReport(_Frozen):
    trends: tuple[ProgressTrend, ...] = ()
    plateau_exercises: tuple[str, ...] = ()
    improving_exercises: tuple[str, ...] = ()
    overall_progress: Literal["excellent", "good", "moderate", "needs_attention"] = "moderate"


class RecoveryInsight(_Frozen):
    id: str
    type: InsightType
    title: str
    description: str
    actionable: bool
    priority: InsightPriority
    muscle_groups: tuple[str, ...] = ()


class UserProfile(_Frozen):
    """Training profile inferred from the session log."""

    fitness_level: FitnessLevel = "beginner"
    primary_goals: tuple[str, ...] = ("general_fitness",)
    available_time_minutes: int = Field(45, ge=0)
    preferred_workout_types: tuple[str, ...] = ("strength",)
    equipment_access: tuple[str, ...] = ("bodyweight",)
    workout_frequency: int = Field(3, ge=1, le=7)


AnyFatigueIndicator = Union[EstimatedFatigueIndicator, FatigueIndicator]
