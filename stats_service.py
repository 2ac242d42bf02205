from __future__ import annotations
import datetime
import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional

from algorithms import MathTools, SessionMetrics
from models import PersonalRecord, WorkoutSession, ensure_aware

logger = logging.getLogger(__name__)


class StatisticsService:
    """Compute workout statistics from a session log."""

    def __init__(self, favorite_limit: int = 10, record_limit: int = 10) -> None:
        self.favorite_limit = favorite_limit
        self.record_limit = record_limit

    def overview(
        self, sessions: Iterable[WorkoutSession], now: datetime.datetime
    ) -> Dict[str, object]:
        """Return aggregated totals, recent counts, favorites and flagged records."""
        now = ensure_aware(now)
        done = SessionMetrics.completed(sessions)
        logger.debug("aggregating %d completed sessions", len(done))
        workouts = len(done)
        duration = sum(s.total_duration_seconds for s in done)
        return {
            "total_workouts": workouts,
            "total_duration_seconds": duration,
            "total_sets": sum(SessionMetrics.completed_sets(s) for s in done),
            "total_reps": sum(SessionMetrics.completed_reps(s) for s in done),
            "total_volume": round(sum(SessionMetrics.volume(s) for s in done), 2),
            "average_duration_seconds": MathTools.safe_ratio(duration, workouts),
            "workouts_last_7_days": len(SessionMetrics.within_days(done, now, 7)),
            "workouts_last_30_days": len(SessionMetrics.within_days(done, now, 30)),
            "favorite_exercises": self.favorite_exercises(done),
            "recent_personal_records": self.flagged_records(done),
        }

    def favorite_exercises(
        self, sessions: Iterable[WorkoutSession]
    ) -> List[Dict[str, object]]:
        """Rank exercises by occurrence; ties keep first-seen order."""
        counts: Counter[str] = Counter()
        for s in sessions:
            if s.completed_at is None:
                continue
            for ex in s.exercises:
                counts[ex.exercise_name] += 1
        return [
            {"name": name, "count": count}
            for name, count in counts.most_common(self.favorite_limit)
        ]

    def flagged_records(
        self, sessions: Iterable[WorkoutSession]
    ) -> List[PersonalRecord]:
        """Return the newest sets flagged as personal records."""
        records: list[PersonalRecord] = []
        for s in SessionMetrics.completed(sessions):
            for ex in s.exercises:
                for st in ex.sets:
                    if not st.is_personal_record:
                        continue
                    if st.actual_weight:
                        value, metric = st.actual_weight, "weight"
                    elif st.actual_reps:
                        value, metric = st.actual_reps, "reps"
                    elif st.actual_duration_seconds:
                        value, metric = st.actual_duration_seconds, "duration"
                    else:
                        continue
                    records.append(
                        PersonalRecord(
                            exercise_name=ex.exercise_name,
                            value=float(value),
                            metric=metric,
                            achieved_at=s.completed_at,
                        )
                    )
        return records[: self.record_limit]

    def detect_personal_records(
        self, sessions: Iterable[WorkoutSession]
    ) -> List[PersonalRecord]:
        """Derive a weight/reps record log from sessions in chronological order.

        The first appearance of an exercise sets the baseline and every later
        improvement over the running best appends one entry.
        """
        best: Dict[tuple[str, str], float] = {}
        records: list[PersonalRecord] = []
        for s in reversed(SessionMetrics.completed(sessions)):
            for ex in s.exercises:
                done = [st for st in ex.sets if st.is_completed]
                if not done:
                    continue
                candidates = {
                    "weight": max(float(st.actual_weight or 0) for st in done),
                    "reps": float(max(int(st.actual_reps or 0) for st in done)),
                }
                for metric, value in candidates.items():
                    if value <= 0:
                        continue
                    key = (ex.exercise_name, metric)
                    if key not in best or value > best[key]:
                        best[key] = value
                        records.append(
                            PersonalRecord(
                                exercise_name=ex.exercise_name,
                                value=value,
                                metric=metric,
                                achieved_at=s.completed_at,
                            )
                        )
        return records

    def workout_metrics(self, session: WorkoutSession) -> Dict[str, object]:
        """Return totals, an estimated calorie burn and a 0-100 intensity score."""
        done = [st for ex in session.exercises for st in ex.sets if st.is_completed]
        volume = SessionMetrics.volume(session)
        seconds = session.total_duration_seconds
        minutes = seconds / 60
        rest = MathTools.mean(float(st.rest_duration_seconds or 0) for st in done)
        if done:
            factor = MathTools.clamp(MathTools.safe_ratio(volume, minutes) / 50, 0.5, 2.0)
            score = (
                min(seconds / 3600, 1)
                + min(volume / 10000, 1)
                + min(len(done) / 30, 1)
                + 1
                - min(MathTools.safe_ratio(session.total_rest_seconds, seconds), 0.5)
            ) * 25
        else:
            factor = 1.0
            score = 0.0
        return {
            "id": session.id,
            "total_duration_seconds": seconds,
            "total_volume": round(volume, 2),
            "total_sets": len(done),
            "total_reps": SessionMetrics.completed_reps(session),
            "average_rest_seconds": round(rest, 2),
            "calories_burned": round(minutes * 8 * factor),
            "intensity_score": round(score),
        }

    def exercise_metrics(
        self, sessions: Iterable[WorkoutSession], exercise: str
    ) -> Dict[str, object]:
        """Return totals and a simple weight trend for one exercise."""
        appearances = []
        for s in reversed(SessionMetrics.completed(sessions)):
            for ex in s.exercises:
                if ex.exercise_name.casefold() == exercise.casefold():
                    appearances.append((s.completed_at, ex))
        if not appearances:
            return {
                "name": exercise,
                "total_sets": 0,
                "total_reps": 0,
                "total_volume": 0.0,
                "max_weight": 0.0,
                "average_weight": 0.0,
                "trend": "stable",
                "last_performed": None,
            }
        done_sets = [st for _ts, ex in appearances for st in ex.sets if st.is_completed]
        weights = [float(st.actual_weight) for st in done_sets if st.actual_weight]

        def avg_weight(items: list) -> float:
            per_session = []
            for _ts, ex in items:
                ws = [float(st.actual_weight or 0) for st in ex.sets if st.is_completed]
                per_session.append(MathTools.mean(ws))
            return MathTools.mean(per_session)

        trend = "stable"
        recent = appearances[-3:]
        older = appearances[-6:-3]
        if older:
            recent_avg = avg_weight(recent)
            older_avg = avg_weight(older)
            band = older_avg * 0.05
            if recent_avg - older_avg > band:
                trend = "up"
            elif recent_avg - older_avg < -band:
                trend = "down"
        return {
            "name": exercise,
            "total_sets": len(done_sets),
            "total_reps": sum(int(st.actual_reps or 0) for st in done_sets),
            "total_volume": round(sum(st.volume for st in done_sets), 2),
            "max_weight": max(weights, default=0.0),
            "average_weight": round(MathTools.mean(weights), 2),
            "trend": trend,
            "last_performed": appearances[-1][0],
        }

    def weekly_trends(
        self,
        sessions: Iterable[WorkoutSession],
        now: datetime.datetime,
        metric: str = "duration",
        weeks: int = 12,
    ) -> List[Dict[str, object]]:
        """Return ``metric`` per 7-day bucket, oldest bucket first."""
        if metric not in ("duration", "volume", "frequency"):
            raise ValueError(f"unknown metric: {metric}")
        now = ensure_aware(now)
        done = SessionMetrics.completed(sessions)
        result: list[Dict[str, object]] = []
        for idx in range(weeks - 1, -1, -1):
            end = now - datetime.timedelta(days=7 * idx)
            bucket = SessionMetrics.within_days(done, end, 7)
            if metric == "duration":
                value = sum(s.total_duration_seconds for s in bucket) / 60
            elif metric == "volume":
                value = sum(SessionMetrics.volume(s) for s in bucket)
            else:
                value = float(len(bucket))
            start = end - datetime.timedelta(days=7)
            result.append({"start": start, "value": round(value, 2)})
        return result

    def summary_for(
        self,
        sessions: Iterable[WorkoutSession],
        now: datetime.datetime,
        exercise: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> Dict[str, object]:
        if session_id:
            match = next((s for s in sessions if s.id == session_id), None)
            if match is None:
                raise ValueError(f"unknown session: {session_id}")
            return self.workout_metrics(match)
        if exercise:
            return self.exercise_metrics(sessions, exercise)
        return self.overview(sessions, now)
