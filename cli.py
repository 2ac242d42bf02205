import argparse
import csv
import datetime
import json
import logging
import sys
from typing import Optional

from pydantic_core import to_jsonable_python

from config import APP_VERSION, YamlConfig
from fatigue_service import FatigueIndicatorEngine, FatiguePatternClassifier
from insights_service import InsightsService
from models import AnalyticsInputError, WorkoutSession, ensure_aware, parse_sessions
from recovery_service import RecoveryService
from stats_service import StatisticsService
from streak_service import StreakService

logger = logging.getLogger(__name__)


def load_json(path: str) -> list:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict) and "sessions" in data:
        data = data["sessions"]
    if not isinstance(data, list):
        raise AnalyticsInputError(f"{path} must contain a list")
    return data


def resolve_now(value: Optional[str], sessions: list[WorkoutSession]) -> datetime.datetime:
    """Parse ``--now`` or fall back to the latest completion in the log."""
    if value:
        return ensure_aware(datetime.datetime.fromisoformat(value))
    done = [s.completed_at for s in sessions if s.completed_at is not None]
    if not done:
        raise AnalyticsInputError("--now is required when no session is completed")
    return max(done)


def export_sets(sessions: list[WorkoutSession], out_path: str) -> int:
    """Write one CSV row per completed set and return the row count."""
    rows = 0
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(
            ["date", "session", "duration_minutes", "exercise", "reps", "weight", "volume"]
        )
        for s in sessions:
            for ex in s.exercises:
                for st in ex.sets:
                    if not st.is_completed:
                        continue
                    writer.writerow(
                        [
                            (s.completed_at or s.started_at).isoformat(),
                            s.id,
                            round(s.total_duration_seconds / 60),
                            ex.exercise_name,
                            st.actual_reps or 0,
                            st.actual_weight or 0,
                            st.volume,
                        ]
                    )
                    rows += 1
    return rows


def dump(data) -> None:
    print(json.dumps(data, indent=2, default=to_jsonable_python))


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Training insights from a workout log")
    parser.add_argument("--verbose", action="store_true")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("--config", default=None, help="YAML threshold overrides")
    sub = parser.add_subparsers(dest="cmd", required=True)

    for name in ("analyze", "stats", "streak", "fatigue", "export"):
        cmd = sub.add_parser(name)
        cmd.add_argument("sessions", help="JSON file with the session log")
        cmd.add_argument("--now", default=None, help="ISO timestamp used as 'now'")
        if name == "analyze":
            cmd.add_argument("--records", default=None, help="JSON personal-record log")
        if name == "stats":
            cmd.add_argument("--exercise", default=None)
            cmd.add_argument("--session", default=None, help="report one workout by id")
        if name == "export":
            cmd.add_argument("--out", default="sets.csv")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        thresholds = YamlConfig(args.config).load()
        sessions = parse_sessions(load_json(args.sessions))
        if args.cmd == "export":
            count = export_sets(sessions, args.out)
            print(f"Exported {count} sets to {args.out}")
            return 0
        now = resolve_now(args.now, sessions)
        if args.cmd == "analyze":
            records = load_json(args.records) if args.records else None
            report = InsightsService(thresholds).analyze(sessions, now, records)
            dump(report.model_dump(mode="json"))
        elif args.cmd == "stats":
            stats = StatisticsService().summary_for(
                sessions, now, args.exercise, args.session
            )
            dump(stats)
        elif args.cmd == "streak":
            streaks = StreakService.streaks(sessions, now)
            streaks["next_milestone"] = StreakService.next_milestone(streaks["current"])
            streaks["multiplier"] = StreakService.multiplier(streaks["current"])
            dump(streaks)
        elif args.cmd == "fatigue":
            fatigue = RecoveryService.fatigue_level(sessions, now)
            indicators = FatigueIndicatorEngine(thresholds).detect(sessions, now, fatigue)
            patterns = FatiguePatternClassifier(thresholds).classify(sessions, indicators, now)
            dump(
                {
                    "fatigue_level": fatigue,
                    "indicators": [i.model_dump(mode="json") for i in indicators],
                    "patterns": [p.model_dump(mode="json") for p in patterns],
                }
            )
    except (ValueError, OSError) as e:
        logger.debug("command failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
