"""CLI commands for Flare Insights."""

import argparse
import json
import sys
from typing import Optional

from sqlalchemy.orm import Session

from app.database import Base, SessionLocal, engine
from app.services.analysis_schemas import TimeRange, TimeRangeOption
from app.services.correlation_orchestration_service import CorrelationOrchestrationService
from app.services.event_repository import EventRepository, RepositoryError
from app.services.pattern_detection_service import PatternDetectionService
from app.services.time_utils import DAY_MS, now_ms
from app.services.trend_service import MonthlyTrendService


def _print_json(model) -> None:
    print(json.dumps(model.model_dump(mode="json", by_alias=True), indent=2))


def _last_days(days: int) -> TimeRange:
    end = now_ms()
    return TimeRange(start=end - days * DAY_MS, end=end)


def init_db() -> None:
    """Create all tables (development databases; production uses alembic)."""
    Base.metadata.create_all(bind=engine)
    print("Database tables created.")


def correlate(user_id: str, symptom_id: str, days: int = 30) -> None:
    """Print enhanced correlations for a symptom over the last ``days`` days."""
    db: Session = SessionLocal()

    try:
        service = CorrelationOrchestrationService(EventRepository(db))
        _print_json(service.compute_with_combinations(user_id, symptom_id, _last_days(days)))
    except RepositoryError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()


def trends(user_id: str, time_range: str = TimeRangeOption.LAST_90D.value) -> None:
    """Print the monthly flare trend."""
    db: Session = SessionLocal()

    try:
        service = MonthlyTrendService(EventRepository(db))
        _print_json(service.get_monthly_trend_data(user_id, TimeRangeOption(time_range)))
    except RepositoryError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()


def patterns(user_id: str, days: int = 30, symptom_id: Optional[str] = None) -> None:
    """
    Print detected timeline patterns over the last ``days`` days.

    With ``symptom_id``, correlations against that symptom supply the pattern
    coefficients.
    """
    db: Session = SessionLocal()

    try:
        repository = EventRepository(db)
        time_range = _last_days(days)
        correlations = []
        if symptom_id:
            correlations = CorrelationOrchestrationService(repository).compute_with_combinations(
                user_id, symptom_id, time_range
            ).correlations
        service = PatternDetectionService(repository)
        _print_json(service.detect_for_user(user_id, time_range, correlations))
    except RepositoryError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Flare Insights CLI")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init-db command
    subparsers.add_parser("init-db", help="Create database tables")

    # correlate command
    correlate_parser = subparsers.add_parser(
        "correlate", help="Correlate foods and triggers with a symptom"
    )
    correlate_parser.add_argument("--user", required=True, help="User id")
    correlate_parser.add_argument("--symptom", required=True, help="Symptom id or name")
    correlate_parser.add_argument(
        "--days", type=int, default=30, help="Days of history to analyze (default: 30)"
    )

    # trends command
    trends_parser = subparsers.add_parser("trends", help="Monthly flare trend")
    trends_parser.add_argument("--user", required=True, help="User id")
    trends_parser.add_argument(
        "--range",
        dest="time_range",
        choices=[o.value for o in TimeRangeOption],
        default=TimeRangeOption.LAST_90D.value,
        help="Time range (default: last90d)",
    )

    # patterns command
    patterns_parser = subparsers.add_parser("patterns", help="Timeline pattern detection")
    patterns_parser.add_argument("--user", required=True, help="User id")
    patterns_parser.add_argument(
        "--days", type=int, default=30, help="Days of history to analyze (default: 30)"
    )
    patterns_parser.add_argument(
        "--symptom", default=None, help="Symptom id or name used to score patterns"
    )

    args = parser.parse_args()

    if args.command == "init-db":
        init_db()
    elif args.command == "correlate":
        correlate(args.user, args.symptom, args.days)
    elif args.command == "trends":
        trends(args.user, args.time_range)
    elif args.command == "patterns":
        patterns(args.user, args.days, args.symptom)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
