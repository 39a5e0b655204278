"""Aggregate engagement events for one analysis date, e.g. from a daily cron."""

from __future__ import annotations

import argparse
import logging
from datetime import date, timedelta

from notifyhub.application.use_cases.send_time import run_send_time_analysis
from notifyhub.config import get_settings
from notifyhub.infrastructure.database import SessionLocal, initialize_database
from notifyhub.utils import now_utc


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute hourly, demographic and cohort send-time analytics.",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Analysis date as YYYY-MM-DD (default: yesterday in UTC)",
    )
    parser.add_argument(
        "--window-days",
        type=int,
        default=None,
        help="Days of events to scan (default: ANALYTICS_WINDOW_DAYS)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    analysis_date = args.date or (now_utc().date() - timedelta(days=1))
    initialize_database()

    session = SessionLocal()
    try:
        result = run_send_time_analysis(
            session, analysis_date=analysis_date, window_days=args.window_days
        )
    finally:
        session.close()

    print(
        f"Send-time analysis for {result.analysis_date.isoformat()}:\n"
        f"  events processed: {result.events_processed}\n"
        f"  rows skipped: {result.rows_skipped}\n"
        f"  variance: {result.variance:.4f}\n"
        f"  recommendation: {result.recommendation.message}\n"
        f"  optimization enabled: {'yes' if result.optimization_enabled else 'no'}"
    )
    if result.errors:
        raise SystemExit("Errors: " + "; ".join(result.errors))


if __name__ == "__main__":
    main()
