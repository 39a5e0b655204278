"""Run one delivery cycle over the due notifications, e.g. from cron."""

from __future__ import annotations

import argparse
import logging

from sqlalchemy.exc import SQLAlchemyError

from notifyhub.application.use_cases.notifications import dispatch_due_notifications
from notifyhub.config import get_settings
from notifyhub.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Deliver the notifications whose scheduled time has come.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of entries to claim (default: DISPATCH_BATCH_SIZE)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    initialize_database()

    session = SessionLocal()
    try:
        summary = dispatch_due_notifications(session, settings=settings, limit=args.limit)
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not claim due notifications: {exc}") from exc
    finally:
        session.close()

    print(
        "Dispatch finished:\n"
        f"  claimed: {summary.claimed}\n"
        f"  sent: {summary.sent}\n"
        f"  deferred (quiet hours): {summary.deferred}\n"
        f"  rescheduled (channel disabled): {summary.rescheduled}\n"
        f"  retried: {summary.retried}\n"
        f"  failed: {summary.failed}\n"
        f"  cancelled: {summary.cancelled}\n"
        f"  errors: {summary.errors}"
    )


if __name__ == "__main__":
    main()
