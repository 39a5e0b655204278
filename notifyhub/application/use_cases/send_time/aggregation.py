"""Daily batch job rolling engagement events into send-time summaries."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notifyhub.config import get_settings
from notifyhub.domain.entities import (
    SEGMENT_AGE,
    SEGMENT_INCOME,
    SEGMENT_INDUSTRY,
    DemographicPerformance,
    EngagementEvent,
    SendTimeAnalytics,
)
from notifyhub.domain.policies import (
    DEFAULT_OPTIMIZATION_POLICY,
    OptimizationPolicy,
    get_scoring_policy,
)
from notifyhub.infrastructure.repositories import (
    DemographicPerformanceRepository,
    EngagementEventRepository,
    SendTimeAnalyticsRepository,
    SendTimeCohortRepository,
)
from notifyhub.utils import now_utc

from .optimization import Recommendation, recommend_from_click_rates

logger = logging.getLogger(__name__)

HOURS_PER_DAY = 24
LOAD_BATCH_SIZE = 500
_SEGMENT_FIELDS = (
    (SEGMENT_AGE, "age_bracket"),
    (SEGMENT_INCOME, "income_bracket"),
    (SEGMENT_INDUSTRY, "industry"),
)


class MalformedEventError(ValueError):
    """Raised for an engagement row that cannot be aggregated."""


@dataclass
class _Average:
    total: int = 0
    count: int = 0

    def add(self, value: int | None) -> None:
        if value is None:
            return
        self.total += value
        self.count += 1

    def value(self) -> int | None:
        if not self.count:
            return None
        return int(round(self.total / self.count))


@dataclass
class _HourBucket:
    sent: int = 0
    opened: int = 0
    clicked: int = 0
    converted: int = 0
    score: float = 0.0
    time_to_open: _Average = field(default_factory=_Average)
    time_to_click: _Average = field(default_factory=_Average)
    time_to_convert: _Average = field(default_factory=_Average)


@dataclass
class _SegmentBucket:
    sent: int = 0
    clicked: int = 0
    time_to_click: _Average = field(default_factory=_Average)
    hours: dict[int, list[int]] = field(default_factory=lambda: defaultdict(lambda: [0, 0]))


@dataclass
class _UserBucket:
    sent: int = 0
    clicked: int = 0
    time_to_click: _Average = field(default_factory=_Average)


@dataclass
class AnalysisResult:
    """Summary of one aggregation run."""

    analysis_date: date
    events_processed: int
    rows_skipped: int
    hourly: list[SendTimeAnalytics]
    segments_written: int
    cohorts_updated: int
    recommendation: Recommendation
    optimization_enabled: bool
    errors: list[str] = field(default_factory=list)

    @property
    def variance(self) -> float:
        return self.recommendation.variance


def _rate(part: int, whole: int) -> float:
    return round(part / whole, 4) if whole else 0.0


def _validate(event: EngagementEvent) -> float:
    """Return the engagement score of ``event`` or raise for malformed rows."""

    if not isinstance(event.send_hour, int) or not 0 <= event.send_hour < HOURS_PER_DAY:
        raise MalformedEventError(f"send_hour {event.send_hour!r} out of range")
    if event.sent_at is None:
        raise MalformedEventError("missing sent_at")
    if not event.user_id:
        raise MalformedEventError("missing user_id")
    for label, minutes in (
        ("time_to_open", event.time_to_open),
        ("time_to_click", event.time_to_click),
        ("time_to_convert", event.time_to_convert),
    ):
        if minutes is None:
            continue
        if not isinstance(minutes, int) or isinstance(minutes, bool):
            raise MalformedEventError(f"{label} {minutes!r} is not a number of minutes")
        if minutes < 0:
            raise MalformedEventError(f"negative {label}")
    for _, attribute in _SEGMENT_FIELDS:
        value = getattr(event, attribute)
        if value is not None and not isinstance(value, str):
            raise MalformedEventError(f"{attribute} {value!r} is not text")

    policy = get_scoring_policy(event.scoring_policy_version)
    if policy is None:
        raise MalformedEventError(
            f"unknown scoring policy version {event.scoring_policy_version!r}"
        )
    weights = policy.weights_for(event.channel)
    half_life = policy.decay_half_life_minutes
    score = 0.0
    for reached, weight, minutes in (
        (event.opened, weights.open, event.time_to_open),
        (event.clicked, weights.click, event.time_to_click),
        (event.converted, weights.convert, event.time_to_convert),
    ):
        if reached:
            score += weight * 0.5 ** ((minutes or 0) / half_life)
    return score


def _load_events(
    repository: EngagementEventRepository, event_ids: list[int]
) -> Iterator[tuple[int, EngagementEvent | None, Exception | None]]:
    """Yield ``(event_id, event, error)`` for every id in ``event_ids``.

    Events are loaded in batches. A batch holding a row that cannot be
    converted is retried one row at a time so only that row is reported.
    """

    for offset in range(0, len(event_ids), LOAD_BATCH_SIZE):
        chunk = event_ids[offset : offset + LOAD_BATCH_SIZE]
        try:
            events = repository.list_by_ids(chunk)
        except (ValueError, TypeError):
            repository.session.expunge_all()
        else:
            for event in events:
                yield event.id, event, None
            continue

        for event_id in chunk:
            try:
                loaded = repository.list_by_ids([event_id])
            except (ValueError, TypeError) as exc:
                repository.session.expunge_all()
                yield event_id, None, exc
                continue
            for event in loaded:
                yield event_id, event, None


def run_send_time_analysis(
    session: Session,
    *,
    analysis_date: date | None = None,
    window_days: int | None = None,
    policy: OptimizationPolicy = DEFAULT_OPTIMIZATION_POLICY,
    now: datetime | None = None,
) -> AnalysisResult:
    """Aggregate engagement events into hourly, segment and cohort summaries.

    Events sent during the ``window_days`` preceding the end of
    ``analysis_date`` are scanned. Summaries are upserted by their natural
    keys, so running the job twice for the same date overwrites instead of
    double counting. Malformed or unreadable rows are skipped with a warning
    and database failures are logged per stage; the run itself never raises.
    Cohort counters always describe the newest analysed window, so a re-run
    for an older date leaves them alone.
    """

    current = now or now_utc()
    target_date = analysis_date or current.astimezone(timezone.utc).date()
    days = window_days or get_settings().analytics_window_days
    window_end = datetime.combine(target_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
    window_start = window_end - timedelta(days=days)

    logger.info(
        "Starting send-time analysis for %s over %s days", target_date.isoformat(), days
    )

    hours = [_HourBucket() for _ in range(HOURS_PER_DAY)]
    segments: dict[tuple[str, str], _SegmentBucket] = defaultdict(_SegmentBucket)
    users: dict[str, _UserBucket] = defaultdict(_UserBucket)
    processed = 0
    skipped = 0

    errors: list[str] = []
    event_repo = EngagementEventRepository(session)
    try:
        event_ids = event_repo.list_ids_sent_between(window_start, window_end)
    except SQLAlchemyError as exc:
        session.rollback()
        event_ids = []
        logger.exception("Failed to scan engagement events: %s", exc)
        errors.append(f"scan: {exc}")

    for event_id, event, load_error in _load_events(event_repo, event_ids):
        if event is None:
            skipped += 1
            logger.warning("Skipping unreadable engagement event %s: %s", event_id, load_error)
            continue
        try:
            score = _validate(event)
        except (ValueError, TypeError) as exc:
            skipped += 1
            logger.warning("Skipping engagement event %s: %s", event.id, exc)
            continue

        processed += 1
        bucket = hours[event.send_hour]
        bucket.sent += 1
        bucket.opened += int(event.opened)
        bucket.clicked += int(event.clicked)
        bucket.converted += int(event.converted)
        bucket.score += score
        if event.opened:
            bucket.time_to_open.add(event.time_to_open)
        if event.clicked:
            bucket.time_to_click.add(event.time_to_click)
        if event.converted:
            bucket.time_to_convert.add(event.time_to_convert)

        for segment_type, attribute in _SEGMENT_FIELDS:
            value = getattr(event, attribute)
            if not value:
                continue
            segment = segments[(segment_type, value)]
            segment.sent += 1
            segment.hours[event.send_hour][0] += 1
            if event.clicked:
                segment.clicked += 1
                segment.hours[event.send_hour][1] += 1
                segment.time_to_click.add(event.time_to_click)

        user = users[event.user_id]
        user.sent += 1
        if event.clicked:
            user.clicked += 1
            user.time_to_click.add(event.time_to_click)

    hourly_rows = [
        SendTimeAnalytics(
            id=None,
            analysis_date=target_date,
            send_hour=hour,
            emails_sent=bucket.sent,
            emails_opened=bucket.opened,
            emails_clicked=bucket.clicked,
            emails_converted=bucket.converted,
            open_rate=_rate(bucket.opened, bucket.sent),
            click_rate=_rate(bucket.clicked, bucket.sent),
            conversion_rate=_rate(bucket.converted, bucket.sent),
            avg_time_to_open=bucket.time_to_open.value(),
            avg_time_to_click=bucket.time_to_click.value(),
            avg_time_to_convert=bucket.time_to_convert.value(),
            engagement_score=round(bucket.score / bucket.sent, 4) if bucket.sent else None,
            sample_size=bucket.sent,
        )
        for hour, bucket in enumerate(hours)
    ]
    recommendation = recommend_from_click_rates(
        [(row.click_rate, row.sample_size) for row in hourly_rows], policy
    )
    variance = round(recommendation.variance, 6)

    analytics_repo = SendTimeAnalyticsRepository(session)
    optimization_enabled = False
    latest_analysed: date | None = None
    try:
        latest_analysed = analytics_repo.latest_analysis_date()
        optimization_enabled = analytics_repo.latest_optimization_flag(
            target_date + timedelta(days=1)
        )
    except (SQLAlchemyError, ValueError, TypeError) as exc:
        session.rollback()
        logger.exception("Failed to read the optimization flag: %s", exc)
        errors.append(f"flag: {exc}")
    else:
        try:
            for row in hourly_rows:
                row.variance = variance
                row.optimization_enabled = optimization_enabled
                analytics_repo.upsert(row, updated_at=current)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Failed to store hourly send-time analytics: %s", exc)
            errors.append(f"hourly: {exc}")

    segments_written = 0
    demographic_repo = DemographicPerformanceRepository(session)
    try:
        for (segment_type, segment_value), segment in sorted(segments.items()):
            optimal_hour, optimal_rate = _optimal_hour(segment, policy)
            demographic_repo.upsert(
                DemographicPerformance(
                    id=None,
                    analysis_date=target_date,
                    segment_type=segment_type,
                    segment_value=segment_value,
                    emails_sent=segment.sent,
                    emails_clicked=segment.clicked,
                    click_rate=_rate(segment.clicked, segment.sent),
                    avg_time_to_click=segment.time_to_click.value(),
                    optimal_send_hour=optimal_hour,
                    optimal_hour_click_rate=optimal_rate,
                ),
                updated_at=current,
            )
            segments_written += 1
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        segments_written = 0
        logger.exception("Failed to store demographic performance: %s", exc)
        errors.append(f"demographics: {exc}")

    cohorts_updated = 0
    cohort_repo = SendTimeCohortRepository(session)
    if latest_analysed is not None and target_date < latest_analysed:
        logger.info(
            "Keeping cohort counters of %s; %s is an older date",
            latest_analysed.isoformat(),
            target_date.isoformat(),
        )
    else:
        try:
            # Users without events in the window drop back to zero.
            cohort_repo.reset_counters(updated_at=current)
            for user_id, user in sorted(users.items()):
                if cohort_repo.update_counters(
                    user_id,
                    emails_sent=user.sent,
                    emails_clicked=user.clicked,
                    click_rate=_rate(user.clicked, user.sent),
                    avg_time_to_click=user.time_to_click.value(),
                    updated_at=current,
                ):
                    cohorts_updated += 1
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            cohorts_updated = 0
            logger.exception("Failed to update cohort counters: %s", exc)
            errors.append(f"cohorts: {exc}")

    logger.info(
        "Send-time analysis for %s complete: %s events, %s skipped, variance %.1f%%, %s",
        target_date.isoformat(),
        processed,
        skipped,
        recommendation.variance * 100,
        recommendation.decision,
    )

    return AnalysisResult(
        analysis_date=target_date,
        events_processed=processed,
        rows_skipped=skipped,
        hourly=hourly_rows,
        segments_written=segments_written,
        cohorts_updated=cohorts_updated,
        recommendation=recommendation,
        optimization_enabled=optimization_enabled,
        errors=errors,
    )


def _optimal_hour(
    segment: _SegmentBucket, policy: OptimizationPolicy
) -> tuple[int | None, float | None]:
    best_hour: int | None = None
    best_rate = 0.0
    for hour in sorted(segment.hours):
        sends, clicks = segment.hours[hour]
        if sends < policy.min_segment_hour_sample_size:
            continue
        rate = clicks / sends
        if rate > best_rate:
            best_rate = rate
            best_hour = hour
    if best_hour is None:
        return None, None
    return best_hour, round(best_rate, 4)


__all__ = ["AnalysisResult", "MalformedEventError", "run_send_time_analysis"]
