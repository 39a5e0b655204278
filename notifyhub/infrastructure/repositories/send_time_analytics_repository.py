"""Persistence helpers for hourly and demographic send-time summaries."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from notifyhub.domain.entities import DemographicPerformance, SendTimeAnalytics
from notifyhub.infrastructure.models import (
    DemographicPerformanceModel,
    SendTimeAnalyticsModel,
)
from notifyhub.utils import ensure_utc, ensure_utc_naive, now_utc


class SendTimeAnalyticsRepository:
    """Upsert hourly summaries keyed by ``(analysis_date, send_hour)``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert(self, row: SendTimeAnalytics, *, updated_at: datetime | None = None) -> None:
        """Insert or overwrite the metrics of ``row``.

        ``optimization_enabled`` is only written when the row is created; it is
        an operator decision and re-running the aggregation must not reset it.
        """

        stamp = ensure_utc_naive(updated_at or now_utc())
        model = (
            self.session.query(SendTimeAnalyticsModel)
            .filter(SendTimeAnalyticsModel.analysis_date == row.analysis_date)
            .filter(SendTimeAnalyticsModel.send_hour == row.send_hour)
            .first()
        )
        if model is None:
            model = SendTimeAnalyticsModel(
                analysis_date=row.analysis_date,
                send_hour=row.send_hour,
                optimization_enabled=row.optimization_enabled,
                created_at=stamp,
            )
        model.emails_sent = row.emails_sent
        model.emails_opened = row.emails_opened
        model.emails_clicked = row.emails_clicked
        model.emails_converted = row.emails_converted
        model.open_rate = row.open_rate
        model.click_rate = row.click_rate
        model.conversion_rate = row.conversion_rate
        model.avg_time_to_open = row.avg_time_to_open
        model.avg_time_to_click = row.avg_time_to_click
        model.avg_time_to_convert = row.avg_time_to_convert
        model.engagement_score = row.engagement_score
        model.sample_size = row.sample_size
        model.variance = row.variance
        model.updated_at = stamp
        self.session.add(model)

    def list_for_date(self, analysis_date: date) -> Sequence[SendTimeAnalytics]:
        query = (
            self.session.query(SendTimeAnalyticsModel)
            .filter(SendTimeAnalyticsModel.analysis_date == analysis_date)
            .order_by(SendTimeAnalyticsModel.send_hour.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def latest_analysis_date(self) -> date | None:
        return self.session.query(func.max(SendTimeAnalyticsModel.analysis_date)).scalar()

    def latest_optimization_flag(self, before: date) -> bool:
        """Return the flag of the most recent analysis date prior to ``before``."""

        model = (
            self.session.query(SendTimeAnalyticsModel)
            .filter(SendTimeAnalyticsModel.analysis_date < before)
            .order_by(
                SendTimeAnalyticsModel.analysis_date.desc(),
                SendTimeAnalyticsModel.send_hour.asc(),
            )
            .first()
        )
        return bool(model and model.optimization_enabled)

    def set_optimization_enabled(self, analysis_date: date, enabled: bool) -> int:
        updated = (
            self.session.query(SendTimeAnalyticsModel)
            .filter(SendTimeAnalyticsModel.analysis_date == analysis_date)
            .update(
                {
                    SendTimeAnalyticsModel.optimization_enabled: enabled,
                    SendTimeAnalyticsModel.updated_at: ensure_utc_naive(now_utc()),
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated

    @staticmethod
    def _to_entity(model: SendTimeAnalyticsModel) -> SendTimeAnalytics:
        return SendTimeAnalytics(
            id=model.id,
            analysis_date=model.analysis_date,
            send_hour=model.send_hour,
            emails_sent=model.emails_sent or 0,
            emails_opened=model.emails_opened or 0,
            emails_clicked=model.emails_clicked or 0,
            emails_converted=model.emails_converted or 0,
            open_rate=model.open_rate or 0.0,
            click_rate=model.click_rate or 0.0,
            conversion_rate=model.conversion_rate or 0.0,
            avg_time_to_open=model.avg_time_to_open,
            avg_time_to_click=model.avg_time_to_click,
            avg_time_to_convert=model.avg_time_to_convert,
            engagement_score=model.engagement_score,
            sample_size=model.sample_size or 0,
            variance=model.variance,
            optimization_enabled=bool(model.optimization_enabled),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )


class DemographicPerformanceRepository:
    """Upsert segment summaries keyed by ``(analysis_date, type, value)``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert(
        self, row: DemographicPerformance, *, updated_at: datetime | None = None
    ) -> None:
        stamp = ensure_utc_naive(updated_at or now_utc())
        model = self._find(row.analysis_date, row.segment_type, row.segment_value)
        if model is None:
            model = DemographicPerformanceModel(
                analysis_date=row.analysis_date,
                segment_type=row.segment_type,
                segment_value=row.segment_value,
                created_at=stamp,
            )
        model.emails_sent = row.emails_sent
        model.emails_clicked = row.emails_clicked
        model.click_rate = row.click_rate
        model.avg_time_to_click = row.avg_time_to_click
        model.optimal_send_hour = row.optimal_send_hour
        model.optimal_hour_click_rate = row.optimal_hour_click_rate
        model.updated_at = stamp
        self.session.add(model)

    def get_segment(
        self, analysis_date: date, segment_type: str, segment_value: str
    ) -> DemographicPerformance | None:
        model = self._find(analysis_date, segment_type, segment_value)
        if model is None:
            return None
        return self._to_entity(model)

    def latest_segment(
        self, segment_type: str, segment_value: str, *, on_or_before: date
    ) -> DemographicPerformance | None:
        model = (
            self.session.query(DemographicPerformanceModel)
            .filter(
                DemographicPerformanceModel.segment_type == segment_type,
                DemographicPerformanceModel.segment_value == segment_value,
                DemographicPerformanceModel.analysis_date <= on_or_before,
            )
            .order_by(DemographicPerformanceModel.analysis_date.desc())
            .first()
        )
        if model is None:
            return None
        return self._to_entity(model)

    def list_for_date(self, analysis_date: date) -> Sequence[DemographicPerformance]:
        query = (
            self.session.query(DemographicPerformanceModel)
            .filter(DemographicPerformanceModel.analysis_date == analysis_date)
            .order_by(
                DemographicPerformanceModel.click_rate.desc(),
                DemographicPerformanceModel.segment_type.asc(),
                DemographicPerformanceModel.segment_value.asc(),
            )
        )
        return [self._to_entity(model) for model in query.all()]

    def _find(
        self, analysis_date: date, segment_type: str, segment_value: str
    ) -> DemographicPerformanceModel | None:
        return (
            self.session.query(DemographicPerformanceModel)
            .filter(DemographicPerformanceModel.analysis_date == analysis_date)
            .filter(DemographicPerformanceModel.segment_type == segment_type)
            .filter(DemographicPerformanceModel.segment_value == segment_value)
            .first()
        )

    @staticmethod
    def _to_entity(model: DemographicPerformanceModel) -> DemographicPerformance:
        return DemographicPerformance(
            id=model.id,
            analysis_date=model.analysis_date,
            segment_type=model.segment_type,
            segment_value=model.segment_value,
            emails_sent=model.emails_sent or 0,
            emails_clicked=model.emails_clicked or 0,
            click_rate=model.click_rate or 0.0,
            avg_time_to_click=model.avg_time_to_click,
            optimal_send_hour=model.optimal_send_hour,
            optimal_hour_click_rate=model.optimal_hour_click_rate,
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )


__all__ = ["SendTimeAnalyticsRepository", "DemographicPerformanceRepository"]
