"""Persistence helpers for send-time cohort assignments."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from notifyhub.domain.entities import SendTimeCohort
from notifyhub.infrastructure.models import SendTimeCohortModel
from notifyhub.utils import ensure_utc, ensure_utc_naive, now_utc


class SendTimeCohortRepository:
    """Create cohort rows once and maintain their engagement counters."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_user(self, user_id: str) -> SendTimeCohort | None:
        model = (
            self.session.query(SendTimeCohortModel)
            .filter(SendTimeCohortModel.user_id == user_id)
            .first()
        )
        if model is None:
            return None
        return self._to_entity(model)

    def create_if_absent(self, cohort: SendTimeCohort) -> SendTimeCohort:
        """Insert ``cohort`` unless the user already has one.

        The unique constraint on ``user_id`` settles concurrent assignments;
        the losing writer gets the row that was stored first.
        """

        existing = self.get_by_user(cohort.user_id)
        if existing is not None:
            return existing

        model = SendTimeCohortModel(
            user_id=cohort.user_id,
            cohort_name=cohort.cohort_name,
            send_hour_min=cohort.send_hour_min,
            send_hour_max=cohort.send_hour_max,
            assigned_at=ensure_utc_naive(cohort.assigned_at or now_utc()),
            emails_sent=0,
            emails_clicked=0,
        )
        self.session.add(model)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            stored = self.get_by_user(cohort.user_id)
            if stored is None:
                raise
            return stored
        self.session.refresh(model)
        return self._to_entity(model)

    def list(self, *, with_sends_only: bool = False) -> Sequence[SendTimeCohort]:
        query = self.session.query(SendTimeCohortModel)
        if with_sends_only:
            query = query.filter(SendTimeCohortModel.emails_sent > 0)
        query = query.order_by(SendTimeCohortModel.cohort_name, SendTimeCohortModel.user_id)
        return [self._to_entity(model) for model in query.all()]

    def reset_counters(self, *, updated_at: datetime | None = None) -> int:
        """Zero the counters of every cohort row that still reports sends."""

        return (
            self.session.query(SendTimeCohortModel)
            .filter(SendTimeCohortModel.emails_sent != 0)
            .update(
                {
                    SendTimeCohortModel.emails_sent: 0,
                    SendTimeCohortModel.emails_clicked: 0,
                    SendTimeCohortModel.click_rate: None,
                    SendTimeCohortModel.avg_time_to_click: None,
                    SendTimeCohortModel.last_updated: ensure_utc_naive(
                        updated_at or now_utc()
                    ),
                },
                synchronize_session=False,
            )
        )

    def update_counters(
        self,
        user_id: str,
        *,
        emails_sent: int,
        emails_clicked: int,
        click_rate: float | None,
        avg_time_to_click: int | None,
        updated_at: datetime | None = None,
    ) -> bool:
        """Overwrite the running counters; bucket bounds are never touched."""

        updated = (
            self.session.query(SendTimeCohortModel)
            .filter(SendTimeCohortModel.user_id == user_id)
            .update(
                {
                    SendTimeCohortModel.emails_sent: emails_sent,
                    SendTimeCohortModel.emails_clicked: emails_clicked,
                    SendTimeCohortModel.click_rate: click_rate,
                    SendTimeCohortModel.avg_time_to_click: avg_time_to_click,
                    SendTimeCohortModel.last_updated: ensure_utc_naive(
                        updated_at or now_utc()
                    ),
                },
                synchronize_session=False,
            )
        )
        return updated == 1

    @staticmethod
    def _to_entity(model: SendTimeCohortModel) -> SendTimeCohort:
        return SendTimeCohort(
            id=model.id,
            user_id=model.user_id,
            cohort_name=model.cohort_name,
            send_hour_min=model.send_hour_min,
            send_hour_max=model.send_hour_max,
            assigned_at=ensure_utc(model.assigned_at),
            emails_sent=model.emails_sent or 0,
            emails_clicked=model.emails_clicked or 0,
            click_rate=model.click_rate,
            avg_time_to_click=model.avg_time_to_click,
            last_updated=ensure_utc(model.last_updated),
        )


__all__ = ["SendTimeCohortRepository"]
