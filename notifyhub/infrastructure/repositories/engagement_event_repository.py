"""Persistence helpers for engagement events."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import false
from sqlalchemy.orm import Session

from notifyhub.domain.entities import EngagementEvent
from notifyhub.infrastructure.models import EngagementEventModel
from notifyhub.utils import ensure_utc, ensure_utc_naive


class EngagementEventRepository:
    """Append engagement events and record reactions on them."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create(self, event: EngagementEvent) -> EngagementEvent:
        model = EngagementEventModel(
            user_id=event.user_id,
            notification_id=event.notification_id,
            channel=event.channel,
            notification_type=event.notification_type,
            sent_at=ensure_utc_naive(event.sent_at),
            send_hour=event.send_hour,
            send_day_of_week=event.send_day_of_week,
            cohort_name=event.cohort_name,
            age_bracket=event.age_bracket,
            income_bracket=event.income_bracket,
            industry=event.industry,
            schema_version=event.schema_version,
            scoring_policy_version=event.scoring_policy_version,
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def get(self, event_id: int) -> EngagementEvent | None:
        model = self.session.get(EngagementEventModel, event_id)
        if model is None:
            return None
        return self._to_entity(model)

    def get_by_notification(self, notification_id: int) -> EngagementEvent | None:
        model = (
            self.session.query(EngagementEventModel)
            .filter(EngagementEventModel.notification_id == notification_id)
            .order_by(EngagementEventModel.id.desc())
            .first()
        )
        if model is None:
            return None
        return self._to_entity(model)

    def record_engagement(
        self,
        event_id: int,
        *,
        stage: str,
        occurred_at: datetime,
        minutes: int,
    ) -> bool:
        """Set the flag, timestamp and delta of ``stage`` if not yet recorded.

        Only the engagement columns are written; the send-time snapshot of the
        row is never modified.
        """

        flag, timestamp, delta = _STAGE_COLUMNS[stage]
        updated = (
            self.session.query(EngagementEventModel)
            .filter(EngagementEventModel.id == event_id)
            .filter(flag == false())
            .update(
                {
                    flag: True,
                    timestamp: ensure_utc_naive(occurred_at),
                    delta: minutes,
                },
                synchronize_session=False,
            )
        )
        self.session.commit()
        return updated == 1

    def list_ids_sent_between(self, start: datetime, end: datetime) -> list[int]:
        """Return the ids of events sent in ``[start, end)`` ordered by send time."""

        query = (
            self.session.query(EngagementEventModel.id)
            .filter(EngagementEventModel.sent_at >= ensure_utc_naive(start))
            .filter(EngagementEventModel.sent_at < ensure_utc_naive(end))
            .order_by(EngagementEventModel.sent_at.asc(), EngagementEventModel.id.asc())
        )
        return [event_id for (event_id,) in query.all()]

    def list_by_ids(self, event_ids: Sequence[int]) -> list[EngagementEvent]:
        """Load ``event_ids`` in the order given, skipping ids that vanished."""

        if not event_ids:
            return []
        models = (
            self.session.query(EngagementEventModel)
            .filter(EngagementEventModel.id.in_(list(event_ids)))
            .all()
        )
        by_id = {model.id: model for model in models}
        return [self._to_entity(by_id[event_id]) for event_id in event_ids if event_id in by_id]

    @staticmethod
    def _to_entity(model: EngagementEventModel) -> EngagementEvent:
        return EngagementEvent(
            id=model.id,
            user_id=model.user_id,
            notification_id=model.notification_id,
            channel=model.channel,
            notification_type=model.notification_type,
            sent_at=ensure_utc(model.sent_at),
            send_hour=model.send_hour,
            send_day_of_week=model.send_day_of_week,
            cohort_name=model.cohort_name,
            age_bracket=model.age_bracket,
            income_bracket=model.income_bracket,
            industry=model.industry,
            opened=bool(model.opened),
            opened_at=ensure_utc(model.opened_at),
            clicked=bool(model.clicked),
            clicked_at=ensure_utc(model.clicked_at),
            converted=bool(model.converted),
            converted_at=ensure_utc(model.converted_at),
            time_to_open=model.time_to_open,
            time_to_click=model.time_to_click,
            time_to_convert=model.time_to_convert,
            schema_version=model.schema_version,
            scoring_policy_version=model.scoring_policy_version,
            created_at=ensure_utc(model.created_at),
        )


_STAGE_COLUMNS = {
    "open": (
        EngagementEventModel.opened,
        EngagementEventModel.opened_at,
        EngagementEventModel.time_to_open,
    ),
    "click": (
        EngagementEventModel.clicked,
        EngagementEventModel.clicked_at,
        EngagementEventModel.time_to_click,
    ),
    "convert": (
        EngagementEventModel.converted,
        EngagementEventModel.converted_at,
        EngagementEventModel.time_to_convert,
    ),
}


__all__ = ["EngagementEventRepository"]
