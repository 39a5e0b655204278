"""SQLAlchemy model for engagement events of sent notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from notifyhub.infrastructure.database import Base
from notifyhub.utils import now_utc_naive


class EngagementEventModel(Base):
    """Append-only record of a delivered notification and its engagement."""

    __tablename__ = "engagement_event"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    notification_id = Column(
        Integer,
        ForeignKey("notification_queue.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    channel = Column(String(20), nullable=False)
    notification_type = Column(String(60), nullable=False)
    sent_at = Column(DateTime(), nullable=False, index=True)
    send_hour = Column(Integer, nullable=False, index=True)
    send_day_of_week = Column(Integer, nullable=False)
    cohort_name = Column(String(30), nullable=True)
    age_bracket = Column(String(20), nullable=True, index=True)
    income_bracket = Column(String(20), nullable=True)
    industry = Column(String(60), nullable=True, index=True)
    opened = Column(Boolean, nullable=False, default=False)
    opened_at = Column(DateTime(), nullable=True)
    clicked = Column(Boolean, nullable=False, default=False)
    clicked_at = Column(DateTime(), nullable=True)
    converted = Column(Boolean, nullable=False, default=False)
    converted_at = Column(DateTime(), nullable=True)
    time_to_open = Column(Integer, nullable=True)
    time_to_click = Column(Integer, nullable=True)
    time_to_convert = Column(Integer, nullable=True)
    schema_version = Column(Integer, nullable=False, default=1)
    scoring_policy_version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(), nullable=False, default=now_utc_naive)


__all__ = ["EngagementEventModel"]
