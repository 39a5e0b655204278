"""SQLAlchemy model for the notification delivery queue."""

from sqlalchemy import Column, DateTime, Index, Integer, JSON, String, Text

from notifyhub.infrastructure.database import Base
from notifyhub.utils import now_utc_naive


class NotificationQueueModel(Base):
    """Database representation of a queued notification."""

    __tablename__ = "notification_queue"
    __table_args__ = (
        Index("ix_notification_queue_due", "status", "scheduled_for"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    channel = Column(String(20), nullable=False)
    type = Column(String(60), nullable=False, default="general")
    status = Column(String(20), nullable=False, default="pending")
    priority = Column(Integer, nullable=False, default=5)
    subject = Column(String(255), nullable=True)
    body = Column(Text, nullable=False)
    metadata_json = Column("metadata", JSON, nullable=True)
    scheduled_for = Column(DateTime(), nullable=False, default=now_utc_naive)
    sent_at = Column(DateTime(), nullable=True)
    failed_at = Column(DateTime(), nullable=True)
    failure_reason = Column(Text, nullable=True)
    retry_count = Column(Integer, nullable=False, default=0)
    claim_token = Column(String(36), nullable=True, index=True)
    claimed_until = Column(DateTime(), nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_utc_naive)


__all__ = ["NotificationQueueModel"]
