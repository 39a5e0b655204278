"""SQLAlchemy model for send-time cohort assignments."""

from sqlalchemy import Column, DateTime, Float, Integer, String

from notifyhub.infrastructure.database import Base
from notifyhub.utils import now_utc_naive


class SendTimeCohortModel(Base):
    """One cohort row per user, written once at assignment time."""

    __tablename__ = "send_time_cohort"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, unique=True, index=True)
    cohort_name = Column(String(30), nullable=False, index=True)
    send_hour_min = Column(Integer, nullable=False)
    send_hour_max = Column(Integer, nullable=False)
    assigned_at = Column(DateTime(), nullable=False, default=now_utc_naive)
    emails_sent = Column(Integer, nullable=False, default=0)
    emails_clicked = Column(Integer, nullable=False, default=0)
    click_rate = Column(Float, nullable=True)
    avg_time_to_click = Column(Integer, nullable=True)
    last_updated = Column(DateTime(), nullable=True)


__all__ = ["SendTimeCohortModel"]
