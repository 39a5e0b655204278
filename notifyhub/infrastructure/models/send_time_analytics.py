"""SQLAlchemy models for aggregated send-time analytics."""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
    UniqueConstraint,
)

from notifyhub.infrastructure.database import Base
from notifyhub.utils import now_utc_naive


class SendTimeAnalyticsModel(Base):
    """Hourly engagement summary for one analysis date."""

    __tablename__ = "send_time_analytics"
    __table_args__ = (
        UniqueConstraint("analysis_date", "send_hour", name="uq_send_time_analytics_date_hour"),
    )

    id = Column(Integer, primary_key=True, index=True)
    analysis_date = Column(Date, nullable=False, index=True)
    send_hour = Column(Integer, nullable=False)
    emails_sent = Column(Integer, nullable=False, default=0)
    emails_opened = Column(Integer, nullable=False, default=0)
    emails_clicked = Column(Integer, nullable=False, default=0)
    emails_converted = Column(Integer, nullable=False, default=0)
    open_rate = Column(Float, nullable=False, default=0.0)
    click_rate = Column(Float, nullable=False, default=0.0)
    conversion_rate = Column(Float, nullable=False, default=0.0)
    avg_time_to_open = Column(Integer, nullable=True)
    avg_time_to_click = Column(Integer, nullable=True)
    avg_time_to_convert = Column(Integer, nullable=True)
    engagement_score = Column(Float, nullable=True)
    sample_size = Column(Integer, nullable=False, default=0)
    variance = Column(Float, nullable=True)
    optimization_enabled = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(), nullable=False, default=now_utc_naive)
    updated_at = Column(DateTime(), nullable=False, default=now_utc_naive)


class DemographicPerformanceModel(Base):
    """Segment engagement summary for one analysis date."""

    __tablename__ = "demographic_performance"
    __table_args__ = (
        UniqueConstraint(
            "analysis_date",
            "segment_type",
            "segment_value",
            name="uq_demographic_performance_segment",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    analysis_date = Column(Date, nullable=False, index=True)
    segment_type = Column(String(20), nullable=False)
    segment_value = Column(String(60), nullable=False)
    emails_sent = Column(Integer, nullable=False, default=0)
    emails_clicked = Column(Integer, nullable=False, default=0)
    click_rate = Column(Float, nullable=False, default=0.0)
    avg_time_to_click = Column(Integer, nullable=True)
    optimal_send_hour = Column(Integer, nullable=True)
    optimal_hour_click_rate = Column(Float, nullable=True)
    created_at = Column(DateTime(), nullable=False, default=now_utc_naive)
    updated_at = Column(DateTime(), nullable=False, default=now_utc_naive)


__all__ = ["SendTimeAnalyticsModel", "DemographicPerformanceModel"]
