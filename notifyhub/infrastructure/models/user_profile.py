"""SQLAlchemy model for recipient profiles."""

from sqlalchemy import Boolean, Column, DateTime, JSON, String

from notifyhub.infrastructure.database import Base
from notifyhub.utils import now_utc_naive


class UserProfileModel(Base):
    """Profile data owned by the user profile collaborator."""

    __tablename__ = "user_profile"

    id = Column(String(64), primary_key=True)
    email = Column(String(120), nullable=True, index=True)
    phone = Column(String(32), nullable=True)
    chat_handle = Column(String(120), nullable=True)
    timezone = Column(String(64), nullable=True)
    notification_preferences = Column(JSON, nullable=True)
    demographics = Column(JSON, nullable=True)
    analytics_consent = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(), nullable=False, default=now_utc_naive)
    updated_at = Column(DateTime(), nullable=True, onupdate=now_utc_naive)


__all__ = ["UserProfileModel"]
