"""Repository implementations for infrastructure layer."""

from .engagement_event_repository import EngagementEventRepository
from .notification_queue_repository import NotificationQueueRepository
from .send_time_analytics_repository import (
    DemographicPerformanceRepository,
    SendTimeAnalyticsRepository,
)
from .send_time_cohort_repository import SendTimeCohortRepository
from .user_profile_repository import UserProfileRepository

__all__ = [
    "EngagementEventRepository",
    "NotificationQueueRepository",
    "DemographicPerformanceRepository",
    "SendTimeAnalyticsRepository",
    "SendTimeCohortRepository",
    "UserProfileRepository",
]
