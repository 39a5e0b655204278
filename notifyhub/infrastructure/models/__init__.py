"""ORM models used by the application infrastructure."""

from .engagement_event import EngagementEventModel
from .notification_queue import NotificationQueueModel
from .send_time_analytics import DemographicPerformanceModel, SendTimeAnalyticsModel
from .send_time_cohort import SendTimeCohortModel
from .user_profile import UserProfileModel

__all__ = [
    "EngagementEventModel",
    "NotificationQueueModel",
    "DemographicPerformanceModel",
    "SendTimeAnalyticsModel",
    "SendTimeCohortModel",
    "UserProfileModel",
]
