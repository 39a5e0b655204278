"""Domain entities exposed by the application."""

from .engagement_event import ENGAGEMENT_EVENT_SCHEMA_VERSION, EngagementEvent
from .notification_queue_entry import (
    CHANNEL_CHAT,
    CHANNEL_EMAIL,
    CHANNEL_SMS,
    DEFAULT_PRIORITY,
    MAX_PRIORITY,
    MAX_RETRY_COUNT,
    MIN_PRIORITY,
    NOTIFICATION_STATUSES,
    STATUS_CANCELLED,
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_SENT,
    SUPPORTED_CHANNELS,
    NotificationQueueEntry,
)
from .preferences import (
    FREQUENCY_DAILY,
    FREQUENCY_INSTANT,
    FREQUENCY_WEEKLY,
    PREFERENCES_SCHEMA_VERSION,
    VALID_FREQUENCIES,
    ChannelPreferences,
    NotificationPreferences,
    QuietHours,
)
from .send_time_analytics import (
    SEGMENT_AGE,
    SEGMENT_INCOME,
    SEGMENT_INDUSTRY,
    SEGMENT_TYPES,
    DemographicPerformance,
    SendTimeAnalytics,
)
from .send_time_cohort import (
    COHORT_CONTROL,
    SEND_TIME_COHORTS,
    CohortDefinition,
    SendTimeCohort,
)
from .user_profile import UserProfile

__all__ = [
    "EngagementEvent",
    "ENGAGEMENT_EVENT_SCHEMA_VERSION",
    "NotificationQueueEntry",
    "CHANNEL_EMAIL",
    "CHANNEL_CHAT",
    "CHANNEL_SMS",
    "SUPPORTED_CHANNELS",
    "STATUS_PENDING",
    "STATUS_SENT",
    "STATUS_FAILED",
    "STATUS_CANCELLED",
    "NOTIFICATION_STATUSES",
    "DEFAULT_PRIORITY",
    "MIN_PRIORITY",
    "MAX_PRIORITY",
    "MAX_RETRY_COUNT",
    "QuietHours",
    "ChannelPreferences",
    "NotificationPreferences",
    "FREQUENCY_INSTANT",
    "FREQUENCY_DAILY",
    "FREQUENCY_WEEKLY",
    "VALID_FREQUENCIES",
    "PREFERENCES_SCHEMA_VERSION",
    "SendTimeAnalytics",
    "DemographicPerformance",
    "SEGMENT_AGE",
    "SEGMENT_INCOME",
    "SEGMENT_INDUSTRY",
    "SEGMENT_TYPES",
    "CohortDefinition",
    "COHORT_CONTROL",
    "SEND_TIME_COHORTS",
    "SendTimeCohort",
    "UserProfile",
]
