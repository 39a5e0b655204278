from .engagement import EngagementEventRead, EngagementSignalRequest
from .notification import (
    DispatchSummaryRead,
    NotificationCancelRequest,
    NotificationCancelResponse,
    NotificationQueueRequest,
    NotificationQueueResponse,
    NotificationStatsRead,
)
from .send_time import (
    AnalysisRunRead,
    AnalysisRunRequest,
    CohortSummaryRead,
    DemographicPerformanceRead,
    HourlyAnalyticsRead,
    OptimizationToggleRead,
    OptimizationToggleRequest,
    RecommendationRead,
    SendTimeReportRead,
)

__all__ = [
    "EngagementEventRead",
    "EngagementSignalRequest",
    "DispatchSummaryRead",
    "NotificationCancelRequest",
    "NotificationCancelResponse",
    "NotificationQueueRequest",
    "NotificationQueueResponse",
    "NotificationStatsRead",
    "AnalysisRunRead",
    "AnalysisRunRequest",
    "CohortSummaryRead",
    "DemographicPerformanceRead",
    "HourlyAnalyticsRead",
    "OptimizationToggleRead",
    "OptimizationToggleRequest",
    "RecommendationRead",
    "SendTimeReportRead",
]
