"""Use cases of the send-time optimization engine."""

from .aggregation import AnalysisResult, run_send_time_analysis
from .cohorts import assign_cohort, cohort_for_user
from .engagement import ENGAGEMENT_STAGES, record_engagement, record_send
from .optimization import (
    DECISION_ENABLE,
    DECISION_INSUFFICIENT_DATA,
    DECISION_KEEP_DEFAULT,
    DECISION_MONITOR,
    Recommendation,
    coefficient_of_variation,
    recommend,
    recommend_from_click_rates,
)
from .reports import (
    CohortSummary,
    SendTimeReport,
    get_send_time_report,
    set_optimization_enabled,
)

__all__ = [
    "AnalysisResult",
    "run_send_time_analysis",
    "assign_cohort",
    "cohort_for_user",
    "ENGAGEMENT_STAGES",
    "record_engagement",
    "record_send",
    "DECISION_ENABLE",
    "DECISION_INSUFFICIENT_DATA",
    "DECISION_KEEP_DEFAULT",
    "DECISION_MONITOR",
    "Recommendation",
    "coefficient_of_variation",
    "recommend",
    "recommend_from_click_rates",
    "CohortSummary",
    "SendTimeReport",
    "get_send_time_report",
    "set_optimization_enabled",
]
