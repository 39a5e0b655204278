"""Schemas for the send-time analytics endpoints."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class RecommendationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    decision: str
    variance: float
    qualifying_hours: int
    message: str
    suggests_optimization: bool


class HourlyAnalyticsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    send_hour: int = Field(..., ge=0, le=23)
    emails_sent: int
    emails_opened: int
    emails_clicked: int
    emails_converted: int
    open_rate: float
    click_rate: float
    conversion_rate: float
    avg_time_to_open: int | None = None
    avg_time_to_click: int | None = None
    avg_time_to_convert: int | None = None
    engagement_score: float | None = None
    sample_size: int


class DemographicPerformanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    segment_type: str
    segment_value: str
    emails_sent: int
    emails_clicked: int
    click_rate: float
    avg_time_to_click: int | None = None
    optimal_send_hour: int | None = None
    optimal_hour_click_rate: float | None = None


class CohortSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    cohort_name: str
    label: str
    users: int
    emails_sent: int
    emails_clicked: int
    click_rate: float
    avg_time_to_click: int | None = None


class SendTimeReportRead(BaseModel):
    """Hourly, demographic and cohort tables of one analysis date."""

    model_config = ConfigDict(from_attributes=True)

    analysis_date: date
    variance: float
    optimization_enabled: bool
    recommendation: RecommendationRead
    hourly: list[HourlyAnalyticsRead]
    demographics: list[DemographicPerformanceRead]
    cohorts: list[CohortSummaryRead]


class AnalysisRunRequest(BaseModel):
    analysis_date: date | None = None
    window_days: int | None = Field(None, ge=1, le=365)


class AnalysisRunRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    analysis_date: date
    events_processed: int
    rows_skipped: int
    segments_written: int
    cohorts_updated: int
    variance: float
    optimization_enabled: bool
    recommendation: RecommendationRead
    errors: list[str]


class OptimizationToggleRequest(BaseModel):
    analysis_date: date
    enabled: bool


class OptimizationToggleRead(BaseModel):
    analysis_date: date
    enabled: bool
    rows_updated: int


__all__ = [
    "RecommendationRead",
    "HourlyAnalyticsRead",
    "DemographicPerformanceRead",
    "CohortSummaryRead",
    "SendTimeReportRead",
    "AnalysisRunRequest",
    "AnalysisRunRead",
    "OptimizationToggleRequest",
    "OptimizationToggleRead",
]
