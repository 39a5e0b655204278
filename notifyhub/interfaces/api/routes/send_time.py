"""Operator endpoints of the send-time optimization engine."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from notifyhub.application.use_cases.send_time import (
    get_send_time_report,
    run_send_time_analysis,
    set_optimization_enabled,
)
from notifyhub.infrastructure.database import get_db
from notifyhub.interfaces.api.schemas import (
    AnalysisRunRead,
    AnalysisRunRequest,
    OptimizationToggleRead,
    OptimizationToggleRequest,
    SendTimeReportRead,
)
from notifyhub.utils import now_utc

router = APIRouter(prefix="/send-time", tags=["send-time"])


@router.get("/analytics", response_model=SendTimeReportRead)
def read_send_time_analytics(
    analysis_date: date | None = Query(None),
    db: Session = Depends(get_db),
) -> SendTimeReportRead:
    """Return the hourly, demographic and cohort tables with the recommendation."""

    report = get_send_time_report(db, analysis_date or now_utc().date())
    return SendTimeReportRead.model_validate(report)


@router.post("/analysis", response_model=AnalysisRunRead)
def run_analysis(
    payload: AnalysisRunRequest | None = None,
    db: Session = Depends(get_db),
) -> AnalysisRunRead:
    request = payload or AnalysisRunRequest()
    result = run_send_time_analysis(
        db, analysis_date=request.analysis_date, window_days=request.window_days
    )
    return AnalysisRunRead.model_validate(result)


@router.put("/optimization", response_model=OptimizationToggleRead)
def toggle_optimization(
    payload: OptimizationToggleRequest,
    db: Session = Depends(get_db),
) -> OptimizationToggleRead:
    """Record the operator's decision on personalized send times."""

    try:
        updated = set_optimization_enabled(db, payload.analysis_date, payload.enabled)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return OptimizationToggleRead(
        analysis_date=payload.analysis_date,
        enabled=payload.enabled,
        rows_updated=updated,
    )


__all__ = ["router"]
