"""Callbacks reporting how recipients reacted to a notification."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from notifyhub.application.use_cases.send_time import ENGAGEMENT_STAGES, record_engagement
from notifyhub.infrastructure.database import get_db
from notifyhub.interfaces.api.schemas import EngagementEventRead, EngagementSignalRequest

router = APIRouter(prefix="/engagement", tags=["engagement"])


@router.post("/{notification_id}/{stage}", response_model=EngagementEventRead)
def record_engagement_endpoint(
    notification_id: int,
    stage: str,
    payload: EngagementSignalRequest | None = None,
    db: Session = Depends(get_db),
) -> EngagementEventRead:
    if stage not in ENGAGEMENT_STAGES:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Stage must be one of: {', '.join(ENGAGEMENT_STAGES)}",
        )
    try:
        event = record_engagement(
            db,
            notification_id,
            stage,
            occurred_at=payload.occurred_at if payload else None,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return EngagementEventRead.model_validate(event)


__all__ = ["router"]
