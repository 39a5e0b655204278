"""Endpoints used by collaborators to queue and deliver notifications."""

from __future__ import annotations

from collections.abc import Mapping

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from notifyhub.application.use_cases.notifications import (
    cancel_notification,
    dispatch_due_notifications,
    get_notification_stats,
    queue_notification,
)
from notifyhub.config import Settings
from notifyhub.infrastructure.channels import ChannelSender
from notifyhub.infrastructure.database import get_db
from notifyhub.interfaces.api.dependencies import get_app_settings, get_channel_senders
from notifyhub.interfaces.api.schemas import (
    DispatchSummaryRead,
    NotificationCancelRequest,
    NotificationCancelResponse,
    NotificationQueueRequest,
    NotificationQueueResponse,
    NotificationStatsRead,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.post(
    "/",
    response_model=NotificationQueueResponse,
    status_code=status.HTTP_201_CREATED,
)
def queue_notification_endpoint(
    payload: NotificationQueueRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> NotificationQueueResponse:
    """Queue a notification; answers 200 with a reason when it is not queued."""

    outcome = queue_notification(
        db,
        user_id=payload.user_id,
        channel=payload.channel,
        type=payload.type,
        subject=payload.subject,
        body=payload.body,
        metadata=payload.metadata,
        priority=payload.priority,
        scheduled_for=payload.scheduled_for,
        optimize_send_time=payload.optimize_send_time,
    )
    if not outcome.queued:
        response.status_code = status.HTTP_200_OK
    return NotificationQueueResponse(
        queued=outcome.queued,
        id=outcome.entry_id,
        reason=outcome.reason,
        scheduled_for=outcome.scheduled_for,
    )


@router.post("/{notification_id}/cancel", response_model=NotificationCancelResponse)
def cancel_notification_endpoint(
    notification_id: int,
    payload: NotificationCancelRequest | None = None,
    db: Session = Depends(get_db),
) -> NotificationCancelResponse:
    try:
        cancelled = cancel_notification(
            db, notification_id, reason=payload.reason if payload else None
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if not cancelled:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Notification is not pending or is being delivered",
        )
    return NotificationCancelResponse(id=notification_id, cancelled=True)


@router.get("/stats/{user_id}", response_model=NotificationStatsRead)
def read_notification_stats(
    user_id: str,
    window_days: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
) -> NotificationStatsRead:
    stats = get_notification_stats(db, user_id, window_days=window_days)
    return NotificationStatsRead.model_validate(stats)


@router.post("/dispatch", response_model=DispatchSummaryRead)
def dispatch_notifications(
    limit: int | None = Query(None, ge=1, le=1000),
    db: Session = Depends(get_db),
    senders: Mapping[str, ChannelSender] = Depends(get_channel_senders),
    settings: Settings = Depends(get_app_settings),
) -> DispatchSummaryRead:
    """Run one dispatcher cycle."""

    summary = dispatch_due_notifications(db, senders=senders, settings=settings, limit=limit)
    return DispatchSummaryRead.model_validate(summary)


__all__ = ["router"]
