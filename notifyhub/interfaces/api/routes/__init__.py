from fastapi import FastAPI

from .engagement import router as engagement_router
from .notifications import router as notifications_router
from .send_time import router as send_time_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(notifications_router)
    app.include_router(engagement_router)
    app.include_router(send_time_router)
