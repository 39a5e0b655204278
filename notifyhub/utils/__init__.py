"""Utility helpers for reusable functionality."""

from .datetime import (
    ensure_utc,
    ensure_utc_naive,
    get_app_timezone,
    now_utc,
    now_utc_naive,
    resolve_timezone,
    to_local,
)

__all__ = [
    "ensure_utc",
    "ensure_utc_naive",
    "get_app_timezone",
    "now_utc",
    "now_utc_naive",
    "resolve_timezone",
    "to_local",
]
