"""Domain entity for the user profile supplied by the profile collaborator."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class UserProfile:
    """Contact data, raw preferences and demographics of a recipient."""

    id: str
    email: str | None = None
    phone: str | None = None
    chat_handle: str | None = None
    timezone: str | None = None
    notification_preferences: Any = None
    demographics: dict[str, Any] = field(default_factory=dict)
    analytics_consent: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


__all__ = ["UserProfile"]
