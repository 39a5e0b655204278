"""Persistence helpers for recipient profiles."""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from notifyhub.domain.entities import UserProfile
from notifyhub.infrastructure.models import UserProfileModel
from notifyhub.utils import ensure_utc


class UserProfileRepository:
    """Read profiles and their raw preference blobs."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str) -> UserProfile | None:
        model = self.session.get(UserProfileModel, user_id)
        if model is None:
            return None
        return self._to_entity(model)

    def get_preferences(self, user_id: str) -> Any:
        """Return the raw, unvalidated notification preferences of ``user_id``."""

        model = self.session.get(UserProfileModel, user_id)
        if model is None:
            return None
        return model.notification_preferences

    def save(self, profile: UserProfile) -> UserProfile:
        model = self.session.get(UserProfileModel, profile.id)
        if model is None:
            model = UserProfileModel(id=profile.id)
        model.email = profile.email
        model.phone = profile.phone
        model.chat_handle = profile.chat_handle
        model.timezone = profile.timezone
        model.notification_preferences = profile.notification_preferences
        model.demographics = profile.demographics or {}
        model.analytics_consent = bool(profile.analytics_consent)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    @staticmethod
    def _to_entity(model: UserProfileModel) -> UserProfile:
        return UserProfile(
            id=model.id,
            email=model.email,
            phone=model.phone,
            chat_handle=model.chat_handle,
            timezone=model.timezone,
            notification_preferences=model.notification_preferences,
            demographics=model.demographics if isinstance(model.demographics, dict) else {},
            analytics_consent=bool(model.analytics_consent),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
        )


__all__ = ["UserProfileRepository"]
