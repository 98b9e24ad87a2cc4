"""Request / response models shared across API route modules."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from mood_adapt.fusion.models import AnyReading
from mood_adapt.models import DeviceClass, MoodState, UserProfile


class FuseRequest(BaseModel):
    readings: list[AnyReading] = Field(default_factory=list)


class DecideRequest(BaseModel):
    """Decision context; the smoothed current mood is used when ``mood_state`` is omitted."""
    mood_state: MoodState | None = None
    user_profile: UserProfile = Field(default_factory=UserProfile)
    current_url: str = ""
    page_category: str | None = None
    interactions: dict[str, float] = {}
    device: DeviceClass = DeviceClass.DESKTOP
    timestamp: datetime | None = None


class FeedbackResponse(BaseModel):
    record_id: str
    applied: bool
