"""Pydantic models for the signal-fusion subsystem.

These models represent:
- Raw per-channel readings (pulse, temperature, interaction, facial)
- Trend summaries over the rolling mood history
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator

from mood_adapt.models import ChannelKind, Mood, clamp01


class TemperatureTrend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


# ── Channel readings ─────────────────────────────────────────


class ChannelReading(BaseModel):
    """One noisy observation from a single channel.

    ``confidence`` is the sensor layer's own reliability estimate; it is
    clamped into ``[0, 1]``.
    """

    channel: ChannelKind
    confidence: float = 1.0
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @field_validator("confidence")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp01(v)


class PulseReading(ChannelReading):
    channel: Literal[ChannelKind.PULSE] = ChannelKind.PULSE
    bpm: float
    variability: float = 0.0  # beat-to-beat variability, bpm


class TemperatureReading(ChannelReading):
    channel: Literal[ChannelKind.TEMPERATURE] = ChannelKind.TEMPERATURE
    celsius: float
    trend: TemperatureTrend = TemperatureTrend.STABLE


class InteractionReading(ChannelReading):
    """Summary of recent mouse / keyboard behaviour."""

    channel: Literal[ChannelKind.INTERACTION] = ChannelKind.INTERACTION
    click_frequency: float = 4.0  # clicks per interval
    typing_speed: float = 50.0  # words per minute
    mouse_jitter: float = 0.0
    mouse_smoothness: float = 1.0
    scroll_velocity: float = 0.0


class FacialReading(ChannelReading):
    channel: Literal[ChannelKind.FACIAL] = ChannelKind.FACIAL
    emotion: str


AnyReading = Annotated[
    Union[PulseReading, TemperatureReading, InteractionReading, FacialReading],
    Field(discriminator="channel"),
]


# ── Trends ───────────────────────────────────────────────────


class MoodTrendPoint(BaseModel):
    timestamp: datetime
    mood: Mood
    energy: float
    valence: float
    arousal: float


class MoodTrend(BaseModel):
    """Summary of mood history over a trailing window."""

    timeline: list[MoodTrendPoint]
    average_energy: float
    average_valence: float
    average_arousal: float
    mood_changes: int
