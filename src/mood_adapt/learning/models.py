"""Pydantic models for the feedback ledger.

These models represent:
- Decision records awaiting (or holding) user feedback
- Per-action success counters
- Training examples for the predictive scorer
"""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from mood_adapt.models import (
    Adaptation,
    AdaptationCandidate,
    BehaviouralTendencies,
    DeviceClass,
    Mood,
    PersonalityTraits,
    clamp01,
)


class Feedback(BaseModel):
    """User verdict on a previous decision."""

    positive: bool
    rating: float | None = Field(None, description="Optional satisfaction rating in [0, 1].")

    @field_validator("rating")
    @classmethod
    def _clamp(cls, v: float | None) -> float | None:
        return None if v is None else clamp01(v)


class Outcome(BaseModel):
    positive: bool
    rating: float | None = None
    received_at: datetime = Field(default_factory=datetime.utcnow)


class ContextSnapshot(BaseModel):
    """The parts of a decision context worth remembering."""

    primary_mood: Mood
    energy: float
    valence: float
    arousal: float
    traits: PersonalityTraits
    tendencies: BehaviouralTendencies
    hour: int
    device: DeviceClass
    features: dict[str, float]


class HistoryRecord(BaseModel):
    """One decision, created with ``outcome=None`` and answered at most once."""

    id: str = Field(default_factory=lambda: f"record_{uuid.uuid4().hex}")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    context_snapshot: ContextSnapshot
    selected: list[AdaptationCandidate]
    outcome: Outcome | None = None

    @property
    def adaptations(self) -> list[Adaptation]:
        return [a for c in self.selected for a in c.adaptations]


class SuccessPattern(BaseModel):
    """Accept / reject counters for one ``(type, action)`` pair."""

    attempts: int = 0
    successes: int = 0

    @property
    def rate(self) -> float:
        if self.attempts == 0:
            return 0.5
        return clamp01(self.successes / self.attempts)


class TrainingExample(BaseModel):
    features: dict[str, float]
    chosen_adaptations: list[Adaptation]
    success: bool
    rating: float = 0.5
