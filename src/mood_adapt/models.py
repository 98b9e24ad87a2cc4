"""Shared Pydantic models used across the framework."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def clamp01(value: float) -> float:
    """Clamp *value* into the closed unit interval."""
    return max(0.0, min(1.0, value))


def as_naive_utc(value: datetime) -> datetime:
    """Mood timestamps are naive UTC; convert aware datetimes accordingly."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# ── Enums ─────────────────────────────────────────────────────

class Mood(str, Enum):
    """Discrete mood labels produced by signal fusion."""
    HAPPY = "happy"
    SAD = "sad"
    NEUTRAL = "neutral"
    FOCUSED = "focused"
    STRESSED = "stressed"
    RELAXED = "relaxed"
    EXCITED = "excited"
    BORED = "bored"


class ChannelKind(str, Enum):
    """Independent signal sources contributing a mood estimate."""
    PULSE = "pulse"
    TEMPERATURE = "temperature"
    INTERACTION = "interaction"
    FACIAL = "facial"


class AdaptationType(str, Enum):
    VISUAL = "visual"
    LAYOUT = "layout"
    CONTENT = "content"
    INTERACTION = "interaction"


class CandidateSource(str, Enum):
    """Which generator produced a candidate."""
    RULE = "rule"
    ML = "ml"
    CONTEXT = "context"
    HISTORY = "history"
    DEFAULT = "default"


class DeviceClass(str, Enum):
    DESKTOP = "desktop"
    MOBILE = "mobile"
    TABLET = "tablet"


# ── Mood state ────────────────────────────────────────────────

class ChannelEstimate(BaseModel):
    """One channel's independent interpretation of its reading.

    Scalars a channel cannot speak to are left as ``None``.
    """

    model_config = ConfigDict(frozen=True)

    channel: ChannelKind
    mood: Mood = Mood.NEUTRAL
    confidence: float = 0.0
    energy: float | None = None
    valence: float | None = None
    arousal: float | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @field_validator("confidence")
    @classmethod
    def _clamp_confidence(cls, v: float) -> float:
        return clamp01(v)

    @field_validator("energy", "valence", "arousal")
    @classmethod
    def _clamp_scalars(cls, v: float | None) -> float | None:
        return None if v is None else clamp01(v)


class MoodWeight(BaseModel):
    model_config = ConfigDict(frozen=True)

    mood: Mood
    confidence: float

    @field_validator("confidence")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp01(v)


class MoodState(BaseModel):
    """Probabilistic mood estimate produced by signal fusion.

    Immutable once created.  All scalars lie in ``[0, 1]``; values outside
    the interval are clamped on construction.  ``timestamp`` is naive UTC; an
    aware datetime is converted on construction.
    """

    model_config = ConfigDict(frozen=True)

    primary_mood: Mood = Mood.NEUTRAL
    confidence: float = 0.0
    energy: float = 0.5
    valence: float = 0.5  # negative ↔ positive
    arousal: float = 0.5  # calm ↔ excited
    secondary_moods: list[MoodWeight] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    indicators: dict[ChannelKind, ChannelEstimate] = Field(default_factory=dict)
    sample_size: int = 1

    @field_validator("confidence", "energy", "valence", "arousal")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp01(v)

    @field_validator("timestamp")
    @classmethod
    def _naive_utc(cls, v: datetime) -> datetime:
        return as_naive_utc(v)

    @classmethod
    def neutral(cls, timestamp: datetime | None = None) -> MoodState:
        """The defined fallback when no channel carries information."""
        return cls(timestamp=timestamp or datetime.utcnow(), sample_size=0)


# ── User profile ──────────────────────────────────────────────

class _UnitScalars(BaseModel):
    """Base for groups of ``[0, 1]`` scalars updated by exponential smoothing."""

    @field_validator("*")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp01(v)

    def blend(self, observed: _UnitScalars, alpha: float) -> _UnitScalars:
        values = {
            name: getattr(self, name) * (1.0 - alpha) + getattr(observed, name) * alpha
            for name in type(self).model_fields
        }
        return type(self)(**values)


class PersonalityTraits(_UnitScalars):
    neuroticism: float = 0.5
    extraversion: float = 0.5
    openness: float = 0.5
    agreeableness: float = 0.5
    conscientiousness: float = 0.5


class BehaviouralTendencies(_UnitScalars):
    risk_taking: float = 0.5
    impatience: float = 0.5
    curiosity: float = 0.5
    perfectionism: float = 0.5
    social_engagement: float = 0.5


class VisualPreferences(BaseModel):
    prefers_bright: bool = False
    prefers_high_contrast: bool = False


class UserPreferences(BaseModel):
    visual: VisualPreferences = Field(default_factory=VisualPreferences)


class UserProfile(BaseModel):
    """Snapshot of the user's personality and tendencies.

    Maintained by the external profiler; the core only reads it.
    """

    user_id: str = "default"
    traits: PersonalityTraits = Field(default_factory=PersonalityTraits)
    tendencies: BehaviouralTendencies = Field(default_factory=BehaviouralTendencies)
    preferences: UserPreferences = Field(default_factory=UserPreferences)

    def blend(self, observed: UserProfile, alpha: float = 0.1) -> UserProfile:
        """Return a new profile smoothed towards *observed* (``0.9 / 0.1`` by default)."""
        return UserProfile(
            user_id=self.user_id,
            traits=self.traits.blend(observed.traits, alpha),
            tendencies=self.tendencies.blend(observed.tendencies, alpha),
            preferences=observed.preferences,
        )


# ── Adaptations ───────────────────────────────────────────────

class Adaptation(BaseModel):
    """Atomic UI change instruction."""

    model_config = ConfigDict(frozen=True)

    type: AdaptationType
    action: str
    amount: float | None = None

    @property
    def key(self) -> tuple[AdaptationType, str]:
        return (self.type, self.action)


class ScoreBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    mood_match: float
    user_match: float
    context_match: float
    success_rate: float
    overall: float


class AdaptationCandidate(BaseModel):
    """A proposed bundle of adaptations, created by one generator.

    Scoring returns a copy carrying ``overall_score`` and ``breakdown``.
    """

    model_config = ConfigDict(frozen=True)

    source: CandidateSource
    adaptations: list[Adaptation]
    confidence: float = 0.5
    reasoning: str | None = None
    rule_name: str | None = None
    reference: str | None = None  # id of the history record it was retrieved from
    overall_score: float | None = None
    breakdown: ScoreBreakdown | None = None

    @field_validator("confidence")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp01(v)

    def actions(self) -> list[str]:
        return [a.action for a in self.adaptations]


# ── Decision context ──────────────────────────────────────────

class Context(BaseModel):
    """Everything one decision cycle knows about the user and their situation."""

    mood_state: MoodState = Field(default_factory=MoodState)
    user_profile: UserProfile = Field(default_factory=UserProfile)
    current_url: str = ""
    page_category: str | None = None
    interactions: dict[str, float] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.now)
    device: DeviceClass = DeviceClass.DESKTOP

    @property
    def hour(self) -> int:
        return self.timestamp.hour

    def page_text(self) -> str:
        """URL and category lower-cased, for keyword matching."""
        return f"{self.current_url} {self.page_category or ''}".lower()


class Decision(BaseModel):
    """Output of one decision cycle: the selected candidates and their ledger id."""

    record_id: str
    selected: list[AdaptationCandidate]
    considered: int = 0
