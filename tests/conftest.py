"""Shared pytest fixtures."""

from __future__ import annotations

from datetime import datetime

import pytest
import structlog

from mood_adapt.adaptation.default_rules import create_rule_table
from mood_adapt.adaptation.predictors import NullPredictor
from mood_adapt.adaptation.rules import RuleTable
from mood_adapt.config import Settings
from mood_adapt.core import MoodAdaptCore, create_core
from mood_adapt.learning.ledger import FeedbackLedger
from mood_adapt.models import Context, Mood, MoodState, UserProfile

# A Wednesday afternoon, outside the night window.
DAYTIME = datetime(2024, 5, 15, 14, 30)
NIGHT = datetime(2024, 5, 15, 23, 15)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo any ``setup_logging`` a test performed."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def stressed_mood() -> MoodState:
    return MoodState(
        primary_mood=Mood.STRESSED,
        confidence=0.8,
        energy=0.8,
        valence=0.2,
        arousal=0.9,
        timestamp=DAYTIME,
    )


@pytest.fixture
def bored_mood() -> MoodState:
    return MoodState(
        primary_mood=Mood.BORED,
        confidence=0.7,
        energy=0.1,
        valence=0.4,
        arousal=0.1,
        timestamp=DAYTIME,
    )


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(user_id="U001")


@pytest.fixture
def stressed_context(stressed_mood: MoodState, profile: UserProfile) -> Context:
    return Context(
        mood_state=stressed_mood,
        user_profile=profile,
        current_url="https://example.com/news",
        timestamp=DAYTIME,
    )


@pytest.fixture
def rule_table() -> RuleTable:
    return create_rule_table()


@pytest.fixture
def ledger() -> FeedbackLedger:
    return FeedbackLedger(predictor=NullPredictor())


@pytest.fixture
def core(settings: Settings) -> MoodAdaptCore:
    return create_core(settings, predictor=NullPredictor())
