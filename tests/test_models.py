"""Tests for shared models and settings."""

import pytest
from pydantic import ValidationError

from mood_adapt.config import Settings
from mood_adapt.learning.models import Feedback, SuccessPattern
from mood_adapt.models import (
    AdaptationCandidate,
    CandidateSource,
    ChannelEstimate,
    ChannelKind,
    Mood,
    MoodState,
    PersonalityTraits,
    UserProfile,
)


class TestClamping:
    def test_mood_state_scalars_clamped(self):
        state = MoodState(confidence=1.7, energy=-0.2, valence=3.0, arousal=0.4)
        assert state.confidence == 1.0
        assert state.energy == 0.0
        assert state.valence == 1.0
        assert state.arousal == 0.4

    def test_channel_estimate_leaves_missing_scalars_none(self):
        est = ChannelEstimate(channel=ChannelKind.PULSE, confidence=2.0, arousal=-1.0)
        assert est.confidence == 1.0
        assert est.arousal == 0.0
        assert est.valence is None

    def test_traits_clamped(self):
        traits = PersonalityTraits(openness=1.4, neuroticism=-0.3)
        assert traits.openness == 1.0
        assert traits.neuroticism == 0.0

    def test_candidate_confidence_clamped(self):
        c = AdaptationCandidate(source=CandidateSource.RULE, adaptations=[], confidence=5)
        assert c.confidence == 1.0

    def test_feedback_rating_clamped(self):
        assert Feedback(positive=True, rating=1.5).rating == 1.0
        assert Feedback(positive=False).rating is None


class TestMoodState:
    def test_neutral_default(self):
        state = MoodState.neutral()
        assert state.primary_mood == Mood.NEUTRAL
        assert state.confidence == 0.0
        assert (state.energy, state.valence, state.arousal) == (0.5, 0.5, 0.5)
        assert state.sample_size == 0

    def test_immutable(self):
        state = MoodState()
        with pytest.raises(ValidationError):
            state.energy = 0.9  # type: ignore[misc]


class TestUserProfile:
    def test_blend_is_exponential_smoothing(self):
        current = UserProfile(traits=PersonalityTraits(openness=0.5))
        observed = UserProfile(traits=PersonalityTraits(openness=1.0))
        blended = current.blend(observed)
        assert blended.traits.openness == pytest.approx(0.55)
        assert blended.traits.neuroticism == pytest.approx(0.5)

    def test_blend_keeps_user_id(self):
        blended = UserProfile(user_id="U1").blend(UserProfile(user_id="other"), alpha=0.5)
        assert blended.user_id == "U1"


class TestSuccessPattern:
    def test_prior_for_unseen(self):
        assert SuccessPattern().rate == 0.5

    def test_rate_in_unit_interval(self):
        pattern = SuccessPattern(attempts=4, successes=3)
        assert pattern.rate == pytest.approx(0.75)
        assert 0.0 <= SuccessPattern(attempts=1, successes=0).rate <= 1.0


class TestSettings:
    def test_defaults(self):
        s = Settings(_env_file=None)
        assert s.mood_history_capacity == 200
        assert s.ledger_capacity == 500
        assert s.training_corpus_capacity == 1000
        assert s.retrain_every == 50
        assert (s.weight_mood_match, s.weight_user_match) == (0.3, 0.3)
        assert (s.weight_context_match, s.weight_success_rate) == (0.2, 0.2)
        assert s.selection_confidence_target == 0.8

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MOOD_ADAPT_RETRAIN_EVERY", "10")
        monkeypatch.setenv("MOOD_ADAPT_PREDICTOR_KIND", "success_table")
        s = Settings(_env_file=None)
        assert s.retrain_every == 10
        assert s.predictor_kind == "success_table"
