"""Tests for channel interpretation and signal fusion."""

from datetime import timedelta, timezone

import pytest

from mood_adapt.fusion import channels
from mood_adapt.fusion.channels import (
    interpret,
    interpret_facial,
    interpret_interactions,
    interpret_pulse,
    interpret_temperature,
    register_interpreter,
)
from mood_adapt.fusion.engine import SignalFusion, combine_estimates
from mood_adapt.fusion.models import (
    ChannelReading,
    FacialReading,
    InteractionReading,
    PulseReading,
    TemperatureReading,
    TemperatureTrend,
)
from mood_adapt.models import ChannelEstimate, ChannelKind, Mood

from tests.conftest import DAYTIME


def _estimate(channel: ChannelKind, mood: Mood, confidence: float, **scalars) -> ChannelEstimate:
    return ChannelEstimate(channel=channel, mood=mood, confidence=confidence, **scalars)


# ── Channel interpretation ───────────────────────────────────


class TestChannels:
    def test_resting_pulse_is_relaxed(self):
        est = interpret_pulse(PulseReading(bpm=65))
        assert est.mood == Mood.RELAXED
        assert est.confidence == pytest.approx(0.8)

    def test_high_variable_pulse_is_stress(self):
        est = interpret_pulse(PulseReading(bpm=115, variability=20))
        assert est.mood == Mood.STRESSED
        assert est.arousal == pytest.approx(0.9)

    def test_high_steady_pulse_is_excitement(self):
        assert interpret_pulse(PulseReading(bpm=115, variability=5)).mood == Mood.EXCITED

    def test_temperature_only_estimates_valence(self):
        est = interpret_temperature(TemperatureReading(celsius=36.5))
        assert est.mood == Mood.NEUTRAL
        assert est.energy is None and est.arousal is None
        assert est.confidence == pytest.approx(0.6)

    def test_falling_temperature_relaxes_stress(self):
        est = interpret_temperature(
            TemperatureReading(celsius=37.5, trend=TemperatureTrend.FALLING)
        )
        assert est.mood == Mood.RELAXED

    def test_jittery_fast_clicking_is_stress(self):
        est = interpret_interactions(
            InteractionReading(click_frequency=10, mouse_jitter=0.9, typing_speed=90)
        )
        assert est.mood == Mood.STRESSED

    def test_slow_input_is_boredom(self):
        est = interpret_interactions(InteractionReading(click_frequency=1, typing_speed=20))
        assert est.mood == Mood.BORED
        assert est.energy == pytest.approx(0.3)

    def test_unknown_facial_label_is_neutral(self):
        assert interpret_facial(FacialReading(emotion="puzzled")).mood == Mood.NEUTRAL

    def test_sensor_confidence_is_discounted(self):
        est = interpret_facial(FacialReading(emotion="Happy", confidence=0.5))
        assert est.mood == Mood.HAPPY
        assert est.confidence == pytest.approx(0.45)

    def test_interpret_passes_estimates_through(self):
        est = _estimate(ChannelKind.PULSE, Mood.FOCUSED, 0.4)
        assert interpret(est) is est
        assert interpret(None) is None

    def test_reading_without_payload_is_dropped(self):
        assert interpret(ChannelReading(channel=ChannelKind.PULSE)) is None
        state = SignalFusion().fuse(
            [ChannelReading(channel=ChannelKind.PULSE), FacialReading(emotion="happy")]
        )
        assert state.primary_mood == Mood.HAPPY
        assert state.sample_size == 1

    def test_replace_interpreter(self, monkeypatch):
        monkeypatch.setitem(
            channels._REGISTRY, ChannelKind.PULSE, channels._REGISTRY[ChannelKind.PULSE]
        )

        def always_focused(reading):
            return _estimate(ChannelKind.PULSE, Mood.FOCUSED, reading.confidence, energy=0.9)

        register_interpreter(ChannelKind.PULSE, always_focused)
        est = interpret(PulseReading(bpm=130, variability=30))
        assert est.mood == Mood.FOCUSED
        # The expected payload type is kept.
        assert interpret(ChannelReading(channel=ChannelKind.PULSE)) is None


# ── Fusion ────────────────────────────────────────────────────


class TestCombineEstimates:
    def test_no_channels_gives_neutral(self):
        state = combine_estimates([])
        assert state.primary_mood == Mood.NEUTRAL
        assert state.confidence == 0.0
        assert (state.energy, state.valence, state.arousal) == (0.5, 0.5, 0.5)

    def test_zero_confidence_channels_are_ignored(self):
        state = combine_estimates([
            None,
            _estimate(ChannelKind.PULSE, Mood.STRESSED, 0.0, energy=0.9),
        ])
        assert state.primary_mood == Mood.NEUTRAL
        assert state.confidence == 0.0

    def test_opposite_scalars_average_to_midpoint(self):
        state = combine_estimates([
            _estimate(ChannelKind.PULSE, Mood.EXCITED, 1.0, energy=0.2),
            _estimate(ChannelKind.INTERACTION, Mood.EXCITED, 1.0, energy=0.8),
        ])
        assert state.energy == pytest.approx(0.5)
        assert state.confidence == pytest.approx(1.0)

    def test_missing_scalar_counts_as_neutral(self):
        state = combine_estimates([
            _estimate(ChannelKind.PULSE, Mood.RELAXED, 1.0, energy=0.1),
            _estimate(ChannelKind.TEMPERATURE, Mood.RELAXED, 1.0, valence=0.7),
        ])
        assert state.energy == pytest.approx(0.3)
        assert state.valence == pytest.approx(0.6)

    def test_heaviest_mood_wins_with_secondaries(self):
        state = combine_estimates([
            _estimate(ChannelKind.PULSE, Mood.STRESSED, 0.8),
            _estimate(ChannelKind.FACIAL, Mood.HAPPY, 0.9),
        ])
        assert state.primary_mood == Mood.HAPPY
        assert state.confidence == pytest.approx(0.45)
        assert [m.mood for m in state.secondary_moods] == [Mood.STRESSED]
        assert state.secondary_moods[0].confidence == pytest.approx(0.8 / 1.7)
        assert set(state.indicators) == {ChannelKind.PULSE, ChannelKind.FACIAL}

    def test_outputs_stay_in_unit_interval(self):
        for conf in (0.1, 0.5, 1.0):
            state = combine_estimates([
                _estimate(ChannelKind.PULSE, Mood.STRESSED, conf, energy=1.0, arousal=1.0),
                _estimate(ChannelKind.FACIAL, Mood.STRESSED, conf, valence=0.0),
                _estimate(ChannelKind.INTERACTION, Mood.STRESSED, conf, energy=1.0),
            ])
            for value in (state.confidence, state.energy, state.valence, state.arousal):
                assert 0.0 <= value <= 1.0


class TestSignalFusion:
    def test_fuse_interprets_and_records(self):
        fusion = SignalFusion()
        state = fusion.fuse(
            [PulseReading(bpm=110, variability=20), FacialReading(emotion="stressed")],
            timestamp=DAYTIME,
        )
        assert state.primary_mood == Mood.STRESSED
        assert state.confidence == pytest.approx(0.85)
        assert fusion.history == [state]

    def test_history_is_bounded(self):
        fusion = SignalFusion(history_capacity=200)
        for i in range(250):
            fusion.fuse([PulseReading(bpm=60 + i % 50)], timestamp=DAYTIME + timedelta(seconds=i))
        history = fusion.history
        assert len(history) == 200
        assert history[0].timestamp == DAYTIME + timedelta(seconds=50)
        assert history[-1].timestamp == DAYTIME + timedelta(seconds=249)

    def test_current_mood_empty_history(self):
        state = SignalFusion().current_mood(now=DAYTIME)
        assert state.primary_mood == Mood.NEUTRAL
        assert state.confidence == 0.0

    def test_current_mood_smooths_window(self):
        fusion = SignalFusion()
        fusion.fuse([PulseReading(bpm=65)], timestamp=DAYTIME - timedelta(seconds=60))
        fusion.fuse(
            [PulseReading(bpm=110, variability=20)], timestamp=DAYTIME - timedelta(seconds=10)
        )
        fusion.fuse(
            [PulseReading(bpm=110, variability=20)], timestamp=DAYTIME - timedelta(seconds=5)
        )
        state = fusion.current_mood(30, now=DAYTIME)
        assert state.primary_mood == Mood.STRESSED
        assert state.sample_size == 2
        assert state.arousal == pytest.approx(0.9)

    def test_current_mood_falls_back_to_latest(self):
        fusion = SignalFusion()
        latest = fusion.fuse([PulseReading(bpm=65)], timestamp=DAYTIME - timedelta(minutes=5))
        assert fusion.current_mood(30, now=DAYTIME) == latest

    def test_current_mood_with_only_neutral_entries(self):
        fusion = SignalFusion()
        fusion.fuse([], timestamp=DAYTIME - timedelta(seconds=2))
        fusion.fuse([], timestamp=DAYTIME - timedelta(seconds=1))
        state = fusion.current_mood(30, now=DAYTIME)
        assert state.primary_mood == Mood.NEUTRAL
        assert state.energy == pytest.approx(0.5)

    def test_mood_trends(self):
        fusion = SignalFusion()
        fusion.fuse([PulseReading(bpm=65)], timestamp=DAYTIME - timedelta(minutes=3))
        fusion.fuse(
            [PulseReading(bpm=110, variability=20)], timestamp=DAYTIME - timedelta(minutes=2)
        )
        fusion.fuse([PulseReading(bpm=65)], timestamp=DAYTIME - timedelta(minutes=1))
        trend = fusion.mood_trends(10, now=DAYTIME)
        assert trend is not None
        assert len(trend.timeline) == 3
        assert trend.mood_changes == 2
        assert trend.average_arousal == pytest.approx((0.2 + 0.9 + 0.2) / 3)

    def test_mood_trends_needs_two_points(self):
        fusion = SignalFusion()
        fusion.fuse([PulseReading(bpm=65)], timestamp=DAYTIME)
        assert fusion.mood_trends(10, now=DAYTIME) is None

    def test_aware_timestamps_are_stored_as_naive_utc(self):
        fusion = SignalFusion()
        aware = DAYTIME.replace(tzinfo=timezone(timedelta(hours=2)))
        state = fusion.fuse([PulseReading(bpm=65)], timestamp=aware)
        assert state.timestamp.tzinfo is None
        assert state.timestamp == DAYTIME - timedelta(hours=2)

        current = fusion.current_mood(30, now=aware + timedelta(seconds=5))
        assert current.sample_size == 1
        assert fusion.current_mood().primary_mood == Mood.RELAXED
