"""Per-channel interpretation — map one raw reading to a mood estimate.

Every channel is interpreted independently, with its own thresholds and a
fixed reliability factor that discounts the sensor's self-reported
confidence:

=============  ==========================================  ===========
Channel        Key signals                                 Reliability
=============  ==========================================  ===========
Pulse          bpm band, beat variability                  0.8
Temperature    absolute °C, short-term trend               0.6
Interaction    click rate, typing speed, mouse jitter      0.7
Facial         classifier emotion label                    0.9
=============  ==========================================  ===========

A channel's interpreter can be replaced with :func:`register_interpreter`.
"""

from __future__ import annotations

from typing import Callable

import structlog

from mood_adapt.fusion.models import (
    ChannelReading,
    FacialReading,
    InteractionReading,
    PulseReading,
    TemperatureReading,
    TemperatureTrend,
)
from mood_adapt.models import ChannelEstimate, ChannelKind, Mood

logger = structlog.get_logger(__name__)

Interpreter = Callable[[ChannelReading], ChannelEstimate]

# ── Thresholds ────────────────────────────────────────────────

_PULSE_RESTING_MAX = 80.0
_PULSE_ELEVATED_MAX = 100.0
_PULSE_STRESS_VARIABILITY = 15.0

_TEMP_NORMAL_MIN = 36.0
_TEMP_ELEVATED_MIN = 37.0

_CLICKS_HIGH = 8.0
_CLICKS_LOW = 2.0
_JITTER_STRESS = 0.7
_TYPING_FAST = 80.0
_TYPING_SLOW = 30.0
_SMOOTHNESS_PRECISE = 0.3

_RELIABILITY = {
    ChannelKind.PULSE: 0.8,
    ChannelKind.TEMPERATURE: 0.6,
    ChannelKind.INTERACTION: 0.7,
    ChannelKind.FACIAL: 0.9,
}

# Facial classifier label → (mood, valence, energy, arousal)
_FACIAL_MAP: dict[str, tuple[Mood, float, float, float]] = {
    "happy": (Mood.HAPPY, 0.9, 0.7, 0.6),
    "sad": (Mood.SAD, 0.1, 0.2, 0.3),
    "neutral": (Mood.NEUTRAL, 0.5, 0.5, 0.5),
    "focused": (Mood.FOCUSED, 0.6, 0.6, 0.4),
    "stressed": (Mood.STRESSED, 0.2, 0.9, 0.9),
}


# ── Interpreters ─────────────────────────────────────────────


def interpret_pulse(reading: PulseReading) -> ChannelEstimate:
    """Cardiac rate → arousal.  A high rate is read as stress when variable."""
    if reading.bpm < _PULSE_RESTING_MAX:
        mood, energy, arousal = Mood.RELAXED, 0.3, 0.2
    elif reading.bpm < _PULSE_ELEVATED_MAX:
        mood, energy, arousal = Mood.FOCUSED, 0.6, 0.4
    elif reading.variability > _PULSE_STRESS_VARIABILITY:
        mood, energy, arousal = Mood.STRESSED, 0.8, 0.9
    else:
        mood, energy, arousal = Mood.EXCITED, 0.8, 0.8

    return ChannelEstimate(
        channel=ChannelKind.PULSE,
        mood=mood,
        confidence=reading.confidence * _RELIABILITY[ChannelKind.PULSE],
        energy=energy,
        arousal=arousal,
        details={"bpm": reading.bpm, "variability": reading.variability},
    )


def interpret_temperature(reading: TemperatureReading) -> ChannelEstimate:
    """Skin temperature → valence, adjusted by the short-term trend."""
    celsius = reading.celsius
    if celsius < _TEMP_NORMAL_MIN:
        mood, valence = Mood.SAD, 0.2
    elif celsius > _TEMP_ELEVATED_MIN:
        mood, valence = Mood.STRESSED, 0.3
    else:
        mood, valence = Mood.NEUTRAL, 0.6

    if reading.trend == TemperatureTrend.RISING and celsius > _TEMP_ELEVATED_MIN:
        mood, valence = Mood.STRESSED, 0.2
    elif reading.trend == TemperatureTrend.FALLING and mood == Mood.STRESSED:
        mood, valence = Mood.RELAXED, 0.7

    return ChannelEstimate(
        channel=ChannelKind.TEMPERATURE,
        mood=mood,
        confidence=reading.confidence * _RELIABILITY[ChannelKind.TEMPERATURE],
        valence=valence,
        details={"celsius": celsius, "trend": reading.trend.value},
    )


def interpret_interactions(reading: InteractionReading) -> ChannelEstimate:
    """Input behaviour → energy / arousal.

    Click rate sets the first guess; typing speed and mouse precision
    refine it without overriding a stress reading.
    """
    mood, energy, arousal = Mood.NEUTRAL, 0.5, 0.5

    if reading.click_frequency > _CLICKS_HIGH:
        if reading.mouse_jitter > _JITTER_STRESS:
            mood, arousal = Mood.STRESSED, 0.9
        else:
            mood, arousal = Mood.EXCITED, 0.8
        energy = 0.8
    elif reading.click_frequency < _CLICKS_LOW:
        mood, energy, arousal = Mood.BORED, 0.1, 0.1

    if reading.typing_speed > _TYPING_FAST:
        mood = Mood.STRESSED if mood == Mood.STRESSED else Mood.FOCUSED
        energy = 0.7
    elif reading.typing_speed < _TYPING_SLOW:
        mood = Mood.BORED if mood == Mood.BORED else Mood.RELAXED
        energy = 0.3

    if reading.mouse_smoothness < _SMOOTHNESS_PRECISE and mood != Mood.STRESSED:
        mood = Mood.FOCUSED  # precise pointer work

    return ChannelEstimate(
        channel=ChannelKind.INTERACTION,
        mood=mood,
        confidence=reading.confidence * _RELIABILITY[ChannelKind.INTERACTION],
        energy=energy,
        arousal=arousal,
        details={
            "click_frequency": reading.click_frequency,
            "typing_speed": reading.typing_speed,
            "mouse_smoothness": reading.mouse_smoothness,
            "scroll_velocity": reading.scroll_velocity,
        },
    )


def interpret_facial(reading: FacialReading) -> ChannelEstimate:
    mood, valence, energy, arousal = _FACIAL_MAP.get(
        reading.emotion.lower(), _FACIAL_MAP["neutral"]
    )
    return ChannelEstimate(
        channel=ChannelKind.FACIAL,
        mood=mood,
        confidence=reading.confidence * _RELIABILITY[ChannelKind.FACIAL],
        energy=energy,
        valence=valence,
        arousal=arousal,
        details={"detected_emotion": reading.emotion},
    )


# ── Registry ──────────────────────────────────────────────────

# channel → (payload type the interpreter expects, interpreter)
_REGISTRY: dict[ChannelKind, tuple[type[ChannelReading], Interpreter]] = {
    ChannelKind.PULSE: (PulseReading, interpret_pulse),  # type: ignore[dict-item]
    ChannelKind.TEMPERATURE: (TemperatureReading, interpret_temperature),  # type: ignore[dict-item]
    ChannelKind.INTERACTION: (InteractionReading, interpret_interactions),  # type: ignore[dict-item]
    ChannelKind.FACIAL: (FacialReading, interpret_facial),  # type: ignore[dict-item]
}


def register_interpreter(
    channel: ChannelKind,
    fn: Interpreter,
    reading_type: type[ChannelReading] | None = None,
) -> None:
    """Replace the interpreter of an existing channel kind.

    *reading_type* is the payload class *fn* expects; it defaults to the
    one already registered for *channel*.
    """
    if reading_type is None:
        reading_type = _REGISTRY[channel][0] if channel in _REGISTRY else ChannelReading
    _REGISTRY[channel] = (reading_type, fn)


def interpret(reading: ChannelReading | ChannelEstimate | None) -> ChannelEstimate | None:
    """Interpret a reading, or pass an already-interpreted estimate through.

    Returns ``None`` for a missing reading, a channel with no registered
    interpreter, or a reading that carries no payload for its channel
    (e.g. a bare :class:`ChannelReading`); such channels are simply left
    out of fusion.
    """
    if reading is None:
        return None
    if isinstance(reading, ChannelEstimate):
        return reading
    entry = _REGISTRY.get(reading.channel)
    if entry is None:
        logger.warning("fusion.no_interpreter", channel=reading.channel.value)
        return None
    reading_type, fn = entry
    if not isinstance(reading, reading_type):
        logger.warning(
            "fusion.no_payload",
            channel=reading.channel.value,
            reading_type=type(reading).__name__,
        )
        return None
    return fn(reading)
