"""Context feature vectors and similarity.

The same numeric encoding of a :class:`Context` feeds the historical
retrieval generator, the training corpus and the predictive scorer.
"""

from __future__ import annotations

import math
from typing import Mapping

from mood_adapt.models import Context, Mood

# Ordinal code per mood, roughly ordered by valence / energy
MOOD_CODES: dict[Mood, float] = {
    Mood.HAPPY: 0.8,
    Mood.SAD: 0.2,
    Mood.NEUTRAL: 0.5,
    Mood.FOCUSED: 0.6,
    Mood.STRESSED: 0.3,
    Mood.RELAXED: 0.7,
    Mood.EXCITED: 0.9,
    Mood.BORED: 0.1,
}

FEATURE_KEYS = (
    "mood_primary",
    "mood_energy",
    "mood_valence",
    "mood_arousal",
    "user_neuroticism",
    "user_extraversion",
    "user_openness",
    "hour",
    "day_of_week",
)


def mood_code(mood: Mood | str) -> float:
    try:
        return MOOD_CODES[Mood(mood)]
    except ValueError:
        return 0.5


def extract_features(context: Context) -> dict[str, float]:
    """Encode *context* as a fixed-order mapping of floats in ``[0, 1]``."""
    mood = context.mood_state
    traits = context.user_profile.traits
    return {
        "mood_primary": mood_code(mood.primary_mood),
        "mood_energy": mood.energy,
        "mood_valence": mood.valence,
        "mood_arousal": mood.arousal,
        "user_neuroticism": traits.neuroticism,
        "user_extraversion": traits.extraversion,
        "user_openness": traits.openness,
        "hour": context.timestamp.hour / 24,
        "day_of_week": (context.timestamp.isoweekday() % 7) / 7,  # Sunday = 0
    }


def cosine_similarity(a: Mapping[str, float], b: Mapping[str, float]) -> float:
    """Cosine similarity over the keys of *a*; missing keys count as 0.

    The similarity of a zero vector is undefined and reported as 0.
    """
    dot = norm_a = norm_b = 0.0
    for key, va in a.items():
        vb = b.get(key, 0.0)
        dot += va * vb
        norm_a += va * va
        norm_b += vb * vb
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def is_night(hour: int, start: int = 22, end: int = 6) -> bool:
    """Whether *hour* falls in the night window ``[start, end]``, wrapping midnight."""
    if start > end:
        return hour >= start or hour <= end
    return start <= hour <= end
