"""Signal fusion — probabilistic mood estimation from noisy channels.

1. **Channel interpretation** (`channels.py`)
   - Pulse, skin temperature, input behaviour, facial expression
   - Each channel discounts its own confidence by a fixed reliability

2. **Fusion engine** (`engine.py`)
   - Confidence-weighted vote over moods, weighted averages of scalars
   - Neutral fallback when no channel carries information
   - Bounded rolling history with smoothing and trend queries
"""

from mood_adapt.fusion.engine import SignalFusion, combine_estimates
from mood_adapt.fusion.models import (
    AnyReading,
    ChannelReading,
    FacialReading,
    InteractionReading,
    MoodTrend,
    PulseReading,
    TemperatureReading,
    TemperatureTrend,
)

__all__ = [
    "AnyReading",
    "ChannelReading",
    "FacialReading",
    "InteractionReading",
    "MoodTrend",
    "PulseReading",
    "SignalFusion",
    "TemperatureReading",
    "TemperatureTrend",
    "combine_estimates",
]
