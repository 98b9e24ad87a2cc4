"""Signal fusion engine — confidence-weighted combination of channel estimates.

This module turns several unreliable per-channel estimates into one
probabilistic :class:`MoodState` and keeps a bounded rolling history of
the results for temporal smoothing and trend queries.

Fusion rules
------------
- Channels with no reading or zero confidence are dropped.
- With no surviving channel, the neutral default (confidence 0) is returned.
- Each channel's mood accumulates its confidence; the heaviest mood wins.
- Energy / valence / arousal are confidence-weighted averages.  A channel
  that does not estimate a scalar contributes the neutral 0.5 for it.
"""

from __future__ import annotations

from collections import deque
from datetime import datetime, timedelta
from typing import Iterable, Sequence

import structlog

from mood_adapt.fusion.channels import interpret
from mood_adapt.fusion.models import ChannelReading, MoodTrend, MoodTrendPoint
from mood_adapt.models import ChannelEstimate, Mood, MoodState, MoodWeight, as_naive_utc

logger = structlog.get_logger(__name__)

DEFAULT_HISTORY_CAPACITY = 200
_NEUTRAL_SCALAR = 0.5
_SECONDARY_MOOD_COUNT = 2


def _ranked(weights: dict[Mood, float]) -> list[tuple[Mood, float]]:
    """Moods by descending weight; ties keep first-seen order."""
    return sorted(weights.items(), key=lambda kv: kv[1], reverse=True)


def combine_estimates(
    estimates: Iterable[ChannelEstimate | None],
    *,
    timestamp: datetime | None = None,
) -> MoodState:
    """Fuse interpreted channel estimates into a single :class:`MoodState`.

    Pure function: does not touch any history.
    """
    active = [e for e in estimates if e is not None and e.confidence > 0]
    if not active:
        return MoodState.neutral(timestamp)

    weights: dict[Mood, float] = {}
    total = 0.0
    energy = valence = arousal = 0.0
    for est in active:
        w = est.confidence
        total += w
        weights[est.mood] = weights.get(est.mood, 0.0) + w
        energy += (est.energy if est.energy is not None else _NEUTRAL_SCALAR) * w
        valence += (est.valence if est.valence is not None else _NEUTRAL_SCALAR) * w
        arousal += (est.arousal if est.arousal is not None else _NEUTRAL_SCALAR) * w

    ranked = _ranked(weights)
    primary, top_weight = ranked[0]
    share = top_weight / total
    confidence = min(share * total / len(active), 1.0)

    return MoodState(
        primary_mood=primary,
        confidence=confidence,
        energy=energy / total,
        valence=valence / total,
        arousal=arousal / total,
        secondary_moods=[
            MoodWeight(mood=m, confidence=w / total)
            for m, w in ranked[1 : 1 + _SECONDARY_MOOD_COUNT]
        ],
        timestamp=timestamp or datetime.utcnow(),
        indicators={e.channel: e for e in active},
        sample_size=len(active),
    )


class SignalFusion:
    """Stateful fusion stage owning the rolling mood history.

    Parameters
    ----------
    history_capacity : int
        Maximum number of fused states retained (oldest evicted first).
    """

    def __init__(self, history_capacity: int = DEFAULT_HISTORY_CAPACITY) -> None:
        self._history: deque[MoodState] = deque(maxlen=history_capacity)

    @property
    def history(self) -> list[MoodState]:
        return list(self._history)

    # ── Fusion ────────────────────────────────────────────────

    def fuse(
        self,
        readings: Sequence[ChannelReading | ChannelEstimate | None],
        *,
        timestamp: datetime | None = None,
    ) -> MoodState:
        """Interpret each reading, fuse the estimates and record the result."""
        estimates = [interpret(r) for r in readings]
        state = combine_estimates(estimates, timestamp=timestamp)
        self._history.append(state)

        if state.sample_size == 0:
            logger.debug("fusion.no_channels", readings=len(readings))
        else:
            logger.debug(
                "fusion.fused",
                mood=state.primary_mood.value,
                confidence=round(state.confidence, 3),
                channels=state.sample_size,
            )
        return state

    # ── Temporal queries ─────────────────────────────────────

    def current_mood(
        self,
        window_seconds: float = 30.0,
        *,
        now: datetime | None = None,
    ) -> MoodState:
        """Smooth the history entries of the last *window_seconds*.

        An empty window falls back to the latest entry, and an empty
        history to the neutral default.
        """
        now = as_naive_utc(now) if now is not None else datetime.utcnow()
        recent = [
            m for m in self._history
            if (now - m.timestamp).total_seconds() < window_seconds
        ]
        if not recent:
            return self._history[-1] if self._history else MoodState.neutral(now)

        weights = [m.confidence for m in recent]
        total = sum(weights)
        if total == 0:
            # Nothing to weigh by; let every entry count equally.
            weights = [1.0] * len(recent)
            total = float(len(recent))

        mood_weights: dict[Mood, float] = {}
        for m, w in zip(recent, weights):
            mood_weights[m.primary_mood] = mood_weights.get(m.primary_mood, 0.0) + w
        ranked = _ranked(mood_weights)

        return MoodState(
            primary_mood=ranked[0][0],
            confidence=min(sum(m.confidence for m in recent) / len(recent), 1.0),
            energy=sum(m.energy * w for m, w in zip(recent, weights)) / total,
            valence=sum(m.valence * w for m, w in zip(recent, weights)) / total,
            arousal=sum(m.arousal * w for m, w in zip(recent, weights)) / total,
            secondary_moods=[
                MoodWeight(mood=mood, confidence=w / total)
                for mood, w in ranked[1 : 1 + _SECONDARY_MOOD_COUNT]
            ],
            timestamp=now,
            sample_size=len(recent),
        )

    def mood_trends(
        self,
        minutes: float = 10.0,
        *,
        now: datetime | None = None,
    ) -> MoodTrend | None:
        """Summarise the history of the last *minutes*.

        Returns ``None`` when fewer than two states fall in the window.
        """
        now = as_naive_utc(now) if now is not None else datetime.utcnow()
        cutoff = now - timedelta(minutes=minutes)
        window = [m for m in self._history if m.timestamp >= cutoff]
        if len(window) < 2:
            return None

        n = len(window)
        changes = sum(
            1 for prev, cur in zip(window, window[1:])
            if prev.primary_mood != cur.primary_mood
        )
        return MoodTrend(
            timeline=[
                MoodTrendPoint(
                    timestamp=m.timestamp,
                    mood=m.primary_mood,
                    energy=m.energy,
                    valence=m.valence,
                    arousal=m.arousal,
                )
                for m in window
            ],
            average_energy=sum(m.energy for m in window) / n,
            average_valence=sum(m.valence for m in window) / n,
            average_arousal=sum(m.arousal for m in window) / n,
            mood_changes=changes,
        )
