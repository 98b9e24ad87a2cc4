"""Candidate scorer — multi-factor desirability of each candidate.

``overall = w_mood·mood_match + w_user·user_match + w_context·context_match
+ w_success·success_rate`` with default weights 0.3 / 0.3 / 0.2 / 0.2.
Every term is clamped to ``[0, 1]`` before weighting.

=============  =====================================================
Term           Rule
=============  =====================================================
mood_match     rule: 0.5 + 0.2 per mood-aligned adaptation (≤ 1);
               ml: the model's confidence; others: 0.5
user_match     0.5 ± 0.1 per adaptation vs. preferences and traits
context_match  0.7 + night dark mode / mobile targets / social pages
success_rate   mean per-adaptation success rate (0.5 prior)
=============  =====================================================
"""

from __future__ import annotations

from typing import Callable, Sequence

from pydantic import BaseModel

from mood_adapt.adaptation.features import is_night
from mood_adapt.models import (
    Adaptation,
    AdaptationCandidate,
    AdaptationType,
    CandidateSource,
    Context,
    DeviceClass,
    Mood,
    ScoreBreakdown,
    UserProfile,
    clamp01,
)

SuccessLookup = Callable[[Adaptation], float]

# (adaptation type, mood, action fragment) that count as aligned
_MOOD_ALIGNMENT: tuple[tuple[AdaptationType, Mood, str], ...] = (
    (AdaptationType.VISUAL, Mood.STRESSED, "reduce"),
    (AdaptationType.VISUAL, Mood.SAD, "warm"),
    (AdaptationType.VISUAL, Mood.FOCUSED, "minimal"),
    (AdaptationType.CONTENT, Mood.SAD, "positive"),
    (AdaptationType.CONTENT, Mood.STRESSED, "minimize"),
)
_ALIGNMENT_BONUS = 0.2

_LOW_OPENNESS = 0.3
_HIGH_OPENNESS = 0.7
_MOBILE_MARKERS = ("increase_click_area", "simplify")
_ENGAGEMENT_MARKERS = ("enhanced", "dynamic")
_SOCIAL_MARKER = "social"


class ScoreWeights(BaseModel):
    mood_match: float = 0.3
    user_match: float = 0.3
    context_match: float = 0.2
    success_rate: float = 0.2


def _neutral_success(_: Adaptation) -> float:
    return 0.5


# ── Individual terms ─────────────────────────────────────────


def mood_alignment(adaptations: Sequence[Adaptation], mood: Mood) -> float:
    alignment = 0.5
    for adaptation in adaptations:
        for a_type, a_mood, fragment in _MOOD_ALIGNMENT:
            if adaptation.type == a_type and mood == a_mood and fragment in adaptation.action:
                alignment += _ALIGNMENT_BONUS
                break
    return min(alignment, 1.0)


def user_alignment(adaptations: Sequence[Adaptation], profile: UserProfile) -> float:
    alignment = 0.5
    visual = profile.preferences.visual
    openness = profile.traits.openness
    for adaptation in adaptations:
        if adaptation.type == AdaptationType.VISUAL:
            if visual.prefers_bright and adaptation.action == "reduce_brightness":
                alignment -= 0.1
            elif visual.prefers_high_contrast and adaptation.action == "increase_contrast":
                alignment += 0.1

        if "minimal" in adaptation.action and openness < _LOW_OPENNESS:
            alignment += 0.1
        elif "dynamic" in adaptation.action and openness > _HIGH_OPENNESS:
            alignment += 0.1
    return clamp01(alignment)


def context_alignment(
    candidate: AdaptationCandidate,
    context: Context,
    *,
    night_start: int = 22,
    night_end: int = 6,
) -> float:
    alignment = 0.7
    actions = candidate.actions()

    if is_night(context.hour, night_start, night_end) and "dark_mode" in actions:
        alignment += 0.2
    if context.device == DeviceClass.MOBILE and any(
        marker in action for action in actions for marker in _MOBILE_MARKERS
    ):
        alignment += 0.1
    if _SOCIAL_MARKER in context.page_text() and any(
        marker in action for action in actions for marker in _ENGAGEMENT_MARKERS
    ):
        alignment += 0.1
    return clamp01(alignment)


# ── Scorer ────────────────────────────────────────────────────


class CandidateScorer:
    """Score and rank candidates for one decision context.

    Parameters
    ----------
    success_rate : Callable[[Adaptation], float] | None
        Per-adaptation empirical success rate (usually
        :meth:`FeedbackLedger.success_rate`).  Defaults to the 0.5 prior.
    weights : ScoreWeights | None
        Term weights.
    night_start, night_end : int
        Night window used by the context term.
    """

    def __init__(
        self,
        success_rate: SuccessLookup | None = None,
        weights: ScoreWeights | None = None,
        night_start: int = 22,
        night_end: int = 6,
    ) -> None:
        self._success_rate = success_rate or _neutral_success
        self._weights = weights or ScoreWeights()
        self._night_start = night_start
        self._night_end = night_end

    def breakdown(self, candidate: AdaptationCandidate, context: Context) -> ScoreBreakdown:
        if candidate.source == CandidateSource.RULE:
            mood = mood_alignment(candidate.adaptations, context.mood_state.primary_mood)
        elif candidate.source == CandidateSource.ML:
            mood = candidate.confidence
        else:
            mood = 0.5

        user = user_alignment(candidate.adaptations, context.user_profile)
        ctx = context_alignment(
            candidate, context, night_start=self._night_start, night_end=self._night_end
        )
        rates = [self._success_rate(a) for a in candidate.adaptations]
        success = sum(rates) / len(rates) if rates else 0.5

        mood, user, ctx, success = (clamp01(x) for x in (mood, user, ctx, success))
        w = self._weights
        overall = (
            w.mood_match * mood
            + w.user_match * user
            + w.context_match * ctx
            + w.success_rate * success
        )
        return ScoreBreakdown(
            mood_match=mood,
            user_match=user,
            context_match=ctx,
            success_rate=success,
            overall=clamp01(overall),
        )

    def score(self, candidate: AdaptationCandidate, context: Context) -> AdaptationCandidate:
        """Return a copy of *candidate* carrying its score and breakdown."""
        breakdown = self.breakdown(candidate, context)
        return candidate.model_copy(
            update={"overall_score": breakdown.overall, "breakdown": breakdown}
        )

    def rank(
        self,
        candidates: Sequence[AdaptationCandidate],
        context: Context,
    ) -> list[AdaptationCandidate]:
        """Score every candidate and sort by descending score (stable)."""
        scored = [self.score(c, context) for c in candidates]
        return sorted(scored, key=lambda c: c.overall_score or 0.0, reverse=True)
