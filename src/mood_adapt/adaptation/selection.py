"""Conflict-aware selector — greedy pick of compatible, high-scoring candidates."""

from __future__ import annotations

from typing import Sequence

import structlog

from mood_adapt.models import Adaptation, AdaptationCandidate, AdaptationType, CandidateSource

logger = structlog.get_logger(__name__)

# Mutually exclusive action fragments; matched by substring in either order.
ANTAGONISTS: tuple[tuple[str, str], ...] = (
    ("increase_brightness", "reduce_brightness"),
    ("increase_contrast", "reduce_contrast"),
    ("dark_mode", "light_mode"),
    ("minimal_distractions", "rich_content"),
)


def actions_conflict(first: str, second: str) -> bool:
    return any(
        (a in first and b in second) or (b in first and a in second)
        for a, b in ANTAGONISTS
    )


def adaptations_conflict(first: Adaptation, second: Adaptation) -> bool:
    """Same type, different action, and the actions are antagonists."""
    return (
        first.type == second.type
        and first.action != second.action
        and actions_conflict(first.action, second.action)
    )


def candidates_conflict(first: AdaptationCandidate, second: AdaptationCandidate) -> bool:
    return any(
        adaptations_conflict(a, b)
        for a in first.adaptations
        for b in second.adaptations
    )


def default_candidate() -> AdaptationCandidate:
    """Safe, balanced bundle used when nothing else can be selected."""
    return AdaptationCandidate(
        source=CandidateSource.DEFAULT,
        adaptations=[
            Adaptation(type=AdaptationType.VISUAL, action="balance_brightness"),
            Adaptation(type=AdaptationType.LAYOUT, action="standard_layout"),
        ],
        confidence=0.5,
        reasoning="Default safe adaptation",
    )


class ConflictAwareSelector:
    """Greedy selection subject to a confidence budget.

    Candidates are taken in the given (score-descending) order; each is
    accepted unless it conflicts with one already accepted.  Selection
    stops once ``Σ overall_score · score_weight`` reaches
    ``confidence_target``.
    """

    def __init__(self, confidence_target: float = 0.8, score_weight: float = 0.3) -> None:
        self._target = confidence_target
        self._score_weight = score_weight

    def select(self, ranked: Sequence[AdaptationCandidate]) -> list[AdaptationCandidate]:
        selected: list[AdaptationCandidate] = []
        total = 0.0
        skipped = 0

        for candidate in ranked:
            if total >= self._target:
                break
            if any(candidates_conflict(existing, candidate) for existing in selected):
                skipped += 1
                continue
            selected.append(candidate)
            total += (candidate.overall_score or 0.0) * self._score_weight

        if not selected:
            logger.info("selector.default_used", candidates=len(ranked))
            return [default_candidate()]

        logger.debug(
            "selector.selected",
            selected=len(selected),
            conflicts_skipped=skipped,
            budget=round(total, 3),
        )
        return selected
