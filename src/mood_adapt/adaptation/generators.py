"""Candidate generators — independent producers of adaptation candidates.

The four generators only read the :class:`Context` and their own static
configuration (plus, for the history generator, the ledger), so they can be
run in any order or concurrently within one decision cycle.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog
from pydantic import BaseModel

from mood_adapt.adaptation.features import extract_features, is_night
from mood_adapt.adaptation.predictors import AdaptationPredictor
from mood_adapt.adaptation.rules import RuleTable
from mood_adapt.learning.ledger import FeedbackLedger
from mood_adapt.models import (
    Adaptation,
    AdaptationCandidate,
    AdaptationType,
    CandidateSource,
    Context,
)

logger = structlog.get_logger(__name__)


class CandidateGenerator(ABC):
    """A single source of adaptation candidates."""

    source: CandidateSource

    @abstractmethod
    def generate(self, context: Context) -> list[AdaptationCandidate]:
        """Return zero or more candidates for *context*."""


# ── Rules ─────────────────────────────────────────────────────


class RuleBasedGenerator(CandidateGenerator):
    source = CandidateSource.RULE

    def __init__(self, table: RuleTable) -> None:
        self._table = table

    @property
    def table(self) -> RuleTable:
        return self._table

    def generate(self, context: Context) -> list[AdaptationCandidate]:
        return self._table.match(context.mood_state, context.user_profile)


# ── Predictive scorer ────────────────────────────────────────


class PredictiveGenerator(CandidateGenerator):
    """Wraps a pluggable :class:`AdaptationPredictor`."""

    source = CandidateSource.ML

    def __init__(self, predictor: AdaptationPredictor) -> None:
        self._predictor = predictor

    def generate(self, context: Context) -> list[AdaptationCandidate]:
        predictions = self._predictor.predict(extract_features(context))
        return [
            p if p.source == CandidateSource.ML else p.model_copy(update={"source": CandidateSource.ML})
            for p in predictions
        ]


# ── Context ───────────────────────────────────────────────────


class KeywordBundle(BaseModel):
    """Adaptations proposed when the page URL or category mentions a keyword."""

    keywords: list[str]
    adaptations: list[Adaptation]
    confidence: float = 0.8
    reasoning: str = ""


def default_keyword_bundles() -> list[KeywordBundle]:
    return [
        KeywordBundle(
            keywords=["work", "productivity"],
            adaptations=[
                Adaptation(type=AdaptationType.LAYOUT, action="minimal_distractions"),
                Adaptation(type=AdaptationType.CONTENT, action="focus_mode"),
            ],
            confidence=0.8,
            reasoning="Work context detected",
        ),
    ]


NIGHT_BUNDLE = [
    Adaptation(type=AdaptationType.VISUAL, action="dark_mode"),
    Adaptation(type=AdaptationType.VISUAL, action="reduce_brightness", amount=0.8),
]


class ContextualGenerator(CandidateGenerator):
    """Time-of-day and page-keyword heuristics with fixed confidences.

    Parameters
    ----------
    night_start, night_end : int
        Night window in hours, inclusive at both ends, wrapping midnight.
    keyword_bundles : list[KeywordBundle] | None
        Keyword → adaptation table; defaults to the work/productivity bundle.
    night_confidence : float
        Confidence of the night-time comfort candidate.
    """

    source = CandidateSource.CONTEXT

    def __init__(
        self,
        night_start: int = 22,
        night_end: int = 6,
        keyword_bundles: list[KeywordBundle] | None = None,
        night_confidence: float = 0.9,
    ) -> None:
        self._night_start = night_start
        self._night_end = night_end
        self._bundles = keyword_bundles if keyword_bundles is not None else default_keyword_bundles()
        self._night_confidence = night_confidence

    def is_night(self, context: Context) -> bool:
        return is_night(context.hour, self._night_start, self._night_end)

    def generate(self, context: Context) -> list[AdaptationCandidate]:
        candidates: list[AdaptationCandidate] = []

        if self.is_night(context):
            candidates.append(
                AdaptationCandidate(
                    source=CandidateSource.CONTEXT,
                    adaptations=list(NIGHT_BUNDLE),
                    confidence=self._night_confidence,
                    reasoning="Night time - eye comfort",
                )
            )

        page = context.page_text()
        for bundle in self._bundles:
            if any(k.lower() in page for k in bundle.keywords):
                candidates.append(
                    AdaptationCandidate(
                        source=CandidateSource.CONTEXT,
                        adaptations=list(bundle.adaptations),
                        confidence=bundle.confidence,
                        reasoning=bundle.reasoning or f"Page matches {bundle.keywords}",
                    )
                )
        return candidates


# ── History ───────────────────────────────────────────────────


class HistoryGenerator(CandidateGenerator):
    """Re-propose what worked before in similar contexts.

    Retrieves the ``top_k`` most similar answered records at or above
    ``threshold`` cosine similarity; each positive one yields a candidate
    with confidence ``0.6 + 0.3 * similarity``.
    """

    source = CandidateSource.HISTORY

    def __init__(
        self,
        ledger: FeedbackLedger,
        threshold: float = 0.7,
        top_k: int = 5,
    ) -> None:
        self._ledger = ledger
        self._threshold = threshold
        self._top_k = top_k

    def generate(self, context: Context) -> list[AdaptationCandidate]:
        similar = self._ledger.find_similar(
            extract_features(context), threshold=self._threshold, top_k=self._top_k
        )
        candidates: list[AdaptationCandidate] = []
        for record, similarity in similar:
            if record.outcome is None or not record.outcome.positive or not record.adaptations:
                continue
            candidates.append(
                AdaptationCandidate(
                    source=CandidateSource.HISTORY,
                    adaptations=record.adaptations,
                    confidence=0.6 + 0.3 * similarity,
                    reasoning="Previous success in similar context",
                    reference=record.id,
                )
            )
        if candidates:
            logger.debug("history_generator.retrieved", candidates=len(candidates))
        return candidates
