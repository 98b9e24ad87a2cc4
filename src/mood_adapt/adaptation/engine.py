"""Adaptation engine — generate → score → select → record.

This module provides :class:`AdaptationEngine`, the decision half of the
core.  One call to :meth:`AdaptationEngine.decide` is one decision cycle:

1. Collect candidates from every generator (rule, predictive, contextual,
   history — in that order, which breaks score ties)
2. Fall back to the default candidate when none was produced
3. Score and rank
4. Greedily select a conflict-free subset
5. Record the decision in the feedback ledger
"""

from __future__ import annotations

from typing import Sequence

import structlog

from mood_adapt.adaptation.generators import CandidateGenerator
from mood_adapt.adaptation.scoring import CandidateScorer
from mood_adapt.adaptation.selection import ConflictAwareSelector, default_candidate
from mood_adapt.learning.ledger import FeedbackLedger
from mood_adapt.models import AdaptationCandidate, Context, Decision

logger = structlog.get_logger(__name__)


class AdaptationEngine:
    """Decision pipeline over a fixed set of generators.

    Parameters
    ----------
    generators : Sequence[CandidateGenerator]
        Candidate sources, consulted in order.
    scorer : CandidateScorer
        Scores and ranks candidates.
    selector : ConflictAwareSelector
        Picks the final, conflict-free subset.
    ledger : FeedbackLedger
        Stores every decision for later feedback.
    """

    def __init__(
        self,
        generators: Sequence[CandidateGenerator],
        scorer: CandidateScorer,
        selector: ConflictAwareSelector,
        ledger: FeedbackLedger,
    ) -> None:
        self._generators = list(generators)
        self._scorer = scorer
        self._selector = selector
        self._ledger = ledger

    @property
    def generators(self) -> list[CandidateGenerator]:
        return list(self._generators)

    def generate(self, context: Context) -> list[AdaptationCandidate]:
        """Collect candidates from all generators.

        A generator that raises is logged and skipped; the cycle carries on
        with the others.
        """
        candidates: list[AdaptationCandidate] = []
        for generator in self._generators:
            try:
                produced = generator.generate(context)
            except Exception as exc:
                logger.error(
                    "engine.generator_failed",
                    generator=type(generator).__name__,
                    error=str(exc),
                )
                continue
            candidates.extend(produced)
        return candidates

    def decide(self, context: Context) -> Decision:
        """Run one full decision cycle for *context*."""
        candidates = self.generate(context) or [default_candidate()]
        ranked = self._scorer.rank(candidates, context)
        selected = self._selector.select(ranked)
        record_id = self._ledger.record(context, selected)

        logger.info(
            "engine.decided",
            record_id=record_id,
            mood=context.mood_state.primary_mood.value,
            candidates=len(candidates),
            selected=[c.source.value for c in selected],
        )
        return Decision(record_id=record_id, selected=selected, considered=len(candidates))
