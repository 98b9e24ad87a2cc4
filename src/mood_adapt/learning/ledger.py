"""Feedback ledger — decision records, success counters, training corpus.

The ledger owns all mutable learning state:

1. **Decision records** — one :class:`HistoryRecord` per decision cycle,
   answered at most once.  Bounded; the oldest record is evicted first, so
   feedback that arrives after eviction is silently ignored.
2. **Success patterns** — ``(type, action)`` → attempts / successes.
3. **Training corpus** — one :class:`TrainingExample` per feedback call,
   bounded; every ``retrain_every`` appended examples the predictive
   scorer is retrained on the current corpus.

The ledger is not thread-safe; hosts serialise calls (see
:class:`mood_adapt.runtime.loop.DecisionLoop`).
"""

from __future__ import annotations

from collections import OrderedDict, deque
from typing import Any, Sequence

import structlog

from mood_adapt.adaptation.features import cosine_similarity, extract_features
from mood_adapt.adaptation.predictors import AdaptationPredictor, NullPredictor
from mood_adapt.learning.models import (
    ContextSnapshot,
    Feedback,
    HistoryRecord,
    Outcome,
    SuccessPattern,
    TrainingExample,
)
from mood_adapt.models import Adaptation, AdaptationCandidate, AdaptationType, Context

logger = structlog.get_logger(__name__)

DEFAULT_LEDGER_CAPACITY = 500
DEFAULT_CORPUS_CAPACITY = 1000
DEFAULT_RETRAIN_EVERY = 50


def snapshot_context(context: Context) -> ContextSnapshot:
    mood = context.mood_state
    return ContextSnapshot(
        primary_mood=mood.primary_mood,
        energy=mood.energy,
        valence=mood.valence,
        arousal=mood.arousal,
        traits=context.user_profile.traits,
        tendencies=context.user_profile.tendencies,
        hour=context.hour,
        device=context.device,
        features=extract_features(context),
    )


class FeedbackLedger:
    """Records decisions and learns from the feedback they receive.

    Parameters
    ----------
    predictor : AdaptationPredictor | None
        Retrained periodically from the corpus.  Defaults to a no-op.
    capacity : int
        Maximum number of decision records kept.
    corpus_capacity : int
        Maximum number of training examples kept.
    retrain_every : int
        Retrain after this many appended training examples.
    """

    def __init__(
        self,
        predictor: AdaptationPredictor | None = None,
        capacity: int = DEFAULT_LEDGER_CAPACITY,
        corpus_capacity: int = DEFAULT_CORPUS_CAPACITY,
        retrain_every: int = DEFAULT_RETRAIN_EVERY,
    ) -> None:
        self._predictor = predictor or NullPredictor()
        self._capacity = capacity
        self._retrain_every = retrain_every
        self._records: OrderedDict[str, HistoryRecord] = OrderedDict()
        self._patterns: dict[tuple[AdaptationType, str], SuccessPattern] = {}
        self._corpus: deque[TrainingExample] = deque(maxlen=corpus_capacity)
        self._examples_appended = 0
        self._retrain_count = 0

    # ── Decisions ─────────────────────────────────────────────

    def record(self, context: Context, selected: Sequence[AdaptationCandidate]) -> str:
        """Store a decision awaiting feedback and return its id."""
        record = HistoryRecord(
            context_snapshot=snapshot_context(context),
            selected=list(selected),
        )
        self._records[record.id] = record
        while len(self._records) > self._capacity:
            evicted_id, _ = self._records.popitem(last=False)
            logger.debug("ledger.record_evicted", record_id=evicted_id)
        return record.id

    def get(self, record_id: str) -> HistoryRecord | None:
        return self._records.get(record_id)

    @property
    def records(self) -> list[HistoryRecord]:
        return list(self._records.values())

    # ── Feedback ──────────────────────────────────────────────

    def apply_feedback(self, record_id: str, feedback: Feedback) -> bool:
        """Attach *feedback* to a stored decision.

        Returns ``False`` without touching any state when the record is
        unknown (never stored, or already evicted) or already answered.
        """
        record = self._records.get(record_id)
        if record is None:
            logger.info("ledger.feedback_unknown_record", record_id=record_id)
            return False
        if record.outcome is not None:
            logger.warning("ledger.feedback_already_applied", record_id=record_id)
            return False

        record.outcome = Outcome(positive=feedback.positive, rating=feedback.rating)

        for adaptation in record.adaptations:
            pattern = self._patterns.setdefault(adaptation.key, SuccessPattern())
            pattern.attempts += 1
            if feedback.positive:
                pattern.successes += 1

        self._append_example(
            TrainingExample(
                features=record.context_snapshot.features,
                chosen_adaptations=record.adaptations,
                success=feedback.positive,
                rating=feedback.rating if feedback.rating is not None else 0.5,
            )
        )
        logger.info(
            "ledger.feedback_applied",
            record_id=record_id,
            positive=feedback.positive,
            adaptations=len(record.adaptations),
        )
        return True

    def _append_example(self, example: TrainingExample) -> None:
        self._corpus.append(example)
        self._examples_appended += 1
        if self._examples_appended % self._retrain_every == 0:
            self._retrain_count += 1
            logger.info(
                "ledger.retrain",
                predictor=self._predictor.name,
                corpus=len(self._corpus),
                round=self._retrain_count,
            )
            try:
                self._predictor.train(list(self._corpus))
            except Exception as exc:
                # Feedback is already committed; the predictor keeps its old fit.
                logger.error(
                    "ledger.retrain_failed",
                    predictor=self._predictor.name,
                    error=str(exc),
                )

    # ── Queries ───────────────────────────────────────────────

    def success_pattern(self, adaptation: Adaptation) -> SuccessPattern | None:
        return self._patterns.get(adaptation.key)

    def success_rate(self, adaptation: Adaptation) -> float:
        """Empirical success rate, 0.5 for an adaptation never tried."""
        pattern = self._patterns.get(adaptation.key)
        return pattern.rate if pattern is not None else 0.5

    @property
    def corpus(self) -> list[TrainingExample]:
        return list(self._corpus)

    def find_similar(
        self,
        features: dict[str, float],
        threshold: float = 0.7,
        top_k: int = 5,
    ) -> list[tuple[HistoryRecord, float]]:
        """Answered records whose context resembles *features*, most similar first."""
        matches: list[tuple[HistoryRecord, float]] = []
        for record in self._records.values():
            if record.outcome is None:
                continue
            similarity = cosine_similarity(features, record.context_snapshot.features)
            if similarity >= threshold:
                matches.append((record, similarity))
        matches.sort(key=lambda item: item[1], reverse=True)
        return matches[:top_k]

    def stats(self) -> dict[str, Any]:
        answered = sum(1 for r in self._records.values() if r.outcome is not None)
        return {
            "records": len(self._records),
            "answered": answered,
            "patterns": len(self._patterns),
            "corpus": len(self._corpus),
            "examples_appended": self._examples_appended,
            "retrain_count": self._retrain_count,
            "predictor": self._predictor.name,
        }

    def reset(self) -> None:
        self._records.clear()
        self._patterns.clear()
        self._corpus.clear()
        self._examples_appended = 0
        self._retrain_count = 0
