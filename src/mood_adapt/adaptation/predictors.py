"""Predictive scorers — pluggable producers of ``source=ml`` candidates.

Any object implementing :class:`AdaptationPredictor` can be plugged into
the decision pipeline.  Three variants ship with the package:

- :class:`HeuristicPredictor` — the default; one low-confidence generic
  suggestion, no learning.
- :class:`SuccessTablePredictor` — a lookup table of per-mood success
  rates rebuilt from the training corpus on every ``train`` call.
- :class:`NullPredictor` — contributes nothing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Sequence, Type

import structlog
from pydantic import BaseModel

from mood_adapt.learning.models import TrainingExample
from mood_adapt.models import Adaptation, AdaptationCandidate, AdaptationType, CandidateSource

logger = structlog.get_logger(__name__)


class PredictorMetrics(BaseModel):
    accuracy: float = 0.0
    loss: float = 0.0
    examples: int = 0


class AdaptationPredictor(ABC):
    """Contract that every predictive scorer must implement."""

    name: str = "base"

    @abstractmethod
    def predict(self, features: Mapping[str, float]) -> list[AdaptationCandidate]:
        """Propose candidates for the given context features."""

    @abstractmethod
    def train(self, corpus: Sequence[TrainingExample]) -> None:
        """Refit on the current training corpus (called periodically)."""

    def evaluate(self, corpus: Sequence[TrainingExample]) -> PredictorMetrics:
        """Score predictions against recorded outcomes.

        A prediction counts as "positive" when any proposed adaptation was
        among those actually chosen; accuracy compares that with the
        recorded success flag, and the loss is the mean squared error of
        the best overlapping candidate's confidence.
        """
        if not corpus:
            return PredictorMetrics()

        correct = 0
        loss = 0.0
        for example in corpus:
            chosen = {a.key for a in example.chosen_adaptations}
            overlapping = [
                c for c in self.predict(example.features)
                if any(a.key in chosen for a in c.adaptations)
            ]
            p = max((c.confidence for c in overlapping), default=0.0)
            correct += bool(overlapping) == example.success
            loss += (p - float(example.success)) ** 2

        n = len(corpus)
        return PredictorMetrics(accuracy=correct / n, loss=loss / n, examples=n)


class HeuristicPredictor(AdaptationPredictor):
    """Fallback that always suggests a gentle brightness adjustment."""

    name = "heuristic"

    def __init__(self, confidence: float = 0.6) -> None:
        self._confidence = confidence
        self.trained_on = 0

    def predict(self, features: Mapping[str, float]) -> list[AdaptationCandidate]:
        return [
            AdaptationCandidate(
                source=CandidateSource.ML,
                adaptations=[Adaptation(type=AdaptationType.VISUAL, action="adjust_brightness")],
                confidence=self._confidence,
                reasoning="Generic heuristic suggestion",
            )
        ]

    def train(self, corpus: Sequence[TrainingExample]) -> None:
        self.trained_on = len(corpus)
        logger.info("predictor.trained", predictor=self.name, examples=len(corpus))


class NullPredictor(AdaptationPredictor):
    name = "null"

    def predict(self, features: Mapping[str, float]) -> list[AdaptationCandidate]:
        return []

    def train(self, corpus: Sequence[TrainingExample]) -> None:
        return None


class SuccessTablePredictor(AdaptationPredictor):
    """Per-mood lookup table of adaptation success rates.

    Parameters
    ----------
    min_support : int
        Minimum number of observations before an adaptation is trusted.
    max_adaptations : int
        Upper bound on adaptations bundled into the predicted candidate.
    """

    name = "success_table"

    def __init__(self, min_support: int = 2, max_adaptations: int = 3) -> None:
        self._min_support = min_support
        self._max_adaptations = max_adaptations
        # mood code → (type, action) → [attempts, successes]
        self._table: dict[float, dict[tuple[AdaptationType, str], list[int]]] = {}
        self._examples: dict[tuple[AdaptationType, str], Adaptation] = {}

    def train(self, corpus: Sequence[TrainingExample]) -> None:
        table: dict[float, dict[tuple[AdaptationType, str], list[int]]] = {}
        for example in corpus:
            code = round(example.features.get("mood_primary", 0.5), 1)
            bucket = table.setdefault(code, {})
            for adaptation in example.chosen_adaptations:
                counts = bucket.setdefault(adaptation.key, [0, 0])
                counts[0] += 1
                counts[1] += int(example.success)
                self._examples.setdefault(adaptation.key, adaptation)
        self._table = table
        logger.info(
            "predictor.trained",
            predictor=self.name,
            examples=len(corpus),
            moods=len(table),
        )

    def predict(self, features: Mapping[str, float]) -> list[AdaptationCandidate]:
        if not self._table:
            return []

        code = features.get("mood_primary", 0.5)
        nearest = min(self._table, key=lambda c: abs(c - code))
        ranked = sorted(
            (
                (successes / attempts, key)
                for key, (attempts, successes) in self._table[nearest].items()
                if attempts >= self._min_support and successes / attempts >= 0.5
            ),
            key=lambda item: item[0],
            reverse=True,
        )[: self._max_adaptations]
        if not ranked:
            return []

        return [
            AdaptationCandidate(
                source=CandidateSource.ML,
                adaptations=[self._examples[key] for _, key in ranked],
                confidence=sum(rate for rate, _ in ranked) / len(ranked),
                reasoning=f"Historically successful for mood code {nearest}",
            )
        ]


# ── Registry ──────────────────────────────────────────────────

_REGISTRY: dict[str, Type[AdaptationPredictor]] = {
    HeuristicPredictor.name: HeuristicPredictor,
    SuccessTablePredictor.name: SuccessTablePredictor,
    NullPredictor.name: NullPredictor,
}


def register_predictor(name: str, cls: Type[AdaptationPredictor]) -> None:
    """Register a new predictor class under *name*."""
    _REGISTRY[name] = cls


def get_predictor(name: str) -> AdaptationPredictor:
    """Instantiate the predictor registered under *name*.

    Raises :class:`ValueError` if no predictor is registered.
    """
    cls = _REGISTRY.get(name)
    if cls is None:
        raise ValueError(
            f"No predictor registered for {name!r}. "
            f"Available: {sorted(_REGISTRY)}"
        )
    return cls()


def available_predictors() -> list[str]:
    return list(_REGISTRY)
