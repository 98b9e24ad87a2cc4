"""Core facade — the four operations exposed to the host.

:class:`MoodAdaptCore` owns one fusion stage, one rule table, one ledger and
one decision engine.  Instances are built explicitly with
:func:`create_core` and passed to whoever needs them; there is no
module-level instance.

Typical host usage::

    core = create_core()
    state = core.fuse(readings)
    decision = core.decide(Context(mood_state=state, user_profile=profile))
    ...
    core.apply_feedback(decision.record_id, Feedback(positive=True))
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from mood_adapt.adaptation.default_rules import create_rule_table
from mood_adapt.adaptation.engine import AdaptationEngine
from mood_adapt.adaptation.generators import (
    ContextualGenerator,
    HistoryGenerator,
    PredictiveGenerator,
    RuleBasedGenerator,
)
from mood_adapt.adaptation.predictors import AdaptationPredictor, get_predictor
from mood_adapt.adaptation.rules import RuleTable
from mood_adapt.adaptation.scoring import CandidateScorer, ScoreWeights
from mood_adapt.adaptation.selection import ConflictAwareSelector
from mood_adapt.config import Settings, get_settings
from mood_adapt.fusion.engine import SignalFusion
from mood_adapt.fusion.models import ChannelReading, MoodTrend
from mood_adapt.learning.ledger import FeedbackLedger
from mood_adapt.learning.models import Feedback
from mood_adapt.models import ChannelEstimate, Context, Decision, MoodState


class MoodAdaptCore:
    """Inference-and-decision core.

    Not safe for concurrent use: hosts serialise calls (one decision loop,
    or a lock around every method).
    """

    def __init__(
        self,
        fusion: SignalFusion,
        rule_table: RuleTable,
        ledger: FeedbackLedger,
        engine: AdaptationEngine,
        predictor: AdaptationPredictor,
        current_mood_window_seconds: float = 30.0,
        mood_trend_minutes: float = 10.0,
    ) -> None:
        self.fusion = fusion
        self.rule_table = rule_table
        self.ledger = ledger
        self.engine = engine
        self.predictor = predictor
        self._window = current_mood_window_seconds
        self._trend_minutes = mood_trend_minutes

    def fuse(
        self,
        readings: Sequence[ChannelReading | ChannelEstimate | None],
        *,
        timestamp: datetime | None = None,
    ) -> MoodState:
        return self.fusion.fuse(readings, timestamp=timestamp)

    def decide(self, context: Context) -> Decision:
        return self.engine.decide(context)

    def apply_feedback(self, record_id: str, feedback: Feedback) -> bool:
        return self.ledger.apply_feedback(record_id, feedback)

    def current_mood(
        self,
        window_seconds: float | None = None,
        *,
        now: datetime | None = None,
    ) -> MoodState:
        return self.fusion.current_mood(
            self._window if window_seconds is None else window_seconds, now=now
        )

    def mood_trends(
        self,
        minutes: float | None = None,
        *,
        now: datetime | None = None,
    ) -> MoodTrend | None:
        return self.fusion.mood_trends(
            self._trend_minutes if minutes is None else minutes, now=now
        )


def create_core(
    settings: Settings | None = None,
    *,
    predictor: AdaptationPredictor | None = None,
    rule_table: RuleTable | None = None,
) -> MoodAdaptCore:
    """Wire a :class:`MoodAdaptCore` from settings.

    *predictor* and *rule_table* override the configured ones.  Raises
    :class:`ValueError` for an unknown predictor kind or an invalid rule
    file.
    """
    settings = settings or get_settings()
    if predictor is None:
        predictor = get_predictor(settings.predictor_kind)
    if rule_table is None:
        rule_table = create_rule_table(settings.rules_file)

    fusion = SignalFusion(history_capacity=settings.mood_history_capacity)
    ledger = FeedbackLedger(
        predictor=predictor,
        capacity=settings.ledger_capacity,
        corpus_capacity=settings.training_corpus_capacity,
        retrain_every=settings.retrain_every,
    )
    generators = [
        RuleBasedGenerator(rule_table),
        PredictiveGenerator(predictor),
        ContextualGenerator(
            night_start=settings.night_start_hour,
            night_end=settings.night_end_hour,
        ),
        HistoryGenerator(
            ledger,
            threshold=settings.history_similarity_threshold,
            top_k=settings.history_top_k,
        ),
    ]
    scorer = CandidateScorer(
        success_rate=ledger.success_rate,
        weights=ScoreWeights(
            mood_match=settings.weight_mood_match,
            user_match=settings.weight_user_match,
            context_match=settings.weight_context_match,
            success_rate=settings.weight_success_rate,
        ),
        night_start=settings.night_start_hour,
        night_end=settings.night_end_hour,
    )
    selector = ConflictAwareSelector(
        confidence_target=settings.selection_confidence_target,
        score_weight=settings.selection_score_weight,
    )
    engine = AdaptationEngine(generators, scorer, selector, ledger)
    return MoodAdaptCore(
        fusion=fusion,
        rule_table=rule_table,
        ledger=ledger,
        engine=engine,
        predictor=predictor,
        current_mood_window_seconds=settings.current_mood_window_seconds,
        mood_trend_minutes=settings.mood_trend_minutes,
    )
