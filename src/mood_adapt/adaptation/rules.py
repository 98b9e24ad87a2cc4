"""Rule table — declarative condition → adaptation mappings.

Conditions are typed predicates evaluated by a small interpreter instead of
free-form expressions:

- ``Equals(field, value)`` — exact match (``mood == "stressed"``)
- ``Compare(field, op, threshold)`` — ``gt`` / ``lt`` / ``gte`` / ``lte``

Fields resolve against the current :class:`MoodState` first
(``mood``, ``confidence``, ``energy``, ``valence``, ``arousal``) and then
against the user's traits and tendencies (``openness``, ``impatience`` …).

Rules may also be written with the string-keyed shorthand used by rule
files::

    {"mood": "stressed", "arousal_gt": "0.8"}

which :func:`parse_conditions` turns into typed predicates.
"""

from __future__ import annotations

import json
import operator
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Callable, Literal, Mapping, Union

import structlog
from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from mood_adapt.models import (
    Adaptation,
    AdaptationCandidate,
    CandidateSource,
    MoodState,
    UserProfile,
    clamp01,
)

logger = structlog.get_logger(__name__)


class ComparisonOp(str, Enum):
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"


_OPERATORS: dict[ComparisonOp, Callable[[float, float], bool]] = {
    ComparisonOp.GT: operator.gt,
    ComparisonOp.LT: operator.lt,
    ComparisonOp.GTE: operator.ge,
    ComparisonOp.LTE: operator.le,
}

# Prefix form accepted in values, e.g. {"arousal": ">0.8"}
_PREFIX_OPS = (
    (">=", ComparisonOp.GTE),
    ("<=", ComparisonOp.LTE),
    (">", ComparisonOp.GT),
    ("<", ComparisonOp.LT),
)

_OP_NAMES = {op.value for op in ComparisonOp}
_MOOD_FIELD_ALIASES = {"mood": "primary_mood", "primary_mood": "primary_mood"}
_MOOD_SCALARS = {"confidence", "energy", "valence", "arousal"}


# ── Predicates ────────────────────────────────────────────────


class Equals(BaseModel):
    kind: Literal["equals"] = "equals"
    field: str
    value: str | float


class Compare(BaseModel):
    kind: Literal["compare"] = "compare"
    field: str
    op: ComparisonOp
    threshold: float


Predicate = Annotated[Union[Equals, Compare], Field(discriminator="kind")]


def parse_conditions(conditions: Mapping[str, Any]) -> list[Equals | Compare]:
    """Convert the string-keyed condition shorthand into typed predicates.

    ``field_op`` keys become comparisons, prefixed values (``">0.8"``)
    likewise, and anything else an exact match.
    """
    predicates: list[Equals | Compare] = []
    for key, value in conditions.items():
        if key in _MOOD_FIELD_ALIASES:
            predicates.append(Equals(field="mood", value=str(value)))
            continue

        field, _, suffix = key.rpartition("_")
        if field and suffix in _OP_NAMES:
            predicates.append(
                Compare(field=field, op=ComparisonOp(suffix), threshold=float(value))
            )
            continue
        if field and suffix == "eq":
            predicates.append(Equals(field=field, value=_coerce(value)))
            continue

        if isinstance(value, str):
            stripped = value.strip()
            for prefix, op in _PREFIX_OPS:
                if stripped.startswith(prefix):
                    predicates.append(
                        Compare(field=key, op=op, threshold=float(stripped[len(prefix):]))
                    )
                    break
            else:
                predicates.append(Equals(field=key, value=_coerce(value)))
        else:
            predicates.append(Equals(field=key, value=_coerce(value)))
    return predicates


def _coerce(value: Any) -> str | float:
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return str(value)


# ── Interpreter ───────────────────────────────────────────────


def _resolve(field: str, mood: MoodState, profile: UserProfile | None) -> Any:
    """Look a field up on the mood state, then on the profile.

    Returns ``None`` for unknown fields.
    """
    if field in _MOOD_FIELD_ALIASES:
        return mood.primary_mood.value
    if field in _MOOD_SCALARS:
        return getattr(mood, field)
    if profile is not None:
        for group in (profile.traits, profile.tendencies):
            if field in type(group).model_fields:
                return getattr(group, field)
    return None


def evaluate_predicate(
    predicate: Equals | Compare,
    mood: MoodState,
    profile: UserProfile | None = None,
) -> bool:
    actual = _resolve(predicate.field, mood, profile)
    if actual is None:
        logger.debug("rule_table.unknown_field", field=predicate.field)
        return False

    if isinstance(predicate, Equals):
        if isinstance(actual, str):
            return actual == str(predicate.value)
        try:
            return float(actual) == float(predicate.value)
        except (TypeError, ValueError):
            return False

    if isinstance(actual, str):
        return False
    return _OPERATORS[predicate.op](float(actual), predicate.threshold)


# ── Rules ─────────────────────────────────────────────────────


class Rule(BaseModel):
    """A static rule: when every condition holds, propose its adaptations."""

    name: str
    conditions: list[Predicate] = Field(default_factory=list)
    adaptations: list[Adaptation]
    confidence: float = 0.5
    description: str = ""

    @field_validator("conditions", mode="before")
    @classmethod
    def _accept_shorthand(cls, v: Any) -> Any:
        if isinstance(v, Mapping):
            return [p.model_dump() for p in parse_conditions(v)]
        return v

    @field_validator("confidence")
    @classmethod
    def _clamp(cls, v: float) -> float:
        return clamp01(v)

    def matches(self, mood: MoodState, profile: UserProfile | None = None) -> bool:
        return all(evaluate_predicate(p, mood, profile) for p in self.conditions)


class RuleTable:
    """Evaluate a set of declarative adaptation rules against the current state.

    Every matching rule yields one ``source=rule`` candidate; no ordering
    between rules is implied.
    """

    def __init__(self, rules: list[Rule] | None = None) -> None:
        self._rules: list[Rule] = rules or []

    # ── Rule management ───────────────────────────────────────

    def add_rule(self, rule: Rule) -> None:
        self._rules.append(rule)

    def remove_rule(self, name: str) -> bool:
        before = len(self._rules)
        self._rules = [r for r in self._rules if r.name != name]
        return len(self._rules) < before

    def list_rules(self) -> list[Rule]:
        return list(self._rules)

    # ── Evaluation ────────────────────────────────────────────

    def match(
        self,
        mood: MoodState,
        profile: UserProfile | None = None,
    ) -> list[AdaptationCandidate]:
        """Return one candidate per rule whose conditions all hold."""
        candidates: list[AdaptationCandidate] = []
        for rule in self._rules:
            if not rule.matches(mood, profile):
                continue
            candidates.append(
                AdaptationCandidate(
                    source=CandidateSource.RULE,
                    adaptations=list(rule.adaptations),
                    confidence=rule.confidence,
                    reasoning=rule.description or f"Rule '{rule.name}' matched",
                    rule_name=rule.name,
                )
            )
            logger.debug("rule_table.rule_matched", rule=rule.name, mood=mood.primary_mood.value)
        return candidates


_RULE_LIST = TypeAdapter(list[Rule])


def load_rules(path: str | Path) -> list[Rule]:
    """Read a JSON rule file (a list of rule objects).

    Raises :class:`ValueError` if the file cannot be parsed or validated.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        return _RULE_LIST.validate_python(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise ValueError(f"Invalid rule file {path}: {exc}") from exc
