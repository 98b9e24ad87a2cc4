"""Default adaptation rules and rule-table factories."""

from __future__ import annotations

from mood_adapt.adaptation.rules import Compare, ComparisonOp, Equals, Rule, RuleTable, load_rules
from mood_adapt.models import Adaptation, AdaptationType


def stress_reduction_rule() -> Rule:
    """Calm the interface down for a highly aroused, stressed user."""
    return Rule(
        name="stress_reduction",
        conditions=[
            Equals(field="mood", value="stressed"),
            Compare(field="arousal", op=ComparisonOp.GT, threshold=0.8),
        ],
        adaptations=[
            Adaptation(type=AdaptationType.VISUAL, action="reduce_brightness", amount=0.2),
            Adaptation(type=AdaptationType.VISUAL, action="simplify_layout"),
            Adaptation(type=AdaptationType.CONTENT, action="minimize_notifications"),
            Adaptation(type=AdaptationType.INTERACTION, action="increase_click_area", amount=1.3),
        ],
        confidence=0.8,
        description="High arousal stress: dim, simplify and enlarge targets.",
    )


def focus_enhancement_rule() -> Rule:
    return Rule(
        name="focus_enhancement",
        conditions=[
            Equals(field="mood", value="focused"),
            Compare(field="energy", op=ComparisonOp.GT, threshold=0.7),
        ],
        adaptations=[
            Adaptation(type=AdaptationType.LAYOUT, action="hide_sidebar"),
            Adaptation(type=AdaptationType.VISUAL, action="increase_contrast", amount=1.1),
            Adaptation(type=AdaptationType.CONTENT, action="block_distractions"),
            Adaptation(type=AdaptationType.INTERACTION, action="keyboard_shortcuts_enable"),
        ],
        confidence=0.9,
        description="Energetic focus: remove distractions and sharpen the view.",
    )


def mood_lifting_rule() -> Rule:
    return Rule(
        name="mood_lifting",
        conditions=[
            Equals(field="mood", value="sad"),
            Compare(field="valence", op=ComparisonOp.LT, threshold=0.3),
        ],
        adaptations=[
            Adaptation(type=AdaptationType.VISUAL, action="warm_color_temperature"),
            Adaptation(type=AdaptationType.CONTENT, action="positive_content_filter"),
            Adaptation(type=AdaptationType.LAYOUT, action="increase_spacing", amount=1.2),
            Adaptation(type=AdaptationType.INTERACTION, action="gentle_animations"),
        ],
        confidence=0.7,
        description="Low valence sadness: warmer colours and gentler content.",
    )


def engagement_boost_rule() -> Rule:
    return Rule(
        name="engagement_boost",
        conditions=[
            Equals(field="mood", value="bored"),
            Compare(field="energy", op=ComparisonOp.LT, threshold=0.3),
        ],
        adaptations=[
            Adaptation(type=AdaptationType.VISUAL, action="increase_brightness", amount=1.1),
            Adaptation(type=AdaptationType.CONTENT, action="dynamic_content"),
            Adaptation(type=AdaptationType.INTERACTION, action="enhanced_navigation"),
            Adaptation(type=AdaptationType.LAYOUT, action="rich_toolbar"),
        ],
        confidence=0.8,
        description="Low energy boredom: brighter, livelier interface.",
    )


def default_rules() -> list[Rule]:
    """Return the built-in rule set."""
    return [
        stress_reduction_rule(),
        focus_enhancement_rule(),
        mood_lifting_rule(),
        engagement_boost_rule(),
    ]


def create_rule_table(rules_file: str = "") -> RuleTable:
    """Build a rule table from *rules_file*, or the defaults when it is empty."""
    if rules_file:
        return RuleTable(rules=load_rules(rules_file))
    return RuleTable(rules=default_rules())
