"""
Intent detector.

Infers the client's disposition from behaviour around the pricing and
executive summary sections and from overall reading patterns.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from src.components.engagement.models import SectionAnalytics

from ._rules import Rule, constant, first_match, mean, normalize_sections
from .models import EXECUTIVE_SUMMARY, PRICING, IntentSignal, IntentThresholds
from .ports import SectionTagger
from .tagging import DEFAULT_TAGGER, first_tagged

NO_DATA = IntentSignal(
    intent="unknown",
    confidence=0,
    signals=("No engagement data available",),
    next_action="Send proposal link reminder",
)

READY = IntentSignal(
    intent="ready",
    confidence=85,
    signals=(
        "Multiple reviews of pricing section",
        "Thorough exploration of proposal",
        "High engagement depth",
    ),
    next_action="Schedule decision call",
)

HESITATING = IntentSignal(
    intent="hesitating",
    confidence=75,
    signals=(
        "Repeated focus on pricing",
        "Long time spent evaluating cost",
        "Possible budget concerns",
    ),
    next_action="Offer pricing discussion or alternatives",
)

CONFUSED = IntentSignal(
    intent="confused",
    confidence=60,
    signals=(
        "Quick, inconsistent section views",
        "May need clarification",
        "Consider proactive outreach",
    ),
    next_action="Send clarification email or schedule walkthrough",
)

REVIEWING = IntentSignal(
    intent="reviewing",
    confidence=70,
    signals=(
        "Systematic review in progress",
        "Steady engagement",
        "Normal evaluation timeline",
    ),
    next_action="Wait for next engagement",
)

UNKNOWN = IntentSignal(
    intent="unknown",
    confidence=0,
    signals=(),
    next_action="Monitor engagement",
)


@dataclass(frozen=True)
class IntentFacts:
    sections: tuple[SectionAnalytics, ...]
    pricing: SectionAnalytics | None
    executive_summary: SectionAnalytics | None
    avg_revisits: float


def _ready(t: IntentThresholds):
    def predicate(f: IntentFacts) -> bool:
        return (
            f.pricing is not None
            and f.pricing.view_count > t.ready_pricing_views_over
            and f.pricing.revisit_count > t.ready_pricing_revisits_over
            and f.executive_summary is not None
            and f.executive_summary.view_count > t.ready_summary_views_over
        )

    return predicate


def _hesitating(t: IntentThresholds):
    def predicate(f: IntentFacts) -> bool:
        return (
            f.pricing is not None
            and f.pricing.revisit_count > t.hesitating_pricing_revisits_over
            and f.pricing.total_time_spent > t.hesitating_pricing_seconds_over
        )

    return predicate


def _confused(t: IntentThresholds):
    def predicate(f: IntentFacts) -> bool:
        return len(f.sections) > t.confused_sections_over and any(
            s.avg_time_per_view < t.confused_avg_seconds_under for s in f.sections
        )

    return predicate


def _reviewing(t: IntentThresholds):
    def predicate(f: IntentFacts) -> bool:
        viewed = sum(1 for s in f.sections if s.view_count > 0)
        return (
            viewed > t.reviewing_viewed_sections_over
            and f.avg_revisits < t.reviewing_avg_revisits_under
        )

    return predicate


def intent_rules(t: IntentThresholds) -> tuple[Rule[IntentFacts, IntentSignal], ...]:
    return (
        Rule("ready", _ready(t), constant(READY)),
        Rule("hesitating", _hesitating(t), constant(HESITATING)),
        Rule("confused", _confused(t), constant(CONFUSED)),
        Rule("reviewing", _reviewing(t), constant(REVIEWING)),
    )


DEFAULT_INTENT_RULES = intent_rules(IntentThresholds())


def detect_intent(
    sections: Sequence[SectionAnalytics] | Any,
    *,
    thresholds: IntentThresholds | None = None,
    tagger: SectionTagger | None = None,
) -> IntentSignal:
    """
    Classify the client's intent and recommend the owner's next action.

    Args:
        sections: Per-section aggregates (records or loose mappings)
        thresholds: Optional threshold overrides
        tagger: Optional section tagger (title substrings by default)

    Returns:
        IntentSignal; never raises
    """
    records = normalize_sections(sections)
    if not records:
        return NO_DATA

    tagger = tagger or DEFAULT_TAGGER
    rules = DEFAULT_INTENT_RULES if thresholds is None else intent_rules(thresholds)

    facts = IntentFacts(
        sections=records,
        pricing=first_tagged(records, PRICING, tagger),
        executive_summary=first_tagged(records, EXECUTIVE_SUMMARY, tagger),
        avg_revisits=mean([s.revisit_count for s in records]),
    )
    return first_match(rules, facts, constant(UNKNOWN))
