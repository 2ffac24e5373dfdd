"""
Engagement classifier.

Maps section aggregates to active / passive / stale / ghosted.

Rule order (first match wins):
1. active  - many views, several revisits, long average reads
2. passive - most sections seen, hardly any revisits, reasonable reads
3. stale   - something was seen, but only skimmed
4. ghosted - fallback
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from src.components.engagement.models import SectionAnalytics

from ._rules import Rule, constant, first_match, mean, normalize_sections
from .models import EngagementState, EngagementThresholds

NOT_VIEWED = EngagementState(
    status="ghosted",
    description="No engagement detected - client hasn't viewed the proposal",
    actions=("Send follow-up reminder", "Check if email was received"),
    urgency="high",
)

ACTIVE = EngagementState(
    status="active",
    description="Client is actively reviewing and revisiting sections - highly engaged",
    actions=(
        "Be ready to answer questions",
        "Prepare to move to next steps",
        "Schedule follow-up call",
    ),
    urgency="low",
)

PASSIVE = EngagementState(
    status="passive",
    description="Client reviewed the proposal but hasn't engaged deeply - light interaction",
    actions=(
        "Send clarification email",
        "Offer to discuss details",
        "Wait for client response",
    ),
    urgency="medium",
)

STALE = EngagementState(
    status="stale",
    description="Client viewed briefly but hasn't engaged deeply - may need more clarity",
    actions=(
        "Send highlighted summary",
        "Request specific feedback",
        "Adjust proposal focus",
    ),
    urgency="high",
)

GHOSTED = EngagementState(
    status="ghosted",
    description="Minimal or no engagement detected",
    actions=("Send reminder", "Check proposal clarity"),
    urgency="high",
)


@dataclass(frozen=True)
class EngagementFacts:
    total_views: int
    total_revisits: int
    # Mean of the per-section averages, not a view-weighted average
    avg_time_per_section: float


def engagement_facts(sections: Sequence[SectionAnalytics]) -> EngagementFacts:
    return EngagementFacts(
        total_views=sum(s.view_count for s in sections),
        total_revisits=sum(s.revisit_count for s in sections),
        avg_time_per_section=mean([s.avg_time_per_view for s in sections]),
    )


def engagement_rules(
    t: EngagementThresholds,
) -> tuple[Rule[EngagementFacts, EngagementState], ...]:
    return (
        Rule(
            "active",
            lambda f: f.total_views > t.active_views_over
            and f.total_revisits > t.active_revisits_over
            and f.avg_time_per_section > t.active_avg_seconds_over,
            constant(ACTIVE),
        ),
        Rule(
            "passive",
            lambda f: f.total_views > t.passive_views_over
            and f.total_revisits <= t.passive_revisits_at_most
            and f.avg_time_per_section > t.passive_avg_seconds_over,
            constant(PASSIVE),
        ),
        Rule(
            "stale",
            lambda f: f.total_views > 0 and f.avg_time_per_section < t.stale_avg_seconds_under,
            constant(STALE),
        ),
    )


DEFAULT_ENGAGEMENT_RULES = engagement_rules(EngagementThresholds())


def analyze_engagement(
    sections: Sequence[SectionAnalytics] | Any,
    *,
    thresholds: EngagementThresholds | None = None,
) -> EngagementState:
    """
    Classify how actively the client is engaging with the proposal.

    Args:
        sections: Per-section aggregates (records or loose mappings)
        thresholds: Optional threshold overrides

    Returns:
        EngagementState; never raises
    """
    records = normalize_sections(sections)
    if not records:
        return NOT_VIEWED

    rules = DEFAULT_ENGAGEMENT_RULES if thresholds is None else engagement_rules(thresholds)
    return first_match(rules, engagement_facts(records), constant(GHOSTED))
