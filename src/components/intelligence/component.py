"""
Intelligence component - Engagement status, readiness and intent verdicts.

Three independent, pure classifiers over the same per-section aggregates.
Each is an ordered rule table: the first matching rule decides.

Invariants:
- Classifiers never raise; empty input maps to a defined default verdict
- Input is never mutated; equal input gives equal output
- Bottleneck and tagged-section lookups honour input order
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from src.components.engagement.component import summarize_sections
from src.components.engagement.models import SectionAnalytics

from ._engagement import analyze_engagement
from ._intent import detect_intent
from ._readiness import analyze_proposal_state
from ._rules import normalize_sections
from .models import IntelligenceThresholds, ProposalInsights
from .ports import IntelligenceRulesPort, SectionTagger


def resolve_thresholds(rules: IntelligenceRulesPort | None) -> IntelligenceThresholds:
    """Thresholds from the rules port, or the defaults."""
    if rules is None:
        return IntelligenceThresholds()
    return rules.get_thresholds()


def run_insights(
    sections: Sequence[SectionAnalytics] | Any,
    *,
    rules: IntelligenceRulesPort | None = None,
    tagger: SectionTagger | None = None,
) -> ProposalInsights:
    """
    Run all three classifiers over one snapshot of section aggregates.

    Args:
        sections: Per-section aggregates (records or loose mappings)
        rules: Optional rules port for threshold overrides
        tagger: Optional section tagger

    Returns:
        ProposalInsights with the three verdicts side by side
    """
    records = normalize_sections(sections)
    thresholds = resolve_thresholds(rules)

    return ProposalInsights(
        sections=records,
        engagement=analyze_engagement(records, thresholds=thresholds.engagement),
        state=analyze_proposal_state(records, thresholds=thresholds.readiness, tagger=tagger),
        intent=detect_intent(records, thresholds=thresholds.intent, tagger=tagger),
        summary=summarize_sections(records),
    )
