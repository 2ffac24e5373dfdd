"""
Intelligence component - Engagement status, readiness and intent verdicts.
"""

from ._engagement import analyze_engagement
from ._intent import detect_intent
from ._readiness import analyze_proposal_state, find_bottleneck, readiness_score
from ._rules import Rule, first_match, normalize_sections
from .component import resolve_thresholds, run_insights
from .models import (
    EXECUTIVE_SUMMARY,
    PRICING,
    TIMELINE,
    EngagementState,
    EngagementStatus,
    EngagementThresholds,
    Intent,
    IntelligenceThresholds,
    IntentSignal,
    IntentThresholds,
    ProposalInsights,
    ProposalPhase,
    ProposalState,
    ReadinessThresholds,
    Urgency,
)
from .ports import IntelligenceRulesPort, SectionTagger
from .tagging import DEFAULT_TAGGER, TitleSubstringTagger, first_tagged

__all__ = [
    # Component functions
    "run_insights",
    "resolve_thresholds",
    # Classifiers
    "analyze_engagement",
    "analyze_proposal_state",
    "detect_intent",
    # Helpers
    "find_bottleneck",
    "readiness_score",
    "normalize_sections",
    "first_match",
    "Rule",
    # Tagging
    "DEFAULT_TAGGER",
    "TitleSubstringTagger",
    "first_tagged",
    "PRICING",
    "TIMELINE",
    "EXECUTIVE_SUMMARY",
    # Models
    "EngagementState",
    "EngagementStatus",
    "EngagementThresholds",
    "Intent",
    "IntelligenceThresholds",
    "IntentSignal",
    "IntentThresholds",
    "ProposalInsights",
    "ProposalPhase",
    "ProposalState",
    "ReadinessThresholds",
    "Urgency",
    # Ports
    "IntelligenceRulesPort",
    "SectionTagger",
]
