"""
Intelligence component models.

Verdicts produced by the three classifiers, and the thresholds they apply.
Default thresholds reproduce the reference behaviour; rules.yaml may
override them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from src.components.engagement.models import ProposalAnalytics, SectionAnalytics

# --- Types ---

EngagementStatus = Literal["active", "passive", "stale", "ghosted"]
Urgency = Literal["high", "medium", "low"]
ProposalPhase = Literal["not-started", "reviewing", "blocked", "ready", "complete"]
Intent = Literal["ready", "hesitating", "confused", "reviewing", "unknown"]

# Semantic section tags
PRICING = "pricing"
TIMELINE = "timeline"
EXECUTIVE_SUMMARY = "executive_summary"


# --- Thresholds ---


@dataclass(frozen=True)
class EngagementThresholds:
    """Thresholds for the engagement status rules (all comparisons strict)."""

    active_views_over: int = 8
    active_revisits_over: int = 2
    active_avg_seconds_over: float = 45
    passive_views_over: int = 5
    passive_revisits_at_most: int = 1
    passive_avg_seconds_over: float = 30
    stale_avg_seconds_under: float = 30


@dataclass(frozen=True)
class ReadinessThresholds:
    """Readiness score weights, phase cut-offs and bottleneck detection."""

    revisit_weight: float = 15
    coverage_weight: float = 85
    not_started_below: int = 25
    reviewing_below: int = 50
    blocked_below: int = 75
    ready_below: int = 95
    bottleneck_avg_seconds_under: float = 30
    critical_tags: tuple[str, ...] = (PRICING, TIMELINE, EXECUTIVE_SUMMARY)


@dataclass(frozen=True)
class IntentThresholds:
    """Thresholds for the intent rules (all comparisons strict)."""

    ready_pricing_views_over: int = 3
    ready_pricing_revisits_over: int = 1
    ready_summary_views_over: int = 0
    hesitating_pricing_revisits_over: int = 2
    hesitating_pricing_seconds_over: float = 300
    confused_avg_seconds_under: float = 20
    confused_sections_over: int = 1
    reviewing_viewed_sections_over: int = 3
    reviewing_avg_revisits_under: float = 1.5


@dataclass(frozen=True)
class IntelligenceThresholds:
    """All classifier thresholds."""

    engagement: EngagementThresholds = field(default_factory=EngagementThresholds)
    readiness: ReadinessThresholds = field(default_factory=ReadinessThresholds)
    intent: IntentThresholds = field(default_factory=IntentThresholds)


# --- Verdicts ---


@dataclass(frozen=True)
class EngagementState:
    """How actively the client is engaging, and what the owner should do."""

    status: EngagementStatus
    description: str
    actions: tuple[str, ...]
    urgency: Urgency


@dataclass(frozen=True)
class ProposalState:
    """How close the client is to a decision, and what may be blocking it."""

    phase: ProposalPhase
    readiness: int
    recommendation: str
    bottleneck: str | None = None


@dataclass(frozen=True)
class IntentSignal:
    """Inferred client disposition with the recommended next action."""

    intent: Intent
    confidence: int
    signals: tuple[str, ...]
    next_action: str


@dataclass(frozen=True)
class ProposalInsights:
    """The three verdicts side by side, with the aggregates and totals they were built from."""

    sections: tuple[SectionAnalytics, ...]
    engagement: EngagementState
    state: ProposalState
    intent: IntentSignal
    summary: ProposalAnalytics = field(default_factory=ProposalAnalytics)
