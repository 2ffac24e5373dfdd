"""
Readiness assessor.

Scores how close the client is to a decision (revisit depth plus view
coverage), picks a lifecycle phase from the score and flags the first
critical section that was only skimmed as the bottleneck.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from src.components.engagement.models import SectionAnalytics

from ._rules import Rule, first_match, mean, normalize_sections
from .models import ProposalState, ReadinessThresholds
from .ports import SectionTagger
from .tagging import DEFAULT_TAGGER

NOT_VIEWED = ProposalState(
    phase="not-started",
    readiness=0,
    recommendation="Proposal not yet viewed by client",
)


@dataclass(frozen=True)
class ReadinessFacts:
    readiness: int
    bottleneck: str | None


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def readiness_score(sections: Sequence[SectionAnalytics], t: ReadinessThresholds) -> int:
    """
    Weighted readiness score.

    Not clamped: heavy revisiting can push it past 100.
    """
    avg_revisits = mean([s.revisit_count for s in sections])
    view_coverage = sum(1 for s in sections if s.view_count > 0) / len(sections)
    return round_half_up(avg_revisits * t.revisit_weight + view_coverage * t.coverage_weight)


def find_bottleneck(
    sections: Sequence[SectionAnalytics],
    t: ReadinessThresholds,
    tagger: SectionTagger,
) -> str | None:
    """First critical section (input order) read for less than the threshold."""
    critical = set(t.critical_tags)
    for section in sections:
        if (
            critical & tagger.tags_for(section.section_title)
            and section.avg_time_per_view < t.bottleneck_avg_seconds_under
        ):
            return section.section_title
    return None


def _not_started(f: ReadinessFacts) -> ProposalState:
    return ProposalState(
        phase="not-started",
        readiness=f.readiness,
        bottleneck=f.bottleneck,
        recommendation="Client is just starting their review. Give them time to explore.",
    )


def _reviewing(f: ReadinessFacts) -> ProposalState:
    if f.bottleneck:
        recommendation = (
            f"Client is stuck on {f.bottleneck}. Consider reaching out with clarification."
        )
    else:
        recommendation = "Client is actively reviewing. Monitor engagement closely."
    return ProposalState(
        phase="reviewing",
        readiness=f.readiness,
        bottleneck=f.bottleneck,
        recommendation=recommendation,
    )


def _blocked(f: ReadinessFacts) -> ProposalState:
    return ProposalState(
        phase="blocked",
        readiness=f.readiness,
        bottleneck=f.bottleneck,
        recommendation="Client engagement is inconsistent. Address concerns and clarify next steps.",
    )


def _ready(f: ReadinessFacts) -> ProposalState:
    return ProposalState(
        phase="ready",
        readiness=f.readiness,
        recommendation="Client appears ready to move forward. Schedule discussion or presentation.",
    )


def _complete(_f: ReadinessFacts) -> ProposalState:
    return ProposalState(
        phase="complete",
        readiness=100,
        recommendation="Client has thoroughly reviewed. Ready for decision or negotiation.",
    )


def readiness_rules(t: ReadinessThresholds) -> tuple[Rule[ReadinessFacts, ProposalState], ...]:
    return (
        Rule("not-started", lambda f: f.readiness < t.not_started_below, _not_started),
        Rule("reviewing", lambda f: f.readiness < t.reviewing_below, _reviewing),
        Rule("blocked", lambda f: f.readiness < t.blocked_below, _blocked),
        Rule("ready", lambda f: f.readiness < t.ready_below, _ready),
    )


DEFAULT_READINESS_RULES = readiness_rules(ReadinessThresholds())


def analyze_proposal_state(
    sections: Sequence[SectionAnalytics] | Any,
    *,
    thresholds: ReadinessThresholds | None = None,
    tagger: SectionTagger | None = None,
) -> ProposalState:
    """
    Assess readiness, phase and bottleneck.

    Args:
        sections: Per-section aggregates; order decides the bottleneck tie-break
        thresholds: Optional threshold overrides
        tagger: Optional section tagger (title substrings by default)

    Returns:
        ProposalState; never raises
    """
    records = normalize_sections(sections)
    if not records:
        return NOT_VIEWED

    t = thresholds or ReadinessThresholds()
    rules = DEFAULT_READINESS_RULES if thresholds is None else readiness_rules(thresholds)

    facts = ReadinessFacts(
        readiness=readiness_score(records, t),
        bottleneck=find_bottleneck(records, t, tagger or DEFAULT_TAGGER),
    )
    return first_match(rules, facts, _complete)
