"""
Proposal Insights API.

Owner-facing endpoints: the three engagement verdicts side by side, and the
share-link engagement signals.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.deps import (
    get_clock,
    get_engagement_rules,
    get_engagement_session_repo,
    get_intelligence_rules,
    get_share_repo,
    get_sharing_rules,
)
from src.api.schemas import (
    EngagementSignalModel,
    EvaluateRequest,
    InsightsRequest,
    InsightsResponse,
    SignalsResponse,
)
from src.components.engagement import (
    EngagementRulesPort,
    EngagementSessionRepoPort,
    run_section_analytics,
)
from src.components.intelligence import run_insights
from src.components.sharing import (
    EngagementSignalsInput,
    ShareRepoPort,
    SharingRulesPort,
    TimePort,
    run_signals,
)
from src.rules.adapters import IntelligenceRulesAdapter

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Helper Functions ---


def parse_datetime(dt_str: str) -> datetime:
    """Parse datetime string to datetime object."""
    try:
        # Try ISO format with Z
        if dt_str.endswith("Z"):
            dt_str = dt_str[:-1] + "+00:00"
        dt = datetime.fromisoformat(dt_str)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid datetime format: {dt_str}",
        ) from e


def _insights_for(
    proposal_id: str,
    body: InsightsRequest | None,
    repo: EngagementSessionRepoPort,
    engagement_rules: EngagementRulesPort,
    intelligence_rules: IntelligenceRulesAdapter,
) -> InsightsResponse:
    outline = None
    if body is not None and body.outline is not None:
        outline = [section.to_domain() for section in body.outline]

    analytics = run_section_analytics(
        proposal_id,
        repo=repo,
        outline=outline,
        rules=engagement_rules,
    )
    if not analytics.success:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=analytics.errors[0].message,
        )

    insights = run_insights(
        analytics.sections,
        rules=intelligence_rules,
        tagger=intelligence_rules.tagger,
    )
    logger.debug(
        "Insights for %s: %s / %s / %s",
        proposal_id,
        insights.engagement.status,
        insights.state.phase,
        insights.intent.intent,
    )
    return InsightsResponse.from_domain(
        insights,
        proposal_id=proposal_id,
        session_count=analytics.session_count,
    )


# --- Routes ---


@router.post("/insights/evaluate", response_model=InsightsResponse)
def evaluate_insights(
    body: EvaluateRequest,
    intelligence_rules: IntelligenceRulesAdapter = Depends(get_intelligence_rules),
) -> InsightsResponse:
    """Classify posted section aggregates directly, without stored sessions."""
    insights = run_insights(
        body.sections,
        rules=intelligence_rules,
        tagger=intelligence_rules.tagger,
    )
    return InsightsResponse.from_domain(insights)


@router.get("/{proposal_id}/insights", response_model=InsightsResponse)
def get_insights(
    proposal_id: str,
    repo: EngagementSessionRepoPort = Depends(get_engagement_session_repo),
    engagement_rules: EngagementRulesPort = Depends(get_engagement_rules),
    intelligence_rules: IntelligenceRulesAdapter = Depends(get_intelligence_rules),
) -> InsightsResponse:
    """Aggregate every stored session of a proposal and classify it."""
    return _insights_for(proposal_id, None, repo, engagement_rules, intelligence_rules)


@router.post("/{proposal_id}/insights", response_model=InsightsResponse)
def post_insights(
    proposal_id: str,
    body: InsightsRequest | None = None,
    repo: EngagementSessionRepoPort = Depends(get_engagement_session_repo),
    engagement_rules: EngagementRulesPort = Depends(get_engagement_rules),
    intelligence_rules: IntelligenceRulesAdapter = Depends(get_intelligence_rules),
) -> InsightsResponse:
    """Like GET, but against the proposal's current outline."""
    return _insights_for(proposal_id, body, repo, engagement_rules, intelligence_rules)


@router.get("/{proposal_id}/signals", response_model=SignalsResponse)
def get_signals(
    proposal_id: str,
    last_modified: str | None = Query(None, description="Last edit (ISO format)"),
    repo: ShareRepoPort = Depends(get_share_repo),
    rules: SharingRulesPort = Depends(get_sharing_rules),
    clock: TimePort = Depends(get_clock),
) -> SignalsResponse:
    """Engagement signals from the proposal's share links."""
    modified = parse_datetime(last_modified) if last_modified else None

    result = run_signals(
        EngagementSignalsInput(proposal_id=proposal_id, last_modified=modified),
        repo=repo,
        rules=rules,
        time_port=clock,
    )
    return SignalsResponse(
        proposal_id=proposal_id,
        signals=[EngagementSignalModel.from_domain(s) for s in result.signals],
    )
