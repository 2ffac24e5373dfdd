"""
Engagement Ingestion API Routes.

Public endpoint the client view calls once, when a viewing session ends
(or the page unloads), with the full session record.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.deps import get_engagement_session_repo
from src.api.schemas import ClientEngagementRequest, ErrorItem, SessionAcceptedResponse
from src.components.engagement import EngagementSessionRepoPort, run_ingest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/sessions",
    response_model=SessionAcceptedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid session"}},
)
def ingest_session(
    body: ClientEngagementRequest,
    repo: EngagementSessionRepoPort = Depends(get_engagement_session_repo),
) -> SessionAcceptedResponse:
    """Validate and store a finished client session."""
    result = run_ingest(body.to_domain(), repo=repo)

    if not result.success or result.session is None:
        logger.warning(
            "Rejected session for proposal %r: %s",
            body.proposal_id,
            ", ".join(e.code for e in result.errors),
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=[
                ErrorItem(code=e.code, message=e.message, field=e.field_name).model_dump()
                for e in result.errors
            ],
        )

    logger.info(
        "Stored session for proposal %s (%d section views)",
        result.session.proposal_id,
        len(result.session.section_views),
    )
    return SessionAcceptedResponse(
        proposal_id=result.session.proposal_id,
        section_views=len(result.session.section_views),
    )
