"""
Share link API.

POST /api/shares               - create a link for a proposal (owner)
POST /api/shares/{id}/view     - client opens the link; counts the view
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.deps import get_clock, get_password_hasher, get_share_repo, get_sharing_rules
from src.api.schemas import CreateShareRequest, ShareLinkResponse, ShareViewRequest
from src.components.sharing import (
    CreateShareLinkInput,
    PasswordHasherPort,
    RecordShareViewInput,
    ShareRepoPort,
    TimePort,
    run_create_link,
    run_record_view,
)
from src.rules.adapters import SharingRulesAdapter

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_STATUS = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_PASSWORD": status.HTTP_401_UNAUTHORIZED,
}


@router.post("", response_model=ShareLinkResponse, status_code=status.HTTP_201_CREATED)
def create_share(
    body: CreateShareRequest,
    repo: ShareRepoPort = Depends(get_share_repo),
    hasher: PasswordHasherPort = Depends(get_password_hasher),
    rules: SharingRulesAdapter = Depends(get_sharing_rules),
    clock: TimePort = Depends(get_clock),
) -> ShareLinkResponse:
    """Create a share link, optionally password protected."""
    allow_password = rules.allows_password_protection()
    if body.password and not allow_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Password protection is disabled",
        )

    result = run_create_link(
        CreateShareLinkInput(proposal_id=body.proposal_id, password=body.password),
        repo=repo,
        hasher=hasher,
        rules=rules,
        time_port=clock,
    )
    if not result.success or result.link is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=result.errors[0].message,
        )

    logger.info("Created share link for proposal %s", result.link.proposal_id)
    return ShareLinkResponse.from_domain(result.link)


@router.post("/{share_id}/view", response_model=ShareLinkResponse)
def view_share(
    share_id: str,
    body: ShareViewRequest | None = None,
    repo: ShareRepoPort = Depends(get_share_repo),
    hasher: PasswordHasherPort = Depends(get_password_hasher),
    clock: TimePort = Depends(get_clock),
) -> ShareLinkResponse:
    """Record a client opening a share link."""
    result = run_record_view(
        RecordShareViewInput(share_id=share_id, password=body.password if body else None),
        repo=repo,
        hasher=hasher,
        time_port=clock,
    )
    if not result.success or result.link is None:
        error = result.errors[0]
        raise HTTPException(
            status_code=_ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
            detail=error.message,
        )

    return ShareLinkResponse.from_domain(result.link)
