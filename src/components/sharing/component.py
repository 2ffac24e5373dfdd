"""
Sharing component - Share links for the read-only client view.

Creates unguessable share links (optionally password protected), counts
client views, and derives owner-facing engagement signals from them.

Invariants:
- Share ids come from a CSPRNG
- Plain passwords are never stored, only their hashes
- Links are immutable; recording a view returns a new link
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from .models import (
    CreateShareLinkInput,
    EngagementSignal,
    EngagementSignalsInput,
    EngagementSignalsOutput,
    RecordShareViewInput,
    ShareableLink,
    ShareLinkOutput,
    SharingValidationError,
)
from .ports import PasswordHasherPort, ShareRepoPort, SharingRulesPort, TimePort

# --- Default Configuration ---

DEFAULT_SHARE_ID_LENGTH = 8
DEFAULT_RECENT_VIEW_WINDOW_HOURS = 24
SHARE_ID_ALPHABET = string.ascii_lowercase + string.digits


# --- Pure Functions (Functional Core) ---


def generate_share_id(length: int = DEFAULT_SHARE_ID_LENGTH) -> str:
    """Generate a random lowercase alphanumeric share id."""
    return "".join(secrets.choice(SHARE_ID_ALPHABET) for _ in range(length))


def create_shareable_link(
    proposal_id: str,
    password: str | None = None,
    *,
    hasher: PasswordHasherPort | None = None,
    now: datetime | None = None,
    id_length: int = DEFAULT_SHARE_ID_LENGTH,
) -> ShareableLink:
    """
    Create a new, never-viewed share link.

    An empty password creates an open link.

    Raises:
        ValueError: If a password is given without a hasher
    """
    password_hash = None
    if password:
        if hasher is None:
            raise ValueError("A password hasher is required for protected links")
        password_hash = hasher.hash_password(password)

    return ShareableLink(
        id=generate_share_id(id_length),
        proposal_id=proposal_id,
        created_at=now or datetime.now(UTC),
        password_hash=password_hash,
    )


def verify_share_password(
    link: ShareableLink,
    password: str | None,
    hasher: PasswordHasherPort | None,
) -> bool:
    """Open links always verify; protected links need the right password."""
    if link.password_hash is None:
        return True
    if not password or hasher is None:
        return False
    return hasher.verify_password(password, link.password_hash)


def record_share_view(link: ShareableLink, at: datetime) -> ShareableLink:
    """Return the link with one more view, last viewed at ``at``."""
    return ShareableLink(
        id=link.id,
        proposal_id=link.proposal_id,
        created_at=link.created_at,
        last_viewed=at,
        password_hash=link.password_hash,
        view_count=link.view_count + 1,
    )


def most_recent_view(links: Sequence[ShareableLink]) -> datetime | None:
    viewed = [link.last_viewed for link in links if link.last_viewed is not None]
    return max(viewed) if viewed else None


def get_engagement_signals(
    links: Sequence[ShareableLink],
    now: datetime,
    last_modified: datetime | None = None,
    recent_window_hours: int = DEFAULT_RECENT_VIEW_WINDOW_HOURS,
) -> list[EngagementSignal]:
    """
    Derive engagement signals from a proposal's share links.

    - last_viewed: hours ago (low urgency) inside the recent window,
      days ago (medium urgency) outside it
    - updated: the proposal changed after the most recent client view

    Args:
        links: Share links of one proposal
        now: Current time
        last_modified: When the proposal was last edited, if known
        recent_window_hours: Size of the "recent view" window

    Returns:
        Signals, most important last
    """
    signals: list[EngagementSignal] = []
    if not links:
        return signals

    last_view = most_recent_view(links)

    if last_view is not None:
        elapsed = max(now - last_view, timedelta(0))
        hours_ago = int(elapsed.total_seconds() // 3600)
        if hours_ago < recent_window_hours:
            signals.append(
                EngagementSignal(
                    type="last_viewed",
                    timestamp=last_view,
                    message=f"Client viewed {hours_ago}h ago",
                    urgency="low",
                )
            )
        else:
            signals.append(
                EngagementSignal(
                    type="last_viewed",
                    timestamp=last_view,
                    message=f"Last viewed {hours_ago // 24}d ago",
                    urgency="medium",
                )
            )

    if last_modified is not None and (last_view is None or last_modified > last_view):
        signals.append(
            EngagementSignal(
                type="updated",
                message="Updated since last client view",
                urgency="high",
            )
        )

    return signals


# --- Component Entry Points ---


def _now(time_port: TimePort | None) -> datetime:
    return time_port.now_utc() if time_port is not None else datetime.now(UTC)


def run_create_link(
    inp: CreateShareLinkInput,
    *,
    repo: ShareRepoPort,
    hasher: PasswordHasherPort | None = None,
    rules: SharingRulesPort | None = None,
    time_port: TimePort | None = None,
) -> ShareLinkOutput:
    """
    Create and store a share link.

    Args:
        inp: Proposal id and optional password
        repo: Share repository port
        hasher: Password hasher (required for protected links)
        rules: Optional rules port for id length
        time_port: Optional time port

    Returns:
        ShareLinkOutput with the stored link
    """
    if not inp.proposal_id:
        return ShareLinkOutput(
            link=None,
            errors=[
                SharingValidationError(
                    code="MISSING_PROPOSAL_ID",
                    message="Proposal id is required",
                    field_name="proposal_id",
                )
            ],
            success=False,
        )

    if inp.password and hasher is None:
        return ShareLinkOutput(
            link=None,
            errors=[
                SharingValidationError(
                    code="PASSWORD_UNSUPPORTED",
                    message="Password protection is not available",
                    field_name="password",
                )
            ],
            success=False,
        )

    id_length = rules.get_share_id_length() if rules is not None else DEFAULT_SHARE_ID_LENGTH

    link = create_shareable_link(
        inp.proposal_id,
        inp.password,
        hasher=hasher,
        now=_now(time_port),
        id_length=id_length,
    )
    return ShareLinkOutput(link=repo.save(link))


def _not_found(share_id: str) -> ShareLinkOutput:
    return ShareLinkOutput(
        link=None,
        errors=[
            SharingValidationError(
                code="NOT_FOUND",
                message=f"Share link not found: {share_id}",
                field_name="share_id",
            )
        ],
        success=False,
    )


def run_record_view(
    inp: RecordShareViewInput,
    *,
    repo: ShareRepoPort,
    hasher: PasswordHasherPort | None = None,
    time_port: TimePort | None = None,
) -> ShareLinkOutput:
    """
    Record a client opening a share link.

    Returns NOT_FOUND for unknown ids and INVALID_PASSWORD when a protected
    link is opened with a wrong or missing password (the view is not counted).
    The count is incremented by the repo in one step, so concurrent views
    are never lost.
    """
    link = repo.get(inp.share_id)
    if link is None:
        return _not_found(inp.share_id)

    if not verify_share_password(link, inp.password, hasher):
        return ShareLinkOutput(
            link=None,
            errors=[
                SharingValidationError(
                    code="INVALID_PASSWORD",
                    message="Incorrect password for share link",
                    field_name="password",
                )
            ],
            success=False,
        )

    viewed = repo.record_view(link.id, _now(time_port))
    if viewed is None:
        return _not_found(inp.share_id)
    return ShareLinkOutput(link=viewed)


def run_signals(
    inp: EngagementSignalsInput,
    *,
    repo: ShareRepoPort,
    rules: SharingRulesPort | None = None,
    time_port: TimePort | None = None,
) -> EngagementSignalsOutput:
    """Compute engagement signals for a proposal's share links."""
    window = (
        rules.get_recent_view_window_hours()
        if rules is not None
        else DEFAULT_RECENT_VIEW_WINDOW_HOURS
    )
    signals = get_engagement_signals(
        repo.list_by_proposal(inp.proposal_id),
        now=_now(time_port),
        last_modified=inp.last_modified,
        recent_window_hours=window,
    )
    return EngagementSignalsOutput(proposal_id=inp.proposal_id, signals=tuple(signals))
