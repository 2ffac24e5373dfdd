"""
Sharing component input/output models.

Share links grant read-only access to a proposal's client view and count
the views they receive.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

# --- Types ---

SignalType = Literal["last_viewed", "updated", "new_feedback"]
SignalUrgency = Literal["low", "medium", "high"]


# --- Validation Error ---


@dataclass(frozen=True)
class SharingValidationError:
    """Sharing validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Domain Models ---


@dataclass(frozen=True)
class ShareableLink:
    """
    A share link for one proposal.

    password_hash is None for open links. The plain password is never kept.
    """

    id: str
    proposal_id: str
    created_at: datetime
    last_viewed: datetime | None = None
    password_hash: str | None = None
    view_count: int = 0

    @property
    def is_protected(self) -> bool:
        return self.password_hash is not None


@dataclass(frozen=True)
class EngagementSignal:
    """Owner-facing nudge derived from share activity."""

    type: SignalType
    message: str
    urgency: SignalUrgency
    timestamp: datetime | None = None


# --- Input Models ---


@dataclass(frozen=True)
class CreateShareLinkInput:
    """Input for creating a share link."""

    proposal_id: str
    password: str | None = None


@dataclass(frozen=True)
class RecordShareViewInput:
    """Input for recording a client opening a share link."""

    share_id: str
    password: str | None = None


@dataclass(frozen=True)
class EngagementSignalsInput:
    """Input for computing a proposal's engagement signals."""

    proposal_id: str
    last_modified: datetime | None = None


# --- Output Models ---


@dataclass(frozen=True)
class ShareLinkOutput:
    """Output from creating or viewing a share link."""

    link: ShareableLink | None
    errors: list[SharingValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class EngagementSignalsOutput:
    """Output for engagement signals."""

    proposal_id: str
    signals: tuple[EngagementSignal, ...]
    errors: list[SharingValidationError] = field(default_factory=list)
    success: bool = True
