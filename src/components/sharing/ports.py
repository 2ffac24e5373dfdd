"""
Sharing component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .models import ShareableLink


class ShareRepoPort(Protocol):
    """Repository interface for share links."""

    def get(self, share_id: str) -> ShareableLink | None:
        """Get a share link by id."""
        ...

    def save(self, link: ShareableLink) -> ShareableLink:
        """Insert or replace a share link."""
        ...

    def record_view(self, share_id: str, at: datetime) -> ShareableLink | None:
        """
        Count one view and stamp last_viewed, atomically.

        Returns the updated link, or None if the id is unknown.
        """
        ...

    def list_by_proposal(self, proposal_id: str) -> list[ShareableLink]:
        """List every share link of a proposal."""
        ...


class PasswordHasherPort(Protocol):
    """Password hashing for protected share links."""

    def hash_password(self, password: str) -> str:
        ...

    def verify_password(self, password: str, hash_str: str) -> bool:
        ...


class SharingRulesPort(Protocol):
    """Port for sharing rules configuration."""

    def get_share_id_length(self) -> int:
        """Length of generated share ids (default 8)."""
        ...

    def get_recent_view_window_hours(self) -> int:
        """Views newer than this are reported in hours, older in days (default 24)."""
        ...


class TimePort(Protocol):
    """Time provider interface."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
