"""
Engagement component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from .models import ClientEngagement


class EngagementSessionRepoPort(Protocol):
    """Repository interface for finished client sessions."""

    def save(self, session: ClientEngagement) -> None:
        """
        Persist a finished session.

        Sessions are append-only; saving never overwrites an earlier session.
        """
        ...

    def load(self, proposal_id: str) -> list[ClientEngagement]:
        """Load every stored session for a proposal, oldest first."""
        ...


class EngagementRulesPort(Protocol):
    """Port for engagement aggregation rules."""

    def get_high_popularity_ratio(self) -> float:
        """Share of the top view count at or above which a section is 'high' (default 0.66)."""
        ...

    def get_medium_popularity_ratio(self) -> float:
        """Share of the top view count at or above which a section is 'medium' (default 0.33)."""
        ...
