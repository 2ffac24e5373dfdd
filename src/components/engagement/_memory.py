"""
In-memory session repository for testing/dev.
"""

from __future__ import annotations

from collections import defaultdict

from .models import ClientEngagement


class InMemoryEngagementSessionRepo:
    """In-memory implementation of EngagementSessionRepoPort."""

    def __init__(self) -> None:
        self._sessions: dict[str, list[ClientEngagement]] = defaultdict(list)

    def save(self, session: ClientEngagement) -> None:
        self._sessions[session.proposal_id].append(session)

    def load(self, proposal_id: str) -> list[ClientEngagement]:
        return list(self._sessions.get(proposal_id, []))

    def clear(self) -> None:
        """Clear all sessions (for testing)."""
        self._sessions.clear()
