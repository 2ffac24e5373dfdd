"""
In-memory share link repository for testing/dev.
"""

from __future__ import annotations

import threading
from datetime import datetime

from .component import record_share_view
from .models import ShareableLink


class InMemoryShareRepo:
    """In-memory implementation of ShareRepoPort."""

    def __init__(self) -> None:
        self._links: dict[str, ShareableLink] = {}
        self._lock = threading.Lock()

    def get(self, share_id: str) -> ShareableLink | None:
        return self._links.get(share_id)

    def save(self, link: ShareableLink) -> ShareableLink:
        with self._lock:
            self._links[link.id] = link
        return link

    def record_view(self, share_id: str, at: datetime) -> ShareableLink | None:
        with self._lock:
            link = self._links.get(share_id)
            if link is None:
                return None
            viewed = record_share_view(link, at)
            self._links[share_id] = viewed
            return viewed

    def list_by_proposal(self, proposal_id: str) -> list[ShareableLink]:
        return [link for link in self._links.values() if link.proposal_id == proposal_id]
