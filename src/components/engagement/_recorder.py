"""
SessionRecorder - Builds a ClientEngagement from viewport observations.

The client view reports when a section enters and leaves the viewport. The
recorder accumulates visible time per section, marks re-entries as
revisits, and seals the session into an immutable record on finish.

Key behaviors:
- First entry creates the SectionView; later entries after a leave are revisits
- Entering a section that is already visible is a no-op
- Leaving a section that is not visible is a no-op
- Clock skew (leave before enter) never reduces time spent
"""

from __future__ import annotations

from datetime import datetime

from .models import ClientEngagement, SectionView


class SessionClosedError(RuntimeError):
    """Raised when a finished session is observed again."""


def _elapsed_ms(start: datetime, end: datetime) -> int:
    return max(0, int((end - start).total_seconds() * 1000))


class _ViewState:
    __slots__ = ("title", "viewed_at", "time_ms", "reentries")

    def __init__(self, title: str, viewed_at: datetime) -> None:
        self.title = title
        self.viewed_at = viewed_at
        self.time_ms = 0
        self.reentries = 0


class SessionRecorder:
    """Records one client session for one proposal."""

    def __init__(self, proposal_id: str, client_id: str, started_at: datetime) -> None:
        self.proposal_id = proposal_id
        self.client_id = client_id
        self.started_at = started_at
        self._views: dict[str, _ViewState] = {}
        self._visible: dict[str, datetime] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosedError(
                f"Session for proposal {self.proposal_id} has already finished"
            )

    def enter(self, section_id: str, section_title: str, at: datetime) -> None:
        """Record a section entering the viewport."""
        self._check_open()

        if section_id in self._visible:
            return

        state = self._views.get(section_id)
        if state is None:
            self._views[section_id] = _ViewState(section_title, at)
        else:
            state.reentries += 1
            if section_title:
                state.title = section_title

        self._visible[section_id] = at

    def leave(self, section_id: str, at: datetime) -> None:
        """Record a section leaving the viewport."""
        self._check_open()

        entered_at = self._visible.pop(section_id, None)
        if entered_at is None:
            return

        self._views[section_id].time_ms += _elapsed_ms(entered_at, at)

    def finish(self, at: datetime) -> ClientEngagement:
        """
        Close every visible section and seal the session.

        Returns:
            The immutable session record
        """
        self._check_open()

        for section_id in list(self._visible):
            self.leave(section_id, at)
        self._closed = True

        views = tuple(
            SectionView(
                section_id=section_id,
                section_title=state.title,
                viewed_at=state.viewed_at,
                time_spent_ms=state.time_ms,
                revisited=state.reentries > 0,
            )
            for section_id, state in self._views.items()
        )

        return ClientEngagement(
            proposal_id=self.proposal_id,
            client_id=self.client_id,
            session_started=self.started_at,
            session_ended=at,
            section_views=views,
            total_time_spent_ms=_elapsed_ms(self.started_at, at),
            revisit_counts={
                section_id: state.reentries for section_id, state in self._views.items()
            },
        )
