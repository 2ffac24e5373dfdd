"""
SQLite Database Adapter.

Implements the engagement session and share link repository ports using
SQLite. Tables are created by the SQL files in migrations/.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from src.components.engagement.models import ClientEngagement, SectionView
from src.components.sharing.models import ShareableLink

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


def format_dt(dt: datetime | None) -> str | None:
    """Format datetime as ISO string."""
    return dt.isoformat() if dt else None


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None


# -----------------------------------------------------------------------------
# Client Engagement Sessions
# -----------------------------------------------------------------------------


class SQLiteEngagementSessionRepo(SQLiteRepoBase):
    """
    SQLite implementation of EngagementSessionRepoPort.

    Sessions are append-only: one client_engagements row per session and one
    section_views row per SectionView, in recorded order.
    """

    def save(self, session: ClientEngagement) -> None:
        """Persist a finished session."""
        conn = self._get_conn()
        engagement_id = str(uuid4())
        try:
            conn.execute(
                """
                INSERT INTO client_engagements (
                    id, proposal_id, client_id, session_started, session_ended,
                    total_time_spent_ms, revisit_counts_json, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    engagement_id,
                    session.proposal_id,
                    session.client_id,
                    format_dt(session.session_started),
                    format_dt(session.session_ended),
                    session.total_time_spent_ms,
                    json.dumps(dict(session.revisit_counts), sort_keys=True),
                    datetime.now(UTC).isoformat(),
                ),
            )
            conn.executemany(
                """
                INSERT INTO section_views (
                    id, engagement_id, position, section_id, section_title,
                    viewed_at, time_spent_ms, revisited
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        str(uuid4()),
                        engagement_id,
                        position,
                        view.section_id,
                        view.section_title,
                        format_dt(view.viewed_at),
                        view.time_spent_ms,
                        1 if view.revisited else 0,
                    )
                    for position, view in enumerate(session.section_views)
                ],
            )

            if self._should_close():
                conn.commit()
        finally:
            if self._should_close():
                conn.close()

        logger.debug(
            "Stored session %s for proposal %s (%d section views)",
            engagement_id,
            session.proposal_id,
            len(session.section_views),
        )

    def load(self, proposal_id: str) -> list[ClientEngagement]:
        """Load every stored session for a proposal, oldest first."""
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM client_engagements
                WHERE proposal_id = ?
                ORDER BY session_started, rowid
                """,
                (proposal_id,),
            ).fetchall()

            sessions: list[ClientEngagement] = []
            for row in rows:
                view_rows = conn.execute(
                    "SELECT * FROM section_views WHERE engagement_id = ? ORDER BY position",
                    (row["id"],),
                ).fetchall()
                sessions.append(self._map_row(row, view_rows))
            return sessions
        finally:
            if self._should_close():
                conn.close()

    def _map_row(
        self, row: dict[str, Any], view_rows: list[dict[str, Any]]
    ) -> ClientEngagement:
        # NOT NULL column
        started = datetime.fromisoformat(row["session_started"])

        views = tuple(
            SectionView(
                section_id=v["section_id"],
                section_title=v["section_title"] or "",
                viewed_at=parse_dt(v["viewed_at"]) or started,
                time_spent_ms=v["time_spent_ms"] or 0,
                revisited=bool(v["revisited"]),
            )
            for v in view_rows
        )

        return ClientEngagement(
            proposal_id=row["proposal_id"],
            client_id=row["client_id"],
            session_started=started,
            session_ended=parse_dt(row["session_ended"]),
            section_views=views,
            total_time_spent_ms=row["total_time_spent_ms"] or 0,
            revisit_counts={
                str(k): int(v) for k, v in json.loads(row["revisit_counts_json"] or "{}").items()
            },
        )


# -----------------------------------------------------------------------------
# Share Links
# -----------------------------------------------------------------------------


class SQLiteShareRepo(SQLiteRepoBase):
    """SQLite implementation of ShareRepoPort."""

    def get(self, share_id: str) -> ShareableLink | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM share_links WHERE id = ?", (share_id,)).fetchone()
            return self._map_row(row) if row else None
        finally:
            if self._should_close():
                conn.close()

    def save(self, link: ShareableLink) -> ShareableLink:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO share_links (
                    id, proposal_id, created_at, last_viewed, password_hash, view_count
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    last_viewed = excluded.last_viewed,
                    password_hash = excluded.password_hash,
                    view_count = excluded.view_count
                """,
                (
                    link.id,
                    link.proposal_id,
                    format_dt(link.created_at),
                    format_dt(link.last_viewed),
                    link.password_hash,
                    link.view_count,
                ),
            )
            if self._should_close():
                conn.commit()
            return link
        finally:
            if self._should_close():
                conn.close()

    def record_view(self, share_id: str, at: datetime) -> ShareableLink | None:
        """Increment view_count in SQL so concurrent views are not lost."""
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                """
                UPDATE share_links
                SET view_count = view_count + 1, last_viewed = ?
                WHERE id = ?
                """,
                (format_dt(at), share_id),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute("SELECT * FROM share_links WHERE id = ?", (share_id,)).fetchone()
            if self._should_close():
                conn.commit()
            return self._map_row(row)
        finally:
            if self._should_close():
                conn.close()

    def list_by_proposal(self, proposal_id: str) -> list[ShareableLink]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM share_links WHERE proposal_id = ? ORDER BY created_at",
                (proposal_id,),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> ShareableLink:
        return ShareableLink(
            id=row["id"],
            proposal_id=row["proposal_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            last_viewed=parse_dt(row["last_viewed"]),
            password_hash=row["password_hash"],
            view_count=row["view_count"] or 0,
        )
