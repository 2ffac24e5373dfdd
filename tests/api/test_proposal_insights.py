"""
Tests for the Proposal Insights API.

- Stored sessions are aggregated per section and classified
- An outline makes unread sections count against coverage
- Posted aggregates are classified without storage
- Share link activity produces engagement signals
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.clock import FixedClock
from src.api import deps
from src.api.routes import proposal_insights
from src.components.engagement import (
    ClientEngagement,
    InMemoryEngagementSessionRepo,
    SectionView,
)
from src.components.sharing import InMemoryShareRepo, ShareableLink
from src.rules.models import Rules

NOW = datetime(2026, 1, 14, 12, 0, 0, tzinfo=UTC)

# --- Test Setup ---


@pytest.fixture
def session_repo() -> InMemoryEngagementSessionRepo:
    return InMemoryEngagementSessionRepo()


@pytest.fixture
def share_repo() -> InMemoryShareRepo:
    return InMemoryShareRepo()


@pytest.fixture
def app(
    rules: Rules,
    session_repo: InMemoryEngagementSessionRepo,
    share_repo: InMemoryShareRepo,
) -> FastAPI:
    """Test FastAPI app with insights routes."""
    app = FastAPI()
    app.include_router(proposal_insights.router, prefix="/api/proposals")

    # Override dependencies
    app.dependency_overrides[deps.get_rules] = lambda: rules
    app.dependency_overrides[deps.get_engagement_session_repo] = lambda: session_repo
    app.dependency_overrides[deps.get_share_repo] = lambda: share_repo
    app.dependency_overrides[deps.get_clock] = lambda: FixedClock(NOW)

    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


# --- Helper Functions ---


def store_session(
    repo: InMemoryEngagementSessionRepo,
    views: list[tuple[str, str, int]],
    revisits: dict[str, int] | None = None,
    proposal_id: str = "prop-1",
) -> None:
    """Store one session; views are (section_id, title, seconds)."""
    repo.save(
        ClientEngagement(
            proposal_id=proposal_id,
            client_id="client-1",
            session_started=NOW,
            session_ended=NOW + timedelta(minutes=10),
            section_views=tuple(
                SectionView(
                    section_id=sid,
                    section_title=title,
                    viewed_at=NOW,
                    time_spent_ms=seconds * 1000,
                )
                for sid, title, seconds in views
            ),
            total_time_spent_ms=600_000,
            revisit_counts=revisits or {},
        )
    )


# --- Insights ---


class TestGetInsights:
    def test_no_sessions(self, client: TestClient) -> None:
        response = client.get("/api/proposals/prop-1/insights")

        assert response.status_code == 200
        data = response.json()
        assert data["proposal_id"] == "prop-1"
        assert data["session_count"] == 0
        assert data["sections"] == []
        assert data["engagement"]["status"] == "ghosted"
        assert data["state"]["phase"] == "not-started"
        assert data["state"]["readiness"] == 0
        assert data["intent"]["intent"] == "unknown"
        assert data["summary"] == {
            "total_views": 0,
            "avg_time_per_section": 0.0,
            "most_viewed_section": None,
            "least_viewed_section": None,
            "total_revisits": 0,
        }

    def test_ready_client(
        self, client: TestClient, session_repo: InMemoryEngagementSessionRepo
    ) -> None:
        for _ in range(5):
            store_session(
                session_repo,
                [("s1", "Executive Summary", 40), ("s2", "Pricing", 60)],
                revisits={"s2": 1},
            )

        response = client.get("/api/proposals/prop-1/insights")

        assert response.status_code == 200
        data = response.json()
        assert data["session_count"] == 5
        assert [s["section_title"] for s in data["sections"]] == ["Executive Summary", "Pricing"]
        pricing = data["sections"][1]
        assert pricing["view_count"] == 5
        assert pricing["revisit_count"] == 5
        assert pricing["avg_time_per_view"] == 60.0
        assert data["intent"]["intent"] == "ready"
        assert data["intent"]["confidence"] == 85
        assert data["state"]["phase"] == "complete"
        assert data["state"]["readiness"] == 100
        summary = data["summary"]
        assert summary["total_views"] == 10
        assert summary["avg_time_per_section"] == 50.0
        assert summary["most_viewed_section"] == "Executive Summary"
        assert summary["least_viewed_section"] == "Executive Summary"
        assert summary["total_revisits"] == 5

    def test_outline_counts_unread_sections(
        self, client: TestClient, session_repo: InMemoryEngagementSessionRepo
    ) -> None:
        store_session(session_repo, [("s2", "Pricing", 10)])

        response = client.post(
            "/api/proposals/prop-1/insights",
            json={
                "outline": [
                    {"section_id": "s2", "section_title": "Pricing Overview"},
                    {"section_id": "s3", "section_title": "Appendix"},
                ]
            },
        )

        assert response.status_code == 200
        state = response.json()["state"]
        assert state["phase"] == "reviewing"
        assert state["readiness"] == 43
        assert state["bottleneck"] == "Pricing Overview"

    def test_post_without_body(
        self, client: TestClient, session_repo: InMemoryEngagementSessionRepo
    ) -> None:
        store_session(session_repo, [("s1", "Introduction", 10)])

        response = client.post("/api/proposals/prop-1/insights")

        assert response.status_code == 200
        assert len(response.json()["sections"]) == 1


class TestEvaluateInsights:
    def test_loose_aggregates(self, client: TestClient) -> None:
        response = client.post(
            "/api/proposals/insights/evaluate",
            json={
                "sections": [
                    {"sectionTitle": "Pricing", "viewCount": 2, "revisitCount": 3, "timeSpent": 400}
                ]
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["proposal_id"] is None
        assert data["sections"][0]["total_time_spent"] == 400.0
        assert data["sections"][0]["avg_time_per_view"] == 200.0
        assert data["intent"]["intent"] == "hesitating"

    def test_empty(self, client: TestClient) -> None:
        response = client.post("/api/proposals/insights/evaluate", json={"sections": []})

        assert response.status_code == 200
        assert response.json()["engagement"]["actions"] == [
            "Send follow-up reminder",
            "Check if email was received",
        ]


# --- Signals ---


class TestSignals:
    def test_recent_view_and_update(
        self, client: TestClient, share_repo: InMemoryShareRepo
    ) -> None:
        share_repo.save(
            ShareableLink(
                id="abc12345",
                proposal_id="prop-1",
                created_at=NOW - timedelta(days=2),
                last_viewed=NOW - timedelta(hours=2),
                view_count=3,
            )
        )

        response = client.get(
            "/api/proposals/prop-1/signals",
            params={"last_modified": "2026-01-14T11:00:00Z"},
        )

        assert response.status_code == 200
        signals = response.json()["signals"]
        assert [s["type"] for s in signals] == ["last_viewed", "updated"]
        assert signals[0]["message"] == "Client viewed 2h ago"

    def test_no_links(self, client: TestClient) -> None:
        response = client.get("/api/proposals/prop-1/signals")

        assert response.status_code == 200
        assert response.json()["signals"] == []

    def test_invalid_last_modified(self, client: TestClient) -> None:
        response = client.get(
            "/api/proposals/prop-1/signals", params={"last_modified": "yesterday"}
        )
        assert response.status_code == 400


class TestEvaluateMalformed:
    def test_oversized_numbers(self, client: TestClient) -> None:
        response = client.post(
            "/api/proposals/insights/evaluate",
            content='{"sections": [{"sectionTitle": "Pricing", "viewCount": 1' + "0" * 400 + "}]}",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["sections"][0]["view_count"] == 0
        assert data["intent"]["intent"] == "unknown"
