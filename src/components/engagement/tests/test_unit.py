"""
Unit tests for Engagement component.

Covers session recording, session validation and ingestion, and the
reduction of sessions into per-section aggregates.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from .._memory import InMemoryEngagementSessionRepo
from .._recorder import SessionClosedError, SessionRecorder
from ..component import (
    aggregate_sessions,
    build_section_analytics,
    classify_popularity,
    run_ingest,
    run_section_analytics,
    section_analytics_for_outline,
    summarize_sections,
    validate_session,
)
from ..models import ClientEngagement, SectionAnalytics, SectionOutline, SectionView

T0 = datetime(2026, 1, 14, 12, 0, 0, tzinfo=UTC)


# --- Test Fixtures ---


class FakeEngagementRules:
    """Fake rules port with configurable popularity ratios."""

    def __init__(self, high: float = 0.66, medium: float = 0.33) -> None:
        self._high = high
        self._medium = medium

    def get_high_popularity_ratio(self) -> float:
        return self._high

    def get_medium_popularity_ratio(self) -> float:
        return self._medium


def at(seconds: float) -> datetime:
    return T0 + timedelta(seconds=seconds)


def view(section_id: str, title: str, ms: int, revisited: bool = False) -> SectionView:
    return SectionView(
        section_id=section_id,
        section_title=title,
        viewed_at=T0,
        time_spent_ms=ms,
        revisited=revisited,
    )


def make_session(
    views: tuple[SectionView, ...] = (),
    revisits: dict[str, int] | None = None,
    proposal_id: str = "prop-1",
    client_id: str = "client-1",
) -> ClientEngagement:
    return ClientEngagement(
        proposal_id=proposal_id,
        client_id=client_id,
        session_started=T0,
        session_ended=at(600),
        section_views=views,
        total_time_spent_ms=600_000,
        revisit_counts=revisits or {},
    )


@pytest.fixture
def two_sessions() -> list[ClientEngagement]:
    first = make_session(
        views=(view("s1", "Introduction", 30_000), view("s2", "Pricing", 60_000)),
        revisits={"s2": 1},
    )
    second = make_session(
        views=(view("s2", "Pricing", 20_000, revisited=True),),
        revisits={"s2": 2},
        client_id="client-2",
    )
    return [first, second]


# --- Session Recorder ---


class TestSessionRecorder:
    """Viewport observations become one sealed session."""

    def test_records_time_and_revisits(self) -> None:
        recorder = SessionRecorder("prop-1", "client-1", T0)
        recorder.enter("s1", "Introduction", at(0))
        recorder.leave("s1", at(10))
        recorder.enter("s2", "Pricing", at(10))
        recorder.enter("s1", "Introduction", at(20))
        recorder.leave("s2", at(30))

        session = recorder.finish(at(50))

        assert [v.section_id for v in session.section_views] == ["s1", "s2"]
        intro, pricing = session.section_views
        assert intro.time_spent_ms == 40_000
        assert intro.revisited is True
        assert intro.viewed_at == at(0)
        assert pricing.time_spent_ms == 20_000
        assert pricing.revisited is False
        assert session.revisit_counts == {"s1": 1, "s2": 0}
        assert session.total_time_spent_ms == 50_000
        assert session.session_ended == at(50)

    def test_enter_while_visible_is_noop(self) -> None:
        recorder = SessionRecorder("prop-1", "client-1", T0)
        recorder.enter("s1", "Introduction", at(0))
        recorder.enter("s1", "Introduction", at(5))
        session = recorder.finish(at(10))

        assert session.revisit_counts == {"s1": 0}
        assert session.section_views[0].time_spent_ms == 10_000

    def test_leave_without_enter_is_noop(self) -> None:
        recorder = SessionRecorder("prop-1", "client-1", T0)
        recorder.leave("s1", at(5))
        session = recorder.finish(at(10))

        assert session.section_views == ()

    def test_clock_skew_never_subtracts(self) -> None:
        recorder = SessionRecorder("prop-1", "client-1", T0)
        recorder.enter("s1", "Introduction", at(10))
        recorder.leave("s1", at(5))
        session = recorder.finish(at(20))

        assert session.section_views[0].time_spent_ms == 0

    def test_finished_session_rejects_observations(self) -> None:
        recorder = SessionRecorder("prop-1", "client-1", T0)
        recorder.finish(at(1))

        assert recorder.closed
        with pytest.raises(SessionClosedError):
            recorder.enter("s1", "Introduction", at(2))
        with pytest.raises(SessionClosedError):
            recorder.finish(at(3))


class TestClientEngagement:
    """Sealed sessions stay sealed."""

    def test_revisit_counts_read_only(self) -> None:
        counts = {"s1": 1}
        session = make_session(revisits=counts)

        with pytest.raises(TypeError):
            session.revisit_counts["s1"] = 5  # type: ignore[index]
        counts["s1"] = 9
        assert session.revisit_counts == {"s1": 1}

    def test_hashable(self) -> None:
        session = make_session(views=(view("s1", "Intro", 1_000),), revisits={"s1": 1})
        twin = make_session(views=(view("s1", "Intro", 1_000),), revisits={"s1": 1})

        assert hash(session) == hash(twin)
        assert session == twin
        assert len({session, twin}) == 1


# --- Popularity ---


class TestClassifyPopularity:
    """Popularity relative to the most viewed section."""

    @pytest.mark.parametrize(
        "views,expected",
        [(10, "high"), (7, "high"), (5, "medium"), (4, "medium"), (3, "low"), (0, "low")],
    )
    def test_ratios(self, views: int, expected: str) -> None:
        assert classify_popularity(views, 10) == expected

    def test_nothing_viewed(self) -> None:
        assert classify_popularity(0, 0) == "low"

    def test_average_guarded_for_zero_views(self) -> None:
        record = build_section_analytics("Pricing", 0, 12.0, 0)
        assert record.avg_time_per_view == 0.0


# --- Aggregation ---


class TestAggregateSessions:
    """Sessions fold into one aggregate per section."""

    def test_aggregates_across_sessions(self, two_sessions: list[ClientEngagement]) -> None:
        intro, pricing = aggregate_sessions(two_sessions)

        assert intro.section_title == "Introduction"
        assert intro.view_count == 1
        assert intro.total_time_spent == 30.0
        assert intro.avg_time_per_view == 30.0
        assert intro.revisit_count == 0
        assert intro.popularity == "medium"

        assert pricing.section_title == "Pricing"
        assert pricing.view_count == 2
        assert pricing.total_time_spent == 80.0
        assert pricing.avg_time_per_view == 40.0
        assert pricing.revisit_count == 3
        assert pricing.popularity == "high"

    def test_no_sessions(self) -> None:
        assert aggregate_sessions([]) == []

    def test_revisits_for_unviewed_sections_ignored(self) -> None:
        session = make_session(views=(view("s1", "Intro", 1_000),), revisits={"ghost": 4})
        (record,) = aggregate_sessions([session])
        assert record.revisit_count == 0

    def test_rules_port_ratios(self, two_sessions: list[ClientEngagement]) -> None:
        intro, _ = aggregate_sessions(two_sessions, rules=FakeEngagementRules(high=0.5))
        assert intro.popularity == "high"


class TestSummarizeSections:
    """Proposal-wide totals over section aggregates."""

    def test_totals(self, two_sessions: list[ClientEngagement]) -> None:
        summary = summarize_sections(aggregate_sessions(two_sessions))

        assert summary.total_views == 3
        assert summary.avg_time_per_section == 35.0
        assert summary.most_viewed_section == "Pricing"
        assert summary.least_viewed_section == "Introduction"
        assert summary.total_revisits == 3

    def test_empty(self) -> None:
        summary = summarize_sections([])

        assert summary.total_views == 0
        assert summary.avg_time_per_section == 0.0
        assert summary.most_viewed_section is None
        assert summary.least_viewed_section is None
        assert summary.total_revisits == 0

    def test_ties_go_to_first_section(self) -> None:
        sections = [
            SectionAnalytics(section_title="Intro", view_count=2),
            SectionAnalytics(section_title="Scope", view_count=2),
        ]
        summary = summarize_sections(sections)
        assert summary.most_viewed_section == "Intro"
        assert summary.least_viewed_section == "Intro"

    def test_unviewed_section_is_least_viewed(self) -> None:
        outline = [SectionOutline("s1", "Introduction"), SectionOutline("s9", "Appendix")]
        session = make_session(views=(view("s1", "Intro", 5_000),))
        sections = section_analytics_for_outline(outline, [session])
        summary = summarize_sections(sections)
        assert summary.least_viewed_section == "Appendix"
        assert summary.avg_time_per_section == 2.5


class TestOutlineAggregation:
    """Aggregation against the proposal's current sections."""

    def test_unviewed_sections_reported(self, two_sessions: list[ClientEngagement]) -> None:
        outline = [
            SectionOutline("s0", "Cover"),
            SectionOutline("s2", "Pricing Overview"),
            SectionOutline("s1", "Introduction"),
        ]
        cover, pricing, intro = section_analytics_for_outline(outline, two_sessions)

        assert cover.section_title == "Cover"
        assert cover.view_count == 0
        assert cover.avg_time_per_view == 0.0
        assert pricing.section_title == "Pricing Overview"
        assert pricing.view_count == 2
        assert intro.view_count == 1

    def test_removed_sections_dropped(self, two_sessions: list[ClientEngagement]) -> None:
        records = section_analytics_for_outline([SectionOutline("s1", "Introduction")], two_sessions)
        assert [r.section_title for r in records] == ["Introduction"]
        assert records[0].popularity == "high"


# --- Validation and ingestion ---


class TestValidateSession:
    """Session validation."""

    def test_valid_session(self, two_sessions: list[ClientEngagement]) -> None:
        assert validate_session(two_sessions[0]) == []

    def test_missing_ids(self) -> None:
        errors = validate_session(make_session(proposal_id="", client_id=""))
        codes = {e.code for e in errors}
        assert codes == {"MISSING_PROPOSAL_ID", "MISSING_CLIENT_ID"}

    def test_end_before_start(self) -> None:
        session = ClientEngagement(
            proposal_id="prop-1",
            client_id="client-1",
            session_started=at(10),
            session_ended=at(0),
        )
        errors = validate_session(session)
        assert [e.code for e in errors] == ["INVALID_SESSION_WINDOW"]

    def test_negative_values(self) -> None:
        session = make_session(views=(view("s1", "Intro", -5),), revisits={"s1": -1})
        codes = [e.code for e in validate_session(session)]
        assert "INVALID_DURATION" in codes
        assert "INVALID_REVISIT_COUNT" in codes

    def test_missing_section_id(self) -> None:
        session = make_session(views=(view("", "Intro", 5),))
        assert [e.code for e in validate_session(session)] == ["MISSING_SECTION_ID"]


class TestRunIngest:
    """run_ingest entry point."""

    def test_stores_valid_session(self, two_sessions: list[ClientEngagement]) -> None:
        repo = InMemoryEngagementSessionRepo()
        result = run_ingest(two_sessions[0], repo=repo)

        assert result.success
        assert repo.load("prop-1") == [two_sessions[0]]

    def test_rejects_invalid_session(self) -> None:
        repo = InMemoryEngagementSessionRepo()
        result = run_ingest(make_session(client_id=""), repo=repo)

        assert not result.success
        assert result.session is None
        assert repo.load("prop-1") == []

    def test_without_repo(self, two_sessions: list[ClientEngagement]) -> None:
        assert run_ingest(two_sessions[0]).success


class TestRunSectionAnalytics:
    """run_section_analytics entry point."""

    def test_aggregates_stored_sessions(self, two_sessions: list[ClientEngagement]) -> None:
        repo = InMemoryEngagementSessionRepo()
        for session in two_sessions:
            repo.save(session)

        result = run_section_analytics("prop-1", repo=repo)

        assert result.success
        assert result.session_count == 2
        assert [s.section_title for s in result.sections] == ["Introduction", "Pricing"]

    def test_other_proposals_excluded(self, two_sessions: list[ClientEngagement]) -> None:
        repo = InMemoryEngagementSessionRepo()
        for session in two_sessions:
            repo.save(session)

        result = run_section_analytics("prop-2", repo=repo)
        assert result.session_count == 0
        assert result.sections == ()

    def test_missing_proposal_id(self) -> None:
        result = run_section_analytics("", repo=InMemoryEngagementSessionRepo())
        assert not result.success
        assert result.errors[0].code == "MISSING_PROPOSAL_ID"
