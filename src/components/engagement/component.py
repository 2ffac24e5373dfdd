"""
Engagement component - Session ingestion and per-section aggregation.

Reduces recorded client sessions into one SectionAnalytics record per
section, the input of the intelligence component.

Invariants:
- avg_time_per_view is never computed from a zero view count
- Aggregated numbers are finite and non-negative (no NaN leaks downstream)
- Section order is first-seen order (or outline order when an outline is given)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import (
    ClientEngagement,
    EngagementValidationError,
    IngestSessionOutput,
    Popularity,
    ProposalAnalytics,
    SectionAnalytics,
    SectionAnalyticsOutput,
    SectionOutline,
    coerce_count,
    coerce_number,
)
from .ports import EngagementRulesPort, EngagementSessionRepoPort

# --- Default Configuration ---

DEFAULT_HIGH_POPULARITY_RATIO = 0.66
DEFAULT_MEDIUM_POPULARITY_RATIO = 0.33


# --- Pure Functions (Functional Core) ---


def classify_popularity(
    view_count: int,
    max_view_count: int,
    high_ratio: float = DEFAULT_HIGH_POPULARITY_RATIO,
    medium_ratio: float = DEFAULT_MEDIUM_POPULARITY_RATIO,
) -> Popularity:
    """
    Tag a section by its view count relative to the most viewed section.

    Args:
        view_count: Views of this section
        max_view_count: Views of the most viewed section
        high_ratio: Ratio of the maximum at or above which the tag is "high"
        medium_ratio: Ratio of the maximum at or above which the tag is "medium"

    Returns:
        Popularity tag ("low" when nothing was viewed)
    """
    if max_view_count <= 0 or view_count <= 0:
        return "low"

    ratio = view_count / max_view_count
    if ratio >= high_ratio:
        return "high"
    elif ratio >= medium_ratio:
        return "medium"
    else:
        return "low"


def build_section_analytics(
    section_title: str,
    view_count: int,
    total_time_spent: float,
    revisit_count: int,
    popularity: Popularity = "low",
) -> SectionAnalytics:
    """Build one aggregate record, guarding the per-view average."""
    view_count = coerce_count(view_count)
    total_time_spent = coerce_number(total_time_spent)
    avg = total_time_spent / view_count if view_count > 0 else 0.0

    return SectionAnalytics(
        section_title=section_title,
        view_count=view_count,
        total_time_spent=total_time_spent,
        revisit_count=coerce_count(revisit_count),
        avg_time_per_view=avg,
        popularity=popularity,
    )


def _popularity_ratios(rules: EngagementRulesPort | None) -> tuple[float, float]:
    if rules is None:
        return DEFAULT_HIGH_POPULARITY_RATIO, DEFAULT_MEDIUM_POPULARITY_RATIO
    return rules.get_high_popularity_ratio(), rules.get_medium_popularity_ratio()


class _SectionTotals:
    """Mutable accumulator used while folding sessions."""

    __slots__ = ("title", "views", "time_ms", "revisits")

    def __init__(self, title: str) -> None:
        self.title = title
        self.views = 0
        self.time_ms = 0.0
        self.revisits = 0


def _fold_sessions(sessions: Iterable[ClientEngagement]) -> dict[str, _SectionTotals]:
    totals: dict[str, _SectionTotals] = {}

    for session in sessions:
        for view in session.section_views:
            entry = totals.get(view.section_id)
            if entry is None:
                entry = _SectionTotals(view.section_title or "")
                totals[view.section_id] = entry
            elif view.section_title:
                entry.title = view.section_title
            entry.views += 1
            entry.time_ms += coerce_number(view.time_spent_ms)

        for section_id, count in (session.revisit_counts or {}).items():
            entry = totals.get(section_id)
            if entry is not None:
                entry.revisits += coerce_count(count)

    return totals


def _finalize(
    ordered: Sequence[tuple[str, _SectionTotals]],
    rules: EngagementRulesPort | None,
) -> list[SectionAnalytics]:
    high_ratio, medium_ratio = _popularity_ratios(rules)
    max_views = max((entry.views for _, entry in ordered), default=0)

    return [
        build_section_analytics(
            section_title=title,
            view_count=entry.views,
            total_time_spent=entry.time_ms / 1000,
            revisit_count=entry.revisits,
            popularity=classify_popularity(entry.views, max_views, high_ratio, medium_ratio),
        )
        for title, entry in ordered
    ]


def aggregate_sessions(
    sessions: Iterable[ClientEngagement],
    *,
    rules: EngagementRulesPort | None = None,
) -> list[SectionAnalytics]:
    """
    Reduce client sessions into one aggregate per viewed section.

    - view_count: number of SectionView records for the section
    - revisit_count: sum of the sessions' revisit counts for the section
    - total_time_spent: sum of visible time, in seconds

    Args:
        sessions: Finished sessions, possibly from several clients
        rules: Optional rules port for popularity ratios

    Returns:
        Aggregates in the order each section was first seen
    """
    totals = _fold_sessions(sessions)
    return _finalize([(entry.title, entry) for entry in totals.values()], rules)


def section_analytics_for_outline(
    outline: Sequence[SectionOutline],
    sessions: Iterable[ClientEngagement],
    *,
    rules: EngagementRulesPort | None = None,
) -> list[SectionAnalytics]:
    """
    Aggregate sessions against the proposal's current sections.

    Sections that were never viewed are reported with zero counts, so view
    coverage reflects unread sections. Views of sections no longer in the
    outline are dropped. Titles come from the outline.
    """
    totals = _fold_sessions(sessions)
    ordered = [
        (section.section_title, totals.get(section.section_id, _SectionTotals(section.section_title)))
        for section in outline
    ]
    return _finalize(ordered, rules)


def summarize_sections(sections: Iterable[SectionAnalytics]) -> ProposalAnalytics:
    """
    Roll section aggregates up into proposal-wide totals.

    Ties for most and least viewed go to the earlier section. An empty input
    gives zero totals and no most or least viewed section.
    """
    records = [section.normalized() for section in sections]
    if not records:
        return ProposalAnalytics()

    most = max(records, key=lambda s: s.view_count)
    least = min(records, key=lambda s: s.view_count)

    return ProposalAnalytics(
        total_views=sum(s.view_count for s in records),
        avg_time_per_section=sum(s.avg_time_per_view for s in records) / len(records),
        most_viewed_section=most.section_title,
        least_viewed_section=least.section_title,
        total_revisits=sum(s.revisit_count for s in records),
    )


def validate_session(session: ClientEngagement) -> list[EngagementValidationError]:
    """
    Validate a finished session before it is stored.

    Args:
        session: Session to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors: list[EngagementValidationError] = []

    if not session.proposal_id:
        errors.append(
            EngagementValidationError(
                code="MISSING_PROPOSAL_ID",
                message="Session must reference a proposal",
                field_name="proposal_id",
            )
        )

    if not session.client_id:
        errors.append(
            EngagementValidationError(
                code="MISSING_CLIENT_ID",
                message="Session must identify the viewing client",
                field_name="client_id",
            )
        )

    if session.session_ended is not None and session.session_ended < session.session_started:
        errors.append(
            EngagementValidationError(
                code="INVALID_SESSION_WINDOW",
                message="Session cannot end before it started",
                field_name="session_ended",
            )
        )

    if session.total_time_spent_ms < 0:
        errors.append(
            EngagementValidationError(
                code="INVALID_DURATION",
                message="Total time spent cannot be negative",
                field_name="total_time_spent_ms",
            )
        )

    if any(view.time_spent_ms < 0 for view in session.section_views):
        errors.append(
            EngagementValidationError(
                code="INVALID_DURATION",
                message="Section time spent cannot be negative",
                field_name="section_views",
            )
        )

    if any(not view.section_id for view in session.section_views):
        errors.append(
            EngagementValidationError(
                code="MISSING_SECTION_ID",
                message="Every section view must reference a section",
                field_name="section_views",
            )
        )

    if any(count < 0 for count in session.revisit_counts.values()):
        errors.append(
            EngagementValidationError(
                code="INVALID_REVISIT_COUNT",
                message="Revisit counts cannot be negative",
                field_name="revisit_counts",
            )
        )

    return errors


# --- Component Entry Points ---


def run_ingest(
    session: ClientEngagement,
    *,
    repo: EngagementSessionRepoPort | None = None,
) -> IngestSessionOutput:
    """
    Validate a finished session and optionally store it.

    Args:
        session: Sealed client session
        repo: Optional repo port (if provided, session is stored)

    Returns:
        IngestSessionOutput with the session or validation errors
    """
    errors = validate_session(session)
    if errors:
        return IngestSessionOutput(session=None, errors=errors, success=False)

    if repo is not None:
        repo.save(session)

    return IngestSessionOutput(session=session, errors=[], success=True)


def run_section_analytics(
    proposal_id: str,
    *,
    repo: EngagementSessionRepoPort,
    outline: Sequence[SectionOutline] | None = None,
    rules: EngagementRulesPort | None = None,
) -> SectionAnalyticsOutput:
    """
    Load a proposal's sessions and aggregate them per section.

    Args:
        proposal_id: Proposal to aggregate
        repo: Session repository port
        outline: Optional current sections of the proposal
        rules: Optional rules port for popularity ratios

    Returns:
        SectionAnalyticsOutput with one record per section
    """
    if not proposal_id:
        return SectionAnalyticsOutput(
            proposal_id=proposal_id,
            sections=(),
            session_count=0,
            errors=[
                EngagementValidationError(
                    code="MISSING_PROPOSAL_ID",
                    message="Proposal id is required",
                    field_name="proposal_id",
                )
            ],
            success=False,
        )

    sessions = repo.load(proposal_id)

    if outline is not None:
        sections = section_analytics_for_outline(outline, sessions, rules=rules)
    else:
        sections = aggregate_sessions(sessions, rules=rules)

    return SectionAnalyticsOutput(
        proposal_id=proposal_id,
        sections=tuple(sections),
        session_count=len(sessions),
    )
