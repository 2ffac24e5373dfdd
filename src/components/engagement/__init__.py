"""
Engagement component - Client session recording and per-section aggregation.
"""

from ._memory import InMemoryEngagementSessionRepo
from ._recorder import SessionClosedError, SessionRecorder
from .component import (
    aggregate_sessions,
    build_section_analytics,
    classify_popularity,
    run_ingest,
    run_section_analytics,
    section_analytics_for_outline,
    summarize_sections,
    validate_session,
)
from .models import (
    ClientEngagement,
    EngagementValidationError,
    IngestSessionOutput,
    Popularity,
    ProposalAnalytics,
    SectionAnalytics,
    SectionAnalyticsOutput,
    SectionOutline,
    SectionView,
    coerce_count,
    coerce_number,
)
from .ports import (
    EngagementRulesPort,
    EngagementSessionRepoPort,
)

__all__ = [
    # Component functions
    "run_ingest",
    "run_section_analytics",
    # Pure functions
    "aggregate_sessions",
    "build_section_analytics",
    "classify_popularity",
    "section_analytics_for_outline",
    "summarize_sections",
    "validate_session",
    "coerce_count",
    "coerce_number",
    # Recording
    "SessionRecorder",
    "SessionClosedError",
    "InMemoryEngagementSessionRepo",
    # Models
    "ClientEngagement",
    "EngagementValidationError",
    "IngestSessionOutput",
    "Popularity",
    "ProposalAnalytics",
    "SectionAnalytics",
    "SectionAnalyticsOutput",
    "SectionOutline",
    "SectionView",
    # Ports
    "EngagementRulesPort",
    "EngagementSessionRepoPort",
]
