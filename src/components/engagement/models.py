"""
Engagement component models.

Raw session records collected from the client view, and the per-section
aggregate consumed by the intelligence component.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Literal

# --- Types ---

Popularity = Literal["high", "medium", "low"]


# --- Validation Error ---


@dataclass(frozen=True)
class EngagementValidationError:
    """Engagement validation error."""

    code: str
    message: str
    field_name: str | None = None


# --- Number coercion ---


def coerce_number(value: Any) -> float:
    """
    Coerce a loosely-typed numeric field to a finite, non-negative float.

    None, booleans, strings that don't parse, NaN, infinities, integers too
    large for a float and negative values all become 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    if math.isnan(number) or math.isinf(number) or number < 0:
        return 0.0
    return number


def coerce_count(value: Any) -> int:
    """Coerce a loosely-typed counter to a non-negative int."""
    return int(coerce_number(value))


# --- Raw Session Models ---


@dataclass(frozen=True)
class SectionView:
    """
    One observed visit to one section during one client session.

    time_spent_ms accumulates while the section is visible; revisited flips
    to True once the section re-enters view after leaving it.
    """

    section_id: str
    section_title: str
    viewed_at: datetime
    time_spent_ms: int = 0
    revisited: bool = False


@dataclass(frozen=True)
class ClientEngagement:
    """
    One client viewing session for one proposal.

    Sealed at session end; never mutated afterward. revisit_counts is a
    read-only mapping and takes no part in hashing.
    """

    proposal_id: str
    client_id: str
    session_started: datetime
    session_ended: datetime | None
    section_views: tuple[SectionView, ...] = ()
    total_time_spent_ms: int = 0
    revisit_counts: Mapping[str, int] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        counts = MappingProxyType(dict(self.revisit_counts or {}))
        object.__setattr__(self, "revisit_counts", counts)


# --- Aggregate Model ---


_TITLE_KEYS = ("section_title", "sectionTitle", "title")
_VIEW_KEYS = ("view_count", "viewCount")
_TIME_KEYS = ("total_time_spent", "totalTimeSpent", "time_spent", "timeSpent")
_REVISIT_KEYS = ("revisit_count", "revisitCount")
_AVG_KEYS = ("avg_time_per_view", "avgTimePerView")
_POPULARITY_VALUES: tuple[Popularity, ...] = ("high", "medium", "low")


def _first_present(data: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


@dataclass(frozen=True)
class SectionAnalytics:
    """
    Per-section engagement aggregate.

    total_time_spent and avg_time_per_view are in seconds. avg_time_per_view
    is 0.0 whenever view_count is 0. popularity is for display only.
    """

    section_title: str
    view_count: int = 0
    total_time_spent: float = 0.0
    revisit_count: int = 0
    avg_time_per_view: float = 0.0
    popularity: Popularity = "low"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SectionAnalytics:
        """
        Build a normalized record from a loosely-shaped mapping.

        Accepts camelCase or snake_case keys and the legacy ``timeSpent``
        alias. Missing or invalid numbers become zero; avg_time_per_view is
        recomputed when absent.
        """
        title = _first_present(data, _TITLE_KEYS)
        view_count = coerce_count(_first_present(data, _VIEW_KEYS))
        total_time = coerce_number(_first_present(data, _TIME_KEYS))
        revisit_count = coerce_count(_first_present(data, _REVISIT_KEYS))

        raw_avg = _first_present(data, _AVG_KEYS)
        if view_count == 0:
            avg = 0.0
        elif raw_avg is None:
            avg = total_time / view_count
        else:
            avg = coerce_number(raw_avg)

        popularity = data.get("popularity")
        if popularity not in _POPULARITY_VALUES:
            popularity = "low"

        return cls(
            section_title=str(title) if title is not None else "",
            view_count=view_count,
            total_time_spent=total_time,
            revisit_count=revisit_count,
            avg_time_per_view=avg,
            popularity=popularity,
        )

    def normalized(self) -> SectionAnalytics:
        """Return a copy with every numeric field coerced to a safe value."""
        view_count = coerce_count(self.view_count)
        return SectionAnalytics(
            section_title=self.section_title if isinstance(self.section_title, str) else "",
            view_count=view_count,
            total_time_spent=coerce_number(self.total_time_spent),
            revisit_count=coerce_count(self.revisit_count),
            avg_time_per_view=coerce_number(self.avg_time_per_view) if view_count > 0 else 0.0,
            popularity=self.popularity if self.popularity in _POPULARITY_VALUES else "low",
        )


@dataclass(frozen=True)
class ProposalAnalytics:
    """
    Proposal-wide totals over its section aggregates.

    avg_time_per_section is the mean of the per-section avg_time_per_view, in
    seconds. Most and least viewed are None when there are no sections.
    """

    total_views: int = 0
    avg_time_per_section: float = 0.0
    most_viewed_section: str | None = None
    least_viewed_section: str | None = None
    total_revisits: int = 0


# --- Outline ---


@dataclass(frozen=True)
class SectionOutline:
    """A section of the proposal as authored (id and title), viewed or not."""

    section_id: str
    section_title: str


# --- Outputs ---


@dataclass(frozen=True)
class IngestSessionOutput:
    """Output from ingesting a finished client session."""

    session: ClientEngagement | None
    errors: list[EngagementValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class SectionAnalyticsOutput:
    """Aggregated per-section analytics for one proposal."""

    proposal_id: str
    sections: tuple[SectionAnalytics, ...]
    session_count: int
    errors: list[EngagementValidationError] = field(default_factory=list)
    success: bool = True
