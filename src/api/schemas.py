from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from src.components.engagement import (
    ClientEngagement,
    ProposalAnalytics,
    SectionAnalytics,
    SectionOutline,
    SectionView,
)
from src.components.intelligence import (
    EngagementState,
    IntentSignal,
    ProposalInsights,
    ProposalState,
)
from src.components.sharing import EngagementSignal, ShareableLink


# --- Errors ---
class ErrorItem(BaseModel):
    code: str
    message: str
    field: str | None = None


# --- Sessions ---
def _assume_utc(value: datetime | None) -> datetime | None:
    """Naive timestamps are taken as UTC so they compare with aware ones."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class SectionViewModel(BaseModel):
    section_id: str
    section_title: str = ""
    viewed_at: datetime
    time_spent_ms: int = 0
    revisited: bool = False

    @field_validator("viewed_at")
    @classmethod
    def viewed_at_utc(cls, v: datetime) -> datetime:
        return _assume_utc(v)


class ClientEngagementRequest(BaseModel):
    proposal_id: str
    client_id: str
    session_started: datetime
    session_ended: datetime | None = None
    section_views: list[SectionViewModel] = []
    total_time_spent_ms: int = 0
    revisit_counts: dict[str, int] = {}

    @field_validator("session_started", "session_ended")
    @classmethod
    def session_times_utc(cls, v: datetime | None) -> datetime | None:
        return _assume_utc(v)

    def to_domain(self) -> ClientEngagement:
        return ClientEngagement(
            proposal_id=self.proposal_id,
            client_id=self.client_id,
            session_started=self.session_started,
            session_ended=self.session_ended,
            section_views=tuple(
                SectionView(
                    section_id=v.section_id,
                    section_title=v.section_title,
                    viewed_at=v.viewed_at,
                    time_spent_ms=v.time_spent_ms,
                    revisited=v.revisited,
                )
                for v in self.section_views
            ),
            total_time_spent_ms=self.total_time_spent_ms,
            revisit_counts=dict(self.revisit_counts),
        )


class SessionAcceptedResponse(BaseModel):
    ok: bool = True
    proposal_id: str
    section_views: int


# --- Insights ---
class SectionOutlineModel(BaseModel):
    section_id: str
    section_title: str

    def to_domain(self) -> SectionOutline:
        return SectionOutline(section_id=self.section_id, section_title=self.section_title)


class InsightsRequest(BaseModel):
    """Current sections of the proposal, so unread sections count against coverage."""

    outline: list[SectionOutlineModel] | None = None


class EvaluateRequest(BaseModel):
    """Section aggregates in any producer shape (camelCase or snake_case)."""

    sections: list[dict[str, Any]] = Field(default_factory=list)


class SectionAnalyticsModel(BaseModel):
    section_title: str
    view_count: int
    total_time_spent: float
    revisit_count: int
    avg_time_per_view: float
    popularity: Literal["high", "medium", "low"]

    @classmethod
    def from_domain(cls, s: SectionAnalytics) -> "SectionAnalyticsModel":
        return cls(
            section_title=s.section_title,
            view_count=s.view_count,
            total_time_spent=s.total_time_spent,
            revisit_count=s.revisit_count,
            avg_time_per_view=s.avg_time_per_view,
            popularity=s.popularity,
        )


class EngagementStateModel(BaseModel):
    status: Literal["active", "passive", "stale", "ghosted"]
    description: str
    actions: list[str]
    urgency: Literal["high", "medium", "low"]

    @classmethod
    def from_domain(cls, e: EngagementState) -> "EngagementStateModel":
        return cls(
            status=e.status,
            description=e.description,
            actions=list(e.actions),
            urgency=e.urgency,
        )


class ProposalStateModel(BaseModel):
    phase: Literal["not-started", "reviewing", "blocked", "ready", "complete"]
    readiness: int
    bottleneck: str | None = None
    recommendation: str

    @classmethod
    def from_domain(cls, p: ProposalState) -> "ProposalStateModel":
        return cls(
            phase=p.phase,
            readiness=p.readiness,
            bottleneck=p.bottleneck,
            recommendation=p.recommendation,
        )


class IntentSignalModel(BaseModel):
    intent: Literal["ready", "hesitating", "confused", "reviewing", "unknown"]
    confidence: int
    signals: list[str]
    next_action: str

    @classmethod
    def from_domain(cls, i: IntentSignal) -> "IntentSignalModel":
        return cls(
            intent=i.intent,
            confidence=i.confidence,
            signals=list(i.signals),
            next_action=i.next_action,
        )


class ProposalAnalyticsModel(BaseModel):
    total_views: int
    avg_time_per_section: float
    most_viewed_section: str | None
    least_viewed_section: str | None
    total_revisits: int

    @classmethod
    def from_domain(cls, a: ProposalAnalytics) -> "ProposalAnalyticsModel":
        return cls(
            total_views=a.total_views,
            avg_time_per_section=a.avg_time_per_section,
            most_viewed_section=a.most_viewed_section,
            least_viewed_section=a.least_viewed_section,
            total_revisits=a.total_revisits,
        )


class InsightsResponse(BaseModel):
    proposal_id: str | None = None
    session_count: int | None = None
    sections: list[SectionAnalyticsModel]
    summary: ProposalAnalyticsModel
    engagement: EngagementStateModel
    state: ProposalStateModel
    intent: IntentSignalModel

    @classmethod
    def from_domain(
        cls,
        insights: ProposalInsights,
        proposal_id: str | None = None,
        session_count: int | None = None,
    ) -> "InsightsResponse":
        return cls(
            proposal_id=proposal_id,
            session_count=session_count,
            sections=[SectionAnalyticsModel.from_domain(s) for s in insights.sections],
            engagement=EngagementStateModel.from_domain(insights.engagement),
            state=ProposalStateModel.from_domain(insights.state),
            intent=IntentSignalModel.from_domain(insights.intent),
            summary=ProposalAnalyticsModel.from_domain(insights.summary),
        )


# --- Sharing ---
class CreateShareRequest(BaseModel):
    proposal_id: str
    password: str | None = None


class ShareViewRequest(BaseModel):
    password: str | None = None


class ShareLinkResponse(BaseModel):
    id: str
    proposal_id: str
    created_at: datetime
    last_viewed: datetime | None = None
    view_count: int
    protected: bool

    @classmethod
    def from_domain(cls, link: ShareableLink) -> "ShareLinkResponse":
        return cls(
            id=link.id,
            proposal_id=link.proposal_id,
            created_at=link.created_at,
            last_viewed=link.last_viewed,
            view_count=link.view_count,
            protected=link.is_protected,
        )


class EngagementSignalModel(BaseModel):
    type: Literal["last_viewed", "updated", "new_feedback"]
    message: str
    urgency: Literal["low", "medium", "high"]
    timestamp: datetime | None = None

    @classmethod
    def from_domain(cls, s: EngagementSignal) -> "EngagementSignalModel":
        return cls(type=s.type, message=s.message, urgency=s.urgency, timestamp=s.timestamp)


class SignalsResponse(BaseModel):
    proposal_id: str
    signals: list[EngagementSignalModel]
