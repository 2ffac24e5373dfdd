from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.components.intelligence.models import (
    EngagementThresholds,
    IntelligenceThresholds,
    IntentThresholds,
    ReadinessThresholds,
)


class ProjectRules(BaseModel):
    slug: str
    rules_version: str
    required_sections: list[str] = Field(default_factory=list)

class EngagementStatusRules(BaseModel):
    model_config = ConfigDict(extra="forbid")

    active_views_over: int = 8
    active_revisits_over: int = 2
    active_avg_seconds_over: float = 45
    passive_views_over: int = 5
    passive_revisits_at_most: int = 1
    passive_avg_seconds_over: float = 30
    stale_avg_seconds_under: float = 30

class ReadinessRules(BaseModel):
    model_config = ConfigDict(extra="forbid")

    revisit_weight: float = 15
    coverage_weight: float = 85
    not_started_below: int = 25
    reviewing_below: int = 50
    blocked_below: int = 75
    ready_below: int = 95
    bottleneck_avg_seconds_under: float = 30
    critical_tags: list[str] = Field(
        default_factory=lambda: ["pricing", "timeline", "executive_summary"]
    )

    @model_validator(mode="after")
    def phases_ascending(self) -> "ReadinessRules":
        cutoffs = [
            self.not_started_below,
            self.reviewing_below,
            self.blocked_below,
            self.ready_below,
        ]
        if cutoffs != sorted(cutoffs):
            raise ValueError(f"readiness phase cut-offs must be ascending, got {cutoffs}")
        return self

class IntentRules(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ready_pricing_views_over: int = 3
    ready_pricing_revisits_over: int = 1
    ready_summary_views_over: int = 0
    hesitating_pricing_revisits_over: int = 2
    hesitating_pricing_seconds_over: float = 300
    confused_avg_seconds_under: float = 20
    confused_sections_over: int = 1
    reviewing_viewed_sections_over: int = 3
    reviewing_avg_revisits_under: float = 1.5

class IntelligenceRules(BaseModel):
    engagement: EngagementStatusRules = Field(default_factory=EngagementStatusRules)
    readiness: ReadinessRules = Field(default_factory=ReadinessRules)
    intent: IntentRules = Field(default_factory=IntentRules)
    # tag -> title substrings
    title_keywords: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "pricing": ["Pricing"],
            "timeline": ["Timeline"],
            "executive_summary": ["Executive Summary"],
        }
    )

    def to_thresholds(self) -> IntelligenceThresholds:
        readiness = self.readiness.model_dump()
        readiness["critical_tags"] = tuple(readiness["critical_tags"])
        return IntelligenceThresholds(
            engagement=EngagementThresholds(**self.engagement.model_dump()),
            readiness=ReadinessThresholds(**readiness),
            intent=IntentThresholds(**self.intent.model_dump()),
        )

class PopularityRules(BaseModel):
    high_ratio: float = Field(0.66, gt=0, le=1)
    medium_ratio: float = Field(0.33, gt=0, le=1)

    @model_validator(mode="after")
    def medium_below_high(self) -> "PopularityRules":
        if self.medium_ratio > self.high_ratio:
            raise ValueError("popularity medium_ratio cannot exceed high_ratio")
        return self

class EngagementRules(BaseModel):
    popularity: PopularityRules = Field(default_factory=PopularityRules)

class SharingRules(BaseModel):
    share_id_length: int = Field(8, ge=6, le=64)
    recent_view_window_hours: int = Field(24, ge=1)
    allow_password_protection: bool = True

class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    project: ProjectRules
    intelligence: IntelligenceRules = Field(default_factory=IntelligenceRules)
    engagement: EngagementRules = Field(default_factory=EngagementRules)
    sharing: SharingRules = Field(default_factory=SharingRules)
    ops: OpsRules = Field(default_factory=OpsRules)
