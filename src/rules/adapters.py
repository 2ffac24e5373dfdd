"""
Rules-backed implementations of the component rules ports.
"""

from __future__ import annotations

from src.components.intelligence import IntelligenceThresholds, TitleSubstringTagger
from src.rules.models import Rules


class IntelligenceRulesAdapter:
    """IntelligenceRulesPort backed by the ``intelligence`` rules section."""

    def __init__(self, rules: Rules) -> None:
        self._thresholds = rules.intelligence.to_thresholds()
        self._tagger = TitleSubstringTagger(rules.intelligence.title_keywords)

    def get_thresholds(self) -> IntelligenceThresholds:
        return self._thresholds

    @property
    def tagger(self) -> TitleSubstringTagger:
        return self._tagger


class EngagementRulesAdapter:
    """EngagementRulesPort backed by the ``engagement`` rules section."""

    def __init__(self, rules: Rules) -> None:
        self._popularity = rules.engagement.popularity

    def get_high_popularity_ratio(self) -> float:
        return self._popularity.high_ratio

    def get_medium_popularity_ratio(self) -> float:
        return self._popularity.medium_ratio


class SharingRulesAdapter:
    """SharingRulesPort backed by the ``sharing`` rules section."""

    def __init__(self, rules: Rules) -> None:
        self._sharing = rules.sharing

    def get_share_id_length(self) -> int:
        return self._sharing.share_id_length

    def get_recent_view_window_hours(self) -> int:
        return self._sharing.recent_view_window_hours

    def allows_password_protection(self) -> bool:
        return self._sharing.allow_password_protection
