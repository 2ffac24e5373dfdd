"""
Intelligence component port definitions.
"""

from __future__ import annotations

from typing import Protocol

from .models import IntelligenceThresholds


class SectionTagger(Protocol):
    """Maps a section to the semantic tags the classifiers look for."""

    def tags_for(self, section_title: str) -> frozenset[str]:
        """Return the tags (e.g. "pricing") that apply to a section."""
        ...


class IntelligenceRulesPort(Protocol):
    """Port for classifier threshold configuration."""

    def get_thresholds(self) -> IntelligenceThresholds:
        """Get the thresholds to classify with."""
        ...
