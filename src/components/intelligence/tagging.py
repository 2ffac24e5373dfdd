"""
Section tagging.

Classifiers never inspect titles directly; they ask a SectionTagger which
semantic tags apply. The default tagger matches title substrings
("Pricing Overview" is a pricing section). Matching is case-sensitive.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from src.components.engagement.models import SectionAnalytics

from .models import EXECUTIVE_SUMMARY, PRICING, TIMELINE
from .ports import SectionTagger

DEFAULT_TITLE_KEYWORDS: dict[str, tuple[str, ...]] = {
    PRICING: ("Pricing",),
    TIMELINE: ("Timeline",),
    EXECUTIVE_SUMMARY: ("Executive Summary",),
}


class TitleSubstringTagger:
    """Tags a section when its title contains one of a tag's keywords."""

    def __init__(self, keywords: Mapping[str, Sequence[str]] | None = None) -> None:
        source = DEFAULT_TITLE_KEYWORDS if keywords is None else keywords
        self._keywords = {tag: tuple(words) for tag, words in source.items()}

    def tags_for(self, section_title: str) -> frozenset[str]:
        if not section_title:
            return frozenset()
        return frozenset(
            tag
            for tag, words in self._keywords.items()
            if any(word and word in section_title for word in words)
        )


DEFAULT_TAGGER = TitleSubstringTagger()


def has_tag(section: SectionAnalytics, tag: str, tagger: SectionTagger) -> bool:
    return tag in tagger.tags_for(section.section_title)


def first_tagged(
    sections: Sequence[SectionAnalytics],
    tag: str,
    tagger: SectionTagger,
) -> SectionAnalytics | None:
    """First section (in input order) carrying the tag, or None."""
    for section in sections:
        if has_tag(section, tag, tagger):
            return section
    return None
