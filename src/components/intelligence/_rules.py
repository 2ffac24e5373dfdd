"""
Ordered rule tables.

Each classifier is a tuple of (predicate, outcome) rules evaluated top to
bottom; the first rule whose predicate holds produces the verdict.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from src.components.engagement.models import SectionAnalytics

F = TypeVar("F")
R = TypeVar("R")


@dataclass(frozen=True)
class Rule(Generic[F, R]):
    """A named classification rule."""

    name: str
    predicate: Callable[[F], bool]
    outcome: Callable[[F], R]


def first_match(rules: Iterable[Rule[F, R]], facts: F, default: Callable[[F], R]) -> R:
    """Evaluate rules in order; the first matching rule wins."""
    for rule in rules:
        if rule.predicate(facts):
            return rule.outcome(facts)
    return default(facts)


def constant(value: R) -> Callable[[Any], R]:
    """Outcome that ignores the facts."""
    return lambda _facts: value


def normalize_sections(sections: Any) -> tuple[SectionAnalytics, ...]:
    """
    Coerce classifier input into clean SectionAnalytics records.

    None, scalars, strings and a lone mapping become an empty tuple. Mappings
    inside the sequence are parsed leniently; items that are neither records
    nor mappings are dropped.
    """
    if not isinstance(sections, Iterable) or isinstance(sections, (str, bytes, Mapping)):
        return ()

    normalized: list[SectionAnalytics] = []
    for item in sections:
        if isinstance(item, SectionAnalytics):
            normalized.append(item.normalized())
        elif isinstance(item, Mapping):
            normalized.append(SectionAnalytics.from_mapping(item))
    return tuple(normalized)


def mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0
