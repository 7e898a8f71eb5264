"""
Ingredient matching.

Resolves a free-text recipe ingredient name to a catalog entry. The default
matcher uses case-insensitive substring containment in either direction:
"Rose" resolves to "Red Rose" and "red rose bouquet" resolves to "Red Rose".
Loose by nature; swap in another IngredientMatcher for stricter rules.

PATTERN: Strategy - matchers are interchangeable behind IngredientMatcher.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from florist.schemas import ProductTemplate


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def sort_catalog(catalog: Iterable[ProductTemplate]) -> list[ProductTemplate]:
    """
    Fixed iteration order for matching (by name, then id).

    First match wins, so callers must match against a sorted catalog to get
    the same answer regardless of how the catalog was loaded.
    """
    return sorted(catalog, key=lambda t: (normalize_name(t.name), t.id))


@runtime_checkable
class IngredientMatcher(Protocol):
    """Resolves one ingredient name against a catalog."""

    def match(self, ingredient_name: str, catalog: Sequence[ProductTemplate]) -> ProductTemplate | None:
        ...


class SubstringIngredientMatcher:
    """First catalog entry whose name contains, or is contained in, the ingredient name."""

    def match(self, ingredient_name: str, catalog: Sequence[ProductTemplate]) -> ProductTemplate | None:
        needle = normalize_name(ingredient_name)
        if not needle:
            return None

        for template in catalog:
            candidate = normalize_name(template.name)
            if not candidate:
                continue
            if needle in candidate or candidate in needle:
                return template
        return None


@dataclass
class MatchReport:
    """Resolution of a list of names; misses are collected, not raised."""

    matches: dict[str, ProductTemplate] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.missing


def match_all(
    names: Iterable[str],
    catalog: Sequence[ProductTemplate],
    matcher: IngredientMatcher | None = None,
) -> MatchReport:
    matcher = matcher or SubstringIngredientMatcher()
    report = MatchReport()
    for name in names:
        template = matcher.match(name, catalog)
        if template is None:
            report.missing.append(name)
        else:
            report.matches[name] = template
    return report
