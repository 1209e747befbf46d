"""
Matcher building and category resolution.

Every pattern of every selected category is compiled into one flat matcher
set. A line is checked against all of them and, when several categories
fire, the one ranked highest in CATEGORY_PRIORITY wins.
"""

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Optional

from .errors import EmptyMatcherSetError, PatternCompileError
from .patterns import ALL_CATEGORIES, PatternCatalog

logger = logging.getLogger(__name__)


# Lower rank = higher priority. Certificates/keys are the catch-all.
CATEGORY_PRIORITY = MappingProxyType({
    "x": 1,      # archives
    "v": 2,      # version control
    "f": 3,      # framework-specific
    "j": 4,      # JavaScript/JSON
    "l": 5,      # logs
    "b": 6,      # backups
    "p": 7,      # PHP
    "s": 8,      # SQL
    "c": 9,      # config
    "g": 10,     # GraphQL
    "d": 11,     # cloud/infra
    "m": 12,     # admin/auth
    "r": 13,     # directories
    "misc": 14,  # miscellaneous
    "k": 15,     # certificates/keys
})

# Rank given to categories missing from the table
UNRANKED = max(CATEGORY_PRIORITY.values()) + 1000


def category_rank(category: str) -> int:
    """Get the priority rank of a category (unknown categories rank last)."""
    return CATEGORY_PRIORITY.get(category, UNRANKED)


@dataclass(frozen=True)
class CompiledMatcher:
    """A compiled case-insensitive pattern tagged with its owning category."""
    regex: re.Pattern
    category: str

    @property
    def pattern(self) -> str:
        return self.regex.pattern

    def matches(self, line: str) -> bool:
        return self.regex.search(line) is not None


def expand_categories(catalog: PatternCatalog, categories: Iterable[str]) -> List[str]:
    """
    Expand a category selection into concrete catalog keys.

    "all" becomes every catalog key. Unknown keys are dropped silently and
    repeated keys are kept once, in first-seen order.
    """
    expanded: List[str] = []
    for cat in categories:
        keys = catalog.keys() if cat == ALL_CATEGORIES else [cat]
        for key in keys:
            if key in catalog and key not in expanded:
                expanded.append(key)
    return expanded


def build_matcher_set(catalog: PatternCatalog, categories: Optional[Iterable[str]] = None) -> List[CompiledMatcher]:
    """
    Compile the patterns of the selected categories.

    Args:
        catalog: Loaded pattern catalog
        categories: Category keys and/or "all". Defaults to "all".

    Returns:
        List of CompiledMatcher in catalog pattern order

    Raises:
        PatternCompileError: If any pattern fails to compile
        EmptyMatcherSetError: If the selection yields no patterns at all
    """
    requested = list(categories) if categories else [ALL_CATEGORIES]

    matchers: List[CompiledMatcher] = []
    for key in expand_categories(catalog, requested):
        for pattern in catalog.get(key).patterns:
            try:
                compiled = re.compile(pattern, re.IGNORECASE)
            except re.error as e:
                raise PatternCompileError(pattern, key, str(e)) from e
            matchers.append(CompiledMatcher(regex=compiled, category=key))

    if not matchers:
        raise EmptyMatcherSetError(requested)

    logger.debug("Compiled %d patterns for categories: %s", len(matchers), ", ".join(requested))
    return matchers


class CategoryResolver:
    """Picks the single winning category for a line."""

    def __init__(self, matchers: List[CompiledMatcher]):
        self.matchers = list(matchers)

    def fired_categories(self, line: str) -> List[str]:
        """Get the categories of every matcher that fires on the line, in matcher order."""
        fired: List[str] = []
        for matcher in self.matchers:
            if matcher.category not in fired and matcher.matches(line):
                fired.append(matcher.category)
        return fired

    def resolve(self, line: str) -> Optional[str]:
        """
        Classify a line.

        Returns:
            The firing category with the lowest rank, or None if nothing fired.
            On equal rank the first firing matcher wins.
        """
        fired = self.fired_categories(line)
        if not fired:
            return None
        # min() keeps the first of equally ranked categories
        return min(fired, key=category_rank)
