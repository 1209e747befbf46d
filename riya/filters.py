"""
Line filters applied before classification.

Order is fixed: dedup, then exclude, then include. Exclude always wins
over include.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Set

from .errors import FilterCompileError

logger = logging.getLogger(__name__)

# Presence of any of these marks a token as a raw regex
_REGEX_MARKERS = ("\\", "^", "$")


def normalize_filter_token(token: str) -> str:
    """
    Turn a bare extension token into an anchored pattern.

    "js" and ".js" both become r"\\.js(\\?|#|$)", so they match "app.js" and
    "app.js?v=2" but not "jsonthing.php". Tokens containing a backslash,
    caret or dollar sign are returned unchanged.
    """
    if any(marker in token for marker in _REGEX_MARKERS):
        return token
    if token.startswith("."):
        token = token[1:]
    return "\\." + token + "(\\?|#|$)"


def parse_filter_patterns(value: Optional[str]) -> List[re.Pattern]:
    """
    Parse a comma-separated filter string.

    Args:
        value: Raw user input, e.g. "js,json,css" or "^https://cdn\\."

    Returns:
        Compiled case-insensitive patterns (empty list for empty input)

    Raises:
        FilterCompileError: On the first token that is not a valid regex
    """
    if not value:
        return []

    patterns = []
    for token in value.split(","):
        token = token.strip()
        if not token:
            continue

        pattern = normalize_filter_token(token)
        try:
            patterns.append(re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            raise FilterCompileError(token, str(e)) from e

    return patterns


def matches_any(line: str, patterns: List[re.Pattern]) -> bool:
    """Check whether any pattern matches anywhere in the line."""
    for pattern in patterns:
        if pattern.search(line):
            return True
    return False


@dataclass
class FilterPipeline:
    """
    Dedup / exclude / include stages run on each line before classification.

    The seen-line set lives as long as the pipeline and is never pruned.
    """
    exclude: List[re.Pattern] = field(default_factory=list)
    include: List[re.Pattern] = field(default_factory=list)
    unique: bool = False
    seen: Set[str] = field(default_factory=set, repr=False)

    @classmethod
    def from_strings(cls, exclude: Optional[str] = None, include: Optional[str] = None, unique: bool = False) -> "FilterPipeline":
        """Build a pipeline from raw comma-separated CLI strings."""
        pipeline = cls(
            exclude=parse_filter_patterns(exclude),
            include=parse_filter_patterns(include),
            unique=unique,
        )
        logger.debug(
            "Filters: %d exclude, %d include, unique=%s",
            len(pipeline.exclude), len(pipeline.include), unique,
        )
        return pipeline

    def is_duplicate(self, line: str) -> bool:
        """Return True if the line was seen before; records it otherwise."""
        if line in self.seen:
            return True
        self.seen.add(line)
        return False

    def is_excluded(self, line: str) -> bool:
        return bool(self.exclude) and matches_any(line, self.exclude)

    def is_included(self, line: str) -> bool:
        # No include patterns means everything passes
        return not self.include or matches_any(line, self.include)
