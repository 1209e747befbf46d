"""
Pattern catalog for classifying sensitive URLs and paths.

The catalog is loaded from a YAML file shaped like:

    categories:
      s:
        description: SQL/database files
        patterns:
          - '\\.sql(\\.|\\?|#|$)'
        examples:
          - https://example.com/dump.sql

Each category contains:
- description: Human readable summary shown in listings and statistics
- patterns: Ordered list of regex strings (matched case-insensitively)
- examples: Sample URLs, documentation only
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

import yaml

from .errors import CatalogLoadError

logger = logging.getLogger(__name__)

# Sentinel selecting every category in the catalog
ALL_CATEGORIES = "all"

PATTERNS_ENV_VAR = "RIYA_PATTERNS"
DEFAULT_PATTERN_FILE = "patterns.yml"
BUNDLED_PATTERN_FILE = Path(__file__).parent / "data" / DEFAULT_PATTERN_FILE


@dataclass(frozen=True)
class Category:
    """A named class of sensitive file/path patterns."""
    key: str
    description: str
    patterns: Tuple[str, ...] = field(default_factory=tuple)
    examples: Tuple[str, ...] = field(default_factory=tuple)


class PatternCatalog:
    """Read-only mapping of category key to Category, in file order."""

    def __init__(self, categories: Mapping[str, Category], source: str = "<memory>"):
        self._categories = MappingProxyType(dict(categories))
        self.source = source

    @classmethod
    def from_dict(cls, data: Dict, source: str = "<memory>") -> "PatternCatalog":
        """
        Build a catalog from parsed pattern-file data.

        Args:
            data: Parsed document with a top-level ``categories`` mapping
            source: Where the data came from, used in error messages

        Returns:
            PatternCatalog

        Raises:
            CatalogLoadError: If the structure is not what we expect
        """
        if not isinstance(data, dict):
            raise CatalogLoadError(source, "top level must be a mapping")

        raw_categories = data.get("categories")
        if not isinstance(raw_categories, dict):
            raise CatalogLoadError(source, "missing 'categories' mapping")

        categories: Dict[str, Category] = {}
        for key, body in raw_categories.items():
            key = str(key)
            if key == ALL_CATEGORIES:
                raise CatalogLoadError(source, f"'{ALL_CATEGORIES}' is reserved and cannot be a category key")
            if body is None:
                body = {}
            if not isinstance(body, dict):
                raise CatalogLoadError(source, f"category '{key}' must be a mapping")

            categories[key] = Category(
                key=key,
                description=str(body.get("description") or ""),
                patterns=_string_list(body.get("patterns"), key, "patterns", source),
                examples=_string_list(body.get("examples"), key, "examples", source),
            )

        return cls(categories, source=source)

    def get(self, key: str) -> Optional[Category]:
        """Get a category by key, or None if the catalog has no such key."""
        return self._categories.get(key)

    def keys(self) -> List[str]:
        """Get all category keys in catalog order."""
        return list(self._categories.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._categories

    def __iter__(self):
        return iter(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)


def _string_list(value, key: str, field_name: str, source: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise CatalogLoadError(source, f"'{field_name}' of category '{key}' must be a list")
    for item in value:
        if not isinstance(item, str):
            raise CatalogLoadError(
                source, f"'{field_name}' of category '{key}' must contain only strings, got {item!r}"
            )
    return tuple(value)


def resolve_pattern_file(explicit: Optional[str] = None) -> Path:
    """
    Work out which pattern file to load.

    Order: explicit path, $RIYA_PATTERNS, ./patterns.yml, bundled default.
    """
    if explicit:
        return Path(explicit)

    from_env = os.environ.get(PATTERNS_ENV_VAR)
    if from_env:
        return Path(from_env)

    local = Path.cwd() / DEFAULT_PATTERN_FILE
    if local.is_file():
        return local

    return BUNDLED_PATTERN_FILE


def load_catalog(path: Optional[str] = None) -> PatternCatalog:
    """
    Load and validate a pattern catalog from a YAML file.

    Args:
        path: Pattern file path. When omitted, resolved by resolve_pattern_file().

    Returns:
        PatternCatalog

    Raises:
        CatalogLoadError: Missing/unreadable file, invalid YAML or bad structure
    """
    pattern_file = resolve_pattern_file(path)
    source = str(pattern_file)

    try:
        with open(pattern_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise CatalogLoadError(source, e.strerror or str(e)) from e
    except yaml.YAMLError as e:
        raise CatalogLoadError(source, f"invalid YAML: {e}") from e

    catalog = PatternCatalog.from_dict(data, source=source)
    logger.debug("Loaded %d categories from %s", len(catalog), source)
    return catalog
