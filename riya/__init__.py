"""
riya - Find sensitive files and paths in crawled URLs.

Classifies URLs from waybackurls/gau output into categories such as SQL
dumps, backups, keys and VCS metadata using a YAML pattern catalog.
"""

__version__ = "1.0.0"
__description__ = "Find sensitive files and paths in crawled URLs"

from .analyzer import OutputMode, RunResult, StatsAggregator, StreamProcessor
from .filters import FilterPipeline
from .matcher import CategoryResolver, build_matcher_set
from .patterns import PatternCatalog, load_catalog

__all__ = [
    "OutputMode",
    "RunResult",
    "StatsAggregator",
    "StreamProcessor",
    "FilterPipeline",
    "CategoryResolver",
    "build_matcher_set",
    "PatternCatalog",
    "load_catalog",
]
