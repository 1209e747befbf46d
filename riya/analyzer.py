"""
Stream processing - the core loop.

Lines are read one at a time, filtered, classified and then either emitted
straight away or counted for the statistics summary.
"""

import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .errors import InputReadError
from .filters import FilterPipeline
from .matcher import CategoryResolver, CompiledMatcher
from .patterns import PatternCatalog

logger = logging.getLogger(__name__)

# Receives each accepted (line, category) pair in normal mode
EmitFunc = Callable[[str, str], None]


def strip_line_ending(raw: str) -> str:
    """Remove exactly one trailing "\\n" or "\\r\\n"."""
    if raw.endswith("\n"):
        raw = raw[:-1]
        if raw.endswith("\r"):
            raw = raw[:-1]
    return raw


class OutputMode(Enum):
    LINES = "lines"
    STATS = "stats"


@dataclass
class CategoryStat:
    """One row of the statistics summary."""
    category: str
    description: str
    count: int


class StatsAggregator:
    """Per-category match counters for statistics mode."""

    def __init__(self):
        self.counts: Counter = Counter()

    def add(self, category: str):
        self.counts[category] += 1

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def summary(self, catalog: Optional[PatternCatalog] = None) -> List[CategoryStat]:
        """
        Get the summary rows.

        Only categories with at least one match are listed, ordered by
        descending count and then by category key.
        """
        rows = []
        for category, count in sorted(self.counts.items(), key=lambda x: (-x[1], x[0])):
            if count <= 0:
                continue
            description = ""
            if catalog is not None:
                cat = catalog.get(category)
                description = cat.description if cat else ""
            rows.append(CategoryStat(category=category, description=description, count=count))
        return rows


@dataclass
class RunResult:
    """Bookkeeping for one pass over the input."""
    mode: OutputMode = OutputMode.LINES
    lines_read: int = 0
    duplicates: int = 0
    filtered: int = 0
    unmatched: int = 0
    matched: int = 0
    cancelled: bool = False
    stats: StatsAggregator = field(default_factory=StatsAggregator)

    def get_stats(self) -> Dict:
        return {
            "lines_read": self.lines_read,
            "duplicates": self.duplicates,
            "filtered": self.filtered,
            "unmatched": self.unmatched,
            "matched": self.matched,
            "by_category": dict(self.stats.counts),
        }


class StreamProcessor:
    """
    Drives filter -> classify -> emit/count over a line stream.

    One processor is one run: the filter pipeline's seen-set and the
    statistics counters belong to it.
    """

    def __init__(
        self,
        matchers: List[CompiledMatcher],
        filters: Optional[FilterPipeline] = None,
        mode: OutputMode = OutputMode.LINES,
        emit: Optional[EmitFunc] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Args:
            matchers: Compiled matcher set from build_matcher_set()
            filters: Filter pipeline (default: no filtering)
            mode: LINES emits every classified line, STATS only counts them
            emit: Callback for (line, category) pairs, required in LINES mode
            cancel_event: When set, processing stops before the next line
        """
        if mode == OutputMode.LINES and emit is None:
            raise ValueError("emit callback is required in lines mode")

        self.resolver = CategoryResolver(matchers)
        self.filters = filters or FilterPipeline()
        self.mode = mode
        self.emit = emit
        self.cancel_event = cancel_event
        self.result = RunResult(mode=mode)

    def classify(self, line: str) -> Optional[str]:
        """Filter and classify one line. Returns the winning category or None."""
        result = self.result
        result.lines_read += 1

        if self.filters.unique and self.filters.is_duplicate(line):
            result.duplicates += 1
            return None

        if self.filters.is_excluded(line) or not self.filters.is_included(line):
            result.filtered += 1
            return None

        category = self.resolver.resolve(line)
        if category is None:
            result.unmatched += 1
            return None

        result.matched += 1
        return category

    def process_line(self, line: str) -> Optional[str]:
        """Classify one line and route it to the emitter or the counters."""
        category = self.classify(line)
        if category is None:
            return None

        if self.mode == OutputMode.STATS:
            self.result.stats.add(category)
        else:
            self.emit(line, category)
        return category

    def run(self, lines: Iterable[str]) -> RunResult:
        """
        Process every line of the input in order.

        Args:
            lines: Lazy line source such as sys.stdin. Trailing newlines are stripped.

        Returns:
            RunResult for the run

        Raises:
            InputReadError: If reading the input fails. Lines handled before
                the failure stay emitted/counted; the partial result is attached.
        """
        iterator = iter(lines)
        while True:
            if self.cancel_event is not None and self.cancel_event.is_set():
                logger.debug("Cancelled after %d lines", self.result.lines_read)
                self.result.cancelled = True
                break

            try:
                raw = next(iterator)
            except StopIteration:
                break
            except (OSError, UnicodeDecodeError) as e:
                # Strictly decoding sources end up here; the caller reports it
                logger.debug("Input read failed after %d lines: %s", self.result.lines_read, e)
                raise InputReadError(str(e), result=self.result) from e

            self.process_line(strip_line_ending(raw))

        return self.result


def classify_lines(
    lines: Iterable[str],
    matchers: List[CompiledMatcher],
    filters: Optional[FilterPipeline] = None,
) -> List[Tuple[str, str]]:
    """Convenience wrapper: collect (line, category) pairs for an iterable."""
    pairs: List[Tuple[str, str]] = []
    processor = StreamProcessor(
        matchers,
        filters=filters,
        emit=lambda line, category: pairs.append((line, category)),
    )
    processor.run(lines)
    return pairs
