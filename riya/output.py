"""
Output formatters for classified lines, statistics and pattern listings.
"""

import os
import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

from .analyzer import RunResult
from .patterns import ALL_CATEGORIES, PatternCatalog


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    # Foreground colors
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    # 256-color palette
    GOLD = "\033[38;5;220m"
    BROWN = "\033[38;5;130m"
    PINK = "\033[38;5;205m"
    ORANGE = "\033[38;5;208m"
    AQUA = "\033[38;5;51m"
    LIME = "\033[38;5;118m"
    LAVENDER = "\033[38;5;183m"


CATEGORY_COLORS = {
    "s": Colors.RED,
    "g": Colors.MAGENTA,
    "p": Colors.BLUE,
    "b": Colors.YELLOW,
    "c": Colors.CYAN,
    "j": Colors.GOLD,
    "l": Colors.BROWN,
    "k": Colors.PINK,
    "f": Colors.BLUE,
    "v": Colors.ORANGE,
    "x": Colors.GREEN,
    "d": Colors.AQUA,
    "m": Colors.LIME,
    "r": Colors.LAVENDER,
    "misc": Colors.WHITE,
}


@dataclass
class OutputConfig:
    """Configuration for output formatting."""
    color: bool = True
    output_file: Optional[str] = None


class OutputFormatter:
    """Writes classified lines and summaries to stdout or a file."""

    def __init__(self, config: Optional[OutputConfig] = None, stream: Optional[TextIO] = None):
        self.config = config or OutputConfig()
        self._stream = stream
        self._owns_stream = False
        self._check_color_support()

    def _check_color_support(self):
        """Check if the destination supports colors."""
        if not self.config.color:
            return

        # Files never get escape codes
        if self.config.output_file or os.environ.get("NO_COLOR"):
            self.config.color = False
        elif self._stream is None and not sys.stdout.isatty():
            self.config.color = False
        elif self._stream is not None and not getattr(self._stream, "isatty", lambda: False)():
            self.config.color = False

    def _colorize(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if self.config.color and color:
            return f"{color}{text}{Colors.RESET}"
        return text

    @property
    def stream(self) -> TextIO:
        if self._stream is None:
            if self.config.output_file:
                self._stream = open(self.config.output_file, "w", encoding="utf-8")
                self._owns_stream = True
            else:
                self._stream = sys.stdout
        return self._stream

    def close(self):
        """Flush the destination and close it if we opened it."""
        if self._stream is None:
            return
        self._stream.flush()
        if self._owns_stream:
            self._stream.close()
            self._stream = None
            self._owns_stream = False

    def __enter__(self):
        # Open an output file up front so a bad path fails before any input is read
        self.stream
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def write_match(self, line: str, category: str):
        """Write one classified line, colored by its category."""
        self.stream.write(self._colorize(line, CATEGORY_COLORS.get(category, "")) + "\n")

    def write_stats(self, result: RunResult, catalog: Optional[PatternCatalog] = None):
        """Write the statistics block for a stats-mode run."""
        output = self.stream
        output.write("\n")
        output.write("=== Match Statistics ===\n")
        for row in result.stats.summary(catalog):
            bullet = self._colorize("●", CATEGORY_COLORS.get(row.category, ""))
            output.write(f"{bullet} [{row.category}] {row.description}: {row.count} matches\n")
        output.write(f"\nTotal matches: {result.stats.total}\n")

    def write_pattern_list(self, catalog: PatternCatalog, categories: List[str]):
        """Write description, patterns and examples for each selected category."""
        output = self.stream
        keys: List[str] = []
        for cat in categories:
            for key in (catalog.keys() if cat == ALL_CATEGORIES else [cat]):
                if key not in keys:
                    keys.append(key)

        for key in keys:
            category = catalog.get(key)
            if category is None:
                output.write(f"Unknown category key: {key}\n")
                continue

            color = CATEGORY_COLORS.get(key, "")
            output.write(self._colorize(f"Category [{key}] - {category.description}:", color) + "\n")
            output.write("Patterns:\n")
            for pattern in category.patterns:
                output.write(f"  • {pattern}\n")
            output.write("Examples:\n")
            for example in category.examples:
                output.write(f"  • {self._colorize(example, color)}\n")
            output.write("\n")
