"""
Error types raised by the riya core.

The library raises these; only the CLI turns them into user-facing messages.
"""

from typing import Iterable, Optional


class RiyaError(Exception):
    """Base class for all riya errors."""


class CatalogLoadError(RiyaError):
    """The pattern file could not be read or does not have the expected structure."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"failed to load pattern file {source}: {reason}")


class PatternCompileError(RiyaError):
    """A catalog pattern is not a valid regular expression."""

    def __init__(self, pattern: str, category: Optional[str], reason: str):
        self.pattern = pattern
        self.category = category
        self.reason = reason
        super().__init__(
            f"failed to compile pattern {pattern} for category {category}: {reason}"
        )


class FilterCompileError(PatternCompileError):
    """An exclude/include filter token is not a valid regular expression."""

    def __init__(self, token: str, reason: str):
        self.token = token
        self.pattern = token
        self.category = None
        self.reason = reason
        RiyaError.__init__(self, f"invalid filter pattern {token}: {reason}")


class EmptyMatcherSetError(RiyaError):
    """The selected categories produced no compiled matchers."""

    def __init__(self, categories: Iterable[str]):
        self.categories = list(categories)
        super().__init__(
            "no valid patterns found for the selected categories: "
            + ", ".join(self.categories)
        )


class InputReadError(RiyaError):
    """Reading the input stream failed part way through a run.

    ``result`` holds whatever was processed before the failure.
    """

    def __init__(self, reason: str, result=None):
        self.reason = reason
        self.result = result
        super().__init__(f"error reading input: {reason}")
