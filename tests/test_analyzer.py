import logging
import threading

import pytest

from riya.analyzer import (
    OutputMode,
    StatsAggregator,
    StreamProcessor,
    classify_lines,
    strip_line_ending,
)
from riya.errors import InputReadError
from riya.filters import FilterPipeline
from riya.matcher import build_matcher_set


@pytest.fixture
def matchers(bundled_catalog):
    return build_matcher_set(bundled_catalog, ["all"])


def run_lines(matchers, lines, filters=None):
    emitted = []
    processor = StreamProcessor(
        matchers,
        filters=filters,
        emit=lambda line, category: emitted.append((line, category)),
    )
    result = processor.run(lines)
    return emitted, result


def test_scenario_all_categories_no_filters(matchers):
    emitted, result = run_lines(matchers, ["a.sql.bak", "index.php", "b.js"])
    assert emitted == [("a.sql.bak", "b"), ("index.php", "p"), ("b.js", "j")]
    assert result.matched == 3


def test_scenario_exclude_extension(matchers):
    filters = FilterPipeline.from_strings(exclude="js")
    emitted, result = run_lines(matchers, ["a.sql.bak", "index.php", "b.js"], filters)
    assert emitted == [("a.sql.bak", "b"), ("index.php", "p")]
    assert result.filtered == 1


def test_scenario_dedup_stats(matchers, bundled_catalog):
    processor = StreamProcessor(
        matchers,
        filters=FilterPipeline(unique=True),
        mode=OutputMode.STATS,
    )
    result = processor.run(["x.env", "x.env", "y.bak"])

    assert result.duplicates == 1
    assert dict(result.stats.counts) == {"c": 1, "b": 1}
    assert result.stats.total == 2
    rows = result.stats.summary(bundled_catalog)
    assert [(r.category, r.count) for r in rows] == [("b", 1), ("c", 1)]
    assert rows[0].description == "Backup and temporary files"


def test_without_dedup_duplicates_are_processed(matchers):
    emitted, result = run_lines(matchers, ["x.env", "x.env"])
    assert emitted == [("x.env", "c"), ("x.env", "c")]
    assert result.duplicates == 0


def test_dedup_applies_before_filters(matchers):
    filters = FilterPipeline.from_strings(exclude="env", unique=True)
    emitted, result = run_lines(matchers, ["x.env", "x.env", "y.bak"], filters)
    assert emitted == [("y.bak", "b")]
    assert result.duplicates == 1
    assert result.filtered == 1


def test_unmatched_lines_are_dropped(matchers):
    emitted, result = run_lines(matchers, ["https://example.com/", "", "y.bak"])
    assert emitted == [("y.bak", "b")]
    assert result.unmatched == 2
    assert result.lines_read == 3


def test_trailing_newlines_are_stripped(matchers):
    emitted, _ = run_lines(matchers, ["y.bak\n", "b.js\r\n"])
    assert emitted == [("y.bak", "b"), ("b.js", "j")]


def test_stream_is_consumed_lazily(matchers):
    consumed = []

    def source():
        for line in ["y.bak", "b.js"]:
            consumed.append(line)
            yield line

    emitted = []

    def emit(line, category):
        # the next line must not have been read yet
        assert consumed[-1] == line
        emitted.append(line)

    StreamProcessor(matchers, emit=emit).run(source())
    assert emitted == ["y.bak", "b.js"]


def test_stats_total_equals_matched_lines(matchers):
    lines = ["a.sql.bak", "index.php", "b.js", "about.html", "x.env", "y.bak", "b.js"]
    processor = StreamProcessor(matchers, mode=OutputMode.STATS)
    result = processor.run(lines)
    assert result.stats.total == result.matched == 6
    assert sum(row.count for row in result.stats.summary()) == 6


def test_read_error_keeps_processed_output(matchers):
    def source():
        yield "y.bak"
        yield "b.js"
        raise OSError("device went away")

    emitted = []
    processor = StreamProcessor(matchers, emit=lambda line, cat: emitted.append(line))
    with pytest.raises(InputReadError) as exc_info:
        processor.run(source())

    assert emitted == ["y.bak", "b.js"]
    assert exc_info.value.result.matched == 2
    assert "device went away" in str(exc_info.value)


def test_cancel_event_stops_processing(matchers):
    cancel = threading.Event()
    emitted = []

    def emit(line, category):
        emitted.append(line)
        cancel.set()

    processor = StreamProcessor(matchers, emit=emit, cancel_event=cancel)
    result = processor.run(["y.bak", "b.js", "x.env"])

    assert emitted == ["y.bak"]
    assert result.cancelled


def test_lines_mode_requires_emitter(matchers):
    with pytest.raises(ValueError):
        StreamProcessor(matchers, mode=OutputMode.LINES)


def test_classify_lines(matchers):
    assert classify_lines(["b.js", "nope"], matchers) == [("b.js", "j")]


def test_stats_summary_order_is_stable():
    stats = StatsAggregator()
    for category in ["s", "b", "b", "c", "s", "b"]:
        stats.add(category)
    rows = stats.summary()
    assert [(r.category, r.count) for r in rows] == [("b", 3), ("s", 2), ("c", 1)]
    assert all(r.description == "" for r in rows)


def test_excluded_line_is_dropped_even_when_included(matchers):
    filters = FilterPipeline.from_strings(exclude="bak", include="bak,js")
    emitted, result = run_lines(matchers, ["a.sql.bak", "b.js"], filters)
    assert emitted == [("b.js", "j")]
    assert result.filtered == 1


@pytest.mark.parametrize("raw, expected", [
    ("y.bak\n", "y.bak"),
    ("y.bak\r\n", "y.bak"),
    ("y.bak", "y.bak"),
    ("y.bak\n\n", "y.bak\n"),
    ("y.bak\r", "y.bak\r"),
])
def test_strip_line_ending_removes_one_terminator(raw, expected):
    assert strip_line_ending(raw) == expected


def test_read_error_is_not_logged_as_warning(matchers, caplog):
    def source():
        yield "y.bak"
        raise OSError("boom")

    processor = StreamProcessor(matchers, mode=OutputMode.STATS)
    with caplog.at_level(logging.WARNING, logger="riya"):
        with pytest.raises(InputReadError):
            processor.run(source())
    assert caplog.records == []
