#!/usr/bin/env python3
"""
riya - Command Line Interface

Classifies URLs/paths from waybackurls, gau and similar tools into
sensitive-file categories (SQL dumps, backups, keys, VCS metadata, ...).
"""

import argparse
import io
import logging
import os
import sys
from typing import List, Optional, Sequence, TextIO

from . import __version__
from .analyzer import OutputMode, StreamProcessor
from .errors import (
    CatalogLoadError,
    EmptyMatcherSetError,
    FilterCompileError,
    InputReadError,
    PatternCompileError,
)
from .filters import FilterPipeline
from .logger import setup_logging
from .matcher import build_matcher_set
from .output import CATEGORY_COLORS, Colors, OutputConfig, OutputFormatter
from .patterns import ALL_CATEGORIES, load_catalog

logger = logging.getLogger(__name__)


# (short flag, long flag, category key, help)
CATEGORY_FLAGS = [
    ("-s", "--sql", "s", "Match SQL/database files"),
    ("-g", "--graphql", "g", "Match GraphQL endpoints"),
    ("-p", "--php", "p", "Match PHP source and config files"),
    ("-b", "--backup", "b", "Match backup and temporary files"),
    ("-c", "--config", "c", "Match config and environment files"),
    ("-j", "--js", "j", "Match JavaScript and JSON files"),
    ("-l", "--logs", "l", "Match log and text files"),
    ("-k", "--certs", "k", "Match certificate and key files"),
    ("-f", "--framework", "f", "Match framework-specific files"),
    ("-v", "--vcs", "v", "Match version control files"),
    ("-x", "--archive", "x", "Match archive/compressed files"),
    ("-d", "--cloud", "d", "Match cloud and infrastructure config files"),
    ("-m", "--admin", "m", "Match admin and authentication paths"),
    ("-r", "--dirs", "r", "Match sensitive directories"),
    (None, "--misc", "misc", "Match miscellaneous sensitive files"),
]

EXAMPLES = """
Examples:
  cat urls.txt | riya -s -p
  waybackurls target.com | riya -a --exc js,json,css -o results.txt
  cat urls.txt | riya -s -u -o sensitive.txt
  waybackurls target.com | riya --inc sql,env,config --stats
  riya -g --list  # lists all GraphQL patterns
"""


def _category_dest(key: str) -> str:
    return f"cat_{key}"


def _color_legend(color: bool) -> str:
    """Category flags, each in the color its matches are printed in."""
    lines = ["Category colors:"]
    for short, long, key, _ in CATEGORY_FLAGS:
        flag = short or long
        if color:
            flag = f"{CATEGORY_COLORS[key]}{flag}{Colors.RESET}"
        lines.append(f"  {flag}  [{key}]")
    return "\n".join(lines)


def build_parser(color: bool = False) -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='riya',
        description='''
riya - find sensitive files and paths in crawled URLs.

Reads URLs (one per line) from stdin or a file and prints the ones that
match a sensitive-file category. Each URL is reported once, under the most
specific category it matches.
        ''',
        epilog=_color_legend(color) + "\n" + EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    # Category options
    category_group = parser.add_argument_group('Category Options')
    category_group.add_argument(
        '-a', '--all',
        action='store_true',
        help='Match all sensitive files and paths (default if no category flag is given)'
    )
    for short, long, key, help_text in CATEGORY_FLAGS:
        flags = [short, long] if short else [long]
        category_group.add_argument(
            *flags,
            dest=_category_dest(key),
            action='store_true',
            help=help_text
        )
    category_group.add_argument(
        '--list',
        action='store_true',
        help='List all known patterns for the selected categories and exit'
    )

    # Input options
    input_group = parser.add_argument_group('Input Options')
    input_group.add_argument(
        '-i', '--input',
        metavar='FILE',
        help='Input file containing URLs (default: stdin)'
    )
    input_group.add_argument(
        '--patterns',
        metavar='FILE',
        help='Pattern file (default: $RIYA_PATTERNS, ./patterns.yml, then the bundled patterns)'
    )

    # Filter options
    filter_group = parser.add_argument_group('Filter Options')
    filter_group.add_argument(
        '--exc', '--exclude',
        dest='exclude',
        metavar='LIST',
        default='',
        help='Exclude patterns (comma-separated extensions/regexes, e.g. js,json,png)'
    )
    filter_group.add_argument(
        '--inc', '--include',
        dest='include',
        metavar='LIST',
        default='',
        help='Include only lines matching these patterns (comma-separated)'
    )
    filter_group.add_argument(
        '-u', '--unique',
        action='store_true',
        help='Remove duplicate URLs (show each URL only once)'
    )

    # Output options
    output_group = parser.add_argument_group('Output Options')
    output_group.add_argument(
        '-o', '--output',
        metavar='FILE',
        help='Output file (default: stdout)'
    )
    output_group.add_argument(
        '--stats',
        action='store_true',
        help='Show a statistics summary instead of URLs'
    )
    output_group.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output'
    )
    output_group.add_argument(
        '--verbose',
        action='store_true',
        help='Print debug logging to stderr'
    )
    output_group.add_argument(
        '--log-file',
        metavar='FILE',
        default='',
        help='Also write debug logging to FILE'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser


def selected_categories(args: argparse.Namespace) -> List[str]:
    """Category keys chosen by flags, or ["all"] when none were chosen."""
    if args.all:
        return [ALL_CATEGORIES]
    cats = [key for _, _, key, _ in CATEGORY_FLAGS if getattr(args, _category_dest(key))]
    return cats or [ALL_CATEGORIES]


def open_input(path: Optional[str]) -> TextIO:
    """Open the input source. Undecodable bytes are replaced, never fatal."""
    if path:
        return open(path, 'r', encoding='utf-8', errors='replace')
    buffer = getattr(sys.stdin, 'buffer', None)
    if buffer is None:
        return sys.stdin
    return io.TextIOWrapper(buffer, encoding='utf-8', errors='replace')


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)
    help_color = (
        '--no-color' not in argv
        and not os.environ.get('NO_COLOR')
        and sys.stdout.isatty()
    )
    args = build_parser(color=help_color).parse_args(argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        catalog = load_catalog(args.patterns)
    except CatalogLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    categories = selected_categories(args)
    config = OutputConfig(color=not args.no_color, output_file=args.output)

    if args.list:
        with OutputFormatter(OutputConfig(color=not args.no_color)) as formatter:
            formatter.write_pattern_list(catalog, categories)
        return 0

    try:
        matchers = build_matcher_set(catalog, categories)
    except PatternCompileError as e:
        print(f"Error: regex compilation error: {e}", file=sys.stderr)
        return 1
    except EmptyMatcherSetError:
        print("Error: no valid patterns found for the selected categories", file=sys.stderr)
        return 1

    try:
        filters = FilterPipeline.from_strings(
            exclude=args.exclude,
            include=args.include,
            unique=args.unique,
        )
    except FilterCompileError as e:
        print(f"Error: parsing filter patterns: {e}", file=sys.stderr)
        return 1

    if not args.input and sys.stdin.isatty():
        print("Error: No URLs provided. Use -i or pipe URLs to stdin.", file=sys.stderr)
        print("Use --help for usage information.", file=sys.stderr)
        return 1

    try:
        source = open_input(args.input)
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    mode = OutputMode.STATS if args.stats else OutputMode.LINES
    exit_code = 0

    try:
        with OutputFormatter(config) as formatter:
            processor = StreamProcessor(
                matchers,
                filters=filters,
                mode=mode,
                emit=formatter.write_match,
            )
            try:
                result = processor.run(source)
            except InputReadError as e:
                print(f"Error: {e}", file=sys.stderr)
                result = e.result
                exit_code = 1

            if mode == OutputMode.STATS:
                formatter.write_stats(result, catalog)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1
    finally:
        if args.input:
            source.close()

    logger.debug("Run finished: %s", result.get_stats())
    if args.output:
        print(f"Results written to: {args.output}", file=sys.stderr)

    return exit_code


if __name__ == '__main__':
    sys.exit(main())
