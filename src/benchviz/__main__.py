"""Main file for benchviz.

Contains ExitResult, entrypoint function, and main function.
ExitResult contains values returned on failure.
Exit codes:
    0: SUCCESS
    1: NO_ACTION
    2: INVALID_TARGET
    3: NO_BENCHMARKS_FOUND
    4: INVALID_CONFIGURATION
    5: READ_ERROR
    6: NO_VALID_FILES
    7: INVALID_BENCHMARK_NAME

Entrypoint function handles parsing arguments and runs main.
Main function acts on the result of the parser and runs the program.
"""

import logging
import textwrap
from enum import IntEnum
import sys
import argparse
from pathlib import Path
from typing import TextIO

import yaml

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger()

from benchviz.benchmark_helpers import (
    TempFiles, capture_stdin, generate_chart, merge_benchmarks, render_document,
    resolve_output_path, write_output,
)
from benchviz.benchmark_settings import LocalSettings, load_local_settings, normalize_settings, LOCAL_SETTINGS_FILE
from benchviz.errors import BenchmarkReadError, ConfigurationError, GroupingError, NoBenchmarksFound
from benchviz.progress import BenchmarkProgress, RichProgressBar

VERSION = '1.0.0'
CHART_ACTIONS = {'chart', 'c'}
MERGE_ACTIONS = {'merge', 'm'}
STDIN_TARGET = '-'

class ExitResult(IntEnum):
    SUCCESS = 0
    NO_ACTION = 1
    INVALID_TARGET = 2
    NO_BENCHMARKS_FOUND = 3
    INVALID_CONFIGURATION = 4
    READ_ERROR = 5
    NO_VALID_FILES = 6
    INVALID_BENCHMARK_NAME = 7

    def __str__(self):
        return self.name

def settings_from_args(args: argparse.Namespace) -> LocalSettings:
    """Local settings file, overridden by the flags given on the command line."""
    local_settings = load_local_settings(Path(args.settings)) or LocalSettings()
    overrides = {
        'name': args.name,
        'description': args.description,
        'output_format': args.format,
        'time_unit': args.time_unit,
        'mem_unit': args.mem_unit,
        'number_unit': args.number_unit,
        'group_pattern': args.group_pattern,
        'group_regex': args.group_regex,
        'separator': args.separator,
        'filter_regex': args.filter,
        'charts': args.charts.split(',') if args.charts else None,
        'sort': args.sort,
        'show_labels': args.show_labels,
    }
    return normalize_settings(local_settings.merged_with(overrides))

def run_chart(args: argparse.Namespace, stdin: TextIO) -> ExitResult:
    settings = settings_from_args(args)
    output_path = resolve_output_path(args.output, settings.output_format)

    with TempFiles() as temp_files:
        if args.target in (None, STDIN_TARGET):
            if args.target is None and stdin.isatty():
                logger.error('Error: no target provided and no piped input detected')
                return ExitResult.NO_ACTION
            progress = BenchmarkProgress(RichProgressBar()) if args.progress else None
            target = capture_stdin(stdin, temp_files, progress)
        else:
            target = Path(args.target)
            if not target.is_file():
                logger.error(f"Error: File '{target}' does not exist")
                return ExitResult.INVALID_TARGET

        content = generate_chart(target, settings)

    write_output(content, output_path)
    return ExitResult.SUCCESS

def run_merge(args: argparse.Namespace) -> ExitResult:
    benchmarks = merge_benchmarks([Path(path) for path in args.paths])
    if len(benchmarks) == 0:
        logger.error('Error: No valid benchmark files processed')
        return ExitResult.NO_VALID_FILES

    output_format = 'json' if args.format and args.format.lower() == 'json' else 'html'
    write_output(render_document(benchmarks, output_format), resolve_output_path(args.output, output_format))
    logger.info(f'Merged {len(benchmarks)} benchmark documents')
    return ExitResult.SUCCESS

def main(args: argparse.Namespace, parser: argparse.ArgumentParser, stdin: TextIO | None = None) -> ExitResult:
    """Entry point for the benchviz CLI. Handles action dispatch and maps errors to exit codes."""
    if args.action is None:
        logger.error("Error: No action specified.\n")
        parser.print_help()
        return ExitResult.NO_ACTION

    try:
        if args.action in CHART_ACTIONS:
            return run_chart(args, stdin or sys.stdin)
        if args.action in MERGE_ACTIONS:
            return run_merge(args)
    except (ConfigurationError, yaml.YAMLError) as e:
        logger.error(f'Invalid configuration: {e}')
        return ExitResult.INVALID_CONFIGURATION
    except GroupingError as e:
        logger.error(f'Error on parsing group from bench name: {e}')
        return ExitResult.INVALID_BENCHMARK_NAME
    except BenchmarkReadError as e:
        logger.error(f'Error reading benchmark results: {e}')
        return ExitResult.READ_ERROR
    except NoBenchmarksFound as e:
        logger.error(f'Error: {e}')
        return ExitResult.NO_BENCHMARKS_FOUND

    return ExitResult.NO_ACTION

def create_parser() -> argparse.ArgumentParser:
    epilog = textwrap.dedent("""\
    Examples:
       go test -bench . -benchmem | benchviz chart -o report
       benchviz chart bench.txt -p n/x/y -t ms -m KB
       benchviz chart bench.json -r "(?P<n>\\w+)/(?P<y>\\w+)" -f json -o report.json
       benchviz merge reports/ extra.json -o merged.html
    """)

    parser = argparse.ArgumentParser(
        prog='benchviz',
        description='Generate interactive charts from Go benchmark output.',
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('--version', action='version', version=f'benchviz {VERSION}')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose output')

    subparsers = parser.add_subparsers(dest='action', help='Action to perform')

    chart_parser = subparsers.add_parser('chart', aliases=['c'], help='Chart a benchmark output file or piped input')
    chart_parser.add_argument('target', nargs='?', default=None, help="Benchmark output (text or go test -json); '-' or omitted reads stdin")
    chart_parser.add_argument('-o', '--output', default=None, help='Output file; printed to stdout when omitted')
    chart_parser.add_argument('-f', '--format', default=None, help='Output format: html, json')
    chart_parser.add_argument('-n', '--name', default=None, help='Name of the chart')
    chart_parser.add_argument('-d', '--description', default=None, help='Description of the benchmark')
    chart_parser.add_argument('-t', '--time-unit', default=None, help='Time unit: ns, us, ms, s')
    chart_parser.add_argument('-m', '--mem-unit', default=None, help='Memory unit: b, B, KB, MB, GB')
    chart_parser.add_argument('-a', '--number-unit', '--alloc-unit', dest='number_unit', default=None, help='Number unit: K, M, B, T (default: as-is)')
    chart_parser.add_argument('-p', '--group-pattern', default=None, help="Grouping pattern of n/name, x/xAxis, y/yAxis joined by '/' or '_'; empty parts skip a fragment, at least one group must be named")
    chart_parser.add_argument('-r', '--group-regex', default=None, help='Grouping regex with named groups n, x, y; wins over --group-pattern')
    chart_parser.add_argument('-s', '--separator', default=None, help="Separator of benchmark name parts when no pattern or regex is set (default: '/')")
    chart_parser.add_argument('--filter', default=None, help='Only keep benchmarks whose name matches this regex')
    chart_parser.add_argument('--charts', default=None, help='Comma separated chart types: bar, line')
    chart_parser.add_argument('--sort', default=None, help='Sort series by value: asc, desc')
    chart_parser.add_argument('--show-labels', action='store_true', default=None, help='Show values on the charts')
    chart_parser.add_argument('--no-progress', dest='progress', action='store_false', help='Hide the progress spinner for piped input')
    chart_parser.add_argument('--settings', default=str(LOCAL_SETTINGS_FILE), help='Settings file (YAML)')

    merge_parser = subparsers.add_parser('merge', aliases=['m'], help='Merge benchmark JSON documents into one report')
    merge_parser.add_argument('paths', nargs='+', help='JSON documents or directories containing them')
    merge_parser.add_argument('-o', '--output', default=None, help='Output file; printed to stdout when omitted')
    merge_parser.add_argument('-f', '--format', default=None, help='Output format: html, json')

    return parser

def entrypoint():
    parser = create_parser()

    if len(sys.argv) == 1:
        parser.print_help()
        sys.exit(ExitResult.NO_ACTION)

    args = parser.parse_args()

    if args.verbose:
        logger.setLevel(logging.DEBUG)
        logger.debug("Verbose mode enabled.")

    sys.exit(main(args, parser))

if __name__ == '__main__':
    entrypoint()
