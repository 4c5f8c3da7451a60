"""Turns raw benchmark measurements into chart-ready results.

Defines:
    - ParseOptions: Units and grouping used while parsing.
    - classify_value(): Converts one (value, unit) pair into a Stat.
    - build_result(): Converts one RawMeasurement into a BenchmarkData.
    - parse_benchmark_data(): Parses a whole file.
"""

from dataclasses import dataclass
from pathlib import Path
import logging
import re

from benchviz.benchmark_data import BenchmarkData, ParseAccumulator, ParseOutcome, Stat
from benchviz.benchmark_framework import Framework, import_framework
from benchviz.errors import BenchmarkReadError, ConfigurationError, NoBenchmarksFound
from benchviz.frameworks.util.name_groups import NAME, X_AXIS, Y_AXIS, NameGrouper, split_cpu_suffix
from benchviz.frameworks.util.raw_measurement import RawMeasurement
from benchviz.util import compose_stat_label, format_count, format_memory, format_time, round_stat

logger = logging.getLogger(__name__)

_BYTE_THROUGHPUT_UNITS = {'B/s', 'MB/s', 'GB/s'}

@dataclass(slots=True)
class ParseOptions:
    """Settings the parser reads; see `benchviz.benchmark_settings` for their defaults."""
    time_unit: str = 'ns'
    mem_unit: str = 'B'
    number_unit: str = ''
    group_pattern: str = ''
    group_regex: str = ''
    separator: str = '/'
    filter_regex: str = ''

def compile_filter(filter_regex: str) -> re.Pattern | None:
    """Raises ConfigurationError when `filter_regex` does not compile."""
    if filter_regex == '':
        return None
    try:
        return re.compile(filter_regex)
    except re.error as e:
        raise ConfigurationError(f"invalid filter regex '{filter_regex}': {e}") from e

def classify_value(value: float, unit: str, options: ParseOptions, accumulator: ParseAccumulator) -> Stat:
    if unit in ('ns/op', 'sec/op'):
        value_ns = value * 1e9 if unit == 'sec/op' else value
        return Stat(
            compose_stat_label('Execution Time', options.time_unit, 'op'),
            format_time(value_ns, options.time_unit),
            options.time_unit,
        )
    if unit == 'B/op':
        accumulator.mark_mem_stats()
        return Stat(
            compose_stat_label('Memory Usage', options.mem_unit, 'op'),
            format_memory(value, options.mem_unit),
            options.mem_unit,
        )
    if unit == 'allocs/op':
        return Stat(
            compose_stat_label('Allocations', options.number_unit, 'op'),
            format_count(value, options.number_unit),
            options.number_unit,
        )
    if unit in _BYTE_THROUGHPUT_UNITS or unit.endswith('/s'):
        return Stat(compose_stat_label('Throughput', unit), round_stat(value), unit)
    return Stat(compose_stat_label('Metric', unit), round_stat(value), unit)

def build_result(measurement: RawMeasurement, grouper: NameGrouper, name_filter: re.Pattern | None,
                 options: ParseOptions, accumulator: ParseAccumulator) -> BenchmarkData | None:
    """Returns None for measurements rejected by the filter or carrying no values.

    Raises:
        GroupingError: The name does not match the group regex.
    """
    if not measurement.values:
        return None

    name, cpu_count = measurement.name, None
    if grouper.strips_cpu_suffix:
        name, cpu_count = split_cpu_suffix(name)

    if name_filter is not None and name_filter.search(name) is None:
        logger.debug(f'Filtered out benchmark: {name}')
        return None

    accumulator.store_cpu_count(cpu_count)
    groups = grouper.group(name)

    stats = tuple(classify_value(value, unit, options, accumulator) for value, unit in measurement.values)
    return BenchmarkData(groups[NAME], groups[X_AXIS], groups[Y_AXIS], stats)

def append_iterations(results: list[BenchmarkData], iterations: list[int], number_unit: str) -> list[BenchmarkData]:
    """Adds an Iterations stat to every result when the iteration counts of the run differ."""
    if len(set(iterations)) <= 1:
        return results

    label = compose_stat_label('Iterations', number_unit)
    return [
        result.with_stat(Stat(label, format_count(count, number_unit), number_unit))
        for result, count in zip(results, iterations)
    ]

def parse_benchmark_data(path: Path | str, options: ParseOptions | None = None,
                         framework: Framework | None = None) -> ParseOutcome:
    """Parses a benchmark output file.

    The configuration (filter, grouping) is validated before the file is
    opened. Each call works on its own ParseAccumulator.

    Args:
        path: Text or `go test -json` output.
        options: Units and grouping; defaults to ParseOptions().
        framework: Reader of the input; defaults to Go's testing package.

    Returns:
        ParseOutcome: Results in input order and the run-wide accumulator.

    Raises:
        ConfigurationError: Invalid pattern, group regex or filter regex.
        GroupingError: A benchmark name does not match the group regex.
        BenchmarkReadError: The file is missing, unreadable or not valid test JSON.
        NoBenchmarksFound: No benchmark result was found.
    """
    path = Path(path)
    options = options or ParseOptions()
    framework = framework or import_framework()

    name_filter = compile_filter(options.filter_regex)
    grouper = NameGrouper(options.group_pattern, options.group_regex, options.separator)
    accumulator = ParseAccumulator()

    results: list[BenchmarkData] = []
    iterations: list[int] = []
    try:
        input_format = framework.detect_format(path)
        logger.debug(f'Reading {path} as {input_format}, grouping by {grouper.strategy}')
        # JSON events are decoded strictly, text logs tolerate stray bytes
        decode_errors = 'strict' if input_format == 'json' else 'replace'
        with open(path, 'r', encoding='utf-8', errors=decode_errors) as file_stream:
            for measurement in framework.parse(file_stream, path, accumulator, input_format):
                result = build_result(measurement, grouper, name_filter, options, accumulator)
                if result is None:
                    continue
                results.append(result)
                iterations.append(measurement.iterations)
    except FileNotFoundError as e:
        raise BenchmarkReadError(f"file '{path}' does not exist") from e
    except (OSError, UnicodeDecodeError) as e:
        raise BenchmarkReadError(f"cannot read '{path}': {e}") from e

    if len(results) == 0:
        raise NoBenchmarksFound()

    results = append_iterations(results, iterations, options.number_unit)
    logger.debug(f'Parsed {len(results)} benchmark results from {path}')
    return ParseOutcome(results, accumulator)
