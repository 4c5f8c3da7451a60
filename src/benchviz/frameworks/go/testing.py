"""Reads the output of Go's `testing` package benchmarks.

Accepts both the plain text written by `go test -bench` and the newline
delimited test events written by `go test -bench -json`. Each input line is
decoded as a JSON test event first and treated as raw text otherwise; the
text of 'output' events is reassembled into lines, since the harness may
emit a benchmark name and its measurements in separate events.

Benchmark lines are read as structured records ('BenchmarkName-8 100
123.4 ns/op 64 B/op 2 allocs/op 10.5 MB/s') and, when that fails, matched
against the classic ns/op and ns/op + B/op + allocs/op layouts.
"""

from dataclasses import dataclass
from io import TextIOBase
from pathlib import Path
from typing import Generator, Iterable
import json
import logging
import re

from benchviz.benchmark_data import ParseAccumulator
from benchviz.errors import BenchmarkReadError
from benchviz.frameworks.util.raw_measurement import RawMeasurement

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = {'txt', 'json'}

BENCHMARK_PREFIX = 'Benchmark'

# BenchmarkName-N  <iterations>  <ns_op> ns/op  <b_op> B/op  <allocs_op> allocs/op
BENCH_MEM_LINE_RE = re.compile(
    r'Benchmark(\S+)\s+(\d+)\s+([\d.]+)\s+ns/op\s+([\d.]+)\s+B/op\s+([\d.]+)\s+allocs/op'
)
# BenchmarkName-N  <iterations>  <ns_op> ns/op
BENCH_LINE_RE = re.compile(r'Benchmark(\S+)\s+(\d+)\s+([\d.]+)\s+ns/op')
CONFIG_LINE_RE = re.compile(r'^(goos|goarch|pkg|cpu):\s*(.*?)\s*$')

_CANDIDATE_UNITS = ('ns/op', 'sec/op')

@dataclass(slots=True)
class JSONEvent:
    """A `go test -json` event."""
    action: str
    output: str = ''
    test: str = ''

@dataclass(slots=True)
class RawLine:
    """A line that is not a test event."""
    text: str

def decode_line(line: str) -> JSONEvent | RawLine:
    try:
        event = json.loads(line)
    except json.JSONDecodeError:
        return RawLine(line)
    if not isinstance(event, dict) or 'Action' not in event:
        return RawLine(line)
    return JSONEvent(str(event['Action']), str(event.get('Output') or ''), str(event.get('Test') or ''))

def is_test_json(path: Path) -> bool:
    """True when the first non-blank line of `path` is a JSON test event."""
    try:
        with open(path, 'r', encoding='utf-8', errors='replace') as file_stream:
            for line in file_stream:
                if line.strip() == '':
                    continue
                return isinstance(decode_line(line), JSONEvent)
    except OSError:
        return False
    return False

def detect_format(path: Path) -> str:
    return 'json' if is_test_json(path) else 'txt'

def has_benchmark(line: str) -> bool:
    return any(unit in line for unit in _CANDIDATE_UNITS)

def iter_output_lines(lines: Iterable[str], strict_json: bool = False, source: str = '<input>') -> Generator[str, None, None]:
    """Yields the benchmark output text carried by `lines`.

    Raises:
        BenchmarkReadError: `strict_json` is set and a non-blank line is not a test event.
    """
    pending = ''
    for line_number, line in enumerate(lines, start=1):
        decoded = decode_line(line)
        if isinstance(decoded, RawLine):
            if strict_json and decoded.text.strip() != '':
                raise BenchmarkReadError(f'{source}:{line_number}: line is not a JSON test event')
            if pending:
                yield pending
                pending = ''
            yield decoded.text.rstrip('\r\n')
            continue

        if decoded.action != 'output':
            continue
        pending += decoded.output
        while '\n' in pending:
            text, pending = pending.split('\n', 1)
            yield text
    if pending:
        yield pending

def parse_record(line: str) -> RawMeasurement | None:
    """Reads 'BenchmarkName <iterations> (<value> <unit>)+'.

    Returns None when the line is not a complete record.
    """
    fields = line.split()
    if len(fields) < 4 or len(fields) % 2 != 0:
        return None
    name = fields[0]
    if not name.startswith(BENCHMARK_PREFIX) or len(name) == len(BENCHMARK_PREFIX):
        return None

    try:
        iterations = int(fields[1])
        values = [(float(fields[i]), fields[i + 1]) for i in range(2, len(fields), 2)]
    except ValueError:
        return None
    return RawMeasurement(name[len(BENCHMARK_PREFIX):], iterations, values)

def match_line(line: str) -> RawMeasurement | None:
    """Matches the classic layouts, richest first. Returns None for anything else."""
    try:
        match = BENCH_MEM_LINE_RE.search(line)
        if match is not None:
            name, iterations, ns_op, b_op, allocs_op = match.groups()
            return RawMeasurement(name, int(iterations), [
                (float(ns_op), 'ns/op'),
                (float(b_op), 'B/op'),
                (float(allocs_op), 'allocs/op'),
            ])

        match = BENCH_LINE_RE.search(line)
        if match is not None:
            name, iterations, ns_op = match.groups()
            return RawMeasurement(name, int(iterations), [(float(ns_op), 'ns/op')])
    except ValueError:
        # '1.2.3 ns/op' satisfies [\d.]+ but is not a number
        return None
    return None

def parse_config_line(line: str) -> tuple[str, str] | None:
    match = CONFIG_LINE_RE.match(line.strip())
    if match is None:
        return None
    return match.group(1), match.group(2)

def parse(file_stream: TextIOBase, file_path: Path, accumulator: ParseAccumulator,
          input_format: str = 'txt') -> Generator[RawMeasurement, None, None]:
    """Yields every benchmark measurement found in `file_stream`.

    Lines that look like benchmark output but match no known layout are
    skipped. Header lines (goos, goarch, pkg, cpu) are stored on `accumulator`.

    Raises:
        NotImplementedError: `input_format` is not supported.
        BenchmarkReadError: A JSON input contains a line that is not a test event.
    """
    if input_format not in SUPPORTED_FORMATS:
        raise NotImplementedError(f'{file_path}: {input_format}')

    strict_json = input_format == 'json'
    for line in iter_output_lines(file_stream, strict_json, str(file_path)):
        if not has_benchmark(line):
            config = parse_config_line(line)
            if config is not None:
                accumulator.store_config(*config)
            continue

        measurement = parse_record(line) or match_line(line)
        if measurement is None:
            logger.debug(f'Skipping unrecognized benchmark line: {line.strip()}')
            continue
        yield measurement
