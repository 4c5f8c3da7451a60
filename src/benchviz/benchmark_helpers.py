from pathlib import Path
from typing import Iterable, TextIO
import json
import logging
import os
import sys
import tempfile

from benchviz.benchmark_data import Benchmark
from benchviz.benchmark_framework import import_framework
from benchviz.benchmark_parser import parse_benchmark_data
from benchviz.benchmark_settings import LocalSettings
from benchviz.chart import render_html
from benchviz.progress import BenchmarkProgress

logger = logging.getLogger(__name__)

TEMP_BENCH_FILE_PREFIX = 'benchviz-benchmark-'

class TempFiles:
    """Remembers the temp files of a run and removes all of them on exit."""

    def __init__(self):
        self.files: list[Path] = []

    def create(self, prefix: str, suffix: str) -> Path:
        fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix)
        os.close(fd)
        path = Path(name)
        self.files.append(path)
        return path

    def remove_all(self) -> None:
        for path in self.files:
            path.unlink(missing_ok=True)
            logger.debug(f'Removed temp file: {path}')
        self.files = []

    def __enter__(self) -> 'TempFiles':
        return self

    def __exit__(self, *exc_info) -> None:
        self.remove_all()

def capture_stdin(stream: Iterable[str], temp_files: TempFiles, progress: BenchmarkProgress | None = None) -> Path:
    """Copies piped benchmark output into a temp file, line by line."""
    target = temp_files.create(TEMP_BENCH_FILE_PREFIX, '.out')
    try:
        with open(target, 'w', encoding='utf-8', errors='surrogateescape') as out_file:
            for line in stream:
                out_file.write(line)
                if progress is not None:
                    progress.process_line(line)
    finally:
        if progress is not None:
            progress.finish()
    return target

def resolve_output_path(output: str | None, output_format: str) -> Path | None:
    """None means stdout. A missing '.html'/'.json' extension is appended."""
    if not output:
        return None
    if not output.lower().endswith(f'.{output_format}'):
        output = f'{output}.{output_format}'
    return Path(output)

def render_document(benchmarks: list[Benchmark], output_format: str) -> str:
    if output_format == 'json':
        payload = [benchmark.to_dict() for benchmark in benchmarks]
        return json.dumps(payload[0] if len(payload) == 1 else payload)
    return render_html(benchmarks)

def write_output(content: str, output_path: Path | None, stdout: TextIO | None = None) -> None:
    if output_path is None:
        (stdout or sys.stdout).write(content)
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding='utf-8')
    logger.info(f'Output file: {output_path}')

def generate_chart(target: Path, settings: LocalSettings) -> str:
    """Parses `target` and renders it in `settings.output_format`."""
    logger.info(f'Reading benchmark data from file: {target}')
    outcome = parse_benchmark_data(target, settings.to_parse_options(), import_framework(settings.framework))
    benchmark = Benchmark.from_outcome(settings.name, settings.description, outcome, settings.to_chart_settings())

    logger.info(f'Generating {settings.output_format.upper()} for {len(outcome.results)} benchmarks')
    return render_document([benchmark], settings.output_format)

def collect_benchmark_files(paths: list[Path]) -> list[Path]:
    """Expands directories into the '*.json' files they contain. Missing paths are skipped."""
    files: list[Path] = []
    for path in paths:
        if path.is_dir():
            files.extend(sorted(path.glob('*.json')))
        elif path.exists():
            files.append(path)
        else:
            logger.warning(f'Cannot access {path}, skipping.')
    return files

def load_benchmark_documents(files: list[Path]) -> list[Benchmark]:
    benchmarks: list[Benchmark] = []
    for file_path in files:
        try:
            content = json.loads(file_path.read_text(encoding='utf-8'))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f'Cannot read file {file_path}: {e}')
            continue
        except json.JSONDecodeError:
            logger.warning(f'File {file_path} is not valid JSON, skipping.')
            continue

        documents = content if isinstance(content, list) else [content]
        try:
            loaded = [Benchmark.from_dict(document) for document in documents]
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning(f'File {file_path} does not hold benchmark documents, skipping.')
            continue
        benchmarks.extend(loaded)
    return benchmarks

def merge_benchmarks(paths: list[Path]) -> list[Benchmark]:
    """Loads every benchmark document found in `paths`, in argument order."""
    return load_benchmark_documents(collect_benchmark_files(paths))
