"""Progress display while benchmark output is piped into benchviz.

The progress only observes lines; parsing happens once the input is complete.
"""

from typing import Protocol

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from benchviz.frameworks.go.testing import BENCHMARK_PREFIX, JSONEvent, decode_line, has_benchmark
from benchviz.frameworks.util.name_groups import split_cpu_suffix

class ProgressBar(Protocol):
    def describe(self, description: str) -> None: ...
    def finish(self) -> None: ...

class RichProgressBar:
    """Spinner on stderr, so stdout stays free for the rendered document."""

    def __init__(self, console: Console | None = None):
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn('[cyan]{task.description}'),
            console=console or Console(stderr=True),
            transient=True,
        )
        self._task = self._progress.add_task('Processing benchmarks', total=None)
        self._progress.start()

    def describe(self, description: str) -> None:
        self._progress.update(self._task, description=description)

    def finish(self) -> None:
        self._progress.stop()

def extract_benchmark_name(line: str) -> str:
    """Name of the benchmark a line reports on, '' when there is none."""
    decoded = decode_line(line)
    if isinstance(decoded, JSONEvent):
        return decoded.test if decoded.test.startswith(BENCHMARK_PREFIX) else ''

    if not has_benchmark(line):
        return ''
    fields = line.split()
    if len(fields) == 0:
        return ''
    name, _ = split_cpu_suffix(fields[0])
    return name

class BenchmarkProgress:
    """Counts finished benchmarks and shows the one currently running."""

    def __init__(self, bar: ProgressBar):
        self.bar = bar
        self.benchmark_count = 0
        self.current_benchmark = ''

    def process_line(self, line: str) -> None:
        if has_benchmark(line):
            self.benchmark_count += 1

        name = extract_benchmark_name(line)
        if name:
            self.current_benchmark = name
            self.bar.describe(f'Running Benchmarks [{self.current_benchmark}] ({self.benchmark_count} completed)')

    def finish(self) -> None:
        self.bar.finish()
