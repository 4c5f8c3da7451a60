"""Stores data parsed from benchmarks.

Defines:
    - Stat: A single formatted metric of a benchmark.
    - BenchmarkData: A finalized benchmark record, grouped into name/xAxis/yAxis.
    - ParseAccumulator: Run-wide state collected while parsing (CPU count, memory flag, environment).
    - ParseOutcome: Results of a parse together with its accumulator.
    - ChartSettings, Benchmark: The document handed to the chart renderer.
"""

from dataclasses import dataclass, field, replace
from typing import Any

@dataclass(frozen=True, slots=True)
class Stat:
    """Formatted metric.

    Attributes:
        type: Label of the metric, e.g. 'Execution Time (ns/op)'.
        value: Value converted to the requested unit, rounded to two decimals.
        unit: Display unit of `value`. May be empty.
    """
    type: str
    value: float
    unit: str = ''

    def to_dict(self) -> dict[str, Any]:
        return {'type': self.type, 'value': self.value, 'unit': self.unit}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Stat':
        return cls(str(data['type']), float(data.get('value', 0.0)), str(data.get('unit', '')))

@dataclass(frozen=True, slots=True)
class BenchmarkData:
    """One benchmark result, the unit consumed by the renderer."""
    name: str
    x_axis: str
    y_axis: str
    stats: tuple[Stat, ...] = ()

    def with_stat(self, stat: Stat) -> 'BenchmarkData':
        return replace(self, stats=self.stats + (stat,))

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'xAxis': self.x_axis,
            'yAxis': self.y_axis,
            'stats': [stat.to_dict() for stat in self.stats],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'BenchmarkData':
        return cls(
            data.get('name') or '',
            data.get('xAxis') or '',
            data.get('yAxis') or '',
            tuple(Stat.from_dict(stat) for stat in data.get('stats') or []),
        )

@dataclass(slots=True)
class ParseAccumulator:
    """Run-wide state of a single parse.

    `cpu_count` and the environment fields keep the first value seen,
    `has_mem_stats` turns True on the first line carrying B/op and stays True.
    """
    cpu_count: int = 0
    has_mem_stats: bool = False
    goos: str = ''
    goarch: str = ''
    pkg: str = ''
    cpu: str = ''

    def store_cpu_count(self, cpu_count: int | None) -> None:
        if self.cpu_count == 0 and cpu_count:
            self.cpu_count = cpu_count

    def mark_mem_stats(self) -> None:
        self.has_mem_stats = True

    def store_config(self, key: str, value: str) -> None:
        if key in ('goos', 'goarch', 'pkg', 'cpu') and not getattr(self, key):
            setattr(self, key, value)

    def reset(self) -> None:
        self.cpu_count = 0
        self.has_mem_stats = False
        self.goos = ''
        self.goarch = ''
        self.pkg = ''
        self.cpu = ''

@dataclass(slots=True)
class ParseOutcome:
    results: list[BenchmarkData]
    accumulator: ParseAccumulator

@dataclass(slots=True)
class ChartSettings:
    sort: str = ''
    show_labels: bool = False
    charts: list[str] = field(default_factory=lambda: ['bar'])

    def to_dict(self) -> dict[str, Any]:
        return {
            'sort': {'enabled': self.sort != '', 'order': self.sort or 'asc'},
            'showLabels': self.show_labels,
            'charts': list(self.charts),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'ChartSettings':
        sort: dict = data.get('sort') or {}
        return cls(
            sort.get('order', 'asc') if sort.get('enabled') else '',
            bool(data.get('showLabels', False)),
            list(data.get('charts') or ['bar']),
        )

@dataclass(slots=True)
class Benchmark:
    """A chart document: one parsed input plus the metadata shown in its header."""
    name: str
    data: list[BenchmarkData]
    description: str = ''
    pkg: str = ''
    cpu_name: str = ''
    cpu_cores: int = 0
    has_mem_stats: bool = False
    settings: ChartSettings = field(default_factory=ChartSettings)

    @classmethod
    def from_outcome(cls, name: str, description: str, outcome: ParseOutcome,
                     settings: ChartSettings | None = None) -> 'Benchmark':
        accumulator = outcome.accumulator
        return cls(
            name=name,
            data=outcome.results,
            description=description,
            pkg=accumulator.pkg,
            cpu_name=accumulator.cpu,
            cpu_cores=accumulator.cpu_count,
            has_mem_stats=accumulator.has_mem_stats,
            settings=settings or ChartSettings(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            'pkg': self.pkg,
            'cpu': {'name': self.cpu_name, 'cores': self.cpu_cores},
            'hasMemStats': self.has_mem_stats,
            'settings': self.settings.to_dict(),
            'data': [result.to_dict() for result in self.data],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Benchmark':
        """Rebuilds a document written by `to_dict`.

        Raises:
            AttributeError, KeyError, TypeError, ValueError: `data` does not describe a Benchmark.
        """
        if not isinstance(data, dict):
            raise TypeError(f'expected an object, got {type(data).__name__}')
        cpu: dict = data.get('cpu') or {}
        return cls(
            name=str(data['name']),
            data=[BenchmarkData.from_dict(result) for result in data['data']],
            description=data.get('description') or '',
            pkg=data.get('pkg') or '',
            cpu_name=cpu.get('name') or '',
            cpu_cores=int(cpu.get('cores') or 0),
            has_mem_stats=bool(data.get('hasMemStats', False)),
            settings=ChartSettings.from_dict(data.get('settings') or {}),
        )
