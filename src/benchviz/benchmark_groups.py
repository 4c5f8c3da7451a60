"""Groups parsed results into the charts of a document.

Results sharing a `name` end up in one ChartGroup. Groups, xAxis categories
and yAxis series all keep the order in which they first appear in the input.
"""

from dataclasses import dataclass, field

from benchviz.benchmark_data import BenchmarkData

COLOR_LIST = [
    '#5470C6', '#3BA272', '#FC8452', '#73C0DE', '#EE6666',
    '#FAC858', '#9A60B4', '#EA7CCC', '#91CC75', '#FF9F7F',

    '#3E5A9E', '#2E7D32', '#EF6C00', '#7E57C2', '#F9A825',
    '#6A8ACF', '#4CAF50', '#FF8F00', '#AB47BC', '#FFEB3B',

    '#2B4E72', '#1B5E20', '#D84315', '#512DA8', '#F57F17',
    '#4A90E2', '#66BB6A', '#FF5722', '#BA68C8', '#FFF176',

    '#1E3A5F', '#00695C', '#BF360C', '#673AB7', '#C0CA33',
    '#7FB3D5', '#81C784', '#FFAB91', '#E040FB', '#DCE775',

    '#335C8A', '#388E3C', '#E64A19', '#9575CD', '#78909C',
    '#5C9EAD', '#AED581', '#FF7043', '#F06292', '#A1887F',
]

class ColorAllocator:
    """Hands out palette colors to series keys.

    The first key gets the first color; a key asked for again gets the color
    it already has. The palette wraps around once every color is taken.
    """

    def __init__(self, palette: list[str] | None = None):
        self.palette = list(palette or COLOR_LIST)
        self._assigned: dict[str, int] = {}
        self._next_index = 0

    def color_for(self, key: str) -> str:
        index = self._assigned.get(key)
        if index is None:
            index = self._next_index
            self._assigned[key] = index
            self._next_index = (self._next_index + 1) % len(self.palette)
        return self.palette[index]

    def reset(self) -> None:
        self._assigned.clear()
        self._next_index = 0

@dataclass(slots=True)
class ChartGroup:
    """Results of one benchmark name.

    Attributes:
        name: Shared `name` of the results ('' when the benchmarks are not named).
        x_axis: Distinct xAxis values, first-seen order.
        y_axis: Distinct yAxis values (the series), first-seen order.
        results: Results in input order.
    """
    name: str
    x_axis: list[str] = field(default_factory=lambda: [])
    y_axis: list[str] = field(default_factory=lambda: [])
    results: list[BenchmarkData] = field(default_factory=lambda: [])

    def add(self, result: BenchmarkData) -> None:
        if result.x_axis not in self.x_axis:
            self.x_axis.append(result.x_axis)
        if result.y_axis not in self.y_axis:
            self.y_axis.append(result.y_axis)
        self.results.append(result)

    def stat_types(self) -> list[str]:
        stat_types: list[str] = []
        for result in self.results:
            for stat in result.stats:
                if stat.type not in stat_types:
                    stat_types.append(stat.type)
        return stat_types

    def series(self, stat_type: str) -> dict[str, list[float | None]]:
        """Values of `stat_type` per series, aligned with `x_axis`.

        Missing combinations are None; a repeated (xAxis, yAxis) pair keeps the
        last value read.
        """
        series: dict[str, list[float | None]] = {
            y_axis: [None] * len(self.x_axis) for y_axis in self.y_axis
        }
        for result in self.results:
            column = self.x_axis.index(result.x_axis)
            for stat in result.stats:
                if stat.type == stat_type:
                    series[result.y_axis][column] = stat.value
        return series

def group_results(results: list[BenchmarkData]) -> list[ChartGroup]:
    groups: dict[str, ChartGroup] = {}
    for result in results:
        group = groups.get(result.name)
        if group is None:
            group = ChartGroup(result.name)
            groups[result.name] = group
        group.add(result)
    return list(groups.values())
