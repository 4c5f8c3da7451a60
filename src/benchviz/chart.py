"""Renders benchmark documents as a standalone interactive HTML page.

One section per Benchmark document, one plotly figure per (group, stat type)
pair. Series colors come from a single ColorAllocator so that a subject keeps
its color across every chart of the page.
"""

import html
import logging

import plotly.graph_objects as go

from benchviz.benchmark_data import Benchmark
from benchviz.benchmark_groups import ChartGroup, ColorAllocator, group_results

logger = logging.getLogger(__name__)

SUPPORTED_CHARTS = {'bar', 'line'}
_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""

def prepare_chart_title(name: str, stat_type: str) -> str:
    return f'{name} - {stat_type}' if name else stat_type

def format_labels(values: list[float | None]) -> list[str | None]:
    """Value labels with at most two decimals, '30' rather than '30.0'."""
    return [f'{value:.2f}'.rstrip('0').rstrip('.') if value is not None else None for value in values]

def _series_order(series: dict[str, list[float | None]], sort: str) -> list[str]:
    if sort not in ('asc', 'desc'):
        return list(series)

    def first_value(key: str) -> float:
        values = [value for value in series[key] if value is not None]
        return values[0] if values else 0.0

    return sorted(series, key=first_value, reverse=sort == 'desc')

def create_figure(group: ChartGroup, stat_type: str, chart_type: str, colors: ColorAllocator,
                  sort: str = '', show_labels: bool = False) -> go.Figure:
    """Builds one chart: xAxis values as categories, one trace per yAxis value."""
    series = group.series(stat_type)
    categories = [x_axis or stat_type for x_axis in group.x_axis]

    figure = go.Figure()
    for y_axis in _series_order(series, sort):
        color = colors.color_for(y_axis)
        values = series[y_axis]
        if chart_type == 'line':
            trace = go.Scatter(x=categories, y=values, name=y_axis,
                               mode='lines+markers+text' if show_labels else 'lines+markers',
                               line=dict(color=color), marker=dict(color=color))
            if show_labels:
                trace.update(text=format_labels(values), textposition='top center')
        else:
            trace = go.Bar(x=categories, y=values, name=y_axis, marker_color=color)
            if show_labels:
                trace.update(text=format_labels(values), textposition='auto')
        figure.add_trace(trace)

    figure.update_layout(
        title=prepare_chart_title(group.name, stat_type),
        yaxis_title=stat_type,
        barmode='group',
        showlegend=True,
        template='plotly_white',
    )
    return figure

def _render_header(benchmark: Benchmark) -> str:
    parts = [f'<h1>{html.escape(benchmark.name)}</h1>']
    if benchmark.description:
        parts.append(f'<p>{html.escape(benchmark.description)}</p>')

    environment = []
    if benchmark.pkg:
        environment.append(f'pkg: {benchmark.pkg}')
    if benchmark.cpu_name:
        environment.append(f'cpu: {benchmark.cpu_name}')
    if benchmark.cpu_cores:
        environment.append(f'cores: {benchmark.cpu_cores}')
    if environment:
        parts.append(f'<p>{html.escape(" | ".join(environment))}</p>')
    return '\n'.join(parts)

def render_html(benchmarks: list[Benchmark], colors: ColorAllocator | None = None) -> str:
    """Renders `benchmarks` into a single HTML page.

    plotly.js is loaded from its CDN by the first figure of the page.
    """
    colors = colors or ColorAllocator()
    sections: list[str] = []
    include_plotlyjs: str | bool = 'cdn'

    for benchmark in benchmarks:
        sections.append(_render_header(benchmark))
        chart_types = [chart for chart in benchmark.settings.charts if chart in SUPPORTED_CHARTS] or ['bar']

        for group in group_results(benchmark.data):
            for stat_type in group.stat_types():
                for chart_type in chart_types:
                    figure = create_figure(group, stat_type, chart_type, colors,
                                           benchmark.settings.sort, benchmark.settings.show_labels)
                    sections.append(figure.to_html(full_html=False, include_plotlyjs=include_plotlyjs))
                    include_plotlyjs = False
        logger.debug(f'Rendered benchmark document: {benchmark.name}')

    title = benchmarks[0].name if len(benchmarks) == 1 else 'Benchmarks'
    return _PAGE_TEMPLATE.format(title=html.escape(title), body='\n'.join(sections))
