"""
Local benchmark settings.

This module defines `LocalSettings`, the chart defaults loaded from
`.benchviz/settings.yaml` and overridden by command line flags. It also
provides `load_local_settings()` to parse the YAML file and
`normalize_settings()` to check unit and format values, falling back to the
default of any value that is not recognized.
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable
import logging

import yaml

from benchviz.benchmark_data import ChartSettings
from benchviz.benchmark_parser import ParseOptions
from benchviz.errors import ConfigurationError
from benchviz.util import normalize_memory_unit

logger = logging.getLogger(__name__)

LOCAL_SETTINGS_FILE = Path('./.benchviz/settings.yaml')

@dataclass(slots=True)
class LocalSettings:
    """Stores chart and parser configuration.

    Attributes:
        name: Title of the chart document.
        description: Text shown under the title.
        output_format: 'html' or 'json'.
        time_unit, mem_unit, number_unit: Units of execution time, memory and counts.
        group_pattern: Shorthand pattern such as 'n/x/y'.
        group_regex: Regex with named groups; wins over `group_pattern`.
        separator: Splits names when neither pattern nor regex is set.
        filter_regex: Only benchmarks whose name matches are kept.
        framework: Framework module reading the input.
        charts: Chart types to draw per stat ('bar', 'line').
        sort: '', 'asc' or 'desc'.
        show_labels: Print values on the charts.
    """
    name: str = 'Benchmarks'
    description: str = ''
    output_format: str = 'html'
    time_unit: str = 'ns'
    mem_unit: str = 'B'
    number_unit: str = ''
    group_pattern: str = ''
    group_regex: str = ''
    separator: str = '/'
    filter_regex: str = ''
    framework: str = 'go.testing'
    charts: list[str] = field(default_factory=lambda: ['bar'])
    sort: str = ''
    show_labels: bool = False

    def merged_with(self, overrides: dict[str, Any]) -> 'LocalSettings':
        """Returns a copy where every known, non-None entry of `overrides` replaces the stored value."""
        known = {settings_field.name for settings_field in fields(self)}
        changes = {key: value for key, value in overrides.items() if key in known and value is not None}
        return replace(self, **changes)

    def to_parse_options(self) -> ParseOptions:
        return ParseOptions(
            time_unit=self.time_unit,
            mem_unit=self.mem_unit,
            number_unit=self.number_unit,
            group_pattern=self.group_pattern,
            group_regex=self.group_regex,
            separator=self.separator,
            filter_regex=self.filter_regex,
        )

    def to_chart_settings(self) -> ChartSettings:
        return ChartSettings(self.sort, self.show_labels, list(self.charts))

@dataclass(slots=True)
class ValidationRule:
    """Checks one settings attribute, replacing invalid values by `default`."""
    label: str
    attribute: str
    valid_set: set[str]
    default: Any
    normalizer: Callable[[str], str] | None = None

    def normalize(self, value: Any) -> str:
        text = str(value)
        return self.normalizer(text) if self.normalizer else text

    def apply(self, settings: LocalSettings) -> None:
        value = getattr(settings, self.attribute)
        if isinstance(value, list):
            normalized = [self.normalize(item) for item in value]
            is_valid = len(normalized) > 0 and all(item in self.valid_set for item in normalized)
        else:
            normalized = self.normalize(value)
            is_valid = normalized in self.valid_set

        if not is_valid:
            logger.warning(f"Invalid {self.label} '{value}'. Using default '{self.default}'")
            normalized = list(self.default) if isinstance(self.default, list) else self.default
        setattr(settings, self.attribute, normalized)

VALIDATION_RULES = [
    ValidationRule('memory unit', 'mem_unit', {'b', 'B', 'KB', 'MB', 'GB'}, 'B', normalize_memory_unit),
    ValidationRule('time unit', 'time_unit', {'ns', 'us', 'ms', 's'}, 'ns', str.lower),
    ValidationRule('number unit', 'number_unit', {'', 'K', 'M', 'B', 'T'}, '', str.upper),
    ValidationRule('format', 'output_format', {'html', 'json'}, 'html', str.lower),
    ValidationRule('chart type', 'charts', {'bar', 'line'}, ['bar'], str.lower),
    ValidationRule('sort order', 'sort', {'', 'asc', 'desc'}, '', str.lower),
]

def normalize_settings(settings: LocalSettings) -> LocalSettings:
    """Applies `VALIDATION_RULES` to a copy of `settings`."""
    normalized = replace(settings, charts=list(settings.charts))
    for rule in VALIDATION_RULES:
        rule.apply(normalized)
    return normalized

def load_local_settings(settings_file: Path = LOCAL_SETTINGS_FILE) -> LocalSettings | None:
    """Load local settings from `.benchviz/settings.yaml`.

    The file holds a mapping whose keys are `LocalSettings` attribute names.
    Unknown keys are ignored with a warning.

    Returns:
        LocalSettings | None:
            A `LocalSettings` object if the YAML file exists, otherwise `None`.

    Raises:
        yaml.YAMLError: The file is not valid YAML.
        ConfigurationError: The file does not hold a mapping.
    """
    try:
        with open(settings_file, 'r') as file:
            local_settings_yaml: dict[str, Any] | None = yaml.safe_load(file)
    except FileNotFoundError:
        return None

    local_settings = LocalSettings()
    if not local_settings_yaml:
        return local_settings
    if not isinstance(local_settings_yaml, dict):
        raise ConfigurationError(f'{settings_file} must hold a mapping of settings')

    known = {settings_field.name for settings_field in fields(local_settings)}
    for key in local_settings_yaml:
        if key not in known:
            logger.warning(f"Unknown setting '{key}' in {settings_file}")

    # 'time_unit: 5' or 'name: 2024' are read by YAML as numbers
    text_fields = [settings_field.name for settings_field in fields(local_settings) if isinstance(settings_field.default, str)]
    for key in text_fields:
        value = local_settings_yaml.get(key)
        if value is not None and not isinstance(value, str):
            local_settings_yaml[key] = str(value)

    if isinstance(local_settings_yaml.get('charts'), str):
        local_settings_yaml['charts'] = [local_settings_yaml['charts']]
    return local_settings.merged_with(local_settings_yaml)
