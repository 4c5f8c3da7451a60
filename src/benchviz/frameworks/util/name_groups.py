"""Splits a benchmark name into the name/xAxis/yAxis groups used by the charts.

Three strategies are available, picked once per run by `NameGrouper`:

    - regex: a regular expression with named groups (n|name, x|xAxis, y|yAxis).
    - pattern: a shorthand such as 'n/x/y' or 'name_yAxis', whose separators
      ('/' and '_') drive how the benchmark name is split.
    - separator: the benchmark name is split on a fixed separator and the
      trailing fragments are read as name, xAxis and yAxis.

Every strategy returns all three keys; slots that received nothing are ''.
"""

import logging
import re

from benchviz.errors import ConfigurationError, GroupingError

logger = logging.getLogger(__name__)

NAME = 'name'
X_AXIS = 'xAxis'
Y_AXIS = 'yAxis'
GROUP_KEYS = (NAME, X_AXIS, Y_AXIS)

_SHORTHANDS = {
    'n': NAME,
    'x': X_AXIS,
    'y': Y_AXIS,
}
_SEPARATOR_RE = re.compile(r'[_/]')
_CPU_SUFFIX_RE = re.compile(r'-(\d+)$')

def empty_groups() -> dict[str, str]:
    return {key: '' for key in GROUP_KEYS}

def expand_shorthand(part: str) -> str:
    return _SHORTHANDS.get(part, part)

def validate_pattern(pattern: str) -> None:
    """Raises ConfigurationError unless every part of `pattern` names a group.

    Empty parts (leading or doubled separators) are allowed; they skip a
    fragment of the benchmark name.
    """
    if pattern == '':
        raise ConfigurationError('pattern cannot be empty')

    parts = [expand_shorthand(part) for part in _SEPARATOR_RE.split(pattern)]
    for part in parts:
        if part != '' and part not in GROUP_KEYS:
            raise ConfigurationError(
                f"invalid pattern part '{part}'; only name(n), xAxis(x) and yAxis(y) are allowed")
    if all(part == '' for part in parts):
        raise ConfigurationError(f"pattern '{pattern}' does not name any group")

def parse_pattern_parts(pattern: str) -> list[str]:
    return [expand_shorthand(part) for part in _SEPARATOR_RE.split(pattern)]

def split_name_by_pattern(name: str, pattern: str) -> list[str]:
    """Splits `name` using the separators found in `pattern`, in order.

    Each separator splits every current fragment at most once, so 'a_b/c_d'
    split by the pattern 'n_x/y' gives ['a', 'b', 'c_d']. Empty fragments
    are dropped.
    """
    separators = _SEPARATOR_RE.findall(pattern)
    if not separators:
        return [name]

    parts = [name]
    for separator in separators:
        split_parts: list[str] = []
        for part in parts:
            split_parts.extend(part.split(separator, 1))
        parts = split_parts

    return [part for part in parts if part != '']

def group_by_pattern(name: str, pattern: str) -> dict[str, str]:
    """Maps the fragments of `name` onto the slots of `pattern` by position.

    Fragments beyond the number of slots are ignored and slots without a
    fragment stay empty.

    Raises:
        ConfigurationError: `pattern` is not valid.
    """
    validate_pattern(pattern)

    groups = empty_groups()
    name_parts = split_name_by_pattern(name, pattern)
    for i, slot in enumerate(parse_pattern_parts(pattern)):
        if slot == '' or i >= len(name_parts):
            continue
        groups[slot] = name_parts[i]
    return groups

def compile_group_regex(regex: str) -> re.Pattern:
    """Compiles a grouping regex and checks its named groups.

    Raises:
        ConfigurationError: `regex` does not compile or names an unknown group.
    """
    try:
        compiled = re.compile(regex)
    except re.error as e:
        raise ConfigurationError(f"invalid group regex '{regex}': {e}") from e

    for group_name in compiled.groupindex:
        if expand_shorthand(group_name) not in GROUP_KEYS:
            raise ConfigurationError(
                f"invalid group '{group_name}' in group regex; only name(n), xAxis(x) and yAxis(y) are allowed")
    return compiled

def group_by_regex(name: str, regex: re.Pattern | str) -> dict[str, str]:
    """Fills the groups from the named capture groups of `regex`.

    Raises:
        ConfigurationError: `regex` is a string that is not a valid group regex.
        GroupingError: `name` does not match `regex`.
    """
    compiled = compile_group_regex(regex) if isinstance(regex, str) else regex

    match = compiled.search(name)
    if match is None:
        raise GroupingError(f"benchmark name '{name}' does not match group regex '{compiled.pattern}'")

    groups = empty_groups()
    for group_name, value in match.groupdict().items():
        if value is not None:
            groups[expand_shorthand(group_name)] = value
    return groups

def group_by_separator(name: str, separator: str) -> dict[str, str]:
    """Reads the last fragments of `name` as name, xAxis and yAxis.

    'Sub' -> yAxis; 'Name/Sub' -> name, yAxis; 'A/Name/Work/Sub' -> name,
    xAxis and yAxis from the last three fragments.
    """
    groups = empty_groups()
    parts = name.split(separator)
    if len(parts) == 1:
        groups[Y_AXIS] = parts[0]
    elif len(parts) == 2:
        groups[NAME], groups[Y_AXIS] = parts
    else:
        groups[NAME], groups[X_AXIS], groups[Y_AXIS] = parts[-3:]
    return groups

def split_cpu_suffix(name: str) -> tuple[str, int | None]:
    """'Sort/Quick-8' -> ('Sort/Quick', 8); names without a suffix come back unchanged."""
    match = _CPU_SUFFIX_RE.search(name)
    if match is None:
        return name, None
    return name[:match.start()], int(match.group(1))

class NameGrouper:
    """Groups benchmark names with the strategy selected by the settings.

    The regex takes precedence over the pattern, the separator is used when
    neither is given. The configuration is validated here, before any input
    is read.

    Raises:
        ConfigurationError: Invalid regex, pattern or separator.
    """

    def __init__(self, pattern: str = '', regex: str = '', separator: str = '/'):
        self.pattern = pattern
        self.separator = separator
        self._regex: re.Pattern | None = None

        if regex:
            self._regex = compile_group_regex(regex)
            if pattern:
                logger.warning('Both a group regex and a group pattern are set, using the regex.')
        elif pattern:
            validate_pattern(pattern)
        elif separator == '':
            raise ConfigurationError('separator cannot be empty')

    @property
    def strategy(self) -> str:
        if self._regex is not None:
            return 'regex'
        return 'pattern' if self.pattern else 'separator'

    @property
    def strips_cpu_suffix(self) -> bool:
        """False when '-' itself separates groups; '-8' is then an ordinary fragment."""
        return not (self.strategy == 'separator' and '-' in self.separator)

    def group(self, name: str) -> dict[str, str]:
        if self._regex is not None:
            return group_by_regex(name, self._regex)
        if self.pattern:
            return group_by_pattern(name, self.pattern)
        return group_by_separator(name, self.separator)
