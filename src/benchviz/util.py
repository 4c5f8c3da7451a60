"""Unit conversion helpers shared across benchviz modules.

Every formatter takes a raw value as reported by the Go benchmark harness
(nanoseconds, bytes, plain counts) and converts it into the unit requested on
the command line. Unknown units leave the value untouched. Results are
rounded half-up to two decimal places, except for zero which is returned as is.
"""

import math

_TIME_DIVISORS: dict[str, float] = {
    's': 1e9,
    'ms': 1e6,
    'us': 1e3,
}

_MEMORY_DIVISORS: dict[str, float] = {
    'KB': 1024,
    'MB': 1024 * 1024,
    'GB': 1024 * 1024 * 1024,
}

_COUNT_DIVISORS: dict[str, float] = {
    'K': 1e3,
    'M': 1e6,
    'B': 1e9,
    'T': 1e12,
}

def round_stat(value: float) -> float:
    """Round to two decimals, halves away from zero.

    Zero short-circuits so callers never see ``-0.0``.
    """
    if value == 0:
        return 0.0
    scaled = math.floor(abs(value) * 100 + 0.5)
    return math.copysign(scaled, value) / 100

def format_time(value_ns: float, unit: str) -> float:
    """Convert nanoseconds to `unit` (ns, us, ms or s)."""
    if value_ns == 0:
        return 0.0
    return round_stat(value_ns / _TIME_DIVISORS.get(unit, 1))

def format_memory(value_bytes: float, unit: str) -> float:
    """Convert bytes to `unit`.

    Args:
        value_bytes: Memory as reported in B/op.
        unit: 'b' for bits, 'B' for bytes, 'KB', 'MB' or 'GB'.
    """
    if value_bytes == 0:
        return 0.0
    if unit == 'b':
        return round_stat(value_bytes * 8)
    return round_stat(value_bytes / _MEMORY_DIVISORS.get(unit, 1))

def format_count(value: float, unit: str) -> float:
    """Scale a plain count into thousands (K), millions (M), billions (B) or trillions (T)."""
    if value == 0:
        return 0.0
    return round_stat(value / _COUNT_DIVISORS.get(unit, 1))

def compose_stat_label(name: str, unit: str = '', per: str = '') -> str:
    """Builds the label shown on a chart axis.

    >>> compose_stat_label('Execution Time', 'ns', 'op')
    'Execution Time (ns/op)'
    >>> compose_stat_label('Allocations', '', 'op')
    'Allocations/op'
    """
    if unit and per:
        return f'{name} ({unit}/{per})'
    if unit:
        return f'{name} ({unit})'
    if per:
        return f'{name}/{per}'
    return name

def normalize_memory_unit(unit: str) -> str:
    """Normalize case variants of a memory unit.

    'b' (bits) and 'B' (bytes) are different units and are kept apart,
    everything else is upper-cased ('kb' -> 'KB').
    """
    if unit in ('b', 'B'):
        return unit
    return unit.upper()
