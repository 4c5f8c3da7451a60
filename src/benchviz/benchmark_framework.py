import importlib
from benchviz.benchmark_data import ParseAccumulator
from benchviz.errors import ConfigurationError
from benchviz.frameworks.util.raw_measurement import RawMeasurement
from typing import cast, Protocol, Generator, Callable
from pathlib import Path
from io import TextIOBase

DEFAULT_FRAMEWORK = 'go.testing'

class Framework(Protocol):
    """Protocol defining the interface of a benchmark framework.

    A Framework must provide:
        - SUPPORTED_FORMATS: set of input formats it can read.
        - detect_format(): guess the input format of a file.
        - parse(): read benchmark output into raw measurements.
    """
    SUPPORTED_FORMATS: set[str]

    def detect_format(path: Path) -> str: ...
    def parse(
        file_stream: TextIOBase,
        file_path: Path,
        accumulator: ParseAccumulator,
        input_format: str
    ) -> Generator[RawMeasurement, None, None]: ...

def import_framework(framework_name: str = DEFAULT_FRAMEWORK) -> Framework:
    """Import a benchmark framework for parsing benchmark output.

    Loads the framework module from `benchviz.frameworks` and checks that it
    implements the required interface (`SUPPORTED_FORMATS`, `detect_format`, `parse`).

    Args:
        framework_name: Name of the framework module to import (e.g., "go.testing").

    Returns:
        Framework: Module implementing `detect_format` and `parse`.

    Raises:
        ConfigurationError: No framework with that name exists.
    """
    try:
        framework = cast(Framework, importlib.import_module(f'benchviz.frameworks.{framework_name}'))
    except ModuleNotFoundError as e:
        raise ConfigurationError(f"unknown framework '{framework_name}'") from e

    assert hasattr(framework, 'SUPPORTED_FORMATS')
    assert isinstance(framework.SUPPORTED_FORMATS, set)

    assert hasattr(framework, 'detect_format')
    assert isinstance(framework.detect_format, Callable)

    assert hasattr(framework, 'parse')
    assert isinstance(framework.parse, Callable)

    return framework
