"""Exceptions raised by the benchviz core.

The core never exits the process; `benchviz.__main__` turns these into log
messages and exit codes.
"""

class BenchvizError(Exception):
    """Base class of every error raised by benchviz."""

class ConfigurationError(BenchvizError):
    """Invalid grouping pattern, grouping regex or filter regex."""

class GroupingError(BenchvizError):
    """A benchmark name could not be split with the configured group regex."""

class BenchmarkReadError(BenchvizError):
    """The input could not be opened, read or decoded."""

class NoBenchmarksFound(BenchvizError):
    """The input was read successfully but held no usable benchmark lines."""

    def __init__(self, message: str = 'no benchmark results found'):
        super().__init__(message)
