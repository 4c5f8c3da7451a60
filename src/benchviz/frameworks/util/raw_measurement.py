from dataclasses import dataclass, field

@dataclass(slots=True)
class RawMeasurement:
    """Result yielded by a framework's parse function.

    One benchmark observation exactly as it was found in the input.

    Attributes:
        name: Benchmark identifier without its 'Benchmark' prefix. The CPU
            suffix ('-8') is still attached.
        iterations: Number of iterations the harness ran.
        values: (value, unit) pairs in input order, e.g. (123.45, 'ns/op').
    """
    name: str
    iterations: int
    values: list[tuple[float, str]] = field(default_factory=lambda: [])

    def units(self) -> list[str]:
        return [unit for _, unit in self.values]
