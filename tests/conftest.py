import json
from pathlib import Path

import pytest

@pytest.fixture
def write_bench(tmp_path: Path):
    """Writes benchmark output lines to a file and returns its path."""
    def _write(lines: list[str], name: str = 'bench.txt') -> Path:
        path = tmp_path / name
        path.write_text('\n'.join(lines) + '\n', encoding='utf-8')
        return path
    return _write

@pytest.fixture
def write_events(tmp_path: Path):
    """Writes `go test -json` output events for the given Output strings."""
    def _write(outputs: list[str], name: str = 'bench.json') -> Path:
        path = tmp_path / name
        events = [{'Action': 'start', 'Package': 'example.com/bench'}]
        for output in outputs:
            event = {'Action': 'output', 'Package': 'example.com/bench', 'Output': output}
            if output.startswith('Benchmark'):
                event['Test'] = output.split()[0]
            events.append(event)
        events.append({'Action': 'pass', 'Package': 'example.com/bench'})
        path.write_text('\n'.join(json.dumps(event) for event in events) + '\n', encoding='utf-8')
        return path
    return _write
