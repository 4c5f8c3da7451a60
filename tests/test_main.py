import io
import json
from pathlib import Path

import pytest

from benchviz.__main__ import ExitResult, create_parser, main

BENCH_LINES = 'goos: linux\nBenchmarkSort/Quick-8 100 1200 ns/op 64 B/op 2 allocs/op\nBenchmarkSort/Merge-8 100 2400 ns/op 128 B/op 3 allocs/op\nPASS\n'

class TTYInput(io.StringIO):
    def isatty(self) -> bool:
        return True

@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch):
    monkeypatch.chdir(tmp_path)

def run(argv: list[str], stdin=None) -> ExitResult:
    parser = create_parser()
    return main(parser.parse_args(argv), parser, stdin)

def test_no_action():
    assert run([]) == ExitResult.NO_ACTION

def test_chart_file_to_json(tmp_path: Path):
    target = tmp_path / 'bench.txt'
    target.write_text(BENCH_LINES)

    result = run(['chart', str(target), '-f', 'json', '-o', 'report', '-t', 'us', '-p', 'n/y'])

    assert result == ExitResult.SUCCESS
    content = json.loads((tmp_path / 'report.json').read_text())
    assert [item['yAxis'] for item in content['data']] == ['Quick', 'Merge']
    assert content['data'][0]['stats'][0]['value'] == 1.2
    assert content['cpu']['cores'] == 8

def test_chart_piped_input(tmp_path: Path):
    result = run(['c', '-', '--no-progress', '-o', 'piped.html'], io.StringIO(BENCH_LINES))

    assert result == ExitResult.SUCCESS
    assert '<!DOCTYPE html>' in (tmp_path / 'piped.html').read_text()

def test_chart_without_target_or_pipe():
    assert run(['chart'], TTYInput()) == ExitResult.NO_ACTION

def test_chart_missing_target():
    assert run(['chart', 'missing.txt']) == ExitResult.INVALID_TARGET

def test_chart_without_benchmarks(tmp_path: Path):
    target = tmp_path / 'empty.txt'
    target.write_text('PASS\nok  \texample.com/bench\t0.412s\n')
    assert run(['chart', str(target)]) == ExitResult.NO_BENCHMARKS_FOUND

@pytest.mark.parametrize('flags', [['-p', 'n/q'], ['-r', '('], ['--filter', '[']])
def test_chart_invalid_configuration(tmp_path: Path, flags):
    target = tmp_path / 'bench.txt'
    target.write_text(BENCH_LINES)
    assert run(['chart', str(target), *flags]) == ExitResult.INVALID_CONFIGURATION

def test_chart_invalid_settings_file(tmp_path: Path):
    target = tmp_path / 'bench.txt'
    target.write_text(BENCH_LINES)
    settings_file = tmp_path / 'settings.yaml'
    settings_file.write_text('name: [unclosed\n')

    assert run(['chart', str(target), '--settings', str(settings_file)]) == ExitResult.INVALID_CONFIGURATION

def test_chart_benchmark_name_not_matching_regex(tmp_path: Path):
    target = tmp_path / 'bench.txt'
    target.write_text(BENCH_LINES)
    assert run(['chart', str(target), '-r', r'^(?P<n>\d+)$']) == ExitResult.INVALID_BENCHMARK_NAME

def test_chart_invalid_json_input(tmp_path: Path):
    target = tmp_path / 'bench.json'
    target.write_text('{"Action": "start"}\nBenchmarkA 1 1 ns/op\n')
    assert run(['chart', str(target)]) == ExitResult.READ_ERROR

def test_settings_file_is_overridden_by_flags(tmp_path: Path):
    target = tmp_path / 'bench.txt'
    target.write_text(BENCH_LINES)
    settings_dir = tmp_path / '.benchviz'
    settings_dir.mkdir()
    (settings_dir / 'settings.yaml').write_text('name: From File\noutput_format: json\ntime_unit: ms\n')

    assert run(['chart', str(target), '-o', 'report', '-t', 'us']) == ExitResult.SUCCESS

    content = json.loads((tmp_path / 'report.json').read_text())
    assert content['name'] == 'From File'
    assert content['data'][0]['stats'][0]['type'] == 'Execution Time (us/op)'

def test_merge(tmp_path: Path):
    target = tmp_path / 'bench.txt'
    target.write_text(BENCH_LINES)
    assert run(['chart', str(target), '-f', 'json', '-o', 'a.json', '-n', 'First']) == ExitResult.SUCCESS
    assert run(['chart', str(target), '-f', 'json', '-o', 'b.json', '-n', 'Second']) == ExitResult.SUCCESS

    assert run(['merge', 'a.json', 'b.json', '-f', 'json', '-o', 'merged']) == ExitResult.SUCCESS

    merged = json.loads((tmp_path / 'merged.json').read_text())
    assert [item['name'] for item in merged] == ['First', 'Second']

def test_merge_without_valid_files(tmp_path: Path):
    (tmp_path / 'broken.json').write_text('{')
    assert run(['m', 'broken.json', 'missing.json']) == ExitResult.NO_VALID_FILES

def test_chart_piped_input_with_undecodable_bytes(tmp_path: Path):
    # sys.stdin decodes invalid UTF-8 into lone surrogates
    stdin = io.StringIO('BenchmarkA-8 100 10 ns/op\n\udcff log\nBenchmarkB-8 100 20 ns/op\n')

    result = run(['chart', '--no-progress', '-f', 'json', '-o', 'piped'], stdin)

    assert result == ExitResult.SUCCESS
    content = json.loads((tmp_path / 'piped.json').read_text())
    assert [item['yAxis'] for item in content['data']] == ['A', 'B']

def test_numeric_settings_values_fall_back_to_defaults(tmp_path: Path):
    target = tmp_path / 'bench.txt'
    target.write_text(BENCH_LINES)
    settings_dir = tmp_path / '.benchviz'
    settings_dir.mkdir()
    (settings_dir / 'settings.yaml').write_text('name: 2024\ntime_unit: 5\noutput_format: json\n')

    assert run(['chart', str(target), '-o', 'report']) == ExitResult.SUCCESS

    content = json.loads((tmp_path / 'report.json').read_text())
    assert content['name'] == '2024'
    assert content['data'][0]['stats'][0]['type'] == 'Execution Time (ns/op)'

def test_pattern_help_mentions_named_groups(capsys):
    with pytest.raises(SystemExit):
        create_parser().parse_args(['chart', '--help'])
    assert 'at least one group must be named' in ' '.join(capsys.readouterr().out.split())
