from pathlib import Path

import pytest

from benchviz.benchmark_data import BenchmarkData, ParseAccumulator, Stat
from benchviz.benchmark_parser import ParseOptions, classify_value, parse_benchmark_data
from benchviz.errors import BenchmarkReadError, ConfigurationError, GroupingError, NoBenchmarksFound

def stat_types(result: BenchmarkData) -> list[str]:
    return [stat.type for stat in result.stats]

def test_simple_line_with_subject_pattern(write_bench):
    path = write_bench(['BenchmarkSimple 100 123.45 ns/op'])

    outcome = parse_benchmark_data(path, ParseOptions(group_pattern='y', time_unit='ns'))

    assert outcome.results == [
        BenchmarkData('', '', 'Simple', (Stat('Execution Time (ns/op)', 123.45, 'ns'),)),
    ]
    assert not outcome.accumulator.has_mem_stats

def test_memory_line_with_full_pattern(write_bench):
    path = write_bench(['BenchmarkGroup/Task/SubjectA 100 123.45 ns/op 64.0 B/op 2 allocs/op'])

    outcome = parse_benchmark_data(path, ParseOptions(group_pattern='n/x/y', mem_unit='b'))

    assert outcome.results == [
        BenchmarkData('Group', 'Task', 'SubjectA', (
            Stat('Execution Time (ns/op)', 123.45, 'ns'),
            Stat('Memory Usage (b/op)', 512.0, 'b'),
            Stat('Allocations/op', 2.0, ''),
        )),
    ]
    assert outcome.accumulator.has_mem_stats

def test_cpu_suffix_is_stripped_and_recorded(write_bench):
    path = write_bench(['BenchmarkParallel/SubjectA-8 100 123.45 ns/op'])

    outcome = parse_benchmark_data(path, ParseOptions(group_pattern='n/y'))

    assert outcome.results[0].name == 'Parallel'
    assert outcome.results[0].y_axis == 'SubjectA'
    assert outcome.accumulator.cpu_count == 8

def test_first_cpu_count_wins(write_bench):
    path = write_bench([
        'BenchmarkA-8 100 1 ns/op',
        'BenchmarkB-16 100 1 ns/op',
        'BenchmarkC-4 100 1 ns/op',
    ])

    outcome = parse_benchmark_data(path)

    assert outcome.accumulator.cpu_count == 8
    assert [result.y_axis for result in outcome.results] == ['A', 'B', 'C']

def test_input_without_benchmarks_fails(write_bench):
    path = write_bench(['PASS', 'ok  \texample.com/bench\t0.412s'])

    with pytest.raises(NoBenchmarksFound, match='no benchmark results found'):
        parse_benchmark_data(path)

def test_differing_iterations_add_an_iterations_stat_to_every_result(write_bench):
    path = write_bench([
        'BenchmarkA 100 10 ns/op',
        'BenchmarkB 200 20 ns/op',
        'BenchmarkC 100 30 ns/op',
    ])

    outcome = parse_benchmark_data(path)

    assert [result.stats[-1] for result in outcome.results] == [
        Stat('Iterations', 100.0, ''),
        Stat('Iterations', 200.0, ''),
        Stat('Iterations', 100.0, ''),
    ]

def test_equal_iterations_add_nothing(write_bench):
    path = write_bench(['BenchmarkA 100 10 ns/op', 'BenchmarkB 100 20 ns/op'])

    outcome = parse_benchmark_data(path)

    assert all(stat_types(result) == ['Execution Time (ns/op)'] for result in outcome.results)

def test_iterations_use_the_number_unit(write_bench):
    path = write_bench(['BenchmarkA 1000 10 ns/op', 'BenchmarkB 2500 20 ns/op'])

    outcome = parse_benchmark_data(path, ParseOptions(number_unit='K'))

    assert outcome.results[1].stats[-1] == Stat('Iterations (K)', 2.5, 'K')

def test_parsing_twice_gives_identical_results(write_bench):
    path = write_bench([
        'BenchmarkSort/Quick/100-8 100 123.45 ns/op 64 B/op 2 allocs/op',
        'BenchmarkSort/Merge/100-8 200 223.45 ns/op 128 B/op 3 allocs/op',
    ])

    first = parse_benchmark_data(path, ParseOptions(group_pattern='n/y/x'))
    second = parse_benchmark_data(path, ParseOptions(group_pattern='n/y/x'))

    assert first.results == second.results
    assert first.accumulator == second.accumulator
    assert first.accumulator is not second.accumulator

def test_memory_flag_is_sticky_across_the_run(write_bench):
    path = write_bench([
        'BenchmarkA 100 10 ns/op 8 B/op 1 allocs/op',
        'BenchmarkB 100 10 ns/op',
    ])

    outcome = parse_benchmark_data(path)

    assert outcome.accumulator.has_mem_stats
    assert stat_types(outcome.results[1]) == ['Execution Time (ns/op)']

def test_json_events_are_parsed(write_events):
    path = write_events([
        'goos: linux\n',
        'BenchmarkJSON/Encode-4   \t',
        '1000\t  2500 ns/op\t  96 B/op\t  3 allocs/op\n',
        'PASS\n',
    ])

    outcome = parse_benchmark_data(path, ParseOptions(time_unit='us'))

    assert outcome.results == [
        BenchmarkData('JSON', '', 'Encode', (
            Stat('Execution Time (us/op)', 2.5, 'us'),
            Stat('Memory Usage (B/op)', 96.0, 'B'),
            Stat('Allocations/op', 3.0, ''),
        )),
    ]
    assert outcome.accumulator.cpu_count == 4
    assert outcome.accumulator.goos == 'linux'

def test_json_input_with_raw_lines_is_a_read_error(tmp_path: Path):
    path = tmp_path / 'broken.json'
    path.write_text('{"Action": "output", "Output": "BenchmarkA 1 1 ns/op\\n"}\nBenchmarkB 1 1 ns/op\n')

    with pytest.raises(BenchmarkReadError, match='not a JSON test event'):
        parse_benchmark_data(path)

def test_custom_units_are_classified(write_bench):
    path = write_bench(['BenchmarkCodec-8 100 1000 ns/op 250.5 MB/s 12 items/s 3.14159 hits/op'])

    outcome = parse_benchmark_data(path)

    assert outcome.results[0].stats == (
        Stat('Execution Time (ns/op)', 1000.0, 'ns'),
        Stat('Throughput (MB/s)', 250.5, 'MB/s'),
        Stat('Throughput (items/s)', 12.0, 'items/s'),
        Stat('Metric (hits/op)', 3.14, 'hits/op'),
    )

def test_sec_per_op_is_converted_to_the_time_unit():
    stat = classify_value(0.0015, 'sec/op', ParseOptions(time_unit='ms'), ParseAccumulator())
    assert stat == Stat('Execution Time (ms/op)', 1.5, 'ms')

def test_filter_keeps_matching_benchmarks(write_bench):
    path = write_bench([
        'BenchmarkSort/Quick-8 100 10 ns/op',
        'BenchmarkSearch/Binary-8 100 20 ns/op',
        'BenchmarkSort/Merge-8 100 30 ns/op',
    ])

    outcome = parse_benchmark_data(path, ParseOptions(filter_regex='^Sort/'))

    assert [result.y_axis for result in outcome.results] == ['Quick', 'Merge']

def test_filter_matching_nothing_means_no_benchmarks(write_bench):
    path = write_bench(['BenchmarkSort/Quick-8 100 10 ns/op'])

    with pytest.raises(NoBenchmarksFound):
        parse_benchmark_data(path, ParseOptions(filter_regex='Search'))

@pytest.mark.parametrize('options', [
    ParseOptions(filter_regex='('),
    ParseOptions(group_pattern='n/z'),
    ParseOptions(group_regex='(?P<n>'),
])
def test_configuration_errors_abort_before_reading(tmp_path: Path, options):
    with pytest.raises(ConfigurationError):
        parse_benchmark_data(tmp_path / 'missing.txt', options)

def test_regex_mismatch_is_fatal(write_bench):
    path = write_bench(['BenchmarkSort/Quick 100 10 ns/op', 'BenchmarkOdd 100 10 ns/op'])

    with pytest.raises(GroupingError):
        parse_benchmark_data(path, ParseOptions(group_regex=r'^(?P<n>\w+)/(?P<y>\w+)$'))

def test_regex_grouping(write_bench):
    path = write_bench(['BenchmarkSort_Quick_1000-8 100 10 ns/op'])

    outcome = parse_benchmark_data(path, ParseOptions(group_regex=r'^(?P<n>[^_]+)_(?P<y>[^_]+)_(?P<x>\d+)$'))

    assert (outcome.results[0].name, outcome.results[0].x_axis, outcome.results[0].y_axis) == \
        ('Sort', '1000', 'Quick')

def test_dash_separator_keeps_the_trailing_number_as_subject(write_bench):
    path = write_bench(['BenchmarkWorkload-Subject1-8 100 10 ns/op'])

    outcome = parse_benchmark_data(path, ParseOptions(separator='-'))

    result = outcome.results[0]
    assert (result.name, result.x_axis, result.y_axis) == ('Workload', 'Subject1', '8')
    assert outcome.accumulator.cpu_count == 0

def test_missing_file_is_a_read_error(tmp_path: Path):
    with pytest.raises(BenchmarkReadError, match='does not exist'):
        parse_benchmark_data(tmp_path / 'missing.txt')

def test_directory_is_a_read_error(tmp_path: Path):
    with pytest.raises(BenchmarkReadError):
        parse_benchmark_data(tmp_path)

def test_stray_bytes_in_a_text_log_are_skipped(tmp_path: Path):
    path = tmp_path / 'bench.txt'
    path.write_bytes(b'BenchmarkA-8 100 10 ns/op\n\xff\xfe garbage log\nBenchmarkB-8 100 20 ns/op\n')

    outcome = parse_benchmark_data(path)

    assert [result.y_axis for result in outcome.results] == ['A', 'B']

def test_stray_bytes_in_json_events_are_a_read_error(tmp_path: Path):
    path = tmp_path / 'bench.json'
    path.write_bytes(b'{"Action": "output", "Output": "BenchmarkA-8 100 10 ns/op\\n"}\n\xff\n')

    with pytest.raises(BenchmarkReadError):
        parse_benchmark_data(path)
