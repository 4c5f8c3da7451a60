from benchviz.benchmark_data import BenchmarkData, Stat
from benchviz.benchmark_groups import COLOR_LIST, ChartGroup, ColorAllocator, group_results

def result(name, x_axis, y_axis, value, stat_type='Execution Time (ns/op)'):
    return BenchmarkData(name, x_axis, y_axis, (Stat(stat_type, value, 'ns'),))

def test_color_allocator_is_memoized_in_first_seen_order():
    colors = ColorAllocator()
    assert colors.color_for('Quick') == COLOR_LIST[0]
    assert colors.color_for('Merge') == COLOR_LIST[1]
    assert colors.color_for('Quick') == COLOR_LIST[0]

def test_color_allocator_wraps_around_the_palette():
    colors = ColorAllocator(['red', 'green'])
    assert [colors.color_for(key) for key in 'abc'] == ['red', 'green', 'red']
    assert colors.color_for('b') == 'green'

def test_color_allocator_reset_starts_over():
    colors = ColorAllocator()
    colors.color_for('a')
    colors.color_for('b')
    colors.reset()
    assert colors.color_for('b') == COLOR_LIST[0]

def test_palette_has_fifty_distinct_colors():
    assert len(COLOR_LIST) == 50
    assert len(set(COLOR_LIST)) == 50

def test_group_results_keeps_first_seen_order():
    groups = group_results([
        result('Sort', '100', 'Quick', 1),
        result('Search', '100', 'Binary', 2),
        result('Sort', '1000', 'Merge', 3),
        result('Sort', '100', 'Merge', 4),
    ])

    assert [group.name for group in groups] == ['Sort', 'Search']
    assert groups[0].x_axis == ['100', '1000']
    assert groups[0].y_axis == ['Quick', 'Merge']
    assert len(groups[0].results) == 3

def test_series_fills_gaps_with_none():
    group = ChartGroup('Sort')
    group.add(result('Sort', '100', 'Quick', 1))
    group.add(result('Sort', '1000', 'Merge', 3))
    group.add(result('Sort', '100', 'Merge', 4))

    assert group.series('Execution Time (ns/op)') == {'Quick': [1, None], 'Merge': [4, 3]}

def test_stat_types_are_collected_in_order():
    group = ChartGroup('')
    group.add(BenchmarkData('', '', 'A', (Stat('Execution Time (ns/op)', 1), Stat('Allocations/op', 2))))
    group.add(BenchmarkData('', '', 'B', (Stat('Execution Time (ns/op)', 1), Stat('Iterations', 5))))

    assert group.stat_types() == ['Execution Time (ns/op)', 'Allocations/op', 'Iterations']
    assert group.series('Iterations') == {'A': [None], 'B': [5]}
